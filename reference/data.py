"""
Static reference tables: known trains, stations, the station food menu,
seeded community reports and the helper leaderboard.

Nothing here has behaviour.  The tables are read by the status resolver,
the cart, and the community feed.
"""

from datetime import datetime, timedelta

MOCK_PNR = "8421039482"

# train_no → name / endpoints / station codes on the route
KNOWN_TRAINS: dict[str, dict] = {
    "12951": {"name": "Mumbai Rajdhani", "start": "Mumbai Central", "end": "New Delhi",
              "route": ["MMCT", "ST", "BRC", "RTM", "KOTA", "NDLS"]},
    "12009": {"name": "Shatabdi Express", "start": "Mumbai Central", "end": "Ahmedabad Jn",
              "route": ["MMCT", "BVI", "VAPI", "ST", "BH", "BRC", "ADI"]},
    "22436": {"name": "Vande Bharat Exp", "start": "New Delhi", "end": "Varanasi",
              "route": ["NDLS", "CNB", "PRYJ", "BSB"]},
    "12626": {"name": "Kerala Express", "start": "New Delhi", "end": "Trivandrum",
              "route": ["NDLS", "AGC", "GWL", "BPL", "NGP", "BZA", "TVC"]},
    "12055": {"name": "Jan Shatabdi", "start": "Dehradun", "end": "New Delhi",
              "route": ["DDN", "HW", "RK", "MTC", "NDLS"]},
    "12137": {"name": "Punjab Mail", "start": "Mumbai CST", "end": "Firozpur",
              "route": ["CSMT", "DR", "NK", "BSL", "BPL", "NDLS", "FZR"]},
}
DEFAULT_TRAIN_NO = "12951"

STATIONS: list[dict[str, str]] = [
    {"name": "New Delhi", "code": "NDLS"},
    {"name": "Kota Jn", "code": "KOTA"},
    {"name": "Vadodara", "code": "BRC"},
    {"name": "Surat", "code": "ST"},
    {"name": "Mumbai Central", "code": "MMCT"},
    {"name": "Agra Cantt", "code": "AGC"},
    {"name": "Mathura Jn", "code": "MTJ"},
    {"name": "Ratlam Jn", "code": "RTM"},
    {"name": "Kanpur Central", "code": "CNB"},
    {"name": "Prayagraj", "code": "PRYJ"},
    {"name": "Varanasi", "code": "BSB"},
    {"name": "Bhopal", "code": "BPL"},
    {"name": "Nagpur", "code": "NGP"},
]

MENU: list[dict] = [
    {"id": "f1", "name": "Spicy Paneer Wrap", "restaurant": "Station Tikka House",
     "price": 180, "prep_time_minutes": 15, "rating": 4.5,
     "image": "https://picsum.photos/200/200?random=1"},
    {"id": "f2", "name": "Veg Biryani Combo", "restaurant": "Royal Kitchens",
     "price": 250, "prep_time_minutes": 25, "rating": 4.2,
     "image": "https://picsum.photos/200/200?random=2"},
    {"id": "f3", "name": "Masala Dosa", "restaurant": "South Express",
     "price": 120, "prep_time_minutes": 10, "rating": 4.8,
     "image": "https://picsum.photos/200/200?random=3"},
    {"id": "f4", "name": "Chole Bhature", "restaurant": "Delhi Delights",
     "price": 150, "prep_time_minutes": 20, "rating": 4.6,
     "image": "https://picsum.photos/200/200?random=4"},
]

LEADERBOARD: list[dict] = [
    {"id": "u1", "name": "Amit Kumar", "points": 1250, "rank": "Guardian", "helps": 342, "avatar": "👨🏽"},
    {"id": "u2", "name": "Priya Sharma", "points": 980, "rank": "Guide", "helps": 215, "avatar": "👩🏻"},
    {"id": "u3", "name": "Rajesh Koothrappali", "points": 850, "rank": "Guide", "helps": 180, "avatar": "👨🏻"},
    {"id": "u4", "name": "Simran K.", "points": 620, "rank": "Scout", "helps": 95, "avatar": "👩🏽"},
    {"id": "u5", "name": "Vikram Batra", "points": 540, "rank": "Scout", "helps": 82, "avatar": "👨🏽"},
]


def seed_reports(now: datetime | None = None) -> list[dict]:
    """Initial community reports, timestamped relative to *now*."""
    now = now or datetime.now()
    return [
        {"id": "1", "type": "ISSUE", "severity": "HIGH",
         "text": "Escalator on Platform 4 is not working. Use the stairs near Coach A1.",
         "upvotes": 45, "timestamp": now - timedelta(minutes=15), "location": "Platform 4",
         "user": "Amit Kumar", "user_rank": "Guardian"},
        {"id": "2", "type": "INFO", "severity": "LOW",
         "text": "Water cooler near Waiting Room has chilled water now.",
         "upvotes": 12, "timestamp": now - timedelta(hours=1), "location": "Main Hall",
         "user": "Sneha Singh", "user_rank": "Scout"},
        {"id": "3", "type": "CROWD", "severity": "MEDIUM",
         "text": "Huge rush at the main exit due to security check.",
         "upvotes": 89, "timestamp": now - timedelta(minutes=5), "location": "Exit Gate 2",
         "user": "Rahul V.", "user_rank": "Guide"},
    ]


def menu_item(item_id: str) -> dict | None:
    return next((m for m in MENU if m["id"] == item_id), None)
