"""User-facing message strings, English and Hindi."""

from typing import Literal

Language = Literal["EN", "HI"]

STRINGS: dict[str, dict[str, str]] = {
    "EN": {
        "invalid_search": "Please enter a valid PNR (10 digits) or Train No (5 digits)",
        "prep_time_exceeded": "⚠️ Cannot order! Kitchen prep time exceeds train halt window.",
        "empty_cart": "Your cart is empty.",
        "checkout_in_progress": "Your order is already being placed.",
        "unknown_item": "That item is not on the menu.",
        "empty_report": "Please describe what you saw.",
        "not_logged_in": "Please log in to continue.",
        "unknown_train": "Search for this train first to see live updates.",
        "sos": "SOS activated. Railway Protection Force helpline: 139",
    },
    "HI": {
        "invalid_search": "कृपया मान्य PNR (10 अंक) या ट्रेन नंबर (5 अंक) दर्ज करें",
        "prep_time_exceeded": "⚠️ ऑर्डर नहीं हो सकता! रसोई में तैयारी का समय ट्रेन के ठहराव से अधिक है।",
        "empty_cart": "आपकी कार्ट खाली है।",
        "checkout_in_progress": "आपका ऑर्डर पहले से प्रक्रिया में है।",
        "unknown_item": "यह आइटम मेनू में नहीं है।",
        "empty_report": "कृपया बताएं आपने क्या देखा।",
        "not_logged_in": "जारी रखने के लिए कृपया लॉग इन करें।",
        "unknown_train": "लाइव अपडेट देखने के लिए पहले यह ट्रेन खोजें।",
        "sos": "SOS सक्रिय। रेलवे सुरक्षा बल हेल्पलाइन: 139",
    },
}

# Selected language for the session
_current: dict[str, Language] = {"language": "EN"}


def get_language() -> Language:
    return _current["language"]


def set_language(language: Language) -> None:
    _current["language"] = language


def t(key: str, language: Language | None = None) -> str:
    """Look up *key* in *language* (default: session language), English as fallback."""
    lang = language or get_language()
    return STRINGS.get(lang, STRINGS["EN"]).get(key) or STRINGS["EN"][key]
