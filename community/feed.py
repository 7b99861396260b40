"""
Crowdsourced station feed.

Reports are classified by the LLM on submission and prepended, so the feed
reads newest-first.  Upvote counts are display data only.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime

from llm.assistant import classify_report
from reference.data import LEADERBOARD, seed_reports

logger = logging.getLogger(__name__)

DEFAULT_LOCATION = "Current Location"


@dataclass(frozen=True)
class StationUpdate:
    id: str
    type: str           # ISSUE | INFO | CROWD
    severity: str       # LOW | MEDIUM | HIGH
    text: str
    upvotes: int
    timestamp: datetime
    location: str
    user: str
    user_rank: str


# Module-level feed, newest first
feed: list[StationUpdate] = []


def reset_feed() -> None:
    """Restore the seeded reports."""
    feed[:] = [StationUpdate(**r) for r in seed_reports()]


reset_feed()


async def submit_report(
    text: str,
    user: str = "You",
    user_rank: str = "Guide",
    location: str = DEFAULT_LOCATION,
) -> StationUpdate:
    """
    Classify and publish a new report.

    Raises ValueError for blank text.
    """
    text = text.strip()
    if not text:
        raise ValueError("Report text is empty.")

    report_type, severity = await classify_report(text)
    update = StationUpdate(
        id=uuid.uuid4().hex[:9],
        type=report_type,
        severity=severity,
        text=text,
        upvotes=0,
        timestamp=datetime.now(),
        location=location,
        user=user,
        user_rank=user_rank,
    )
    feed.insert(0, update)
    logger.info("New %s/%s report from %s.", report_type, severity, user)
    return update


def leaderboard() -> list[dict]:
    return sorted((dict(u) for u in LEADERBOARD), key=lambda u: u["points"], reverse=True)
