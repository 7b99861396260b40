"""Fire-and-forget write of a placed order to the document store."""

import logging
from dataclasses import asdict
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.models import Order

logger = logging.getLogger(__name__)


def save_order(session: Session, receipt, user_id: str) -> bool:
    """
    Persist *receipt* as a CONFIRMED order.

    Returns False (after logging) on any database error; the caller never
    needs to handle the failure.
    """
    try:
        session.add(Order(
            order_id=receipt.order_id,
            user_id=user_id,
            items=[asdict(item) for item in receipt.items],
            total=receipt.total,
            gst=receipt.gst,
            final_total=receipt.final_total,
            station=receipt.station,
            coach=receipt.coach,
            status="CONFIRMED",
            timestamp=receipt.timestamp.isoformat(),
            created_at=datetime.now(timezone.utc).isoformat(),
        ))
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("Error saving order %s to DB: %s", receipt.order_id, exc, exc_info=True)
        return False
    logger.debug("Order %s written to store.", receipt.order_id)
    return True
