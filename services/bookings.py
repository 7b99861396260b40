"""
Station-service bookings (coolie, wheelchair, cloakroom, medical) and the
on-board doctor lookup.

Bookings are created PENDING and stay that way; nothing in the app
advances their status.  The booking log is append-only.
"""

import asyncio
import logging
import math
import uuid
from dataclasses import dataclass
from typing import Literal

from config import DOCTOR_SCAN_SECONDS

logger = logging.getLogger(__name__)

ServiceType = Literal["COOLIE", "WHEELCHAIR", "CLOAKROOM", "MEDICAL"]
BookingStatus = Literal["PENDING", "CONFIRMED", "COMPLETED"]

COOLIE_RATE_PER_KG = 2.5
ON_BOARD_DOCTOR = "Dr. Anjali Verma (MD) - Coach B2, Seat 45"


@dataclass(frozen=True)
class ServiceBooking:
    id: str
    type: ServiceType
    status: BookingStatus
    details: str
    price: int


# Module-level booking log, oldest first
bookings: list[ServiceBooking] = []


def quote(service: ServiceType, luggage_weight_kg: int) -> tuple[str, int]:
    """Return (details, price) for a service request."""
    if service == "COOLIE":
        return f"{luggage_weight_kg}kg Luggage", math.floor(luggage_weight_kg * COOLIE_RATE_PER_KG)
    if service == "MEDICAL":
        return "Doctor Request", 0
    return "Assistance Required", 0


def book_service(service: ServiceType, luggage_weight_kg: int = 20) -> ServiceBooking:
    details, price = quote(service, luggage_weight_kg)
    booking = ServiceBooking(
        id=uuid.uuid4().hex[:9],
        type=service,
        status="PENDING",
        details=details,
        price=price,
    )
    bookings.append(booking)
    logger.info("Booked %s (%s) for ₹%d.", service, details, price)
    return booking


def list_bookings() -> list[ServiceBooking]:
    """Newest first."""
    return list(reversed(bookings))


async def find_doctor() -> str:
    """Simulated scan of the passenger manifest for a registered doctor."""
    if DOCTOR_SCAN_SECONDS > 0:
        await asyncio.sleep(DOCTOR_SCAN_SECONDS)
    return ON_BOARD_DOCTOR


def clear() -> None:
    bookings.clear()
