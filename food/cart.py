"""
Food cart and checkout.

The cart is an ordered list of menu items; repeating an item is how
quantity is expressed.  An item is only accepted when its kitchen prep
time fits inside the window before the train leaves the delivery station
(time to arrival + halt duration).

Checkout snapshots the cart into an immutable OrderReceipt, attempts one
write to the order store, waits out the simulated confirmation delay and
then empties the cart.
"""

import asyncio
import logging
import math
import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from config import (
    CHECKOUT_DELAY_SECONDS,
    DELIVERY_COACH,
    DELIVERY_STATION,
    GST_RATE,
    HALT_DURATION_MINUTES,
    TIME_TO_ARRIVAL_MINUTES,
)
from food.orders import save_order

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FoodItem:
    id: str
    name: str
    restaurant: str
    price: int
    prep_time_minutes: int
    rating: float
    image: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "FoodItem":
        return cls(**d)


@dataclass(frozen=True)
class OrderReceipt:
    order_id: str
    items: tuple[FoodItem, ...]
    total: int          # subtotal before GST
    gst: int
    final_total: int
    station: str
    coach: str
    timestamp: datetime


class CheckoutInProgress(Exception):
    """A previous checkout has not finished yet."""


class EmptyCart(Exception):
    """Checkout was requested with nothing in the cart."""


def delivery_window_minutes() -> int:
    return TIME_TO_ARRIVAL_MINUTES + HALT_DURATION_MINUTES


def fits_halt_window(item: FoodItem) -> bool:
    return item.prep_time_minutes <= delivery_window_minutes()


def compute_totals(items: list[FoodItem]) -> tuple[int, int, int]:
    """
    Return (subtotal, gst, final_total).

    GST is rounded half-up to whole rupees: 430 → 21.5 → 22.
    """
    subtotal = sum(item.price for item in items)
    gst = math.floor(subtotal * GST_RATE + 0.5)
    return subtotal, gst, subtotal + gst


def generate_order_id(rng: random.Random | None = None) -> str:
    rng = rng or random
    return f"ORD-{rng.randint(10000, 99999)}"


@dataclass
class Cart:
    items: list[FoodItem] = field(default_factory=list)
    checkout_in_flight: bool = False

    def add(self, item: FoodItem) -> bool:
        """Append *item*; returns False (cart unchanged) if it can't be ready in time."""
        if not fits_halt_window(item):
            logger.info(
                "Rejected %s: prep %d min exceeds %d min halt window.",
                item.id, item.prep_time_minutes, delivery_window_minutes(),
            )
            return False
        self.items.append(item)
        return True

    def remove(self, index: int) -> None:
        """Drop the entry at *index*; out-of-range indices are ignored."""
        if 0 <= index < len(self.items):
            del self.items[index]

    def clear(self) -> None:
        self.items.clear()

    @property
    def subtotal(self) -> int:
        return compute_totals(self.items)[0]

    async def checkout(self, session: Session | None, user_id: str) -> OrderReceipt:
        """
        Build the receipt, write it through to the order store, then clear.

        A failed store write is logged and does not block the receipt.
        """
        if self.checkout_in_flight:
            raise CheckoutInProgress("A checkout is already in progress.")
        if not self.items:
            raise EmptyCart("Cart is empty.")

        self.checkout_in_flight = True
        try:
            subtotal, gst, final_total = compute_totals(self.items)
            receipt = OrderReceipt(
                order_id=generate_order_id(),
                items=tuple(self.items),
                total=subtotal,
                gst=gst,
                final_total=final_total,
                station=DELIVERY_STATION,
                coach=DELIVERY_COACH,
                timestamp=datetime.now(),
            )

            if session is not None:
                save_order(session, receipt, user_id)

            if CHECKOUT_DELAY_SECONDS > 0:
                await asyncio.sleep(CHECKOUT_DELAY_SECONDS)

            self.clear()
            logger.info("Order %s placed: %d items, ₹%d.", receipt.order_id, len(receipt.items), final_total)
            return receipt
        finally:
            self.checkout_in_flight = False


# Process-wide cart for the active session
cart = Cart()
