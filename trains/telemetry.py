"""
Display-only live telemetry for tracked trains.

After a status lookup the train's speed and distance-to-next seed an entry
here.  A scheduler job calls tick() every LIVE_TICK_SECONDS to nudge the
values so the dashboard looks alive.  TrainStatus records are never touched.
"""

import logging
import random
from dataclasses import dataclass

from trains.status import MAX_SPEED_KPH, TrainStatus

logger = logging.getLogger(__name__)

SPEED_STEP_KPH = 1
DISTANCE_STEP_KM = 0.01


@dataclass
class LiveTelemetry:
    train_no: str
    speed_kph: int
    distance_km: float


# Module-level state, keyed by train_no
live_telemetry: dict[str, LiveTelemetry] = {}


def track(status: TrainStatus) -> LiveTelemetry:
    """Start (or restart) telemetry from a freshly resolved status."""
    entry = LiveTelemetry(
        train_no=status.train_no,
        speed_kph=status.current_speed,
        distance_km=status.next_station.distance_km,
    )
    live_telemetry[status.train_no] = entry
    logger.debug("Tracking telemetry for train %s.", status.train_no)
    return entry


def tick(rng: random.Random | None = None) -> None:
    """Perturb speed by ±1 km/h within [0, 130] and close distance by 0.01 km."""
    rng = rng or random
    for entry in live_telemetry.values():
        change = SPEED_STEP_KPH if rng.random() > 0.5 else -SPEED_STEP_KPH
        entry.speed_kph = min(MAX_SPEED_KPH, max(0, entry.speed_kph + change))
        entry.distance_km = max(0.0, round(entry.distance_km - DISTANCE_STEP_KM, 2))


def clear() -> None:
    live_telemetry.clear()
