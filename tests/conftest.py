"""
Shared test setup.

Environment overrides must be in place before config.py is imported, so
they are applied at module import time: a throwaway data directory, no
artificial delays, no scheduler tick, demo-mode auth and the simulated
train API.
"""

import os
import tempfile

_TMP_DATA = tempfile.mkdtemp(prefix="railsahayak-test-")
os.environ.update({
    "DATA_DIR": _TMP_DATA,
    "DATABASE_URL": "sqlite:///:memory:",
    "CHECKOUT_DELAY_SECONDS": "0",
    "DOCTOR_SCAN_SECONDS": "0",
    "SIMULATION_LATENCY_SECONDS": "0",
    "LIVE_TICK_SECONDS": "0",
    "AUTH_API_KEY": "",
    "USE_REAL_TRAIN_API": "false",
})

import pytest  # noqa: E402


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _reset_state():
    """Every test starts from a logged-out session with seeded data."""
    from auth.profiles import profile_store
    from community.feed import reset_feed
    from food.cart import cart
    from i18n.strings import set_language
    from llm.assistant import transcript
    from services.bookings import clear as clear_bookings
    from trains.telemetry import clear as clear_telemetry

    profile_store.logout()
    cart.clear()
    cart.checkout_in_flight = False
    reset_feed()
    transcript.reset()
    clear_bookings()
    clear_telemetry()
    set_language("EN")
    yield
