"""
FastAPI application entry point.

On startup:
  1. Initialise the order store schema.
  2. Restore the locally stored profile (demo / offline continuity).
  3. Start the APScheduler live-telemetry ticker (every LIVE_TICK_SECONDS).

Endpoints (v1):
  GET  /health
  GET  /auth/session             POST /auth/login   /auth/register
  POST /auth/google              POST /auth/logout
  GET  /trains/status?query=<PNR or train no>
  GET  /trains/{train_no}/live
  GET  /food/menu                GET  /food/cart
  POST /food/cart                DELETE /food/cart/{index}
  POST /food/checkout
  GET  /services/bookings        POST /services/bookings
  POST /services/doctor
  GET  /community/feed           POST /community/reports
  GET  /community/leaderboard
  GET  /assistant/messages       POST /assistant/messages
  GET  /settings/language        PUT  /settings/language
  POST /sos

Every feature endpoint requires a logged-in profile; without one the API
answers 401 and the client shows the login view.
"""

import logging
import re
from contextlib import asynccontextmanager
from dataclasses import asdict
from datetime import datetime
from typing import Any

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import func
from sqlalchemy.orm import Session

from api.schemas import (
    AddToCartRequest,
    AddToCartResponse,
    BookingRequest,
    CartResponse,
    ChatMessageOut,
    ChatRequest,
    DoctorResponse,
    EmailAuthRequest,
    FoodItemOut,
    GoogleAuthRequest,
    HealthResponse,
    LanguageSetting,
    LeaderboardUserOut,
    LiveTelemetryOut,
    OrderReceiptOut,
    ReportRequest,
    ServiceBookingOut,
    SessionResponse,
    SosResponse,
    StationUpdateOut,
    TrainStatusOut,
)
from auth import provider as auth_provider
from auth.profiles import UserProfile, from_provider_user, mock_user, profile_store
from community import feed as community_feed
from config import CORS_ORIGINS, LIVE_TICK_SECONDS, USE_REAL_TRAIN_API
from db.models import Order
from db.session import get_session, init_db
from food.cart import CheckoutInProgress, EmptyCart, FoodItem, cart, delivery_window_minutes
from i18n.strings import get_language, set_language, t
from llm.assistant import transcript
from reference.data import MENU, menu_item
from services import bookings as service_bookings
from trains import telemetry
from trains.status import resolve_train_status

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

_SEARCH_PATTERN = re.compile(r"^\d{5,10}$")
RPF_HELPLINE = "139"

scheduler = AsyncIOScheduler()


def _require_user() -> UserProfile:
    """Guard for feature endpoints: 401 until someone is logged in."""
    if profile_store.current is None:
        raise HTTPException(status_code=401, detail=t("not_logged_in"))
    return profile_store.current


def _tick_telemetry() -> None:
    """Scheduled job: nudge displayed speed / distance for tracked trains."""
    try:
        telemetry.tick()
    except Exception as exc:
        logger.error("Telemetry tick failed: %s", exc, exc_info=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    init_db()
    logger.info("Order store initialised.")

    restored = profile_store.restore()
    if restored:
        logger.info("Restored stored profile for %s.", restored.id)

    if not auth_provider.is_configured():
        logger.warning("AUTH_API_KEY not set; running in demo mode (mock auth).")

    if LIVE_TICK_SECONDS > 0:
        scheduler.add_job(
            _tick_telemetry,
            "interval",
            seconds=LIVE_TICK_SECONDS,
            id="live_telemetry_tick",
            replace_existing=True,
        )
    scheduler.start()
    logger.info("Scheduler started. Live telemetry tick every %ds.", LIVE_TICK_SECONDS)

    yield

    # Shutdown
    if scheduler.running:
        scheduler.shutdown()


app = FastAPI(
    title="RailSahayak",
    description="Railway passenger companion: live status, food, station services, community feed, assistant.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)


@app.get("/health", response_model=HealthResponse)
async def health(session: Session = Depends(get_session)) -> HealthResponse:
    """Liveness check plus a summary of configured integrations."""
    orders: int = session.query(func.count(Order.id)).scalar() or 0
    return {
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat(),
        "authenticated": profile_store.current is not None,
        "auth_mode": "provider" if auth_provider.is_configured() else "demo",
        "real_train_api": USE_REAL_TRAIN_API,
        "tracked_trains": len(telemetry.live_telemetry),
        "orders_stored": orders,
    }


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

def _session_payload() -> dict[str, Any]:
    user = profile_store.current
    return {"authenticated": user is not None, "user": asdict(user) if user else None}


@app.get("/auth/session", response_model=SessionResponse)
async def get_auth_session() -> SessionResponse:
    return _session_payload()


async def _email_auth(body: EmailAuthRequest, register: bool) -> dict[str, Any]:
    if not auth_provider.is_configured():
        profile_store.login(mock_user("EMAIL", name=body.name, email=body.email))
        return _session_payload()
    try:
        if register:
            raw = await auth_provider.sign_up(body.email, body.password, body.name)
        else:
            raw = await auth_provider.sign_in_with_password(body.email, body.password)
    except auth_provider.AuthError as exc:
        raise HTTPException(status_code=401, detail={"message": exc.message, "hint": exc.hint})
    profile_store.login(from_provider_user(raw, "EMAIL"))
    return _session_payload()


@app.post("/auth/login", response_model=SessionResponse)
async def login(body: EmailAuthRequest) -> SessionResponse:
    return await _email_auth(body, register=False)


@app.post("/auth/register", response_model=SessionResponse)
async def register(body: EmailAuthRequest) -> SessionResponse:
    return await _email_auth(body, register=True)


@app.post("/auth/google", response_model=SessionResponse)
async def login_google(body: GoogleAuthRequest) -> SessionResponse:
    """Federated sign-in.  In demo mode no token is needed."""
    if not auth_provider.is_configured():
        profile_store.login(mock_user("GOOGLE", name=body.name, email=body.email))
        return _session_payload()
    if not body.id_token:
        raise HTTPException(status_code=422, detail="id_token is required.")
    try:
        raw = await auth_provider.sign_in_with_google(body.id_token)
    except auth_provider.AuthError as exc:
        raise HTTPException(status_code=401, detail={"message": exc.message, "hint": exc.hint})
    profile_store.login(from_provider_user(raw, "GOOGLE"))
    return _session_payload()


@app.post("/auth/logout", response_model=SessionResponse)
async def logout() -> SessionResponse:
    """Drop the in-memory profile and the stored fallback copy."""
    profile_store.logout()
    return _session_payload()


# ---------------------------------------------------------------------------
# Trains
# ---------------------------------------------------------------------------

@app.get("/trains/status", response_model=TrainStatusOut)
async def train_status(
    query: str = Query(..., description="10-digit PNR or 5-digit train number"),
    _: UserProfile = Depends(_require_user),
) -> TrainStatusOut:
    """
    Live status for a PNR or train number.

    Always answers with a complete status; the simulation stands in when the
    live API is disabled or fails.
    """
    query = query.strip()
    if not _SEARCH_PATTERN.match(query):
        raise HTTPException(status_code=422, detail=t("invalid_search"))

    status = await resolve_train_status(query)
    telemetry.track(status)
    return asdict(status)


@app.get("/trains/{train_no}/live", response_model=LiveTelemetryOut)
async def train_live(train_no: str, _: UserProfile = Depends(_require_user)) -> LiveTelemetryOut:
    entry = telemetry.live_telemetry.get(train_no)
    if entry is None:
        raise HTTPException(status_code=404, detail=t("unknown_train"))
    return asdict(entry)


# ---------------------------------------------------------------------------
# Food
# ---------------------------------------------------------------------------

def _cart_payload() -> dict[str, Any]:
    return {
        "items": [asdict(i) for i in cart.items],
        "subtotal": cart.subtotal,
        "halt_window_minutes": delivery_window_minutes(),
        "checkout_in_flight": cart.checkout_in_flight,
    }


@app.get("/food/menu", response_model=list[FoodItemOut])
async def food_menu(_: UserProfile = Depends(_require_user)) -> list[FoodItemOut]:
    return MENU


@app.get("/food/cart", response_model=CartResponse)
async def get_cart(_: UserProfile = Depends(_require_user)) -> CartResponse:
    return _cart_payload()


@app.post("/food/cart", response_model=AddToCartResponse)
async def add_to_cart(body: AddToCartRequest, _: UserProfile = Depends(_require_user)) -> AddToCartResponse:
    """
    Add one menu item.  Items that can't be ready before the train leaves
    are refused with a warning; the cart is left as it was.
    """
    raw = menu_item(body.item_id)
    if raw is None:
        raise HTTPException(status_code=404, detail=t("unknown_item"))
    accepted = cart.add(FoodItem.from_dict(raw))
    return {
        **_cart_payload(),
        "accepted": accepted,
        "warning": None if accepted else t("prep_time_exceeded"),
    }


@app.delete("/food/cart/{index}", response_model=CartResponse)
async def remove_from_cart(index: int, _: UserProfile = Depends(_require_user)) -> CartResponse:
    cart.remove(index)
    return _cart_payload()


@app.post("/food/checkout", response_model=OrderReceiptOut)
async def checkout(
    session: Session = Depends(get_session),
    user: UserProfile = Depends(_require_user),
) -> OrderReceiptOut:
    try:
        receipt = await cart.checkout(session, user.id)
    except CheckoutInProgress:
        raise HTTPException(status_code=409, detail=t("checkout_in_progress"))
    except EmptyCart:
        raise HTTPException(status_code=400, detail=t("empty_cart"))
    return asdict(receipt)


# ---------------------------------------------------------------------------
# Station services
# ---------------------------------------------------------------------------

@app.get("/services/bookings", response_model=list[ServiceBookingOut])
async def list_bookings(_: UserProfile = Depends(_require_user)) -> list[ServiceBookingOut]:
    return [asdict(b) for b in service_bookings.list_bookings()]


@app.post("/services/bookings", response_model=ServiceBookingOut)
async def create_booking(body: BookingRequest, _: UserProfile = Depends(_require_user)) -> ServiceBookingOut:
    return asdict(service_bookings.book_service(body.type, body.luggage_weight_kg))


@app.post("/services/doctor", response_model=DoctorResponse)
async def find_doctor(_: UserProfile = Depends(_require_user)) -> DoctorResponse:
    return {"doctor": await service_bookings.find_doctor()}


# ---------------------------------------------------------------------------
# Community
# ---------------------------------------------------------------------------

@app.get("/community/feed", response_model=list[StationUpdateOut])
async def get_feed(_: UserProfile = Depends(_require_user)) -> list[StationUpdateOut]:
    return [asdict(u) for u in community_feed.feed]


@app.post("/community/reports", response_model=StationUpdateOut)
async def post_report(body: ReportRequest, user: UserProfile = Depends(_require_user)) -> StationUpdateOut:
    try:
        update = await community_feed.submit_report(body.text, user=user.name)
    except ValueError:
        raise HTTPException(status_code=422, detail=t("empty_report"))
    return asdict(update)


@app.get("/community/leaderboard", response_model=list[LeaderboardUserOut])
async def get_leaderboard(_: UserProfile = Depends(_require_user)) -> list[LeaderboardUserOut]:
    return community_feed.leaderboard()


# ---------------------------------------------------------------------------
# Assistant
# ---------------------------------------------------------------------------

@app.get("/assistant/messages", response_model=list[ChatMessageOut])
async def get_messages(_: UserProfile = Depends(_require_user)) -> list[ChatMessageOut]:
    return [asdict(m) for m in transcript.messages]


@app.post("/assistant/messages", response_model=ChatMessageOut)
async def send_message(body: ChatRequest, _: UserProfile = Depends(_require_user)) -> ChatMessageOut:
    """Append the user's message and return the assistant's reply."""
    text = body.text.strip()
    if not text:
        raise HTTPException(status_code=422, detail="Message is empty.")
    return asdict(await transcript.send(text))


# ---------------------------------------------------------------------------
# Shell
# ---------------------------------------------------------------------------

@app.get("/settings/language", response_model=LanguageSetting)
async def get_language_setting() -> LanguageSetting:
    return {"language": get_language()}


@app.put("/settings/language", response_model=LanguageSetting)
async def put_language_setting(body: LanguageSetting) -> LanguageSetting:
    set_language(body.language)
    return {"language": get_language()}


@app.post("/sos", response_model=SosResponse)
async def sos() -> SosResponse:
    logger.warning("SOS activated by %s.", profile_store.current.id if profile_store.current else "anonymous")
    return {"message": t("sos"), "helpline": RPF_HELPLINE}
