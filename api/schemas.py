from __future__ import annotations
from datetime import datetime
from typing import Literal
from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# GET /health
# ---------------------------------------------------------------------------

class HealthResponse(BaseModel):
    status: Literal["ok"]
    timestamp: str
    authenticated: bool
    auth_mode: Literal["provider", "demo"]
    real_train_api: bool
    tracked_trains: int
    orders_stored: int


# ---------------------------------------------------------------------------
# /auth
# ---------------------------------------------------------------------------

class EmailAuthRequest(BaseModel):
    email: str
    password: str = Field(..., min_length=1)
    name: str = ""


class GoogleAuthRequest(BaseModel):
    id_token: str | None = None   # required only when a real provider is configured
    name: str = ""
    email: str = ""


class UserProfileOut(BaseModel):
    id: str
    name: str
    email: str
    avatar: str
    provider: Literal["GOOGLE", "EMAIL"]
    level: str
    points: int


class SessionResponse(BaseModel):
    authenticated: bool
    user: UserProfileOut | None = None


# ---------------------------------------------------------------------------
# /trains
# ---------------------------------------------------------------------------

class CurrentStopOut(BaseModel):
    name: str
    code: str
    departure_time: str
    platform: str


class NextStopOut(BaseModel):
    name: str
    code: str
    arrival_time: str
    distance_km: float
    weather: str


class PreviousStopOut(BaseModel):
    name: str
    code: str
    departure_time: str


class TrainStatusOut(BaseModel):
    train_name: str
    train_no: str
    pnr: str
    current_station: CurrentStopOut
    next_station: NextStopOut
    previous_station: PreviousStopOut
    coach_position: str
    status: Literal["ON_TIME", "DELAYED", "ARRIVED"]
    delay_minutes: int
    current_speed: int
    timestamp: int


class LiveTelemetryOut(BaseModel):
    train_no: str
    speed_kph: int
    distance_km: float


# ---------------------------------------------------------------------------
# /food
# ---------------------------------------------------------------------------

class FoodItemOut(BaseModel):
    id: str
    name: str
    restaurant: str
    price: int
    prep_time_minutes: int
    rating: float
    image: str


class AddToCartRequest(BaseModel):
    item_id: str


class CartResponse(BaseModel):
    items: list[FoodItemOut]
    subtotal: int
    halt_window_minutes: int
    checkout_in_flight: bool


class AddToCartResponse(CartResponse):
    accepted: bool
    warning: str | None = None


class OrderReceiptOut(BaseModel):
    order_id: str
    items: list[FoodItemOut]
    total: int
    gst: int
    final_total: int
    station: str
    coach: str
    timestamp: datetime


# ---------------------------------------------------------------------------
# /services
# ---------------------------------------------------------------------------

class BookingRequest(BaseModel):
    type: Literal["COOLIE", "WHEELCHAIR", "CLOAKROOM", "MEDICAL"]
    luggage_weight_kg: int = Field(20, ge=0, le=200)


class ServiceBookingOut(BaseModel):
    id: str
    type: Literal["COOLIE", "WHEELCHAIR", "CLOAKROOM", "MEDICAL"]
    status: Literal["PENDING", "CONFIRMED", "COMPLETED"]
    details: str
    price: int


class DoctorResponse(BaseModel):
    doctor: str


# ---------------------------------------------------------------------------
# /community
# ---------------------------------------------------------------------------

class ReportRequest(BaseModel):
    text: str


class StationUpdateOut(BaseModel):
    id: str
    type: Literal["ISSUE", "INFO", "CROWD"]
    severity: Literal["LOW", "MEDIUM", "HIGH"]
    text: str
    upvotes: int
    timestamp: datetime
    location: str
    user: str
    user_rank: str


class LeaderboardUserOut(BaseModel):
    id: str
    name: str
    points: int
    rank: str
    helps: int
    avatar: str


# ---------------------------------------------------------------------------
# /assistant
# ---------------------------------------------------------------------------

class ChatRequest(BaseModel):
    text: str


class ChatMessageOut(BaseModel):
    id: int
    role: Literal["user", "model"]
    text: str


# ---------------------------------------------------------------------------
# /settings, /sos
# ---------------------------------------------------------------------------

class LanguageSetting(BaseModel):
    language: Literal["EN", "HI"]


class SosResponse(BaseModel):
    message: str
    helpline: str
