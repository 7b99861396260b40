"""
Integration tests for API endpoints.

The FastAPI lifespan's init_db is patched out for every test and the
get_session dependency is pointed at a fresh in-memory SQLite database,
so tests are fully isolated.  Auth runs in demo mode (no AUTH_API_KEY).
"""

import httpx
import pytest
from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from db.models import Base, Order
from db.session import get_session


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def db_session():
    """Fresh in-memory SQLite database, schema pre-created, per test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    TestSession = sessionmaker(bind=engine)
    session = TestSession()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def client(db_session):
    """TestClient with init_db patched and get_session overridden."""
    from api.main import app

    def override_get_session():
        yield db_session

    with patch("api.main.init_db"):
        app.dependency_overrides[get_session] = override_get_session
        with TestClient(app, raise_server_exceptions=True) as c:
            yield c
        app.dependency_overrides.clear()


@pytest.fixture
def authed(client):
    """Client with a demo user logged in."""
    resp = client.post("/auth/login", json={"email": "asha@example.com", "password": "pw", "name": "Asha"})
    assert resp.status_code == 200
    return client


# ---------------------------------------------------------------------------
# GET /health
# ---------------------------------------------------------------------------

class TestHealth:
    def test_returns_200(self, client):
        assert client.get("/health").status_code == 200

    def test_reports_demo_mode_and_no_user(self, client):
        body = client.get("/health").json()
        assert body["status"] == "ok"
        assert body["auth_mode"] == "demo"
        assert body["authenticated"] is False
        assert body["real_train_api"] is False
        assert body["orders_stored"] == 0


# ---------------------------------------------------------------------------
# /auth
# ---------------------------------------------------------------------------

class TestAuth:
    def test_session_initially_unauthenticated(self, client):
        body = client.get("/auth/session").json()
        assert body == {"authenticated": False, "user": None}

    def test_demo_email_login(self, client):
        body = client.post("/auth/login", json={"email": "asha@example.com", "password": "pw", "name": "Asha"}).json()
        assert body["authenticated"] is True
        assert body["user"]["id"] == "mock-email-id"
        assert body["user"]["name"] == "Asha"
        assert body["user"]["provider"] == "EMAIL"

    def test_demo_google_login_needs_no_token(self, client):
        body = client.post("/auth/google", json={}).json()
        assert body["user"]["provider"] == "GOOGLE"
        assert body["user"]["name"] == "Demo User"

    def test_logout_returns_to_unauthenticated_view(self, authed):
        from auth.profiles import PROFILE_STORAGE_KEY, profile_store

        body = authed.post("/auth/logout").json()

        assert body["authenticated"] is False
        assert profile_store.current is None
        assert profile_store.storage.get_item(PROFILE_STORAGE_KEY) is None
        assert authed.get("/food/cart").status_code == 401

    def test_feature_endpoints_require_login(self, client):
        for path in ("/food/menu", "/community/feed", "/assistant/messages", "/services/bookings"):
            assert client.get(path).status_code == 401

    def test_provider_error_surfaces_message_and_hint(self, client):
        from auth.provider import AuthError

        with (
            patch("api.main.auth_provider.is_configured", return_value=True),
            patch("api.main.auth_provider.sign_in_with_password", new_callable=AsyncMock,
                  side_effect=AuthError("No account found.", "Please register first.")),
        ):
            resp = client.post("/auth/login", json={"email": "a@b.c", "password": "pw"})

        assert resp.status_code == 401
        assert resp.json()["detail"]["message"] == "No account found."

    def test_provider_login_maps_user(self, client):
        with (
            patch("api.main.auth_provider.is_configured", return_value=True),
            patch("api.main.auth_provider.sign_in_with_password", new_callable=AsyncMock,
                  return_value={"localId": "uid-9", "email": "ravi@example.com"}),
        ):
            body = client.post("/auth/login", json={"email": "ravi@example.com", "password": "pw"}).json()

        assert body["user"]["id"] == "uid-9"
        assert body["user"]["name"] == "ravi"
        assert body["user"]["points"] == 120

    def test_provider_google_requires_token(self, client):
        with patch("api.main.auth_provider.is_configured", return_value=True):
            assert client.post("/auth/google", json={}).status_code == 422


# ---------------------------------------------------------------------------
# /trains
# ---------------------------------------------------------------------------

class TestTrains:
    def test_pnr_lookup(self, authed):
        body = authed.get("/trains/status?query=8421039482").json()
        assert body["pnr"] == "8421039482"
        codes = {body["current_station"]["code"], body["next_station"]["code"],
                 body["previous_station"]["code"]}
        assert len(codes) == 3

    def test_train_number_lookup(self, authed):
        body = authed.get("/trains/status?query=22436").json()
        assert body["train_no"] == "22436"
        assert body["status"] in ("ON_TIME", "DELAYED")
        assert 0 <= body["current_speed"] <= 130

    @pytest.mark.parametrize("query", ["1234", "12a51", "12345678901", ""])
    def test_invalid_query_returns_422(self, authed, query):
        resp = authed.get(f"/trains/status?query={query}")
        assert resp.status_code == 422

    def test_invalid_query_message_is_localized(self, authed):
        authed.put("/settings/language", json={"language": "HI"})
        detail = authed.get("/trains/status?query=12").json()["detail"]
        assert "PNR" in detail and "कृपया" in detail

    def test_live_telemetry_after_lookup(self, authed):
        status = authed.get("/trains/status?query=12951").json()
        live = authed.get("/trains/12951/live").json()
        assert live["speed_kph"] == status["current_speed"]
        assert live["distance_km"] == status["next_station"]["distance_km"]

    def test_live_telemetry_unknown_train(self, authed):
        assert authed.get("/trains/12009/live").status_code == 404


# ---------------------------------------------------------------------------
# /food
# ---------------------------------------------------------------------------

class TestFood:
    def test_menu(self, authed):
        menu = authed.get("/food/menu").json()
        assert {m["id"] for m in menu} == {"f1", "f2", "f3", "f4"}

    def test_add_within_window(self, authed):
        body = authed.post("/food/cart", json={"item_id": "f1"}).json()
        assert body["accepted"] is True
        assert body["subtotal"] == 180
        assert body["halt_window_minutes"] == 15

    def test_add_over_window_leaves_cart_unchanged(self, authed):
        authed.post("/food/cart", json={"item_id": "f3"})
        body = authed.post("/food/cart", json={"item_id": "f2"}).json()
        assert body["accepted"] is False
        assert "halt window" in body["warning"]
        assert [i["id"] for i in body["items"]] == ["f3"]

    def test_unknown_item_404(self, authed):
        assert authed.post("/food/cart", json={"item_id": "zz"}).status_code == 404

    def test_remove_by_index(self, authed):
        for item_id in ("f1", "f3", "f1"):
            authed.post("/food/cart", json={"item_id": item_id})
        body = authed.delete("/food/cart/1").json()
        assert [i["id"] for i in body["items"]] == ["f1", "f1"]

    def test_remove_out_of_range_noop(self, authed):
        authed.post("/food/cart", json={"item_id": "f1"})
        body = authed.delete("/food/cart/7").json()
        assert len(body["items"]) == 1

    def test_checkout_receipt_and_store_write(self, authed, db_session):
        authed.post("/food/cart", json={"item_id": "f1"})
        authed.post("/food/cart", json={"item_id": "f4"})

        receipt = authed.post("/food/checkout").json()

        assert receipt["total"] == 330
        assert receipt["gst"] == 17          # 16.5 rounds up
        assert receipt["final_total"] == 347
        assert receipt["order_id"].startswith("ORD-")
        assert authed.get("/food/cart").json()["items"] == []
        row = db_session.query(Order).one()
        assert row.user_id == "mock-email-id"

    def test_checkout_empty_cart_400(self, authed):
        assert authed.post("/food/checkout").status_code == 400

    def test_checkout_while_in_flight_409(self, authed):
        from food.cart import cart

        authed.post("/food/cart", json={"item_id": "f1"})
        cart.checkout_in_flight = True
        assert authed.post("/food/checkout").status_code == 409


# ---------------------------------------------------------------------------
# /services
# ---------------------------------------------------------------------------

class TestServices:
    def test_coolie_priced_by_weight(self, authed):
        body = authed.post("/services/bookings", json={"type": "COOLIE", "luggage_weight_kg": 25}).json()
        assert body["price"] == 62
        assert body["details"] == "25kg Luggage"
        assert body["status"] == "PENDING"

    def test_other_services_free(self, authed):
        body = authed.post("/services/bookings", json={"type": "MEDICAL"}).json()
        assert body["price"] == 0
        assert body["details"] == "Doctor Request"
        body = authed.post("/services/bookings", json={"type": "CLOAKROOM"}).json()
        assert body["details"] == "Assistance Required"

    def test_listing_newest_first(self, authed):
        authed.post("/services/bookings", json={"type": "WHEELCHAIR"})
        authed.post("/services/bookings", json={"type": "COOLIE"})
        types = [b["type"] for b in authed.get("/services/bookings").json()]
        assert types == ["COOLIE", "WHEELCHAIR"]

    def test_unknown_service_422(self, authed):
        assert authed.post("/services/bookings", json={"type": "TAXI"}).status_code == 422

    def test_find_doctor(self, authed):
        assert "Dr. Anjali Verma" in authed.post("/services/doctor").json()["doctor"]


# ---------------------------------------------------------------------------
# /community
# ---------------------------------------------------------------------------

class TestCommunity:
    def test_seeded_feed(self, authed):
        assert len(authed.get("/community/feed").json()) == 3

    def test_report_with_failing_classifier(self, authed):
        with patch("llm.assistant._ollama_chat", new_callable=AsyncMock,
                   side_effect=httpx.ConnectError("down")):
            body = authed.post("/community/reports", json={"text": "lift stuck"}).json()

        assert (body["type"], body["severity"]) == ("INFO", "LOW")
        assert body["user"] == "Asha"
        assert authed.get("/community/feed").json()[0]["id"] == body["id"]

    def test_blank_report_422(self, authed):
        assert authed.post("/community/reports", json={"text": "  "}).status_code == 422

    def test_leaderboard(self, authed):
        board = authed.get("/community/leaderboard").json()
        assert board[0]["name"] == "Amit Kumar"


# ---------------------------------------------------------------------------
# /assistant
# ---------------------------------------------------------------------------

class TestAssistant:
    def test_welcome_message_present(self, authed):
        msgs = authed.get("/assistant/messages").json()
        assert len(msgs) == 1 and msgs[0]["role"] == "model"

    def test_send_appends_reply(self, authed):
        with patch("llm.assistant.chat", new_callable=AsyncMock, return_value="Platform 5."):
            reply = authed.post("/assistant/messages", json={"text": "Where is my train?"}).json()

        assert reply["text"] == "Platform 5."
        msgs = authed.get("/assistant/messages").json()
        assert [m["role"] for m in msgs] == ["model", "user", "model"]

    def test_backend_down_gives_apology(self, authed):
        from llm.assistant import APOLOGY

        with patch("llm.assistant._ollama_chat", new_callable=AsyncMock,
                   side_effect=httpx.ConnectError("down")):
            reply = authed.post("/assistant/messages", json={"text": "hi"}).json()
        assert reply["text"] == APOLOGY

    def test_empty_message_422(self, authed):
        assert authed.post("/assistant/messages", json={"text": ""}).status_code == 422


# ---------------------------------------------------------------------------
# Shell
# ---------------------------------------------------------------------------

class TestShell:
    def test_language_roundtrip(self, client):
        assert client.get("/settings/language").json() == {"language": "EN"}
        assert client.put("/settings/language", json={"language": "HI"}).json() == {"language": "HI"}

    def test_unsupported_language_422(self, client):
        assert client.put("/settings/language", json={"language": "FR"}).status_code == 422

    def test_sos(self, client):
        assert client.post("/sos").json()["helpline"] == "139"


# ---------------------------------------------------------------------------
# _tick_telemetry job function
# ---------------------------------------------------------------------------

class TestTickJob:
    def test_error_does_not_propagate(self):
        from api.main import _tick_telemetry

        with patch("api.main.telemetry.tick", side_effect=Exception("boom")):
            _tick_telemetry()  # must not raise
