"""
Logged-in user profile and its local fallback copy.

The profile lives in memory for the running session and is mirrored into a
small JSON key/value file that plays the part of the browser's
localStorage.  On startup the stored copy is restored so demo sessions
survive a restart; logout removes both.
"""

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Literal
from urllib.parse import quote

from config import LOCAL_STORAGE_PATH

logger = logging.getLogger(__name__)

Provider = Literal["GOOGLE", "EMAIL"]

PROFILE_STORAGE_KEY = "railSahayak_demo_user"
DEFAULT_LEVEL = "Scout"
DEMO_POINTS = 100
PROVIDER_POINTS = 120


@dataclass
class UserProfile:
    id: str
    name: str
    email: str
    avatar: str
    provider: Provider
    level: str = DEFAULT_LEVEL
    points: int = 0


def _avatar_url(name: str) -> str:
    return f"https://ui-avatars.com/api/?name={quote(name)}&background=random"


def map_user(
    uid: str,
    display_name: str | None,
    email: str | None,
    photo_url: str | None,
    provider: Provider,
    points: int = DEMO_POINTS,
) -> UserProfile:
    """Build a profile; name falls back to the email prefix, then 'Traveller'."""
    name = display_name or (email.split("@")[0] if email else "") or "Traveller"
    return UserProfile(
        id=uid,
        name=name,
        email=email or "",
        avatar=photo_url or _avatar_url(name),
        provider=provider,
        level=DEFAULT_LEVEL,
        points=points,
    )


def from_provider_user(user: dict[str, Any], provider: Provider) -> UserProfile:
    """Map an Identity Toolkit user record onto a profile."""
    return map_user(
        uid=user["localId"],
        display_name=user.get("displayName"),
        email=user.get("email"),
        photo_url=user.get("photoUrl"),
        provider=provider,
        points=PROVIDER_POINTS,
    )


def mock_user(provider: Provider, name: str = "", email: str = "") -> UserProfile:
    return map_user(
        uid=f"mock-{provider.lower()}-id",
        display_name=name or "Demo User",
        email=email or "demo@railsahayak.com",
        photo_url=None,
        provider=provider,
    )


class LocalStorage:
    """Tiny persistent string key/value store backed by one JSON file."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable local storage %s: %s", self.path, exc)
            return {}

    def get_item(self, key: str) -> str | None:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self.path.write_text(json.dumps(data), encoding="utf-8")

    def remove_item(self, key: str) -> None:
        data = self._read()
        if data.pop(key, None) is not None:
            self.path.write_text(json.dumps(data), encoding="utf-8")


class ProfileStore:
    def __init__(self, storage: LocalStorage) -> None:
        self.storage = storage
        self.current: UserProfile | None = None

    def restore(self) -> UserProfile | None:
        """Load the stored fallback profile, if any."""
        raw = self.storage.get_item(PROFILE_STORAGE_KEY)
        if raw is None:
            self.current = None
            return None
        try:
            self.current = UserProfile(**json.loads(raw))
        except (ValueError, TypeError) as exc:
            logger.warning("Discarding corrupt stored profile: %s", exc)
            self.storage.remove_item(PROFILE_STORAGE_KEY)
            self.current = None
        return self.current

    def login(self, profile: UserProfile) -> UserProfile:
        self.current = profile
        self.storage.set_item(PROFILE_STORAGE_KEY, json.dumps(asdict(profile)))
        logger.info("User %s logged in via %s.", profile.id, profile.provider)
        return profile

    def logout(self) -> None:
        user_id = self.current.id if self.current else None
        self.current = None
        try:
            self.storage.remove_item(PROFILE_STORAGE_KEY)
        except OSError as exc:
            logger.error("Error clearing stored profile: %s", exc)
        logger.info("User %s logged out.", user_id)


profile_store = ProfileStore(LocalStorage(LOCAL_STORAGE_PATH))
