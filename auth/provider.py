"""
Third-party authentication client (Firebase Identity Toolkit REST API).

This module only talks to the provider and translates its error codes into
AuthError messages a passenger can act on.  Turning the provider's user
record into a UserProfile is auth.profiles' job.

When AUTH_API_KEY is empty the app runs in demo mode and these functions
are never called.
"""

import logging
from typing import Any

import httpx

from config import AUTH_API_KEY, AUTH_BASE_URL

logger = logging.getLogger(__name__)

# provider error code prefix → (message, hint)
_ERROR_MESSAGES: dict[str, tuple[str, str]] = {
    "INVALID_LOGIN_CREDENTIALS": ("Invalid email or password.", "Check for typos or try creating a new account."),
    "INVALID_PASSWORD": ("Invalid email or password.", "Check for typos or try creating a new account."),
    "EMAIL_NOT_FOUND": ("No account found.", "Please switch to the 'Register' tab to create an account first."),
    "EMAIL_EXISTS": ("Email already registered.", "Try logging in instead."),
    "WEAK_PASSWORD": ("Password is too weak.", "Use at least 6 characters."),
}


class AuthError(Exception):
    def __init__(self, message: str, hint: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint


def is_configured() -> bool:
    return bool(AUTH_API_KEY)


def _to_auth_error(code: str) -> AuthError:
    for prefix, (message, hint) in _ERROR_MESSAGES.items():
        if code.startswith(prefix):
            return AuthError(message, hint)
    return AuthError("Authentication failed")


async def _call(endpoint: str, body: dict[str, Any]) -> dict[str, Any]:
    try:
        async with httpx.AsyncClient(timeout=15) as client:
            resp = await client.post(
                f"{AUTH_BASE_URL}/accounts:{endpoint}",
                params={"key": AUTH_API_KEY},
                json=body,
            )
    except httpx.HTTPError as exc:
        logger.warning("Auth provider unreachable (%s): %s", endpoint, exc)
        raise AuthError("Authentication failed", "Check your connection and try again.") from exc

    if resp.status_code >= 400:
        try:
            code = resp.json()["error"]["message"]
        except (ValueError, KeyError, TypeError):
            code = f"HTTP_{resp.status_code}"
        logger.warning("Auth error on %s: %s", endpoint, code)
        raise _to_auth_error(code)
    return resp.json()


async def sign_in_with_password(email: str, password: str) -> dict[str, Any]:
    return await _call("signInWithPassword", {
        "email": email, "password": password, "returnSecureToken": True,
    })


async def sign_up(email: str, password: str, display_name: str = "") -> dict[str, Any]:
    """Create an account and, if given, set its display name."""
    user = await _call("signUp", {
        "email": email, "password": password, "returnSecureToken": True,
    })
    if display_name:
        await _call("update", {
            "idToken": user["idToken"], "displayName": display_name, "returnSecureToken": True,
        })
        user["displayName"] = display_name
    return user


async def sign_in_with_google(id_token: str) -> dict[str, Any]:
    """Exchange a Google ID token for a provider session."""
    return await _call("signInWithIdp", {
        "postBody": f"id_token={id_token}&providerId=google.com",
        "requestUri": "http://localhost",
        "returnSecureToken": True,
        "returnIdpCredential": True,
    })
