"""Firebase Authentication adapter - Identity Toolkit REST API."""

import logging
import time
from pathlib import Path
from typing import Callable

import requests

from wodlog.config import Session
from wodlog.core.errors import AuthenticationError, AuthErrorKind

logger = logging.getLogger(__name__)

IDENTITY_BASE = "https://identitytoolkit.googleapis.com/v1"
SECURE_TOKEN_URL = "https://securetoken.googleapis.com/v1/token"

ERROR_KINDS = {
    "EMAIL_NOT_FOUND": AuthErrorKind.BAD_CREDENTIALS,
    "INVALID_PASSWORD": AuthErrorKind.BAD_CREDENTIALS,
    "INVALID_LOGIN_CREDENTIALS": AuthErrorKind.BAD_CREDENTIALS,
    "INVALID_EMAIL": AuthErrorKind.INVALID_EMAIL,
    "TOO_MANY_ATTEMPTS_TRY_LATER": AuthErrorKind.RATE_LIMITED,
    "EMAIL_EXISTS": AuthErrorKind.EMAIL_IN_USE,
    "WEAK_PASSWORD": AuthErrorKind.WEAK_PASSWORD,
}


def error_kind(code: str) -> AuthErrorKind:
    """Map a Firebase error message like 'WEAK_PASSWORD : ...' to a kind."""
    return ERROR_KINDS.get(code.split(":")[0].strip(), AuthErrorKind.UNKNOWN)


class FirebaseAuthAdapter:
    """
    Email/password authentication against Firebase.

    Implements IdentityProvider protocol. Persists the session to disk and
    notifies listeners whenever the signed-in user changes.
    """

    def __init__(self, api_key: str, session_path: Path | None = None):
        self.api_key = api_key
        self.session_path = session_path
        self._session = requests.Session()
        self._user = Session.load(session_path)
        self._listeners: list[Callable[[Session | None], None]] = []

    @property
    def current_user(self) -> Session | None:
        return self._user

    def on_auth_state_changed(self, callback: Callable[[Session | None], None]) -> Callable[[], None]:
        """Register a listener, called now with the current user and on every change."""
        self._listeners.append(callback)
        callback(self._user)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _set_user(self, user: Session | None) -> None:
        self._user = user
        for listener in list(self._listeners):
            listener(user)

    def _post(self, url: str, operation: str, **kwargs) -> dict:
        if not self.api_key:
            raise AuthenticationError(
                AuthErrorKind.UNKNOWN, operation, "FIREBASE_API_KEY not configured in wodlog.conf"
            )
        try:
            resp = self._session.post(url, params={"key": self.api_key}, timeout=30, **kwargs)
        except requests.RequestException as e:
            logger.error(f"Firebase {operation} request failed: {e}")
            raise AuthenticationError(AuthErrorKind.UNKNOWN, operation, str(e)) from e

        if resp.status_code != 200:
            try:
                code = resp.json()["error"]["message"]
            except (ValueError, KeyError, TypeError):
                code = resp.text
            logger.error(f"Firebase {operation} error: {code}")
            raise AuthenticationError(error_kind(code), operation, code)

        return resp.json()

    def _sign_with_password(self, endpoint: str, operation: str, email: str, password: str) -> Session:
        data = self._post(
            f"{IDENTITY_BASE}/accounts:{endpoint}",
            operation,
            json={"email": email, "password": password, "returnSecureToken": True},
        )
        user = Session(
            user_id=data["localId"],
            email=data.get("email", email),
            id_token=data["idToken"],
            refresh_token=data.get("refreshToken", ""),
            expires_at=int(time.time()) + int(data.get("expiresIn", 3600)),
        )
        user.save(self.session_path)
        self._set_user(user)
        return user

    def sign_in(self, email: str, password: str) -> Session:
        return self._sign_with_password("signInWithPassword", "sign_in", email, password)

    def sign_up(self, email: str, password: str) -> Session:
        return self._sign_with_password("signUp", "sign_up", email, password)

    def sign_out(self) -> None:
        try:
            Session.clear(self.session_path)
        except OSError as e:
            raise AuthenticationError(AuthErrorKind.UNKNOWN, "sign_out", str(e)) from e
        self._set_user(None)

    def ensure_fresh_token(self) -> Session | None:
        """Refresh the ID token if it expires within 5 minutes."""
        user = self._user
        if user is None or not user.is_expiring():
            return user
        if not user.refresh_token:
            raise AuthenticationError(AuthErrorKind.UNKNOWN, "refresh", "No refresh token. Run 'wodlog login'.")

        data = self._post(
            SECURE_TOKEN_URL,
            "refresh",
            data={"grant_type": "refresh_token", "refresh_token": user.refresh_token},
        )
        user.id_token = data["id_token"]
        user.refresh_token = data.get("refresh_token", user.refresh_token)
        user.expires_at = int(time.time()) + int(data.get("expires_in", 3600))
        user.save(self.session_path)
        return user
