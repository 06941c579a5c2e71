"""
Auth session provider backed by the Firebase Identity Toolkit REST API.

register/login/refresh resolve to an AuthResult instead of raising for
rejected credentials; transport problems are reported the same way with the
error text as the reason.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, Optional

import requests
from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

LOGGER = logging.getLogger(__name__)

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"
SECURE_TOKEN_URL = "https://securetoken.googleapis.com/v1"

_REASONS: Dict[str, str] = {
    "EMAIL_EXISTS": "An account with this email already exists",
    "EMAIL_NOT_FOUND": "No account found for this email",
    "INVALID_PASSWORD": "Incorrect password",
    "INVALID_LOGIN_CREDENTIALS": "Invalid email or password",
    "INVALID_EMAIL": "Invalid email address",
    "MISSING_PASSWORD": "Password is required",
    "WEAK_PASSWORD": "Password should be at least 6 characters",
    "USER_DISABLED": "This account has been disabled",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "Too many attempts, try again later",
    "TOKEN_EXPIRED": "Session expired, please log in again",
    "INVALID_REFRESH_TOKEN": "Session expired, please log in again",
}


class _SignInResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    localId: str
    idToken: str
    refreshToken: str
    email: Optional[str] = None


class _RefreshResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    user_id: str
    id_token: str
    refresh_token: str


@dataclass(frozen=True)
class AuthCredentials:
    user_id: str
    id_token: str
    refresh_token: str
    email: Optional[str] = None


@dataclass(frozen=True)
class AuthResult:
    ok: bool
    reason: Optional[str] = None


class AuthError(Exception):
    """Auth request rejected or failed; ``code`` is the Firebase error code."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


def _reason(code: str) -> str:
    # Messages look like "WEAK_PASSWORD : Password should be at least 6 characters"
    key = code.split(":", 1)[0].strip()
    return _REASONS.get(key, code)


class FirebaseAuthSession:
    """
    Holds the signed-in principal for one process.

    ``current_user_id`` feeds NoteService; ``id_token`` feeds the Firestore
    client's bearer header.
    """

    def __init__(
        self,
        api_key: str,
        session: Optional[requests.Session] = None,
        *,
        credentials: Optional[AuthCredentials] = None,
        identity_url: str = IDENTITY_TOOLKIT_URL,
        token_url: str = SECURE_TOKEN_URL,
    ):
        self._api_key = api_key
        self._session = session or requests.Session()
        self._credentials = credentials
        self._identity_url = identity_url.rstrip("/")
        self._token_url = token_url.rstrip("/")

    @property
    def credentials(self) -> Optional[AuthCredentials]:
        return self._credentials

    @property
    def current_user_id(self) -> Optional[str]:
        return self._credentials.user_id if self._credentials else None

    @property
    def current_email(self) -> Optional[str]:
        return self._credentials.email if self._credentials else None

    @property
    def id_token(self) -> Optional[str]:
        return self._credentials.id_token if self._credentials else None

    @property
    def is_logged_in(self) -> bool:
        return self._credentials is not None

    # -------------------------- Public API methods ---------------------------

    async def register(self, email: str, password: str) -> AuthResult:
        return await self._sign_in("accounts:signUp", email, password)

    async def login(self, email: str, password: str) -> AuthResult:
        return await self._sign_in("accounts:signInWithPassword", email, password)

    async def refresh(self) -> AuthResult:
        """Exchange the stored refresh token for a fresh ID token."""
        creds = self._credentials
        if creds is None:
            return AuthResult(False, "Not logged in")
        try:
            data = await asyncio.to_thread(
                self._post,
                f"{self._token_url}/token",
                data={
                    "grant_type": "refresh_token",
                    "refresh_token": creds.refresh_token,
                },
            )
            resp = _RefreshResponse.model_validate(data)
        except AuthError as e:
            LOGGER.warning("auth.refresh.failed code=%s", e.code)
            return AuthResult(False, str(e))
        except PydanticValidationError:
            LOGGER.error("auth.refresh.invalid_response")
            return AuthResult(False, "Unexpected response from auth server")
        self._credentials = AuthCredentials(
            user_id=resp.user_id,
            id_token=resp.id_token,
            refresh_token=resp.refresh_token,
            email=creds.email,
        )
        LOGGER.info("auth.refresh.ok user=%s", resp.user_id)
        return AuthResult(True)

    def logout(self) -> None:
        LOGGER.info("auth.logout user=%s", self.current_user_id)
        self._credentials = None

    # -------------------------- Internal helpers -----------------------------

    async def _sign_in(self, endpoint: str, email: str, password: str) -> AuthResult:
        try:
            data = await asyncio.to_thread(
                self._post,
                f"{self._identity_url}/{endpoint}",
                json={
                    "email": email,
                    "password": password,
                    "returnSecureToken": True,
                },
            )
            resp = _SignInResponse.model_validate(data)
        except AuthError as e:
            LOGGER.warning("auth.%s.failed code=%s", endpoint, e.code)
            return AuthResult(False, str(e))
        except PydanticValidationError:
            LOGGER.error("auth.%s.invalid_response", endpoint)
            return AuthResult(False, "Unexpected response from auth server")
        self._credentials = AuthCredentials(
            user_id=resp.localId,
            id_token=resp.idToken,
            refresh_token=resp.refreshToken,
            email=resp.email or email,
        )
        LOGGER.info("auth.%s.ok user=%s", endpoint, resp.localId)
        return AuthResult(True)

    def _post(self, url: str, **kwargs) -> Dict:
        LOGGER.debug("POST to %s", url)
        try:
            resp = self._session.post(url, params={"key": self._api_key}, **kwargs)
        except requests.RequestException as e:
            raise AuthError(f"Network error: {e}") from e
        code = getattr(resp, "status_code", 0)
        try:
            body = resp.json()
        except ValueError:
            body = None
        if code >= 400:
            message = ""
            if isinstance(body, dict) and isinstance(body.get("error"), dict):
                message = str(body["error"].get("message") or "")
            LOGGER.debug("POST to %s failed with code %d: %s", url, code, message)
            raise AuthError(
                _reason(message) if message else f"HTTP {code}", message or None
            )
        if not isinstance(body, dict):
            raise AuthError("Invalid JSON response")
        return body


__all__ = [
    "AuthCredentials",
    "AuthError",
    "AuthResult",
    "FirebaseAuthSession",
]
