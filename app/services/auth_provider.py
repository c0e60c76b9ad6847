"""
Shadi Recommendations - Authentication Provider

Abstraction over "who is calling" for one request.
JWTAuthProvider reads the access token from the Authorization header or the
access_token cookie.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from app.utils.security import verify_access_token
from app.utils.session_config import COOKIE_NAMES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthUser:
    """Identity asserted by a valid credential."""
    id: str
    email: str = ""


@dataclass(frozen=True)
class AuthSession:
    """Session attached to the credential. expires_at is epoch seconds."""
    session_id: Optional[str] = None
    expires_at: Optional[float] = None


class AuthProvider(ABC):
    """Request-scoped authentication operations."""

    @abstractmethod
    async def get_user(self) -> Optional[AuthUser]:
        """Identity from a cryptographically valid credential, or None."""
        pass

    @abstractmethod
    async def get_session(self) -> Optional[AuthSession]:
        """Session for the current credential, or None."""
        pass

    @abstractmethod
    async def sign_out(self) -> None:
        """Invalidate the current session."""
        pass


class JWTAuthProvider(AuthProvider):
    """
    JWT bearer/cookie authentication.

    Expiry is not enforced while decoding; the session verifier compares
    the exp claim against the wall clock and signs the caller out.
    """

    SIGN_OUT_FLAG = "clear_auth_cookie"

    def __init__(self, request: Request):
        self.request = request
        self._payload: Optional[dict] = None
        self._decoded = False

    def _get_token(self) -> Optional[str]:
        auth_header = self.request.headers.get("authorization")
        if auth_header and auth_header.lower().startswith("bearer "):
            return auth_header[7:].strip() or None
        return self.request.cookies.get(COOKIE_NAMES["access_token"])

    def _get_payload(self) -> Optional[dict]:
        if not self._decoded:
            self._decoded = True
            token = self._get_token()
            if token:
                self._payload = verify_access_token(token, verify_exp=False)
        return self._payload

    async def get_user(self) -> Optional[AuthUser]:
        payload = self._get_payload()
        if not payload or not payload.get("sub"):
            return None
        return AuthUser(id=str(payload["sub"]), email=payload.get("email") or "")

    async def get_session(self) -> Optional[AuthSession]:
        payload = self._get_payload()
        if not payload:
            return None
        exp = payload.get("exp")
        return AuthSession(
            session_id=payload.get("sid"),
            expires_at=float(exp) if exp is not None else None,
        )

    async def sign_out(self) -> None:
        # RequestContextMiddleware clears the cookie on the way out
        setattr(self.request.state, self.SIGN_OUT_FLAG, True)
        session_id = self._payload.get("sid") if self._payload else None
        logger.info(f"Signed out session {session_id}")
