"""
Shadi Recommendations - Session Verification

Resolves the calling identity once per request:

1. Validate the credential
2. Reject (and sign out) expired sessions
3. Read the live role from the profiles table, never from token claims
4. Default to the "user" role when no profile exists
5. Derive permissions from the role

Any collaborator failure is treated as "not authenticated".
"""

import asyncio
import logging
import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.profile import Profile, UserRole
from app.services.auth_provider import AuthProvider
from app.utils.permissions import Permission, get_role_permissions, resolve_role

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerifiedUser:
    """Authenticated principal for the duration of one request."""
    id: str
    email: str
    role: UserRole
    permissions: Tuple[Permission, ...]
    session_valid: bool
    last_verified: datetime

    def has_permission(self, permission: Permission) -> bool:
        return permission in self.permissions


# ===========================================
# PROFILE STORE
# ===========================================

class ProfileStore(ABC):
    """Authoritative role lookup."""

    @abstractmethod
    async def get_role(self, user_id: str) -> Optional[str]:
        """Persisted role for a user, or None when no profile exists."""
        pass


class SQLAlchemyProfileStore(ProfileStore):
    """Reads roles from the profiles table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_role(self, user_id: str) -> Optional[str]:
        try:
            profile_id = uuid.UUID(str(user_id))
        except ValueError:
            return None
        result = await self.db.execute(
            select(Profile.role).where(Profile.id == profile_id)
        )
        return result.scalar_one_or_none()


# ===========================================
# SESSION VERIFIER
# ===========================================

class SessionVerifier:
    """
    Request-scoped, memoized session verification.

    Create one instance per request. Repeated and concurrent calls to
    verify_session() share a single verification and return the same object.
    """

    def __init__(
        self,
        auth_provider: AuthProvider,
        profile_store: ProfileStore,
        clock: Callable[[], float] = time.time,
    ):
        self.auth_provider = auth_provider
        self.profile_store = profile_store
        self._clock = clock
        self._lock = asyncio.Lock()
        self._verified = False
        self._user: Optional[VerifiedUser] = None

    async def verify_session(self) -> Optional[VerifiedUser]:
        """Verified identity for this request, or None."""
        if self._verified:
            return self._user

        async with self._lock:
            if not self._verified:
                self._user = await self._verify()
                self._verified = True

        return self._user

    async def _verify(self) -> Optional[VerifiedUser]:
        try:
            user = await self.auth_provider.get_user()
            if user is None:
                return None

            session = await self.auth_provider.get_session()
            if session is None:
                return None

            expires_at = session.expires_at or 0
            if expires_at < self._clock():
                logger.info(f"Session expired for user {user.id}")
                await self.auth_provider.sign_out()
                return None

            stored_role = await self.profile_store.get_role(user.id)
            role = resolve_role(stored_role)

            return VerifiedUser(
                id=user.id,
                email=user.email or "",
                role=role,
                permissions=get_role_permissions(role),
                session_valid=True,
                last_verified=datetime.now(timezone.utc),
            )
        except Exception as e:
            logger.warning(f"Session verification failed: {e}")
            return None
