"""
Shadi Recommendations - Authentication Service

Business logic for email/password authentication and the initial admin account.
"""

import logging
from datetime import timedelta
from typing import Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.profile import Profile, UserRole
from app.utils.security import create_access_token, get_password_hash, verify_password

logger = logging.getLogger(__name__)


class AuthService:
    """Service for authentication operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_profile_by_email(self, email: str) -> Optional[Profile]:
        """Get profile by email address (case-insensitive)."""
        result = await self.db.execute(
            select(Profile).where(func.lower(Profile.email) == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def authenticate_user(
        self, email: str, password: str
    ) -> Tuple[Optional[Profile], bool]:
        """
        Authenticate a user with email and password.

        Returns:
            (profile, success). profile is set whenever the email is known,
            so failed attempts can still be attributed to the account.
        """
        profile = await self.get_profile_by_email(email)

        if not profile:
            return None, False

        if not profile.is_active or not profile.hashed_password:
            return profile, False

        if not verify_password(password, profile.hashed_password):
            return profile, False

        return profile, True

    def create_token(self, profile: Profile) -> Tuple[str, int]:
        """Issue an access token. Returns (token, lifetime in seconds)."""
        expires = timedelta(minutes=settings.access_token_expire_minutes)
        token = create_access_token(
            {"sub": str(profile.id), "email": profile.email},
            expires_delta=expires,
        )
        return token, int(expires.total_seconds())

    async def ensure_admin_profile(self, email: str, password: str) -> Profile:
        """Create the initial admin profile, or promote an existing one."""
        profile = await self.get_profile_by_email(email)

        if profile is None:
            profile = Profile(
                email=email.strip().lower(),
                display_name="Administrator",
                role=UserRole.ADMIN.value,
                hashed_password=get_password_hash(password),
            )
            self.db.add(profile)
            logger.info(f"Created admin profile {email}")
        elif profile.role != UserRole.ADMIN.value:
            profile.role = UserRole.ADMIN.value
            logger.info(f"Promoted {email} to admin")

        await self.db.commit()
        return profile
