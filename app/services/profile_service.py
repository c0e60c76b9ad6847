"""
Shadi Recommendations - Profile Service

User listing and role management for administrators.
"""

import uuid
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.profile import Profile, UserRole


class ProfileService:
    """Service for profile administration."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_profile(self, profile_id: uuid.UUID) -> Optional[Profile]:
        result = await self.db.execute(select(Profile).where(Profile.id == profile_id))
        return result.scalar_one_or_none()

    async def list_profiles(
        self,
        role: Optional[UserRole] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[List[Profile], int]:
        """List profiles, newest first. Returns (page, total)."""
        query = select(Profile)
        count_query = select(func.count(Profile.id))

        if role:
            query = query.where(Profile.role == role.value)
            count_query = count_query.where(Profile.role == role.value)

        total = await self.db.scalar(count_query) or 0

        query = query.order_by(Profile.created_at.desc()).offset(skip).limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all()), total

    async def change_role(self, profile: Profile, new_role: UserRole) -> str:
        """Set a new role. Returns the previous stored value."""
        previous = profile.role
        profile.role = new_role.value
        await self.db.commit()
        await self.db.refresh(profile)
        return previous
