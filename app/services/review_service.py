"""
Shadi Recommendations - Review Service

Persistence for review edits and deletions. Authorization happens in the
router through the access checker before these methods are called.
"""

import uuid
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.restaurant import Review


EDITABLE_FIELDS = ("rating", "title", "content")


class ReviewService:
    """Service for review mutations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_review(self, review_id: uuid.UUID) -> Optional[Review]:
        result = await self.db.execute(select(Review).where(Review.id == review_id))
        return result.scalar_one_or_none()

    async def update_review(
        self, review: Review, updates: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Apply field updates to a review.

        Returns:
            {field: {"old": ..., "new": ...}} for every changed field
        """
        changes = {}
        for field in EDITABLE_FIELDS:
            if field not in updates:
                continue
            old_value = getattr(review, field)
            new_value = updates[field]
            if old_value != new_value:
                setattr(review, field, new_value)
                changes[field] = {"old": old_value, "new": new_value}

        if changes:
            await self.db.commit()
            await self.db.refresh(review)
        return changes

    async def delete_review(self, review: Review) -> None:
        await self.db.delete(review)
        await self.db.commit()
