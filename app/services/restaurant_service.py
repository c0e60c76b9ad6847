"""
Shadi Recommendations - Restaurant Service

Restaurant record management for administrators. Callers are expected to
have checked settings:manage before any mutation.
"""

import uuid
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.restaurant import Emirate, Restaurant


EDITABLE_FIELDS = (
    "name",
    "name_ar",
    "description",
    "description_ar",
    "emirate",
    "district",
    "price_tier",
    "rating",
)


def _column_value(field: str, value: Any) -> Any:
    if isinstance(value, Emirate):
        return value.value
    if field == "rating" and value is not None:
        return Decimal(str(value))
    return value


def snapshot_restaurant(restaurant: Restaurant) -> Dict[str, Any]:
    """Editable fields of a restaurant, for audit metadata."""
    data = {field: getattr(restaurant, field) for field in EDITABLE_FIELDS}
    if data["rating"] is not None:
        data["rating"] = float(data["rating"])
    return data


class RestaurantService:
    """Service for restaurant CRUD."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_restaurant(self, restaurant_id: uuid.UUID) -> Optional[Restaurant]:
        result = await self.db.execute(select(Restaurant).where(Restaurant.id == restaurant_id))
        return result.scalar_one_or_none()

    async def list_restaurants(
        self,
        emirate: Optional[Emirate] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[List[Restaurant], int]:
        """List restaurants, newest first. Returns (page, total)."""
        query = select(Restaurant)
        count_query = select(func.count(Restaurant.id))

        if emirate:
            query = query.where(Restaurant.emirate == emirate.value)
            count_query = count_query.where(Restaurant.emirate == emirate.value)

        total = await self.db.scalar(count_query) or 0

        query = query.order_by(Restaurant.created_at.desc()).offset(skip).limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all()), total

    async def create_restaurant(self, data: Dict[str, Any], created_by: str) -> Restaurant:
        values = {
            field: _column_value(field, value)
            for field, value in data.items()
            if field in EDITABLE_FIELDS
        }
        restaurant = Restaurant(id=uuid.uuid4(), user_id=uuid.UUID(created_by), **values)
        self.db.add(restaurant)
        await self.db.commit()
        await self.db.refresh(restaurant)
        return restaurant

    async def update_restaurant(
        self, restaurant: Restaurant, updates: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Apply field updates to a restaurant.

        Returns:
            {field: {"old": ..., "new": ...}} for every changed field
        """
        old_values = snapshot_restaurant(restaurant)
        changes = {}
        for field in EDITABLE_FIELDS:
            if field not in updates:
                continue
            new_value = _column_value(field, updates[field])
            if getattr(restaurant, field) != new_value:
                setattr(restaurant, field, new_value)
                changes[field] = {
                    "old": old_values[field],
                    "new": float(new_value) if field == "rating" and new_value is not None else new_value,
                }

        if changes:
            await self.db.commit()
            await self.db.refresh(restaurant)
        return changes

    async def delete_restaurant(self, restaurant: Restaurant) -> None:
        await self.db.delete(restaurant)
        await self.db.commit()
