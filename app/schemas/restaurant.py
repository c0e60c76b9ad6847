"""
Shadi Recommendations - Restaurant Schemas

Pydantic schemas for administrator management of restaurant records.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.restaurant import Emirate
from app.schemas.review import validate_safe_text


class RestaurantBase(BaseModel):
    name_ar: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    description_ar: Optional[str] = Field(None, max_length=5000)
    emirate: Optional[Emirate] = None
    district: Optional[str] = Field(None, max_length=100)
    price_tier: Optional[int] = Field(None, ge=1, le=4)
    rating: Optional[float] = Field(None, ge=0, le=5)

    # name is declared by the subclasses
    @field_validator("name", "name_ar", "description", "description_ar", "district", check_fields=False)
    @classmethod
    def check_safe_text(cls, v: Optional[str]) -> Optional[str]:
        return validate_safe_text(v)


class RestaurantCreate(RestaurantBase):
    """New restaurant record."""
    name: str = Field(..., min_length=1, max_length=255)


class RestaurantUpdate(RestaurantBase):
    """Partial update of a restaurant record."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)


class RestaurantResponse(BaseModel):
    """Restaurant as returned by the admin API."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    name_ar: Optional[str] = None
    description: Optional[str] = None
    description_ar: Optional[str] = None
    emirate: Optional[str] = None
    district: Optional[str] = None
    price_tier: Optional[int] = None
    rating: Optional[float] = None
    user_id: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class RestaurantListResponse(BaseModel):
    items: List[RestaurantResponse]
    total: int
    page: int
    limit: int
