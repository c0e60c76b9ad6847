"""
Shadi Recommendations - Admin Schemas

Pydantic schemas for user administration.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.profile import UserRole


class ProfileResponse(BaseModel):
    """A user profile as seen by moderators and admins."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    role: str
    is_active: bool = True
    created_at: Optional[datetime] = None


class ProfileListResponse(BaseModel):
    items: List[ProfileResponse]
    total: int
    page: int
    limit: int


class RoleChangeRequest(BaseModel):
    """New role for a user."""
    role: UserRole
    reason: Optional[str] = Field(None, max_length=500)
