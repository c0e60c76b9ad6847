"""
Shadi Recommendations - Review Schemas

Pydantic schemas for review requests and responses.
"""

import re
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Script tags, javascript: URLs and inline event handlers
UNSAFE_TEXT_PATTERN = re.compile(r"<script|javascript:|on\w+=", re.IGNORECASE)


def validate_safe_text(value: Optional[str]) -> Optional[str]:
    """Reject text containing XSS-style markup."""
    if value is not None and UNSAFE_TEXT_PATTERN.search(value):
        raise ValueError("Invalid characters detected")
    return value


class ReviewUpdate(BaseModel):
    """Partial update of a review."""
    rating: Optional[int] = Field(None, ge=1, le=5)
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    content: Optional[str] = Field(None, min_length=1, max_length=2000)

    @field_validator("title", "content")
    @classmethod
    def check_safe_text(cls, v: Optional[str]) -> Optional[str]:
        return validate_safe_text(v)


class ReviewResponse(BaseModel):
    """Review as returned by the API."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    restaurant_id: UUID
    user_id: UUID
    rating: int
    title: Optional[str] = None
    content: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
