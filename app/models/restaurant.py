"""
Shadi Recommendations - Restaurant and Review Models

Both tables carry a user_id owner column used by the resource ownership checks.
"""

import uuid
from decimal import Decimal
from enum import Enum
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel

if TYPE_CHECKING:
    from app.models.profile import Profile


class Emirate(str, Enum):
    """UAE emirates a restaurant can be listed under."""
    DUBAI = "Dubai"
    ABU_DHABI = "Abu Dhabi"
    SHARJAH = "Sharjah"
    AJMAN = "Ajman"
    UMM_AL_QUWAIN = "Umm Al Quwain"
    RAS_AL_KHAIMAH = "Ras Al Khaimah"
    FUJAIRAH = "Fujairah"


class Restaurant(BaseModel):
    """Restaurant listing (bilingual name and description)."""

    __tablename__ = "restaurants"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    name_ar: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description_ar: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    emirate: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, index=True)
    district: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    price_tier: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        comment="1 (budget) to 4 (fine dining)",
    )
    rating: Mapped[Optional[Decimal]] = mapped_column(Numeric(2, 1), nullable=True)

    # Creator of the listing
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    reviews: Mapped[List["Review"]] = relationship(
        "Review",
        back_populates="restaurant",
        lazy="noload",
    )


class Review(BaseModel):
    """A user's review of a restaurant."""

    __tablename__ = "reviews"

    restaurant_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("restaurants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    restaurant: Mapped["Restaurant"] = relationship(
        "Restaurant",
        back_populates="reviews",
        lazy="noload",
    )
    author: Mapped["Profile"] = relationship("Profile", back_populates="reviews", lazy="noload")
