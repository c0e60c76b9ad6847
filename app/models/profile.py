"""
Shadi Recommendations - Profile Model

One profile row per authenticated identity. The role column is the
authoritative source of a user's role; token claims are never trusted for it.
"""

from enum import Enum
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel

if TYPE_CHECKING:
    from app.models.restaurant import Review


class UserRole(str, Enum):
    """Application roles, lowest privilege first."""
    USER = "user"              # Regular diner
    MODERATOR = "moderator"    # Can moderate any review
    ADMIN = "admin"            # Full access


class Profile(BaseModel):
    """
    User profile for authentication and authorization.
    """

    __tablename__ = "profiles"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    display_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    avatar_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Stored as plain text so unexpected values can be read back and
    # resolved to the least privileged role.
    role: Mapped[str] = mapped_column(
        String(20),
        default=UserRole.USER.value,
        server_default=UserRole.USER.value,
        nullable=False,
    )

    # Null for accounts created through an external identity provider
    hashed_password: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    reviews: Mapped[List["Review"]] = relationship(
        "Review",
        back_populates="author",
        lazy="noload",
    )

    def __repr__(self) -> str:
        return f"<Profile(id={self.id}, email={self.email}, role={self.role})>"
