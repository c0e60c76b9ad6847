"""
Shadi Recommendations - SQLAlchemy Models Package

This package contains all database models for the application.
"""

from app.models.base import BaseModel, TimestampMixin
from app.models.profile import Profile, UserRole
from app.models.restaurant import Emirate, Restaurant, Review
from app.models.audit import AuditLog, AuditAction, AuditSeverity

__all__ = [
    "BaseModel",
    "TimestampMixin",
    "Profile",
    "UserRole",
    "Emirate",
    "Restaurant",
    "Review",
    "AuditLog",
    "AuditAction",
    "AuditSeverity",
]
