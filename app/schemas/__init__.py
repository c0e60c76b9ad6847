"""
Shadi Recommendations - Schemas Package

Pydantic schemas for request/response validation.
"""

from app.schemas.auth import (
    LoginRequest,
    TokenResponse,
    VerifiedUserResponse,
    AccessCheckResponse,
)
from app.schemas.review import ReviewUpdate, ReviewResponse
from app.schemas.admin import (
    ProfileResponse,
    ProfileListResponse,
    RoleChangeRequest,
)
from app.schemas.audit import AuditLogResponse, AuditLogListResponse
from app.schemas.restaurant import (
    RestaurantCreate,
    RestaurantUpdate,
    RestaurantResponse,
    RestaurantListResponse,
)
