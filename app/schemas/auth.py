"""
Shadi Recommendations - Authentication Schemas

Pydantic schemas for authentication requests and responses.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from app.models.profile import UserRole


# ===========================================
# REQUEST SCHEMAS
# ===========================================

class LoginRequest(BaseModel):
    """Email/password login."""
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=100)


# ===========================================
# RESPONSE SCHEMAS
# ===========================================

class TokenResponse(BaseModel):
    """Issued access token."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Token lifetime in seconds")


class VerifiedUserResponse(BaseModel):
    """The verified identity of the caller."""
    id: str
    email: str
    role: UserRole
    permissions: List[str]
    session_valid: bool
    last_verified: datetime

    @classmethod
    def from_verified(cls, user) -> "VerifiedUserResponse":
        return cls(
            id=user.id,
            email=user.email,
            role=user.role,
            permissions=[p.value for p in user.permissions],
            session_valid=user.session_valid,
            last_verified=user.last_verified,
        )


class AccessCheckResponse(BaseModel):
    """Result of a non-redirecting access check."""
    allowed: bool
    reason: Optional[str] = None
    user: Optional[VerifiedUserResponse] = None
