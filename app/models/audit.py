"""
Shadi Recommendations - Audit Log Model

Append-only audit trail for security-relevant events.

- Severity constrained to info / warning / error / critical
- Request provenance (IP, user agent) captured best-effort
- Rows are only removed by the retention job
"""

import uuid
import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Boolean, CheckConstraint, DateTime, ForeignKey, Index, String, Text, func,
)
from sqlalchemy.dialects.postgresql import INET, UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class AuditAction(str, enum.Enum):
    """Closed taxonomy of audited actions."""
    # Authentication
    AUTH_LOGIN = "auth_login"
    AUTH_LOGOUT = "auth_logout"
    AUTH_SIGNUP = "auth_signup"
    AUTH_PASSWORD_RESET = "auth_password_reset"
    AUTH_PASSWORD_CHANGE = "auth_password_change"
    AUTH_FAILED_LOGIN = "auth_failed_login"
    # Profile
    PROFILE_VIEW = "profile_view"
    PROFILE_UPDATE = "profile_update"
    PROFILE_DELETE = "profile_delete"
    # Data
    DATA_CREATE = "data_create"
    DATA_UPDATE = "data_update"
    DATA_DELETE = "data_delete"
    DATA_EXPORT = "data_export"
    # Admin
    ADMIN_ROLE_CHANGE = "admin_role_change"
    ADMIN_USER_DELETE = "admin_user_delete"
    ADMIN_SETTINGS_UPDATE = "admin_settings_update"
    ADMIN_IMPERSONATION = "admin_impersonation"
    # Security
    SECURITY_RATE_LIMIT = "security_rate_limit"
    SECURITY_CSRF_BLOCKED = "security_csrf_blocked"
    SECURITY_UNAUTHORIZED = "security_unauthorized"
    SECURITY_SUSPICIOUS = "security_suspicious"


class AuditSeverity(str, enum.Enum):
    """Severity tiers. Critical entries are written without buffering."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditLog(Base):
    """
    Append-only audit log entry.

    This table should have no UPDATE or DELETE permissions for the
    application role. The retention job runs as a service principal.
    """

    __tablename__ = "audit_logs"
    __table_args__ = (
        CheckConstraint(
            "severity IN ('info', 'warning', 'error', 'critical')",
            name="severity_valid",
        ),
        Index("ix_audit_logs_target", "target_type", "target_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
        comment="When the event happened (not when it was written)",
    )

    action: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    severity: Mapped[str] = mapped_column(String(20), nullable=False, index=True)

    # User Context
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,  # Anonymous and system-detected events have no user
        index=True,
    )

    # Target
    target_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    target_type: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        comment="Type of the affected resource (reviews, user, ...)",
    )

    # Request Context
    ip_address: Mapped[Optional[str]] = mapped_column(INET, nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # JSON-encoded payload. "metadata" is reserved on declarative classes.
    event_metadata: Mapped[Optional[str]] = mapped_column(
        "metadata",
        Text,
        nullable=True,
    )

    success: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<AuditLog(id={self.id}, action={self.action}, severity={self.severity})>"
