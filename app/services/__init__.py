"""
Shadi Recommendations - Services Package

Business logic services.
"""

from app.services.access_control_service import AccessChecker, AccessCheck
from app.services.activity_tracker import ActivityContext, ActivityTracker
from app.services.audit_service import AuditLogger, AuditLogEntry, SQLAlchemyAuditStore
from app.services.auth_service import AuthService
from app.services.security_service import SecurityService
from app.services.session_verifier import SessionVerifier, VerifiedUser

__all__ = [
    "AccessChecker",
    "AccessCheck",
    "ActivityContext",
    "ActivityTracker",
    "AuditLogger",
    "AuditLogEntry",
    "SQLAlchemyAuditStore",
    "AuthService",
    "SecurityService",
    "SessionVerifier",
    "VerifiedUser",
]
