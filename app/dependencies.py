"""
Shadi Recommendations - FastAPI Dependencies

Shared dependencies for database sessions, session verification and RBAC.

This module provides dependency injection for:
1. The process-wide SecurityService (audit logger, activity tracker)
2. The request-scoped SessionVerifier
3. Access checks and ownership checks
4. Guard dependencies that redirect on denial
"""

from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_async_session
from app.services.access_control_service import (
    AccessChecker,
    ResourceStore,
    SQLAlchemyResourceStore,
)
from app.services.audit_service import AuditLogger
from app.services.auth_provider import AuthProvider, JWTAuthProvider
from app.services import guards
from app.services.security_service import SecurityService
from app.services.session_verifier import (
    ProfileStore,
    SessionVerifier,
    SQLAlchemyProfileStore,
    VerifiedUser,
)
from app.utils.permissions import Permission


# ===========================================
# PROCESS-WIDE SERVICES
# ===========================================

def get_security_service(request: Request) -> SecurityService:
    """SecurityService created in the application lifespan."""
    return request.app.state.security_service


def get_audit_logger(
    security: SecurityService = Depends(get_security_service),
) -> AuditLogger:
    return security.audit_logger


# ===========================================
# REQUEST-SCOPED COLLABORATORS
# FastAPI resolves each dependency once per request, so every consumer in
# a request shares the same SessionVerifier (and its cached result).
# ===========================================

def get_auth_provider(request: Request) -> AuthProvider:
    return JWTAuthProvider(request)


def get_profile_store(db: AsyncSession = Depends(get_async_session)) -> ProfileStore:
    return SQLAlchemyProfileStore(db)


def get_resource_store(db: AsyncSession = Depends(get_async_session)) -> ResourceStore:
    return SQLAlchemyResourceStore(db)


def get_session_verifier(
    auth_provider: AuthProvider = Depends(get_auth_provider),
    profile_store: ProfileStore = Depends(get_profile_store),
) -> SessionVerifier:
    return SessionVerifier(auth_provider, profile_store)


def get_access_checker(
    verifier: SessionVerifier = Depends(get_session_verifier),
    resource_store: ResourceStore = Depends(get_resource_store),
) -> AccessChecker:
    return AccessChecker(verifier, resource_store)


async def get_optional_user(
    verifier: SessionVerifier = Depends(get_session_verifier),
) -> Optional[VerifiedUser]:
    """Verified user if authenticated, None otherwise. Never redirects."""
    return await verifier.verify_session()


# ===========================================
# GUARDS
# ===========================================

def require_auth(redirect_to: Optional[str] = None):
    """
    Require an authenticated user.

    Usage:
        @router.get("/me")
        async def me(user: VerifiedUser = Depends(require_auth())):
            ...
    """
    target = redirect_to or settings.login_redirect_path

    async def auth_checker(
        verifier: SessionVerifier = Depends(get_session_verifier),
        audit_logger: AuditLogger = Depends(get_audit_logger),
    ) -> VerifiedUser:
        return await guards.require_auth(verifier, audit_logger, target)

    return auth_checker


def require_permission(permission: Permission, redirect_to: Optional[str] = None):
    """
    Require a specific permission.

    Usage:
        @router.get("/audit-logs")
        async def list_logs(
            user: VerifiedUser = Depends(require_permission(Permission.AUDIT_VIEW))
        ):
            ...
    """
    target = redirect_to or settings.unauthorized_redirect_path

    async def permission_checker(
        verifier: SessionVerifier = Depends(get_session_verifier),
        audit_logger: AuditLogger = Depends(get_audit_logger),
    ) -> VerifiedUser:
        return await guards.require_permission(verifier, audit_logger, permission, target)

    return permission_checker
