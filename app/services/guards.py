"""
Shadi Recommendations - Guard Entry Points

The only layer allowed to end a request early. A denial writes a
security_unauthorized audit entry and raises AuthRedirect.
"""

import logging
from typing import Union

from app.models.audit import AuditAction
from app.services.audit_service import AuditLogger
from app.services.session_verifier import SessionVerifier, VerifiedUser
from app.utils.error_handling import AuthRedirect
from app.utils.permissions import Permission

logger = logging.getLogger(__name__)


async def require_auth(
    verifier: SessionVerifier,
    audit_logger: AuditLogger,
    redirect_to: str = "/login",
) -> VerifiedUser:
    """Return the verified user or redirect to ``redirect_to``."""
    user = await verifier.verify_session()

    if user is None:
        await audit_logger.security_event(
            AuditAction.SECURITY_UNAUTHORIZED,
            {
                "reason": "No valid session",
                "redirect": redirect_to,
            },
        )
        raise AuthRedirect(redirect_to)

    return user


async def require_permission(
    verifier: SessionVerifier,
    audit_logger: AuditLogger,
    permission: Union[Permission, str],
    redirect_to: str = "/unauthorized",
) -> VerifiedUser:
    """
    Return the verified user if they hold ``permission``.

    Unauthenticated callers are redirected to ``redirect_to`` as well.
    """
    user = await require_auth(verifier, audit_logger, redirect_to)

    required = getattr(permission, "value", permission)

    if permission not in user.permissions:
        logger.info(f"User {user.id} ({user.role.value}) lacks {required}")
        await audit_logger.security_event(
            AuditAction.SECURITY_UNAUTHORIZED,
            {
                "reason": "Insufficient permissions",
                "required": required,
                "userRole": user.role.value,
            },
            user.id,
        )
        raise AuthRedirect(redirect_to)

    return user
