"""
Shadi Recommendations - Authentication Router

API endpoints for login, logout and the caller's verified identity.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.dependencies import (
    get_access_checker,
    get_optional_user,
    get_security_service,
    require_auth,
)
from app.models.audit import AuditAction
from app.schemas.auth import (
    AccessCheckResponse,
    LoginRequest,
    TokenResponse,
    VerifiedUserResponse,
)
from app.services.access_control_service import AccessChecker
from app.services.auth_service import AuthService
from app.services.security_service import SecurityService
from app.services.session_verifier import VerifiedUser
from app.utils.error_handling import InvalidCredentialsException
from app.utils.permissions import Permission
from app.utils.request_context import get_request_context
from app.utils.session_config import COOKIE_NAMES, get_secure_cookie_options


router = APIRouter()


def get_auth_service(db: AsyncSession = Depends(get_async_session)) -> AuthService:
    return AuthService(db)


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Login user",
    description="Authenticate with email and password. Sets the access_token cookie.",
)
async def login(
    request: LoginRequest,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
    security: SecurityService = Depends(get_security_service),
):
    """Login with email and password."""
    client_ip = get_request_context().ip_address
    profile, success = await auth_service.authenticate_user(
        email=request.email,
        password=request.password,
    )

    if not success:
        user_id = str(profile.id) if profile else None
        await security.audit_logger.user_action(
            AuditAction.AUTH_FAILED_LOGIN,
            user_id,
            {"email": request.email},
            success=False,
            error_message="Invalid email or password",
        )
        # Unknown accounts are tracked by email
        await security.track_activity(
            user_id or request.email.lower(),
            AuditAction.AUTH_FAILED_LOGIN.value,
            client_ip,
        )
        raise InvalidCredentialsException()

    token, expires_in = auth_service.create_token(profile)
    response.set_cookie(
        key=COOKIE_NAMES["access_token"],
        value=token,
        **get_secure_cookie_options(max_age=expires_in),
    )

    user_id = str(profile.id)
    await security.audit_logger.user_action(
        AuditAction.AUTH_LOGIN,
        user_id,
        {"method": "password"},
    )
    await security.track_activity(user_id, AuditAction.AUTH_LOGIN.value, client_ip)

    return TokenResponse(access_token=token, expires_in=expires_in)


@router.post(
    "/logout",
    summary="Logout user",
)
async def logout(
    response: Response,
    user: Optional[VerifiedUser] = Depends(get_optional_user),
    security: SecurityService = Depends(get_security_service),
):
    """Clear the auth cookie."""
    response.delete_cookie(COOKIE_NAMES["access_token"], path="/")

    if user is not None:
        await security.audit_logger.user_action(AuditAction.AUTH_LOGOUT, user.id)

    return {"message": "Logged out"}


@router.get(
    "/me",
    response_model=VerifiedUserResponse,
    summary="Current user",
)
async def me(user: VerifiedUser = Depends(require_auth())):
    """The caller's verified identity, with the live role."""
    return VerifiedUserResponse.from_verified(user)


@router.get(
    "/access",
    response_model=AccessCheckResponse,
    summary="Check access",
    description="Non-redirecting access check, optionally for one permission.",
)
async def check_access(
    permission: Optional[Permission] = Query(None),
    checker: AccessChecker = Depends(get_access_checker),
):
    result = await checker.check_access(permission)
    return AccessCheckResponse(
        allowed=result.allowed,
        reason=result.reason,
        user=VerifiedUserResponse.from_verified(result.user) if result.user else None,
    )
