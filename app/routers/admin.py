"""
Shadi Recommendations - Admin Router

User administration, restaurant records and audit log viewing.

Permissions:
- users:view       list users (moderators and admins)
- roles:manage     change a user's role (admins)
- settings:manage  create, edit and delete restaurants (admins)
- audit:view       read the audit log (admins)
"""

import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.dependencies import get_security_service, require_permission
from app.models.audit import AuditAction, AuditSeverity
from app.models.profile import UserRole
from app.models.restaurant import Emirate
from app.schemas.admin import ProfileListResponse, ProfileResponse, RoleChangeRequest
from app.schemas.audit import AuditLogListResponse, AuditLogResponse
from app.schemas.restaurant import (
    RestaurantCreate,
    RestaurantListResponse,
    RestaurantResponse,
    RestaurantUpdate,
)
from app.services.audit_log_service import AuditLogQueryService
from app.services.profile_service import ProfileService
from app.services.restaurant_service import RestaurantService, snapshot_restaurant
from app.services.security_service import SecurityService
from app.services.session_verifier import VerifiedUser
from app.utils.error_handling import NotFoundException
from app.utils.permissions import Permission


router = APIRouter()


def get_profile_service(db: AsyncSession = Depends(get_async_session)) -> ProfileService:
    return ProfileService(db)


def get_audit_log_query_service(
    db: AsyncSession = Depends(get_async_session),
) -> AuditLogQueryService:
    return AuditLogQueryService(db)


def get_restaurant_service(db: AsyncSession = Depends(get_async_session)) -> RestaurantService:
    return RestaurantService(db)


# ===========================================
# USERS
# ===========================================

@router.get(
    "/users",
    response_model=ProfileListResponse,
    summary="List users",
)
async def list_users(
    role: Optional[UserRole] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    user: VerifiedUser = Depends(require_permission(Permission.USERS_VIEW)),
    profile_service: ProfileService = Depends(get_profile_service),
):
    profiles, total = await profile_service.list_profiles(
        role=role,
        skip=(page - 1) * limit,
        limit=limit,
    )
    return ProfileListResponse(
        items=[ProfileResponse.model_validate(p) for p in profiles],
        total=total,
        page=page,
        limit=limit,
    )


@router.patch(
    "/users/{user_id}/role",
    response_model=ProfileResponse,
    summary="Change a user's role",
)
async def change_user_role(
    user_id: uuid.UUID,
    request: RoleChangeRequest,
    admin: VerifiedUser = Depends(require_permission(Permission.ROLES_MANAGE)),
    profile_service: ProfileService = Depends(get_profile_service),
    security: SecurityService = Depends(get_security_service),
):
    """Role changes take effect on the target's next request."""
    if str(user_id) == admin.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Administrators cannot change their own role",
        )

    profile = await profile_service.get_profile(user_id)
    if profile is None:
        raise NotFoundException("User", user_id)

    previous_role = await profile_service.change_role(profile, request.role)

    await security.audit_logger.admin_action(
        AuditAction.ADMIN_ROLE_CHANGE,
        admin.id,
        str(user_id),
        {
            "previous_role": previous_role,
            "new_role": request.role.value,
            "reason": request.reason,
        },
    )
    return ProfileResponse.model_validate(profile)


# ===========================================
# RESTAURANTS
# ===========================================

RESTAURANT_RESOURCE = "restaurants"


@router.get(
    "/restaurants",
    response_model=RestaurantListResponse,
    summary="List restaurants",
)
async def list_restaurants(
    emirate: Optional[Emirate] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    admin: VerifiedUser = Depends(require_permission(Permission.SETTINGS_MANAGE)),
    restaurant_service: RestaurantService = Depends(get_restaurant_service),
):
    restaurants, total = await restaurant_service.list_restaurants(
        emirate=emirate,
        skip=(page - 1) * limit,
        limit=limit,
    )
    return RestaurantListResponse(
        items=[RestaurantResponse.model_validate(r) for r in restaurants],
        total=total,
        page=page,
        limit=limit,
    )


@router.post(
    "/restaurants",
    response_model=RestaurantResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a restaurant",
)
async def create_restaurant(
    request: RestaurantCreate,
    admin: VerifiedUser = Depends(require_permission(Permission.SETTINGS_MANAGE)),
    restaurant_service: RestaurantService = Depends(get_restaurant_service),
    security: SecurityService = Depends(get_security_service),
):
    restaurant = await restaurant_service.create_restaurant(
        request.model_dump(exclude_unset=True),
        admin.id,
    )

    await security.audit_logger.data_modification(
        AuditAction.DATA_CREATE,
        admin.id,
        RESTAURANT_RESOURCE,
        str(restaurant.id),
        {"created": snapshot_restaurant(restaurant)},
    )
    return RestaurantResponse.model_validate(restaurant)


@router.patch(
    "/restaurants/{restaurant_id}",
    response_model=RestaurantResponse,
    summary="Update a restaurant",
)
async def update_restaurant(
    restaurant_id: uuid.UUID,
    request: RestaurantUpdate,
    admin: VerifiedUser = Depends(require_permission(Permission.SETTINGS_MANAGE)),
    restaurant_service: RestaurantService = Depends(get_restaurant_service),
    security: SecurityService = Depends(get_security_service),
):
    restaurant = await restaurant_service.get_restaurant(restaurant_id)
    if restaurant is None:
        raise NotFoundException("Restaurant", restaurant_id)

    changes = await restaurant_service.update_restaurant(
        restaurant, request.model_dump(exclude_unset=True)
    )

    await security.audit_logger.data_modification(
        AuditAction.DATA_UPDATE,
        admin.id,
        RESTAURANT_RESOURCE,
        str(restaurant_id),
        changes,
    )
    return RestaurantResponse.model_validate(restaurant)


@router.delete(
    "/restaurants/{restaurant_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a restaurant",
)
async def delete_restaurant(
    restaurant_id: uuid.UUID,
    admin: VerifiedUser = Depends(require_permission(Permission.SETTINGS_MANAGE)),
    restaurant_service: RestaurantService = Depends(get_restaurant_service),
    security: SecurityService = Depends(get_security_service),
):
    restaurant = await restaurant_service.get_restaurant(restaurant_id)
    if restaurant is None:
        raise NotFoundException("Restaurant", restaurant_id)

    snapshot = snapshot_restaurant(restaurant)
    await restaurant_service.delete_restaurant(restaurant)

    await security.audit_logger.data_modification(
        AuditAction.DATA_DELETE,
        admin.id,
        RESTAURANT_RESOURCE,
        str(restaurant_id),
        {"deleted": snapshot},
    )


# ===========================================
# AUDIT LOGS
# ===========================================

@router.get(
    "/audit-logs",
    response_model=AuditLogListResponse,
    summary="List audit log entries",
)
async def list_audit_logs(
    action: Optional[AuditAction] = Query(None),
    severity: Optional[AuditSeverity] = Query(None),
    user_id: Optional[uuid.UUID] = Query(None),
    target_type: Optional[str] = Query(None),
    target_id: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    admin: VerifiedUser = Depends(require_permission(Permission.AUDIT_VIEW)),
    query_service: AuditLogQueryService = Depends(get_audit_log_query_service),
):
    logs, total = await query_service.get_audit_logs(
        action=action,
        severity=severity,
        user_id=user_id,
        target_type=target_type,
        target_id=target_id,
        start_date=start_date,
        end_date=end_date,
        skip=(page - 1) * limit,
        limit=limit,
    )
    return AuditLogListResponse(
        items=[AuditLogResponse.from_model(log) for log in logs],
        total=total,
        page=page,
        limit=limit,
    )
