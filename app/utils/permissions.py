"""
Shadi Recommendations - Permissions System

Role-based permissions for application users.

Permission Matrix:
==================

| Permission            | User | Moderator | Admin |
|-----------------------|------|-----------|-------|
| profile:read          | X    | X         | X     |
| profile:update        | X    | X         | X     |
| reviews:create        | X    | X         | X     |
| reviews:update:own    | X    | X         | X     |
| reviews:delete:own    | X    | X         | X     |
| reviews:update:any    |      | X         | X     |
| reviews:delete:any    |      | X         | X     |
| users:view            |      | X         | X     |
| users:manage          |      |           | X     |
| roles:manage          |      |           | X     |
| settings:manage       |      |           | X     |
| audit:view            |      |           | X     |
"""

from enum import Enum
from typing import Dict, Optional, Tuple, Union

from app.models.profile import UserRole


# ===========================================
# PERMISSION ENUM
# ===========================================

class Permission(str, Enum):
    """Capability tags in resource:action[:scope] form."""

    # Profile
    PROFILE_READ = "profile:read"
    PROFILE_UPDATE = "profile:update"

    # Reviews
    REVIEWS_CREATE = "reviews:create"
    REVIEWS_UPDATE_OWN = "reviews:update:own"
    REVIEWS_DELETE_OWN = "reviews:delete:own"
    REVIEWS_UPDATE_ANY = "reviews:update:any"
    REVIEWS_DELETE_ANY = "reviews:delete:any"

    # Administration
    USERS_VIEW = "users:view"
    USERS_MANAGE = "users:manage"
    ROLES_MANAGE = "roles:manage"
    SETTINGS_MANAGE = "settings:manage"
    AUDIT_VIEW = "audit:view"


# ===========================================
# PERMISSION MAPPINGS
# ===========================================

_USER_PERMISSIONS: Tuple[Permission, ...] = (
    Permission.PROFILE_READ,
    Permission.PROFILE_UPDATE,
    Permission.REVIEWS_CREATE,
    Permission.REVIEWS_UPDATE_OWN,
    Permission.REVIEWS_DELETE_OWN,
)

_MODERATOR_PERMISSIONS: Tuple[Permission, ...] = _USER_PERMISSIONS + (
    Permission.REVIEWS_UPDATE_ANY,
    Permission.REVIEWS_DELETE_ANY,
    Permission.USERS_VIEW,
)

# Role to permissions mapping. Tuples keep declaration order stable.
ROLE_PERMISSIONS: Dict[UserRole, Tuple[Permission, ...]] = {
    UserRole.USER: _USER_PERMISSIONS,
    UserRole.MODERATOR: _MODERATOR_PERMISSIONS,
    UserRole.ADMIN: tuple(Permission),
}


# ===========================================
# PERMISSION HELPER FUNCTIONS
# ===========================================

def resolve_role(value: Optional[Union[str, UserRole]]) -> UserRole:
    """
    Map a persisted role value onto the closed role set.

    Missing or unrecognized values resolve to UserRole.USER, the least
    privileged role.
    """
    if isinstance(value, UserRole):
        return value
    try:
        return UserRole(value)
    except ValueError:
        return UserRole.USER


def get_role_permissions(role: UserRole) -> Tuple[Permission, ...]:
    """Get all permissions for a role."""
    return ROLE_PERMISSIONS[resolve_role(role)]


def has_role_permission(role: UserRole, permission: Permission) -> bool:
    """Check if a role has a specific permission."""
    return permission in get_role_permissions(role)


# ===========================================
# ROLE HIERARCHY
# ===========================================

ROLE_HIERARCHY = {
    UserRole.ADMIN: 3,
    UserRole.MODERATOR: 2,
    UserRole.USER: 1,
}


def get_role_level(role: UserRole) -> int:
    """Get the hierarchy level of a role."""
    return ROLE_HIERARCHY.get(role, 0)


def is_role_higher_or_equal(role1: UserRole, role2: UserRole) -> bool:
    """Check if role1 is higher or equal to role2 in hierarchy."""
    return get_role_level(role1) >= get_role_level(role2)
