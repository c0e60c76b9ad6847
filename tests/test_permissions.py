"""
Shadi Recommendations - Permission Tests

Tests for the role to permission mapping and role resolution.
"""

import pytest

from app.models.profile import UserRole
from app.utils.permissions import (
    ROLE_PERMISSIONS,
    Permission,
    get_role_permissions,
    has_role_permission,
    is_role_higher_or_equal,
    resolve_role,
)


class TestRolePermissions:
    """Test the permission matrix."""

    def test_user_permissions(self):
        assert get_role_permissions(UserRole.USER) == (
            Permission.PROFILE_READ,
            Permission.PROFILE_UPDATE,
            Permission.REVIEWS_CREATE,
            Permission.REVIEWS_UPDATE_OWN,
            Permission.REVIEWS_DELETE_OWN,
        )

    def test_moderator_extends_user(self):
        moderator = get_role_permissions(UserRole.MODERATOR)
        assert set(get_role_permissions(UserRole.USER)) < set(moderator)
        assert Permission.REVIEWS_UPDATE_ANY in moderator
        assert Permission.REVIEWS_DELETE_ANY in moderator
        assert Permission.USERS_VIEW in moderator
        assert len(moderator) == 8

    def test_moderator_lacks_admin_permissions(self):
        for permission in (
            Permission.USERS_MANAGE,
            Permission.ROLES_MANAGE,
            Permission.SETTINGS_MANAGE,
            Permission.AUDIT_VIEW,
        ):
            assert not has_role_permission(UserRole.MODERATOR, permission)

    def test_admin_has_every_permission(self):
        assert set(get_role_permissions(UserRole.ADMIN)) == set(Permission)
        assert len(Permission) == 12

    def test_every_role_is_mapped(self):
        assert set(ROLE_PERMISSIONS) == set(UserRole)

    def test_permission_values(self):
        assert Permission.REVIEWS_UPDATE_OWN.value == "reviews:update:own"
        assert Permission.AUDIT_VIEW.value == "audit:view"


class TestResolveRole:
    """Test resolution of persisted role values."""

    @pytest.mark.parametrize("value,expected", [
        ("user", UserRole.USER),
        ("moderator", UserRole.MODERATOR),
        ("admin", UserRole.ADMIN),
        (UserRole.ADMIN, UserRole.ADMIN),
    ])
    def test_known_roles(self, value, expected):
        assert resolve_role(value) == expected

    @pytest.mark.parametrize("value", [None, "", "superuser", "ADMIN"])
    def test_unknown_roles_resolve_to_user(self, value):
        assert resolve_role(value) == UserRole.USER


class TestRoleHierarchy:
    def test_admin_outranks_moderator(self):
        assert is_role_higher_or_equal(UserRole.ADMIN, UserRole.MODERATOR)
        assert not is_role_higher_or_equal(UserRole.USER, UserRole.MODERATOR)
        assert is_role_higher_or_equal(UserRole.USER, UserRole.USER)
