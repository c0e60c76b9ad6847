"""
Shadi Recommendations - Session Verifier Tests

Tests for request-scoped session verification.
"""

import asyncio
import time

import pytest

from app.models.profile import UserRole
from app.services.auth_provider import AuthSession, AuthUser
from app.services.session_verifier import SessionVerifier
from app.utils.permissions import Permission, get_role_permissions
from tests.fixtures.fakes import FakeAuthProvider, FakeProfileStore, valid_session


def _verifier(provider, roles=None, clock=time.time):
    store = FakeProfileStore(roles)
    return SessionVerifier(provider, store, clock=clock), store


class TestVerifySession:
    """Test session verification outcomes."""

    @pytest.mark.asyncio
    async def test_no_credential_returns_none(self):
        verifier, _ = _verifier(FakeAuthProvider(user=None))
        assert await verifier.verify_session() is None

    @pytest.mark.asyncio
    async def test_missing_session_returns_none(self):
        provider = FakeAuthProvider(user=AuthUser(id="u1"), session=None)
        verifier, store = _verifier(provider)

        assert await verifier.verify_session() is None
        assert store.calls == 0

    @pytest.mark.asyncio
    async def test_valid_session_with_profile(self):
        provider = FakeAuthProvider(
            user=AuthUser(id="u1", email="u1@example.com"),
            session=valid_session(),
        )
        verifier, _ = _verifier(provider, {"u1": "moderator"})

        user = await verifier.verify_session()

        assert user is not None
        assert user.id == "u1"
        assert user.email == "u1@example.com"
        assert user.role == UserRole.MODERATOR
        assert user.permissions == get_role_permissions(UserRole.MODERATOR)
        assert user.session_valid is True
        assert user.has_permission(Permission.USERS_VIEW)

    @pytest.mark.asyncio
    async def test_missing_profile_defaults_to_user_role(self):
        provider = FakeAuthProvider(user=AuthUser(id="u1"), session=valid_session())
        verifier, _ = _verifier(provider, {})

        user = await verifier.verify_session()

        assert user.role == UserRole.USER
        assert user.permissions == get_role_permissions(UserRole.USER)
        assert user.email == ""

    @pytest.mark.asyncio
    async def test_unrecognized_role_defaults_to_user(self):
        provider = FakeAuthProvider(user=AuthUser(id="u1"), session=valid_session())
        verifier, _ = _verifier(provider, {"u1": "superuser"})

        user = await verifier.verify_session()

        assert user.role == UserRole.USER
        assert not user.has_permission(Permission.AUDIT_VIEW)


class TestExpiredSessions:
    """Expired sessions are rejected and signed out."""

    @pytest.mark.asyncio
    async def test_expired_session_signs_out(self):
        provider = FakeAuthProvider(
            user=AuthUser(id="u1"),
            session=AuthSession(session_id="s", expires_at=1_000.0),
        )
        verifier, store = _verifier(provider, {"u1": "admin"}, clock=lambda: 2_000.0)

        assert await verifier.verify_session() is None
        assert provider.sign_out_calls == 1
        assert store.calls == 0

    @pytest.mark.asyncio
    async def test_missing_expiry_counts_as_expired(self):
        provider = FakeAuthProvider(
            user=AuthUser(id="u1"),
            session=AuthSession(session_id="s", expires_at=None),
        )
        verifier, _ = _verifier(provider)

        assert await verifier.verify_session() is None
        assert provider.sign_out_calls == 1

    @pytest.mark.asyncio
    async def test_sign_out_happens_once_per_request(self):
        provider = FakeAuthProvider(
            user=AuthUser(id="u1"),
            session=AuthSession(expires_at=1.0),
        )
        verifier, _ = _verifier(provider, clock=lambda: 10.0)

        await verifier.verify_session()
        await verifier.verify_session()

        assert provider.sign_out_calls == 1


class TestFailureHandling:
    @pytest.mark.asyncio
    async def test_provider_error_is_not_authenticated(self):
        verifier, _ = _verifier(FakeAuthProvider(error=RuntimeError("provider down")))
        assert await verifier.verify_session() is None

    @pytest.mark.asyncio
    async def test_profile_store_error_is_not_authenticated(self):
        provider = FakeAuthProvider(user=AuthUser(id="u1"), session=valid_session())
        store = FakeProfileStore()

        async def broken(user_id):
            raise ConnectionError("db down")

        store.get_role = broken
        verifier = SessionVerifier(provider, store)

        assert await verifier.verify_session() is None


class TestMemoization:
    """One verification per request."""

    @pytest.mark.asyncio
    async def test_repeated_calls_return_same_object(self):
        provider = FakeAuthProvider(user=AuthUser(id="u1"), session=valid_session())
        verifier, store = _verifier(provider, {"u1": "user"})

        first = await verifier.verify_session()
        second = await verifier.verify_session()

        assert first is second
        assert provider.get_user_calls == 1
        assert store.calls == 1

    @pytest.mark.asyncio
    async def test_concurrent_calls_share_one_verification(self):
        provider = FakeAuthProvider(user=AuthUser(id="u1"), session=valid_session())
        store = FakeProfileStore({"u1": "admin"})
        original = store.get_role

        async def slow_get_role(user_id):
            await asyncio.sleep(0.01)
            return await original(user_id)

        store.get_role = slow_get_role
        verifier = SessionVerifier(provider, store)

        results = await asyncio.gather(*(verifier.verify_session() for _ in range(5)))

        assert all(r is results[0] for r in results)
        assert provider.get_user_calls == 1
        assert store.calls == 1

    @pytest.mark.asyncio
    async def test_negative_result_is_cached(self):
        provider = FakeAuthProvider(user=None)
        verifier, _ = _verifier(provider)

        assert await verifier.verify_session() is None
        assert await verifier.verify_session() is None
        assert provider.get_user_calls == 1

    @pytest.mark.asyncio
    async def test_new_verifier_sees_role_change(self):
        provider = FakeAuthProvider(user=AuthUser(id="u1"), session=valid_session())
        store = FakeProfileStore({"u1": "user"})

        before = await SessionVerifier(provider, store).verify_session()
        store.roles["u1"] = "admin"
        after = await SessionVerifier(provider, store).verify_session()

        assert before.role == UserRole.USER
        assert after.role == UserRole.ADMIN
