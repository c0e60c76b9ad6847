"""
Shadi Recommendations - Session & Token Utility Tests

Tests for cookie options, session timing, request provenance and tokens.
"""

import time
from datetime import timedelta

import pytest
from starlette.requests import Request

from app.services.auth_provider import JWTAuthProvider
from app.utils.request_context import build_request_context, get_client_ip
from app.utils.security import (
    create_access_token,
    decode_token,
    get_password_hash,
    verify_access_token,
    verify_password,
)
from app.utils.session_config import (
    COOKIE_NAMES,
    SECURE_COOKIE_OPTIONS,
    SESSION_CONFIG,
    STRICT_COOKIE_OPTIONS,
    get_secure_cookie_options,
    is_session_expiring_soon,
)
from tests.fixtures.fakes import bearer, make_token


class TestCookieOptions:
    def test_secure_defaults(self):
        assert SECURE_COOKIE_OPTIONS["httponly"] is True
        assert SECURE_COOKIE_OPTIONS["samesite"] == "lax"
        assert SECURE_COOKIE_OPTIONS["path"] == "/"
        assert SECURE_COOKIE_OPTIONS["max_age"] == 86400

    def test_strict_options(self):
        assert STRICT_COOKIE_OPTIONS["samesite"] == "strict"
        assert STRICT_COOKIE_OPTIONS["max_age"] == 900
        assert STRICT_COOKIE_OPTIONS["httponly"] is True

    def test_overrides_do_not_mutate_defaults(self):
        options = get_secure_cookie_options(max_age=60)

        assert options["max_age"] == 60
        assert SECURE_COOKIE_OPTIONS["max_age"] == 86400

    def test_cookie_names(self):
        assert COOKIE_NAMES["access_token"] == "access_token"
        assert COOKIE_NAMES["consent"] == "cookie-consent"


class TestSessionTiming:
    def test_session_config(self):
        assert SESSION_CONFIG["max_session_duration"] == timedelta(hours=24)
        assert SESSION_CONFIG["refresh_threshold"] == timedelta(minutes=5)
        assert SESSION_CONFIG["max_concurrent_sessions"] == 5

    @pytest.mark.parametrize("seconds_left,expected", [
        (60, True),
        (299, True),
        (301, False),
        (3600, False),
        (-10, True),
    ])
    def test_is_session_expiring_soon(self, seconds_left, expected):
        now = 10_000.0
        assert is_session_expiring_soon(now + seconds_left, now=now) is expected


class TestClientIp:
    def test_first_forwarded_entry(self):
        assert get_client_ip({"x-forwarded-for": "203.0.113.9, 10.0.0.2"}) == "203.0.113.9"

    def test_real_ip_fallback(self):
        assert get_client_ip({"x-real-ip": "198.51.100.4"}) == "198.51.100.4"

    def test_no_headers(self):
        assert get_client_ip({}) is None

    def test_build_request_context(self):
        ctx = build_request_context({"x-real-ip": "198.51.100.4", "user-agent": "curl/8"})
        assert ctx.ip_address == "198.51.100.4"
        assert ctx.user_agent == "curl/8"


class TestTokens:
    def test_password_hashing(self):
        hashed = get_password_hash("s3cret!")
        assert hashed != "s3cret!"
        assert verify_password("s3cret!", hashed)
        assert not verify_password("wrong", hashed)

    def test_access_token_claims(self):
        payload = verify_access_token(make_token("u1", "u1@example.com"))

        assert payload["sub"] == "u1"
        assert payload["email"] == "u1@example.com"
        assert payload["type"] == "access"
        assert payload["sid"]
        assert payload["exp"] > time.time()

    def test_expired_token(self):
        token = make_token("u1", expires_delta=timedelta(minutes=-5))

        assert verify_access_token(token) is None
        assert verify_access_token(token, verify_exp=False)["sub"] == "u1"

    def test_tampered_token(self):
        token = make_token("u1")
        assert decode_token(token[:-4] + "abcd") is None

    def test_type_claim_is_always_access(self):
        payload = decode_token(create_access_token({"sub": "u1", "type": "refresh"}))
        assert payload["type"] == "access"

    def test_garbage_token(self):
        assert verify_access_token("not-a-token") is None


def _request(headers=None, cookies=None) -> Request:
    raw = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    if cookies:
        raw.append((b"cookie", "; ".join(f"{k}={v}" for k, v in cookies.items()).encode()))
    return Request({"type": "http", "method": "GET", "path": "/", "headers": raw})


class TestJWTAuthProvider:
    @pytest.mark.asyncio
    async def test_bearer_token(self):
        provider = JWTAuthProvider(_request(bearer(make_token("u1", "u1@example.com"))))

        user = await provider.get_user()
        session = await provider.get_session()

        assert user.id == "u1"
        assert user.email == "u1@example.com"
        assert session.session_id
        assert session.expires_at > time.time()

    @pytest.mark.asyncio
    async def test_cookie_token(self):
        provider = JWTAuthProvider(_request(cookies={"access_token": make_token("u2")}))
        assert (await provider.get_user()).id == "u2"

    @pytest.mark.asyncio
    async def test_no_token(self):
        provider = JWTAuthProvider(_request())

        assert await provider.get_user() is None
        assert await provider.get_session() is None

    @pytest.mark.asyncio
    async def test_expired_token_still_identifies_user(self):
        token = make_token("u1", expires_delta=timedelta(minutes=-1))
        provider = JWTAuthProvider(_request(bearer(token)))

        assert (await provider.get_user()).id == "u1"
        assert (await provider.get_session()).expires_at < time.time()

    @pytest.mark.asyncio
    async def test_sign_out_sets_flag(self):
        request = _request(bearer(make_token("u1")))
        provider = JWTAuthProvider(request)

        await provider.sign_out()

        assert getattr(request.state, JWTAuthProvider.SIGN_OUT_FLAG) is True
