"""
Shadi Recommendations - Security Middleware

FastAPI middleware for:
1. Request context (client IP / user agent for audit entries)
2. Rate Limiting (per IP, /api/ paths)
3. Origin checks for mutating requests (CSRF)
4. Content Security Policy with per-request nonce
5. Security Headers
6. Request Logging
"""

import time
import logging
from typing import Callable, Dict, Mapping, Tuple

from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers, MutableHeaders
from starlette.middleware.base import BaseHTTPMiddleware

from app.config import settings
from app.models.audit import AuditAction
from app.services.auth_provider import JWTAuthProvider
from app.utils.request_context import (
    build_request_context,
    reset_request_context,
    set_request_context,
)
from app.utils.security import generate_nonce
from app.utils.session_config import COOKIE_NAMES, SECURE_COOKIE_OPTIONS

logger = logging.getLogger(__name__)


def _get_audit_logger(app):
    security_service = getattr(app.state, "security_service", None)
    return security_service.audit_logger if security_service else None


def _client_ip(request: Request) -> str:
    context_ip = build_request_context(request.headers).ip_address
    if context_ip:
        return context_ip
    return request.client.host if request.client else "127.0.0.1"


# ============================================================================
# REQUEST CONTEXT MIDDLEWARE
# ============================================================================

class RequestContextMiddleware:
    """
    Capture request provenance for the duration of the request.

    Also clears the auth cookie when the session was signed out while
    handling the request.
    """

    def __init__(self, app: FastAPI):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        token = set_request_context(build_request_context(Headers(scope=scope)))

        async def send_wrapper(message):
            if message["type"] == "http.response.start":
                state = scope.get("state") or {}
                if state.get(JWTAuthProvider.SIGN_OUT_FLAG):
                    headers = MutableHeaders(scope=message)
                    headers.append(
                        "set-cookie",
                        f'{COOKIE_NAMES["access_token"]}=""; '
                        f'Max-Age=0; Path={SECURE_COOKIE_OPTIONS["path"]}; '
                        f"HttpOnly; SameSite={SECURE_COOKIE_OPTIONS['samesite']}",
                    )
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            reset_request_context(token)


# ============================================================================
# RATE LIMITING MIDDLEWARE
# ============================================================================

class RateLimitingMiddleware(BaseHTTPMiddleware):
    """
    Fixed-window rate limiting using in-memory storage.

    Applies to /api/ paths only; counts are per process.
    """

    def __init__(
        self,
        app: FastAPI,
        enabled: bool = True,
        max_requests: int = 100,
        window_seconds: int = 60,
        path_prefix: str = "/api/",
        clock: Callable[[], float] = time.time,
    ):
        super().__init__(app)
        self.enabled = enabled
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.path_prefix = path_prefix
        self._clock = clock

        # In-memory storage: {ip: (count, window_reset_time)}
        self._requests: Dict[str, Tuple[int, float]] = {}

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not self.enabled or not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        client_ip = _client_ip(request)
        is_limited, remaining, reset_at = self._hit(client_ip)

        if is_limited:
            logger.warning(f"Rate limit exceeded for {client_ip} on {request.url.path}")
            audit_logger = _get_audit_logger(request.app)
            if audit_logger is not None:
                await audit_logger.security_event(
                    AuditAction.SECURITY_RATE_LIMIT,
                    {
                        "path": request.url.path,
                        "limit": self.max_requests,
                        "window": f"{self.window_seconds} seconds",
                    },
                )
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                headers={"Retry-After": str(self.window_seconds)},
                content={"error": "Too Many Requests"},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.max_requests)
        response.headers["X-RateLimit-Remaining"] = str(max(0, remaining))
        response.headers["X-RateLimit-Reset"] = str(int(reset_at))
        return response

    def _hit(self, ip: str) -> Tuple[bool, int, float]:
        """Count a request. Returns (limited, remaining, window reset time)."""
        now = self._clock()
        count, reset_at = self._requests.get(ip, (0, 0.0))

        if now > reset_at:
            count, reset_at = 0, now + self.window_seconds

        count += 1
        self._requests[ip] = (count, reset_at)
        return count > self.max_requests, self.max_requests - count, reset_at


# ============================================================================
# ORIGIN CHECK (CSRF) MIDDLEWARE
# ============================================================================

class OriginCheckMiddleware(BaseHTTPMiddleware):
    """
    Reject browser mutations whose Origin does not match the Host.

    Requests without an Origin header (non-browser clients) pass through.
    """

    MUTATION_METHODS = {"POST", "PUT", "PATCH", "DELETE"}

    def __init__(self, app: FastAPI, enabled: bool = True):
        super().__init__(app)
        self.enabled = enabled

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not self.enabled or request.method not in self.MUTATION_METHODS:
            return await call_next(request)

        origin = request.headers.get("origin")
        host = request.headers.get("host")

        if origin and host and host not in origin:
            logger.warning(f"Blocked {request.method} {request.url.path} from origin {origin}")
            audit_logger = _get_audit_logger(request.app)
            if audit_logger is not None:
                await audit_logger.security_event(
                    AuditAction.SECURITY_CSRF_BLOCKED,
                    {
                        "origin": origin,
                        "host": host,
                        "path": request.url.path,
                        "method": request.method,
                    },
                )
            return JSONResponse(
                status_code=status.HTTP_403_FORBIDDEN,
                content={"error": "Invalid origin"},
            )

        return await call_next(request)


# ============================================================================
# SECURITY HEADERS MIDDLEWARE
# ============================================================================

def build_csp(nonce: str, production: bool = False) -> str:
    """Content-Security-Policy with a script nonce."""
    directives = [
        "default-src 'self'",
        f"script-src 'self' 'nonce-{nonce}' 'strict-dynamic' https: 'unsafe-inline'",
        "style-src 'self' 'unsafe-inline'",
        "img-src 'self' data: blob: https://images.unsplash.com https://*.cloudinary.com https://*.amazonaws.com",
        "font-src 'self' https://fonts.gstatic.com https://fonts.googleapis.com",
        "connect-src 'self'",
        "frame-ancestors 'none'",
        "form-action 'self'",
        "base-uri 'self'",
        "object-src 'none'",
        "frame-src 'self'",
    ]
    if production:
        directives.append("upgrade-insecure-requests")
    return "; ".join(directives)


PERMISSIONS_POLICY = ", ".join([
    "camera=()",
    "microphone=()",
    "geolocation=()",
    "payment=()",
    "usb=()",
    "accelerometer=()",
    "gyroscope=()",
    "magnetometer=()",
])


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Add security headers to all responses.

    Headers:
    - Content-Security-Policy (with X-Nonce)
    - X-Content-Type-Options
    - X-Frame-Options
    - X-XSS-Protection
    - Strict-Transport-Security (outside development)
    - Referrer-Policy
    - Permissions-Policy
    """

    def __init__(self, app: FastAPI, development_mode: bool = False):
        super().__init__(app)
        self.development_mode = development_mode

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        nonce = generate_nonce()
        request.state.csp_nonce = nonce

        response = await call_next(request)

        response.headers["Content-Security-Policy"] = build_csp(
            nonce, production=not self.development_mode
        )
        response.headers["X-Nonce"] = nonce
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = PERMISSIONS_POLICY

        # HSTS is hard to revert, so never in development
        if not self.development_mode:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains; preload"

        return response


REQUIRED_SECURITY_HEADERS = (
    "content-security-policy",
    "x-frame-options",
    "x-content-type-options",
    "referrer-policy",
    "permissions-policy",
)


def verify_security_headers(headers: Mapping[str, str]) -> dict:
    """
    Check a response's headers against the required security headers.

    Returns {"is_secure": bool, "missing": [...], "present": [...]}.
    """
    lowered = {k.lower(): v for k, v in headers.items()}
    missing = [h for h in REQUIRED_SECURITY_HEADERS if not lowered.get(h)]
    present = [h for h in REQUIRED_SECURITY_HEADERS if lowered.get(h)]
    return {
        "is_secure": not missing,
        "missing": missing,
        "present": present,
    }


# ============================================================================
# REQUEST LOGGING MIDDLEWARE
# ============================================================================

class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log requests for security monitoring.

    Sensitive paths and error responses are always logged.
    """

    SENSITIVE_PATHS = [
        "/api/v1/auth",
        "/api/v1/admin",
    ]

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()

        client_ip = _client_ip(request)
        user_agent = request.headers.get("User-Agent", "unknown")
        path = request.url.path
        method = request.method

        response = await call_next(request)

        duration = time.time() - start_time

        log_level = logging.WARNING if response.status_code >= 400 else logging.INFO

        is_sensitive = any(path.startswith(p) for p in self.SENSITIVE_PATHS)

        if is_sensitive or response.status_code >= 400:
            logger.log(
                log_level,
                f"{method} {path} - {response.status_code} - {duration:.3f}s - {client_ip}",
                extra={
                    "method": method,
                    "path": path,
                    "status": response.status_code,
                    "duration": duration,
                    "client_ip": client_ip,
                    "user_agent": user_agent[:100],
                }
            )

        response.headers["X-Response-Time"] = f"{duration:.3f}s"

        return response


# ============================================================================
# SETUP FUNCTION
# ============================================================================

def setup_security_middleware(
    app: FastAPI,
    development_mode: bool = False,
    rate_limiting_enabled: bool = True,
    origin_check_enabled: bool = True,
):
    """
    Setup all security middleware for the application.

    Args:
        app: FastAPI application instance
        development_mode: If True, skips HSTS and upgrade-insecure-requests
        rate_limiting_enabled: Enable rate limiting
        origin_check_enabled: Enable origin checks for mutations
    """
    # Order matters! Later middleware wraps earlier ones

    # 1. Origin check (innermost)
    if origin_check_enabled:
        app.add_middleware(OriginCheckMiddleware, enabled=True)

    # 2. Rate limiting
    if rate_limiting_enabled:
        app.add_middleware(
            RateLimitingMiddleware,
            enabled=True,
            max_requests=settings.rate_limit_max_requests,
            window_seconds=settings.rate_limit_window_seconds,
        )

    # 3. Security headers (applied to rejected requests too)
    app.add_middleware(
        SecurityHeadersMiddleware,
        development_mode=development_mode,
    )

    # 4. Request logging
    app.add_middleware(RequestLoggingMiddleware)

    # 5. Request context (outermost - provenance for every audit entry)
    app.add_middleware(RequestContextMiddleware)

    logger.info(
        f"Security middleware configured: "
        f"rate_limiting={rate_limiting_enabled}, "
        f"origin_check={origin_check_enabled}, "
        f"development_mode={development_mode}"
    )
