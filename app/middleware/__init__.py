"""
Shadi Recommendations - Middleware Package

Security middleware for FastAPI.
"""

from app.middleware.security import (
    RequestContextMiddleware,
    RateLimitingMiddleware,
    OriginCheckMiddleware,
    SecurityHeadersMiddleware,
    RequestLoggingMiddleware,
    setup_security_middleware,
    verify_security_headers,
)

__all__ = [
    "RequestContextMiddleware",
    "RateLimitingMiddleware",
    "OriginCheckMiddleware",
    "SecurityHeadersMiddleware",
    "RequestLoggingMiddleware",
    "setup_security_middleware",
    "verify_security_headers",
]
