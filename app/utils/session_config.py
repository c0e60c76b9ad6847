"""
Shadi Recommendations - Session Configuration

Cookie and session settings applied to authentication cookies.
"""

import time
from datetime import timedelta
from typing import Any, Dict, Optional

from app.config import settings


SECURE_COOKIE_OPTIONS: Dict[str, Any] = {
    "httponly": True,
    # Only sent over HTTPS outside development
    "secure": not settings.is_development,
    "samesite": "lax",
    "path": "/",
    "max_age": 60 * 60 * 24,  # 24 hours
}

# For short-lived sensitive tokens (password reset and similar)
STRICT_COOKIE_OPTIONS: Dict[str, Any] = {
    **SECURE_COOKIE_OPTIONS,
    "samesite": "strict",
    "max_age": 60 * 15,
}

SESSION_CONFIG = {
    "max_session_duration": timedelta(hours=24),
    "refresh_threshold": timedelta(minutes=5),
    "inactivity_timeout": timedelta(hours=1),
    "max_concurrent_sessions": 5,
}

COOKIE_NAMES = {
    "access_token": "access_token",
    "theme": "theme",
    "language": "language",
    "consent": "cookie-consent",
}


def is_session_expiring_soon(expires_at: float, now: Optional[float] = None) -> bool:
    """
    Check whether a session expires within the refresh threshold.

    Args:
        expires_at: Expiry as epoch seconds
        now: Current epoch seconds (defaults to wall clock)
    """
    if now is None:
        now = time.time()
    threshold = SESSION_CONFIG["refresh_threshold"].total_seconds()
    return expires_at - now < threshold


def get_secure_cookie_options(**overrides: Any) -> Dict[str, Any]:
    """Secure cookie options with optional per-cookie overrides."""
    return {**SECURE_COOKIE_OPTIONS, **overrides}
