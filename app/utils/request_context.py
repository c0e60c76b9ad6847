"""
Shadi Recommendations - Request Context

Best-effort request provenance (client IP, user agent) for audit entries.
RequestContextMiddleware populates the context variable for each request;
outside a request every field is None.
"""

from contextvars import ContextVar
from dataclasses import dataclass
from typing import Mapping, Optional


@dataclass(frozen=True)
class RequestContext:
    """Provenance attached to audit entries."""
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


_EMPTY = RequestContext()

_request_context: ContextVar[RequestContext] = ContextVar(
    "request_context",
    default=_EMPTY,
)


def get_client_ip(headers: Mapping[str, str]) -> Optional[str]:
    """
    Extract the client IP from proxy headers.

    Prefers the first X-Forwarded-For entry, falls back to X-Real-IP.
    """
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = headers.get("x-real-ip")
    return real_ip.strip() if real_ip else None


def build_request_context(headers: Mapping[str, str]) -> RequestContext:
    """Build a RequestContext from lower-cased request headers."""
    return RequestContext(
        ip_address=get_client_ip(headers),
        user_agent=headers.get("user-agent"),
    )


def get_request_context() -> RequestContext:
    """Context of the request currently being handled."""
    return _request_context.get()


def set_request_context(context: RequestContext):
    """Set the current context. Returns a token for reset_request_context."""
    return _request_context.set(context)


def reset_request_context(token) -> None:
    _request_context.reset(token)
