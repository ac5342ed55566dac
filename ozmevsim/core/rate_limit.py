"""
Request-rate limiting for the auth endpoints (slowapi, fixed window).

Counters live in ``RATE_LIMIT_STORAGE_URI``: process memory by default,
Redis when several instances sit behind the same load balancer.
"""

from __future__ import annotations

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from ozmevsim.core.config import settings


def get_client_ip(request: Request) -> str:
    """Best-effort client address for session provenance, honouring proxy headers."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    if request.client:
        return request.client.host
    return "unknown"


def get_user_agent(request: Request) -> str | None:
    return request.headers.get("user-agent")


def rate_limit_key(request: Request) -> str:
    """Limiter key: the socket peer, unless the app runs behind a trusted proxy."""
    if settings.TRUST_PROXY_HEADERS:
        return get_client_ip(request)
    return get_remote_address(request)


limiter = Limiter(
    key_func=rate_limit_key,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)
