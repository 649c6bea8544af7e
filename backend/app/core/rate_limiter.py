"""
Request rate limiting backed by SlowAPI (in-memory storage).
"""

import logging

from fastapi import Request
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

logger = logging.getLogger("vodichron.rate_limiter")


def get_real_client_ip(request: Request) -> str:
    """
    Client IP, honouring X-Forwarded-For / X-Real-IP set by a reverse proxy.
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    return get_remote_address(request)


limiter = Limiter(
    key_func=get_real_client_ip,
    default_limits=["1000/hour", "200/minute"],
    strategy="fixed-window",
    headers_enabled=False,
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return a JSON 429 with retry information."""
    logger.warning(
        f"Rate limit exceeded for {get_real_client_ip(request)} "
        f"on {request.method} {request.url.path}"
    )
    retry_after = getattr(exc, "retry_after", 60)

    return JSONResponse(
        status_code=429,
        content={
            "error": "Rate limit exceeded",
            "detail": f"Too many requests. Please retry after {retry_after} seconds.",
            "retry_after": retry_after,
        },
        headers={"Retry-After": str(retry_after)},
    )


class RateLimits:
    """Limits applied to specific endpoint groups."""

    AUTH_LOGIN = "10/minute"
    AUTH_PASSWORD_RESET = "5/minute"
    AUTH_REFRESH = "30/minute"

    FILE_UPLOAD = "10/minute"
