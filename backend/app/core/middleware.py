"""
HTTP hardening middleware: security headers and request body size limits.
"""

import logging
from typing import Callable

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from app.core.config import settings

logger = logging.getLogger("vodichron.middleware")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
        if settings.COOKIE_SECURE:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """
    Reject requests whose Content-Length exceeds the limit with a 413.

    Document uploads get MAX_UPLOAD_SIZE_MB plus room for the multipart
    envelope; everything else gets `max_size`.
    """

    DEFAULT_MAX_SIZE = 1 * 1024 * 1024
    UPLOAD_PATH_PREFIX = f"{settings.API_V1_STR}/documents/employee/"

    def __init__(self, app, max_size: int = DEFAULT_MAX_SIZE):
        super().__init__(app)
        self.max_size = max_size
        self.upload_max_size = (settings.MAX_UPLOAD_SIZE_MB + 1) * 1024 * 1024

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        max_size = self.max_size
        if request.method == "POST" and request.url.path.startswith(self.UPLOAD_PATH_PREFIX):
            max_size = self.upload_max_size

        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > max_size:
            logger.warning(
                f"Request too large: {content_length} bytes (max: {max_size}) "
                f"from {request.client.host if request.client else 'unknown'}"
            )
            return JSONResponse(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                content={
                    "success": False,
                    "error": "Payload Too Large",
                    "message": f"Request body too large. Maximum size is {max_size // (1024 * 1024)} MB",
                },
            )

        return await call_next(request)
