"""Security Headers Middleware

Adds security headers to the JSON API responses the storefront page reads.
Toggled with WEBAPP_SECURITY_HEADERS_ENABLED, HSTS separately with
WEBAPP_HSTS_ENABLED (only meaningful behind HTTPS).
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

import config


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware that adds security headers to all HTTP responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)

        if not config.WEBAPP_SECURITY_HEADERS_ENABLED:
            return response

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        # Snapshots carry profile and cart data
        response.headers["Cache-Control"] = "no-store"

        if config.WEBAPP_HSTS_ENABLED:
            # 1 year
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response
