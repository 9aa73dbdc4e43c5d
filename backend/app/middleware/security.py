"""Security middleware: response headers and the admin page gate."""

import logging
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import RedirectResponse

from app.auth.jwt import decode_token
from app.config import settings

logger = logging.getLogger(__name__)

ADMIN_PREFIX = "/admin"
LOGIN_PATH = "/admin"
DASHBOARD_PATH = "/admin/dashboard"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        if settings.environment == "production":
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response


class AdminGateMiddleware(BaseHTTPMiddleware):
    """Gate the admin pages on a valid session cookie.

    - /admin/<anything>  without a valid session → redirect to /admin (login)
    - /admin             with a valid session    → redirect to /admin/dashboard

    Only page paths are gated here. Admin API routes live under /api/admin
    and answer 401 through app.auth.deps.require_admin instead.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path.rstrip("/") or "/"
        if path != ADMIN_PREFIX and not path.startswith(ADMIN_PREFIX + "/"):
            return await call_next(request)

        token = request.cookies.get(settings.session_cookie_name)
        valid = bool(token and decode_token(token))

        if path == LOGIN_PATH:
            if valid:
                return RedirectResponse(url=DASHBOARD_PATH, status_code=307)
            return await call_next(request)

        if not valid:
            logger.info("Redirecting unauthenticated request for %s to login", path)
            return RedirectResponse(url=LOGIN_PATH, status_code=307)
        return await call_next(request)
