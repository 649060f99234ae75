from __future__ import annotations

import logging
from urllib.parse import urlencode

from fastapi import Request
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from stockkeeper.core.constants import (
    ADMIN_HOME_PATH,
    ADMIN_PATH_PREFIX,
    COOKIE_NAME,
    EMPLOYEE_HOME_PATH,
    LOGIN_PATH,
    REDIRECT_PARAM,
)
from stockkeeper.core.security import SessionClaims, decode_session_token
from stockkeeper.models.user import UserRole


logger = logging.getLogger(__name__)

EXEMPT_PREFIXES = ("/api/", "/static/")
EXEMPT_PATHS = {"/api", "/healthz", "/favicon.ico", "/logout"}


def home_path_for(role: UserRole) -> str:
    return ADMIN_HOME_PATH if role == UserRole.ADMIN else EMPLOYEE_HOME_PATH


def is_exempt(path: str) -> bool:
    return path in EXEMPT_PATHS or path.startswith(EXEMPT_PREFIXES)


def _is_admin_path(path: str) -> bool:
    return path == ADMIN_PATH_PREFIX or path.startswith(ADMIN_PATH_PREFIX + "/")


def gate_redirect(path: str, claims: SessionClaims | None) -> str | None:
    """Where a page request for *path* should be sent instead, if anywhere.

    Only the token is checked here; handlers still resolve the user against
    the database. The login page decides for itself, since a signed token may
    belong to an account that is no longer active.
    """

    if path == LOGIN_PATH:
        return None
    if claims is None:
        return f"{LOGIN_PATH}?{urlencode({REDIRECT_PARAM: path})}"
    if _is_admin_path(path) and claims.role != UserRole.ADMIN:
        return EMPLOYEE_HOME_PATH
    return None


class RouteGateMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if is_exempt(path):
            return await call_next(request)

        claims = decode_session_token(request.cookies.get(COOKIE_NAME))
        target = gate_redirect(path, claims)
        if target is not None:
            logger.debug("Route gate redirecting %s to %s", path, target)
            return RedirectResponse(url=target, status_code=307)
        return await call_next(request)
