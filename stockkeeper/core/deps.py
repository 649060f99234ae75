from __future__ import annotations

import logging
from collections.abc import Iterable

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from stockkeeper.core.constants import COOKIE_NAME
from stockkeeper.core.errors import AuthenticationError, AuthorizationError
from stockkeeper.db.session import get_session
from stockkeeper.models.user import User
from stockkeeper.services.auth_service import resolve_session


logger = logging.getLogger(__name__)

NOT_AUTHENTICATED = "Authentication required. Please log in."
ADMIN_ONLY = "Only administrators can perform this action."


def get_db() -> Iterable[Session]:
    yield from get_session()


def get_current_user_optional(request: Request, db: Session = Depends(get_db)) -> User | None:
    return resolve_session(db, request.cookies.get(COOKIE_NAME))


def require_user(user: User | None = Depends(get_current_user_optional)) -> User:
    if user is None:
        raise AuthenticationError(NOT_AUTHENTICATED)
    return user


def require_admin(request: Request, user: User | None = Depends(get_current_user_optional)) -> User:
    if user is None:
        raise AuthenticationError(NOT_AUTHENTICATED)
    if not user.is_admin:
        logger.warning(
            "Denied %s %s to non-admin user %r",
            request.method,
            request.url.path,
            user.username,
        )
        raise AuthorizationError(ADMIN_ONLY)
    return user
