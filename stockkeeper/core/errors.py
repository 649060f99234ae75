from __future__ import annotations

import logging

from fastapi import status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError


logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base for failures that are reported to the caller as ``{"error": message}``."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AuthenticationError(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED


class AuthorizationError(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(ServiceError):
    status_code = status.HTTP_409_CONFLICT


class InvariantViolationError(ServiceError):
    status_code = status.HTTP_409_CONFLICT


class DatabaseError(ServiceError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


# PostgreSQL SQLSTATE codes surfaced through psycopg as ``orig.sqlstate``.
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"


def _integrity_kind(exc: IntegrityError) -> str | None:
    orig = getattr(exc, "orig", None)
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate == UNIQUE_VIOLATION:
        return "unique"
    if sqlstate == FOREIGN_KEY_VIOLATION:
        return "foreign_key"
    text = str(orig or exc).lower()
    if "unique" in text:
        return "unique"
    if "foreign key" in text:
        return "foreign_key"
    return None


def translate_db_error(
    exc: SQLAlchemyError,
    *,
    action: str,
    unique_message: str | None = None,
    foreign_key_message: str | None = None,
) -> ServiceError:
    """Turn a driver error into a domain error with a user-facing sentence."""

    if isinstance(exc, IntegrityError):
        kind = _integrity_kind(exc)
        if kind == "unique" and unique_message:
            return ConflictError(unique_message)
        if kind == "foreign_key" and foreign_key_message:
            return ConflictError(foreign_key_message)
        return ConflictError(f"Failed to {action}: the change conflicts with existing data.")
    logger.error("Database failure while trying to %s: %s", action, exc)
    return DatabaseError(f"Failed to {action} because of a database error. Please try again.")
