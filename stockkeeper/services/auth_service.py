from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stockkeeper.core.security import decode_session_token, issue_session_token, verify_password
from stockkeeper.models.user import User, UserStatus
from stockkeeper.services.audit_service import record_activity


logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Incorrect username or password."
ACCOUNT_INACTIVE = "Your account is not active. Please contact an administrator."
LOGIN_FAILED = "Something went wrong while trying to log in."


@dataclass(slots=True)
class LoginOutcome:
    success: bool
    message: str
    user: User | None = None
    token: str | None = None
    inactive: bool = False


def resolve_session(db: Session, token: str | None) -> User | None:
    """Map a session token to a live, active user, or ``None``.

    Never raises. Nothing about the user is cached between requests, so a
    suspension takes effect on the next resolution.
    """

    if not token:
        return None
    claims = decode_session_token(token)
    if claims is None:
        return None
    try:
        user = (
            db.query(User)
            .filter(User.id == claims.user_id)
            .filter(User.status == UserStatus.ACTIVE)
            .one_or_none()
        )
    except SQLAlchemyError:
        logger.exception("Failed to resolve session for user id %s", claims.user_id)
        db.rollback()
        return None
    if user is None:
        logger.warning("No active user found for session user id %s", claims.user_id)
    return user


def login(db: Session, username: str, password: str) -> LoginOutcome:
    try:
        user = db.query(User).filter(User.username == username).one_or_none()
    except SQLAlchemyError:
        logger.exception("Login lookup failed for %r", username)
        db.rollback()
        return LoginOutcome(success=False, message=LOGIN_FAILED)

    if user is None:
        logger.info("Login failed: unknown username %r", username)
        return LoginOutcome(success=False, message=INVALID_CREDENTIALS)

    if not verify_password(password, user.password_hash):
        logger.warning("Login failed: password mismatch for %r", user.username)
        return LoginOutcome(success=False, message=INVALID_CREDENTIALS)

    if user.status != UserStatus.ACTIVE:
        logger.warning("Login refused: %r is %s", user.username, user.status.value)
        return LoginOutcome(success=False, message=ACCOUNT_INACTIVE, inactive=True)

    token = issue_session_token(user.id, user.role)
    record_activity(db, user, "User logged in")
    return LoginOutcome(success=True, message="Login successful!", user=user, token=token)


def logout(db: Session, token: str | None) -> None:
    user = resolve_session(db, token)
    if user is not None:
        record_activity(db, user, "User logged out")
