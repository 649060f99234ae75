from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from jwt.exceptions import PyJWTError
from passlib.context import CryptContext

from stockkeeper.core.config import settings
from stockkeeper.core.constants import JWT_ALGORITHM
from stockkeeper.models.user import UserRole


logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Unrecognised hash format
        return False


@dataclass(frozen=True, slots=True)
class SessionClaims:
    """Identity asserted by a verified session token."""

    user_id: int
    role: UserRole
    issued_at: datetime
    expires_at: datetime


def issue_session_token(
    user_id: int,
    role: UserRole,
    *,
    now: datetime | None = None,
    secret: str | None = None,
) -> str:
    """Sign ``{userId, role}`` with a fixed validity window."""

    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "userId": user_id,
        "role": UserRole(role).value,
        "iat": issued_at,
        "exp": issued_at + timedelta(hours=settings.session_ttl_hours),
    }
    return jwt.encode(payload, secret or settings.jwt_secret, algorithm=JWT_ALGORITHM)


def decode_session_token(token: str | None, *, secret: str | None = None) -> SessionClaims | None:
    """Verify signature and expiry. Every failure degrades to ``None``."""

    if not token:
        return None
    try:
        payload = jwt.decode(
            token,
            secret or settings.jwt_secret,
            algorithms=[JWT_ALGORITHM],
            options={"require": ["exp", "iat"]},
        )
    except PyJWTError as exc:
        logger.warning("Session token rejected: %s", exc)
        return None

    raw_user_id = payload.get("userId")
    if isinstance(raw_user_id, bool):
        raw_user_id = None
    try:
        user_id = int(raw_user_id)
        role = UserRole(payload.get("role"))
    except (TypeError, ValueError):
        logger.warning("Session token carries malformed claims: userId=%r role=%r", raw_user_id, payload.get("role"))
        return None

    return SessionClaims(
        user_id=user_id,
        role=role,
        issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    )
