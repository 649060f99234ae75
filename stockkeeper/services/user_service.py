from __future__ import annotations

import logging

from sqlalchemy import func, true
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stockkeeper.core.errors import (
    ConflictError,
    DatabaseError,
    InvariantViolationError,
    NotFoundError,
    translate_db_error,
)
from stockkeeper.core.security import hash_password
from stockkeeper.models.user import User, UserRole, UserStatus
from stockkeeper.schemas.user import PasswordChange, UserCreate, UsernameChange
from stockkeeper.services.audit_service import record_activity


logger = logging.getLogger(__name__)

USERNAME_TAKEN = "That username is already taken. Please choose another one."
USER_NOT_FOUND = "The target user was not found."
LAST_ADMIN_SUSPEND = "The last active administrator account cannot be suspended."
LAST_ADMIN_DELETE = "The last active administrator account cannot be deleted."
SELF_DELETE = "Administrators cannot delete their own account."
USER_HAS_REFERENCES = "This user still has related records and cannot be deleted."


def _active_admin_filter():
    return (User.role == UserRole.ADMIN, User.status == UserStatus.ACTIVE)


def _lock_active_admins(db: Session) -> int:
    """Lock every active admin row for the rest of the transaction and count them.

    Concurrent suspend/delete requests serialise on these locks, so the count
    cannot go stale between the check and the write.
    """

    rows = db.query(User.id).filter(*_active_admin_filter()).with_for_update().all()
    return len(rows)


def _admin_guard(active_admins: int):
    """WHERE clause that refuses to touch the last active admin."""

    if active_admins > 1:
        return true()
    return (User.role != UserRole.ADMIN) | (User.status != UserStatus.ACTIVE)


def list_users(db: Session) -> list[User]:
    try:
        return db.query(User).order_by(User.username).all()
    except SQLAlchemyError as exc:
        logger.exception("Failed to fetch users")
        raise DatabaseError("Failed to load users from the database.") from exc


def count_active_admins(db: Session) -> int:
    return db.query(func.count(User.id)).filter(*_active_admin_filter()).scalar() or 0


def create_user(db: Session, actor: User, payload: UserCreate) -> User:
    existing = db.query(User.id).filter(User.username == payload.username).first()
    if existing:
        raise ConflictError(USERNAME_TAKEN)

    # Accounts created here are always employees.
    user = User(
        username=payload.username,
        password_hash=hash_password(payload.password),
        role=UserRole.EMPLOYEE,
        status=payload.status,
    )
    try:
        db.add(user)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise translate_db_error(exc, action="create the user", unique_message=USERNAME_TAKEN) from exc
    db.refresh(user)

    record_activity(
        db,
        actor,
        "Created user account",
        f"User: '{user.username}' (ID: {user.id}), Role: '{user.role.value}', Status: '{user.status.value}'",
    )
    return user


def update_status(db: Session, actor: User, user_id: int, new_status: UserStatus) -> User:
    try:
        target = db.get(User, user_id)
        if not target:
            raise NotFoundError(USER_NOT_FOUND)
        previous_status = target.status

        guard = true()
        if new_status == UserStatus.SUSPENDED:
            active_admins = _lock_active_admins(db)
            if target.role == UserRole.ADMIN and target.status == UserStatus.ACTIVE and active_admins <= 1:
                db.rollback()
                raise InvariantViolationError(LAST_ADMIN_SUSPEND)
            guard = _admin_guard(active_admins)

        updated = (
            db.query(User)
            .filter(User.id == user_id)
            .filter(guard)
            .update({User.status: new_status, User.updated_at: func.now()}, synchronize_session=False)
        )
        if not updated:
            db.rollback()
            raise NotFoundError("Failed to update the user's status: user not found or nothing changed.")
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise translate_db_error(exc, action="update the user's status") from exc

    db.refresh(target)
    record_activity(
        db,
        actor,
        "Updated user account status",
        f"User: '{target.username}' (ID: {target.id}), Status changed from "
        f"'{previous_status.value}' to '{target.status.value}'",
    )
    return target


def change_username(db: Session, actor: User, user_id: int, payload: UsernameChange) -> User:
    target = db.get(User, user_id)
    if not target:
        raise NotFoundError(USER_NOT_FOUND)
    old_username = target.username
    if old_username == payload.username:
        return target

    taken = (
        db.query(User.id)
        .filter(User.username == payload.username, User.id != user_id)
        .first()
    )
    if taken:
        raise ConflictError("The new username is already used by another user.")

    try:
        updated = (
            db.query(User)
            .filter(User.id == user_id)
            .update({User.username: payload.username, User.updated_at: func.now()}, synchronize_session=False)
        )
        if not updated:
            db.rollback()
            raise NotFoundError("Failed to change the username: user not found or nothing changed.")
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise translate_db_error(
            exc,
            action="change the username",
            unique_message="The new username is already used by another user.",
        ) from exc

    db.refresh(target)
    record_activity(
        db,
        actor,
        "Changed user username",
        f"Username changed for user ID: {user_id} from '{old_username}' to '{target.username}'",
    )
    return target


def change_password(db: Session, actor: User, user_id: int, payload: PasswordChange) -> str:
    target = db.get(User, user_id)
    if not target:
        raise NotFoundError(USER_NOT_FOUND)
    username = target.username

    try:
        updated = (
            db.query(User)
            .filter(User.id == user_id)
            .update(
                {User.password_hash: hash_password(payload.password), User.updated_at: func.now()},
                synchronize_session=False,
            )
        )
        if not updated:
            db.rollback()
            raise NotFoundError("Failed to change the password: user not found or nothing changed.")
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise translate_db_error(exc, action="change the password") from exc

    record_activity(
        db,
        actor,
        "Changed user password",
        f"Password changed for user: '{username}' (ID: {user_id})",
    )
    return username


def delete_user(db: Session, actor: User, user_id: int) -> str:
    if actor.id == user_id:
        raise InvariantViolationError(SELF_DELETE)

    try:
        target = db.get(User, user_id)
        if not target:
            raise NotFoundError(USER_NOT_FOUND)
        snapshot = (target.id, target.username, target.role)

        active_admins = _lock_active_admins(db)
        if target.role == UserRole.ADMIN and target.status == UserStatus.ACTIVE and active_admins <= 1:
            db.rollback()
            raise InvariantViolationError(LAST_ADMIN_DELETE)

        deleted = (
            db.query(User)
            .filter(User.id == user_id)
            .filter(_admin_guard(active_admins))
            .delete(synchronize_session=False)
        )
        if not deleted:
            db.rollback()
            raise NotFoundError("Failed to delete the user: no rows were affected.")
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise translate_db_error(
            exc,
            action="delete the user",
            foreign_key_message=USER_HAS_REFERENCES,
        ) from exc

    db.expunge(target)
    record_activity(
        db,
        actor,
        "Deleted user account",
        f"Deleted user: '{snapshot[1]}' (ID: {snapshot[0]}), Role: '{snapshot[2].value}'",
    )
    return snapshot[1]
