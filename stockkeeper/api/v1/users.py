from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from stockkeeper.core.deps import get_db, require_admin
from stockkeeper.models.user import User
from stockkeeper.schemas.user import (
    PasswordChange,
    PasswordChanged,
    UserCreate,
    UserDeleted,
    UsernameChange,
    UserOut,
    UserStatusUpdate,
)
from stockkeeper.services import user_service


router = APIRouter(
    prefix="/users",
    tags=["users"],
    dependencies=[Depends(require_admin)],
)


@router.get("", response_model=list[UserOut])
def list_users(db: Session = Depends(get_db)):
    return user_service.list_users(db)


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, db: Session = Depends(get_db), current_user: User = Depends(require_admin)):
    return user_service.create_user(db, current_user, payload)


@router.patch("/{user_id}/status", response_model=UserOut)
def update_status(
    user_id: int,
    payload: UserStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return user_service.update_status(db, current_user, user_id, payload.status)


@router.patch("/{user_id}/username", response_model=UserOut)
def change_username(
    user_id: int,
    payload: UsernameChange,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return user_service.change_username(db, current_user, user_id, payload)


@router.patch("/{user_id}/password", response_model=PasswordChanged)
def change_password(
    user_id: int,
    payload: PasswordChange,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    username = user_service.change_password(db, current_user, user_id, payload)
    return PasswordChanged(username=username)


@router.delete("/{user_id}", response_model=UserDeleted)
def delete_user(user_id: int, db: Session = Depends(get_db), current_user: User = Depends(require_admin)):
    username = user_service.delete_user(db, current_user, user_id)
    return UserDeleted(username=username)
