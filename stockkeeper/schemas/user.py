from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from stockkeeper.models.user import UserRole, UserStatus


def _strip(value):
    return value.strip() if isinstance(value, str) else value


class UserCreate(BaseModel):
    # Any "role" sent by the client is ignored; new accounts are employees.
    username: str = Field(min_length=3, max_length=50)
    password: str = Field(min_length=6, max_length=100)
    status: UserStatus = UserStatus.ACTIVE

    @field_validator("username", mode="before")
    @classmethod
    def strip_username(cls, value):
        return _strip(value)


class UserStatusUpdate(BaseModel):
    status: UserStatus


class UsernameChange(BaseModel):
    username: str = Field(min_length=3, max_length=50)

    @field_validator("username", mode="before")
    @classmethod
    def strip_username(cls, value):
        return _strip(value)


class PasswordChange(BaseModel):
    password: str = Field(min_length=6, max_length=100)


class UserOut(BaseModel):
    id: int
    username: str
    role: UserRole
    status: UserStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class UserDeleted(BaseModel):
    success: bool = True
    username: str


class PasswordChanged(BaseModel):
    success: bool = True
    username: str
