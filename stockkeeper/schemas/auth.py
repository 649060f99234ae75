from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from stockkeeper.models.user import UserRole


class LoginRequest(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class SessionUser(BaseModel):
    id: int
    username: str
    role: UserRole

    model_config = ConfigDict(from_attributes=True)


class LoginResult(BaseModel):
    success: bool
    message: str
    user: SessionUser | None = None


class AuthResponse(BaseModel):
    ok: bool
