from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse, Response
from sqlalchemy.orm import Session

from stockkeeper.core.config import settings
from stockkeeper.core.constants import COOKIE_NAME
from stockkeeper.core.deps import get_db, require_user
from stockkeeper.models.user import User
from stockkeeper.schemas.auth import AuthResponse, LoginRequest, LoginResult, SessionUser
from stockkeeper.services import auth_service


router = APIRouter(prefix="/auth", tags=["auth"])


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.session_cookie_secure,
        path="/",
        max_age=settings.session_max_age,
        samesite="lax",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=COOKIE_NAME, path="/")


@router.post("/login", response_model=LoginResult)
def login(body: LoginRequest, db: Session = Depends(get_db)):
    outcome = auth_service.login(db, body.username.strip(), body.password)
    if not outcome.success:
        code = status.HTTP_403_FORBIDDEN if outcome.inactive else status.HTTP_401_UNAUTHORIZED
        return JSONResponse(
            status_code=code,
            content=LoginResult(success=False, message=outcome.message).model_dump(mode="json"),
        )

    result = LoginResult(
        success=True,
        message=outcome.message,
        user=SessionUser.model_validate(outcome.user),
    )
    response = JSONResponse(content=result.model_dump(mode="json"))
    set_session_cookie(response, outcome.token)
    return response


@router.post("/logout", response_model=AuthResponse)
def logout(request: Request, response: Response, db: Session = Depends(get_db)):
    auth_service.logout(db, request.cookies.get(COOKIE_NAME))
    clear_session_cookie(response)
    return AuthResponse(ok=True)


@router.get("/me", response_model=SessionUser)
def me(user: User = Depends(require_user)):
    return user
