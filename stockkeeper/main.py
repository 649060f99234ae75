from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import urlencode, urlparse

from fastapi import Depends, FastAPI, Form, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from stockkeeper.api.v1 import activity, auth, dashboard, defects, items, users
from stockkeeper.api.v1.auth import clear_session_cookie, set_session_cookie
from stockkeeper.core.config import settings
from stockkeeper.core.constants import COOKIE_NAME, DEFECT_REASON_SUGGESTIONS, LOGIN_PATH, REDIRECT_PARAM
from stockkeeper.core.deps import get_current_user_optional, get_db
from stockkeeper.core.errors import ServiceError
from stockkeeper.core.gate import RouteGateMiddleware, home_path_for
from stockkeeper.db.provision import provision
from stockkeeper.db.session import get_engine, get_sessionmaker
from stockkeeper.models.defect import DefectStatus
from stockkeeper.models.user import User
from stockkeeper.services import audit_service, auth_service, dashboard_service, defect_service, item_service, user_service


logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Stockkeeper")
app.add_middleware(RouteGateMiddleware)

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))

app.include_router(auth.router, prefix="/api/v1")
app.include_router(users.router, prefix="/api/v1")
app.include_router(items.router, prefix="/api/v1")
app.include_router(defects.router, prefix="/api/v1")
app.include_router(activity.router, prefix="/api/v1")
app.include_router(dashboard.router, prefix="/api/v1")


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid input."
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content={"error": message})


@app.middleware("http")
async def no_store_api_responses(request: Request, call_next):
    response = await call_next(request)
    if request.url.path.startswith("/api/"):
        response.headers["Cache-Control"] = "no-store"
    return response


@app.on_event("startup")
def provision_database() -> None:
    with get_sessionmaker()() as db:
        provision(get_engine(), db)


@app.get("/healthz")
def health_check():
    return {"status": "ok"}


def _safe_redirect_target(target: str | None) -> str | None:
    """Only same-site absolute paths are honoured after login."""

    if not target:
        return None
    parsed = urlparse(target)
    if parsed.scheme or parsed.netloc or not target.startswith("/") or target.startswith("//"):
        return None
    if parsed.path == LOGIN_PATH:
        return None
    return target


def _render(request: Request, name: str, user: User | None, **context):
    return templates.TemplateResponse(request, name, {"user": user, **context})


def _login_redirect(request: Request) -> RedirectResponse:
    query = urlencode({REDIRECT_PARAM: request.url.path})
    return RedirectResponse(url=f"{LOGIN_PATH}?{query}", status_code=status.HTTP_303_SEE_OTHER)


@app.get("/login", response_class=HTMLResponse)
def login_page(
    request: Request,
    redirectedFrom: str | None = None,
    user: User | None = Depends(get_current_user_optional),
):
    if user is not None:
        return RedirectResponse(url=home_path_for(user.role), status_code=status.HTTP_303_SEE_OTHER)
    return _render(request, "login.html", None, redirected_from=redirectedFrom or "", error=None, username="")


@app.post("/login", response_class=HTMLResponse)
def login_submit(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    redirectedFrom: str = Form(""),
    db: Session = Depends(get_db),
):
    username = username.strip()
    if not username or not password:
        response = _render(
            request,
            "login.html",
            None,
            redirected_from=redirectedFrom,
            error="Username and password are required.",
            username=username,
        )
        response.status_code = status.HTTP_400_BAD_REQUEST
        return response

    outcome = auth_service.login(db, username, password)
    if not outcome.success:
        response = _render(
            request,
            "login.html",
            None,
            redirected_from=redirectedFrom,
            error=outcome.message,
            username=username,
        )
        response.status_code = status.HTTP_403_FORBIDDEN if outcome.inactive else status.HTTP_401_UNAUTHORIZED
        return response

    target = _safe_redirect_target(redirectedFrom) or home_path_for(outcome.user.role)
    response = RedirectResponse(url=target, status_code=status.HTTP_303_SEE_OTHER)
    set_session_cookie(response, outcome.token)
    return response


@app.post("/logout")
def logout_submit(request: Request, db: Session = Depends(get_db)):
    auth_service.logout(db, request.cookies.get(COOKIE_NAME))
    response = RedirectResponse(url=LOGIN_PATH, status_code=status.HTTP_303_SEE_OTHER)
    clear_session_cookie(response)
    return response


@app.get("/", response_class=HTMLResponse)
def inventory_page(
    request: Request,
    db: Session = Depends(get_db),
    user: User | None = Depends(get_current_user_optional),
):
    if user is None:
        return _login_redirect(request)
    return _render(request, "index.html", user, items=item_service.list_items(db))


@app.get("/defective-items", response_class=HTMLResponse)
def defective_items_page(
    request: Request,
    db: Session = Depends(get_db),
    user: User | None = Depends(get_current_user_optional),
):
    if user is None:
        return _login_redirect(request)
    return _render(
        request,
        "defective_items.html",
        user,
        defects=defect_service.list_defects(db),
        items=item_service.list_items(db),
        reasons=DEFECT_REASON_SUGGESTIONS,
        statuses=[member.value for member in DefectStatus],
    )


@app.get("/statistics", response_class=HTMLResponse)
def statistics_page(
    request: Request,
    db: Session = Depends(get_db),
    user: User | None = Depends(get_current_user_optional),
):
    if user is None:
        return _login_redirect(request)
    return _render(request, "statistics.html", user, stats=dashboard_service.get_statistics(db))


def _admin_page_guard(request: Request, user: User | None) -> RedirectResponse | None:
    if user is None:
        return _login_redirect(request)
    if not user.is_admin:
        logger.warning("Non-admin user %r tried to open %s", user.username, request.url.path)
        return RedirectResponse(url="/", status_code=status.HTTP_303_SEE_OTHER)
    return None


@app.get("/admin/dashboard", response_class=HTMLResponse)
def admin_dashboard_page(
    request: Request,
    db: Session = Depends(get_db),
    user: User | None = Depends(get_current_user_optional),
):
    redirect = _admin_page_guard(request, user)
    if redirect is not None:
        return redirect
    return _render(request, "admin/dashboard.html", user, summary=dashboard_service.get_summary(db))


@app.get("/admin/user-management", response_class=HTMLResponse)
def user_management_page(
    request: Request,
    db: Session = Depends(get_db),
    user: User | None = Depends(get_current_user_optional),
):
    redirect = _admin_page_guard(request, user)
    if redirect is not None:
        return redirect
    return _render(request, "admin/user_management.html", user, users=user_service.list_users(db))


@app.get("/admin/activity-log", response_class=HTMLResponse)
def activity_log_page(
    request: Request,
    db: Session = Depends(get_db),
    user: User | None = Depends(get_current_user_optional),
):
    redirect = _admin_page_guard(request, user)
    if redirect is not None:
        return redirect
    return _render(request, "admin/activity_log.html", user, entries=audit_service.list_activity(db))
