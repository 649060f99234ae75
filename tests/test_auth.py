"""
Session issuing, verification and the login/logout endpoints.
"""

from datetime import datetime, timedelta, timezone

import jwt

from stockkeeper.core.constants import COOKIE_NAME, JWT_ALGORITHM
from stockkeeper.core.config import settings
from stockkeeper.core.security import decode_session_token, issue_session_token
from stockkeeper.models import ActivityLogEntry, User, UserRole, UserStatus
from stockkeeper.services.auth_service import resolve_session

from conftest import ADMIN_PASSWORD, ADMIN_USERNAME, login


class TestSessionTokens:
    def test_issued_token_decodes_to_same_identity(self):
        token = issue_session_token(7, UserRole.EMPLOYEE)
        claims = decode_session_token(token)

        assert claims is not None
        assert claims.user_id == 7
        assert claims.role == UserRole.EMPLOYEE
        assert claims.expires_at - claims.issued_at == timedelta(hours=settings.session_ttl_hours)

    def test_expired_token_is_rejected(self):
        issued = datetime.now(timezone.utc) - timedelta(hours=settings.session_ttl_hours + 1)
        token = issue_session_token(1, UserRole.ADMIN, now=issued)

        assert decode_session_token(token) is None

    def test_token_signed_with_other_key_is_rejected(self):
        token = issue_session_token(1, UserRole.ADMIN, secret="another-secret-key-of-more-than-32-bytes!!")

        assert decode_session_token(token) is None

    def test_garbage_and_missing_tokens_are_rejected(self):
        assert decode_session_token(None) is None
        assert decode_session_token("") is None
        assert decode_session_token("not-a-jwt") is None

    def test_token_with_unknown_role_is_rejected(self):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"userId": 1, "role": "superuser", "iat": now, "exp": now + timedelta(hours=1)},
            settings.jwt_secret,
            algorithm=JWT_ALGORITHM,
        )

        assert decode_session_token(token) is None


class TestResolveSession:
    def test_active_user_resolves(self, db_session, admin):
        token = issue_session_token(admin.id, admin.role)

        user = resolve_session(db_session, token)

        assert user is not None
        assert user.id == admin.id

    def test_suspended_user_does_not_resolve(self, db_session, employee):
        token = issue_session_token(employee.id, employee.role)
        employee.status = UserStatus.SUSPENDED
        db_session.commit()

        assert resolve_session(db_session, token) is None

    def test_deleted_user_does_not_resolve(self, db_session):
        token = issue_session_token(9999, UserRole.EMPLOYEE)

        assert resolve_session(db_session, token) is None

    def test_missing_token_does_not_resolve(self, db_session):
        assert resolve_session(db_session, None) is None


class TestLoginEndpoint:
    def test_wrong_password_then_correct_password(self, client):
        for _ in range(2):
            response = login(client, ADMIN_USERNAME, "wrong-password")
            assert response.status_code == 401
            assert response.json()["success"] is False
            assert COOKIE_NAME not in response.cookies
            assert client.cookies.get(COOKIE_NAME) is None

        response = login(client, ADMIN_USERNAME, ADMIN_PASSWORD)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["user"]["username"] == ADMIN_USERNAME
        assert body["user"]["role"] == "admin"
        assert isinstance(body["user"]["id"], int)
        assert client.cookies.get(COOKIE_NAME)
        cookie_header = response.headers["set-cookie"].lower()
        assert "httponly" in cookie_header
        assert "path=/" in cookie_header
        assert "samesite=lax" in cookie_header

    def test_unknown_username_fails(self, client):
        response = login(client, "nobody", "whatever")

        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Incorrect username or password.", "user": None}

    def test_suspended_account_cannot_log_in(self, client, db_session, employee):
        employee.status = UserStatus.SUSPENDED
        db_session.commit()

        response = login(client, employee.username, "secret1")

        assert response.status_code == 403
        assert response.json()["success"] is False
        assert client.cookies.get(COOKIE_NAME) is None

    def test_login_is_audited(self, client, db_session):
        login(client, ADMIN_USERNAME, ADMIN_PASSWORD)

        actions = [row.action for row in db_session.query(ActivityLogEntry).all()]
        assert actions == ["User logged in"]

    def test_failed_login_is_not_audited(self, client, db_session):
        login(client, ADMIN_USERNAME, "nope")

        assert db_session.query(ActivityLogEntry).count() == 0

    def test_empty_credentials_are_rejected_by_validation(self, client):
        response = client.post("/api/v1/auth/login", json={"username": "", "password": ""})

        assert response.status_code == 422
        assert "error" in response.json()


class TestMeAndLogout:
    def test_me_requires_session(self, client):
        response = client.get("/api/v1/auth/me")

        assert response.status_code == 401
        assert "error" in response.json()

    def test_me_returns_current_user(self, employee_client, employee):
        response = employee_client.get("/api/v1/auth/me")

        assert response.status_code == 200
        assert response.json() == {"id": employee.id, "username": "siti", "role": "employee"}

    def test_logout_clears_cookie_and_is_audited(self, admin_client, db_session):
        response = admin_client.post("/api/v1/auth/logout")

        assert response.status_code == 200
        assert response.json() == {"ok": True}
        assert admin_client.cookies.get(COOKIE_NAME) is None
        actions = [row.action for row in db_session.query(ActivityLogEntry).order_by(ActivityLogEntry.id)]
        assert actions == ["User logged in", "User logged out"]

    def test_logout_without_session_still_succeeds(self, client, db_session):
        response = client.post("/api/v1/auth/logout")

        assert response.status_code == 200
        assert db_session.query(ActivityLogEntry).count() == 0

    def test_suspension_takes_effect_on_next_request(self, employee_client, db_session, employee):
        assert employee_client.get("/api/v1/auth/me").status_code == 200

        db_session.query(User).filter(User.id == employee.id).update({User.status: UserStatus.SUSPENDED})
        db_session.commit()

        assert employee_client.get("/api/v1/auth/me").status_code == 401

    def test_api_responses_are_not_cached(self, admin_client):
        response = admin_client.get("/api/v1/auth/me")

        assert response.headers["cache-control"] == "no-store"
