"""
Pytest fixtures for the stockkeeper tests.

Every test gets a fresh in-memory SQLite schema, the bootstrap admin, and
TestClient instances that carry a session cookie.
"""

import os

os.environ.setdefault("JWT_SECRET", "test-secret-key-that-is-definitely-longer-than-32-bytes")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["RUN_MIGRATIONS"] = "false"
os.environ.setdefault("APP_ENV", "test")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from stockkeeper.core.deps import get_db
from stockkeeper.core.security import hash_password
from stockkeeper.db.base import Base
from stockkeeper.db.provision import seed_default_admin
from stockkeeper.db.session import enable_sqlite_foreign_keys
from stockkeeper.main import app
from stockkeeper.models import User, UserRole, UserStatus


ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin123"
EMPLOYEE_PASSWORD = "secret1"


@pytest.fixture(scope='function')
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope='function')
def session_factory(engine):
    return sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


@pytest.fixture(scope='function')
def db_session(session_factory):
    """Session for arranging and inspecting data outside of requests."""
    session = session_factory()
    seed_default_admin(session)
    yield session
    session.close()


@pytest.fixture(scope='function')
def app_client_factory(session_factory, db_session):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    clients = []

    def make_client():
        client = TestClient(app)
        clients.append(client)
        return client

    yield make_client

    for client in clients:
        client.close()
    app.dependency_overrides.clear()


@pytest.fixture(scope='function')
def client(app_client_factory):
    """Anonymous client."""
    return app_client_factory()


def login(client, username, password):
    return client.post("/api/v1/auth/login", json={"username": username, "password": password})


@pytest.fixture(scope='function')
def admin(db_session):
    return db_session.query(User).filter(User.username == ADMIN_USERNAME).one()


@pytest.fixture(scope='function')
def admin_client(app_client_factory):
    client = app_client_factory()
    response = login(client, ADMIN_USERNAME, ADMIN_PASSWORD)
    assert response.status_code == 200, response.text
    return client


@pytest.fixture(scope='function')
def employee(db_session):
    user = User(
        username="siti",
        password_hash=hash_password(EMPLOYEE_PASSWORD),
        role=UserRole.EMPLOYEE,
        status=UserStatus.ACTIVE,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture(scope='function')
def employee_client(app_client_factory, employee):
    client = app_client_factory()
    response = login(client, employee.username, EMPLOYEE_PASSWORD)
    assert response.status_code == 200, response.text
    return client
