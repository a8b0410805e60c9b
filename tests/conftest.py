"""
DualAuth - Test Configuration

Pytest fixtures for authentication testing.
Provides an in-memory database per test, a client bound to it, and
seeded users. Secrets and a low bcrypt cost are injected through the
environment before the application is imported.
"""

import os

os.environ.setdefault("ACCESS_TOKEN_SECRET", "test-access-secret")
os.environ.setdefault("REFRESH_TOKEN_SECRET", "test-refresh-secret")
os.environ.setdefault("SESSION_SECRET", "test-session-secret")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_WORK_FACTOR"] = "4"
os.environ["APP_ENV"] = "development"

from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from dualauth.app import app
from dualauth.auth.cookies import REFRESH_COOKIE_NAME, SESSION_COOKIE_NAME
from dualauth.auth.database import get_engine, init_db
from dualauth.auth.models import Role
from dualauth.auth.store import UserStore, new_user


SESSION_API = "/api/auth/session"
TOKEN_API = "/api/auth/jwt"


@pytest.fixture(scope="function")
def client() -> Generator[TestClient, None, None]:
    """Test client; its lifespan builds a fresh in-memory database."""
    with TestClient(app) as c:
        yield c


@pytest.fixture(scope="function")
def app_engine(client):
    """Engine of the database the client talks to."""
    return client.app.state.db_engine


@pytest.fixture(scope="function")
def db_engine():
    """Standalone in-memory engine for service-level tests."""
    engine = get_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine) -> Generator[Session, None, None]:
    with Session(db_engine) as session:
        yield session


def seed_user(engine, username: str, email: str, password: str, role: Role = Role.USER) -> dict:
    """Insert a user directly and return its credentials."""
    with Session(engine) as session:
        user = UserStore(session).save(new_user(username, email, password, role=role))
        return {
            "id": user.id,
            "username": username,
            "email": email,
            "password": password,
            "role": role,
        }


@pytest.fixture(scope="function")
def test_user(app_engine) -> dict:
    return seed_user(app_engine, "alice", "alice@test.com", "secret1")


@pytest.fixture(scope="function")
def test_admin(app_engine) -> dict:
    return seed_user(app_engine, "root", "admin@test.com", "adminpass", role=Role.ADMIN)


def login(client: TestClient, api: str, email: str, password: str):
    return client.post(f"{api}/login", json={"email": email, "password": password})


def bearer(access_token: str) -> dict:
    return {"Authorization": f"Bearer {access_token}"}


def session_cookie_header(value: str) -> dict:
    """Send exactly this session cookie, bypassing the client's jar."""
    return {"Cookie": f"{SESSION_COOKIE_NAME}={value}"}


def refresh_cookie_header(value: str) -> dict:
    """Send exactly this refresh cookie, bypassing the client's jar."""
    return {"Cookie": f"{REFRESH_COOKIE_NAME}={value}"}
