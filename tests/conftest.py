"""
Pytest configuration and fixtures.

Environment is set before any application module is imported: config reads
it at import time and refuses to load without JWT_SECRET.
"""
import os
import tempfile
from pathlib import Path

_TMP_DIR = tempfile.mkdtemp(prefix="booktracker-tests-")

os.environ["ENV"] = "test"
os.environ["JWT_SECRET"] = "test-secret-key-for-jwt-signing"
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_TMP_DIR) / 'test.db'}"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ.pop("GOOGLE_BOOKS_API_KEY", None)
os.environ.pop("JWT_ISSUER", None)
os.environ.pop("JWT_AUDIENCE", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import models  # noqa: E402,F401
from database import Base, SessionLocal, engine  # noqa: E402
from main import app  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_schema():
    """Recreate all tables so every test starts from an empty database."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(client):
    """Register a user and return (user_json, auth headers)."""

    def _make(username="alice", email="a@x.com", password="pw123"):
        resp = client.post(
            "/auth/register",
            json={"username": username, "email": email, "password": password},
        )
        assert resp.status_code == 200, resp.text
        login = client.post("/auth/login", json={"email": email, "password": password})
        assert login.status_code == 200, login.text
        token = login.json()["Token"]
        return resp.json(), {"Authorization": f"Bearer {token}"}

    return _make
