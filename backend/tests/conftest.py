import os
import tempfile
from datetime import datetime, timedelta, timezone

import pytest

# Point every service at a throwaway directory before settings are loaded
_TMP_DIR = tempfile.mkdtemp(prefix="tradesync-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'main.db')}"
os.environ["BROKER_A_DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'broker_a.db')}"
os.environ["BROKER_B_DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'broker_b.db')}"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["LLM_API_KEY"] = ""
os.environ["DEBUG"] = "false"

from fastapi.testclient import TestClient  # noqa: E402

from tradesync.core.database import Base, SessionLocal, engine  # noqa: E402

T0 = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)


def at(minutes: int) -> datetime:
    return T0 + timedelta(minutes=minutes)


@pytest.fixture
def app():
    from main import app as main_app

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield main_app
    main_app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    # context manager so startup seeding runs
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db(app):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def register(client):
    """Register a user and return (token, user payload)."""

    def _register(username="trader1", brokers=("brokerA", "brokerB"), password="secret123"):
        r = client.post("/api/auth/register", json={
            "username": username,
            "email": f"{username}@example.com",
            "password": password,
            "firstName": "Test",
            "lastName": "Trader",
            "brokerCodes": list(brokers),
        })
        assert r.status_code == 201, r.text
        body = r.json()
        return body["token"], body["user"]

    return _register


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
