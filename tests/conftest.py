"""Shared fixtures: database, application and HTTP/WebSocket client."""

import os

os.environ["ENV"] = "test"
os.environ.setdefault(
    "SECRET_KEY", "test-secret-key-with-enough-length-for-hs256-signing"
)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import market.models  # noqa: E402,F401
from market.db import Base, SessionLocal, engine, get_db  # noqa: E402
from market.main import create_app  # noqa: E402

pytest_plugins = [
    "tests.fixtures.user_fixtures",
    "tests.fixtures.conversation_fixtures",
    "tests.fixtures.server_fixtures",
]


@pytest.fixture(scope="function")
def db():
    """Fresh schema per test; the session is shared with the app under test."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def app(db):
    application = create_app(testing=True)

    def override_get_db():
        try:
            yield db
        finally:
            pass

    application.dependency_overrides[get_db] = override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client(app):
    with TestClient(app) as c:
        yield c
