"""
Pytest configuration and fixtures.
"""

from __future__ import annotations

import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from tests.test_constants import TEST_INTERNAL_JOB_TOKEN

# Force an in-memory test DB; don't inherit from .env
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "staging"
os.environ["RATE_LIMIT_ENABLED"] = "false"  # Enabled per test where limits are under test
os.environ["PUBLIC_BASE_URL"] = "https://nomoji.test"
os.environ.setdefault("INTERNAL_JOB_TOKEN", TEST_INTERNAL_JOB_TOKEN)


@pytest.fixture
def db() -> Session:
    """Database session on a fresh schema. Tables are dropped after each test."""
    import nomoji.models  # noqa: F401
    from nomoji.db.session import Base, engine

    Base.metadata.create_all(bind=engine)
    session = Session(bind=engine, expire_on_commit=False)
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client() -> TestClient:
    """FastAPI test client."""
    from nomoji.main import app

    return TestClient(app)


@pytest.fixture
def api_client(db: Session) -> TestClient:
    """TestClient with get_db overridden to use the test db session."""
    from nomoji.db.session import get_db
    from nomoji.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    c = TestClient(app)
    yield c
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def rate_limited_settings(monkeypatch: pytest.MonkeyPatch):
    """Production settings with rate limiting on, patched into the limiter."""
    from unittest.mock import patch

    from nomoji.config import Settings

    monkeypatch.setenv("RATE_LIMIT_ENABLED", "true")
    monkeypatch.setenv("ENVIRONMENT", "production")
    settings = Settings()
    with patch("nomoji.services.rate_limit.get_settings", return_value=settings):
        yield settings
