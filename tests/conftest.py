"""Pytest configuration: in-memory SQLite per test and an API client."""

import os

# Set test settings BEFORE any imports from church_ledger
# This ensures the module-level engine and settings use test values
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["WEBHOOK_SECRET"] = "test-secret"
os.environ.setdefault("LOG_LEVEL", "INFO")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from church_ledger.database import get_db  # noqa: E402
from church_ledger.main import app  # noqa: E402
from church_ledger.models import Base  # noqa: E402

WEBHOOK_HEADERS = {"X-Webhook-Secret": "test-secret"}


@pytest.fixture
def db_session():
    """Create a fresh in-memory database session."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def client(db_session):
    """FastAPI test client bound to the test session."""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def webhook_headers():
    return dict(WEBHOOK_HEADERS)
