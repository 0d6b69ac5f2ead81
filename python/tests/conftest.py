"""Pytest configuration and fixtures for SkillSwap tests.

Test isolation strategy:
- Every test gets a fresh in-memory SQLite database built from the ORM
  metadata (StaticPool keeps one connection so all sessions see it)
- The identity provider is Configured with MockClerkVerifier and
  FakeIdentityClient; no test talks to Clerk
- Route tests use a TestClient whose get_db dependency is bound to the
  test engine
"""

import os
from collections.abc import Generator

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("SKILLSWAP_ENV", "test")

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from skillswap.api.deps import get_db
from skillswap.app import add_request_id_middleware, create_app
from skillswap.config import clear_settings_cache
from skillswap.db.models import Base
from skillswap.db.session import create_session_factory
from skillswap.identity.provider import Configured, IdentityProvider
from tests.helpers import create_test_clerk_user_id
from tests.support.fake_identity import FakeIdentityClient
from tests.support.mock_verifier import MockClerkVerifier


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """Create a fresh in-memory database with the full schema."""
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return create_session_factory(engine)


@pytest.fixture
def db_session(session_factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    """Provide a database session bound to the test engine."""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def fake_identity_client() -> FakeIdentityClient:
    return FakeIdentityClient()


@pytest.fixture
def mock_verifier() -> MockClerkVerifier:
    """Provide a test session verifier."""
    return MockClerkVerifier()


@pytest.fixture
def identity_provider(
    mock_verifier: MockClerkVerifier, fake_identity_client: FakeIdentityClient
) -> IdentityProvider:
    return Configured(verifier=mock_verifier, users=fake_identity_client)


def build_test_app(
    provider: IdentityProvider, session_factory: sessionmaker[Session]
) -> FastAPI:
    """Create an app wired to the given provider and test database."""
    app = create_app(identity_provider=provider)

    def override_get_db() -> Generator[Session, None, None]:
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    add_request_id_middleware(app, log_requests=False)
    return app


@pytest.fixture
def app(identity_provider: IdentityProvider, session_factory: sessionmaker[Session]) -> FastAPI:
    """Provide a FastAPI app with auth middleware using the test verifier."""
    return build_test_app(identity_provider, session_factory)


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """Provide a FastAPI test client with auth middleware.

    Use auth_headers() to generate valid tokens for requests.
    """
    with TestClient(app) as client:
        yield client


@pytest.fixture
def clerk_user_id() -> str:
    """Generate a random Clerk user ID."""
    return create_test_clerk_user_id()


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Reset the settings cache before each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()
