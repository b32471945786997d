"""
Test fixtures for the OAuth gateway core.

This module provides shared test fixtures including database setup,
configuration isolation, and common test data.
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.orm import Session

from oauth_gateway_core.config import AppConfig, reset_config, set_config
from oauth_gateway_core.context.principal_context import PrincipalContext
from oauth_gateway_core.db import DatabaseConfig, DatabaseManager, import_all_models
from oauth_gateway_core.db.db_config import Base, initialize_db
from oauth_gateway_core.schemas.credential_schemas import Credential
from oauth_gateway_core.utils.logger import reset_logging

FIXED_NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="session")
def db_config() -> DatabaseConfig:
    """Create SQLite in-memory database configuration for testing."""
    return DatabaseConfig(
        db_type="sqlite",
        database=":memory:",
        echo=False,
        development_mode=True,
    )


@pytest.fixture(scope="session")
def db_manager(db_config: DatabaseConfig) -> DatabaseManager:
    """Create and initialize database manager with all models."""
    import_all_models()
    return initialize_db(db_config)


@pytest.fixture(scope="function")
def db_session(db_manager: DatabaseManager) -> Session:
    """
    Create a database session for each test.

    Tables are created before and dropped after every test so no credential
    leaks between tests.
    """
    Base.metadata.create_all(db_manager.engine)
    session = db_manager.get_session()

    yield session

    session.rollback()
    db_manager.close_session()
    Base.metadata.drop_all(db_manager.engine)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Deterministic configuration; no test reads the developer's environment."""
    monkeypatch.setenv("GOOGLE_CLIENT_ID", "test-client-id")
    monkeypatch.setenv("GOOGLE_CLIENT_SECRET", "test-client-secret")
    monkeypatch.setenv("GOOGLE_REDIRECT_URI", "http://localhost:3000/oauth/callback")
    monkeypatch.delenv("OAUTH_LOGIN_URL", raising=False)
    monkeypatch.delenv("CREDENTIAL_READ_MAX_ATTEMPTS", raising=False)
    monkeypatch.delenv("CREDENTIAL_READ_BASE_DELAY", raising=False)
    monkeypatch.setenv("ENABLE_LOGS_QUEUE", "false")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    reset_config()
    reset_logging()
    set_config(AppConfig())

    yield

    reset_config()
    reset_logging()
    PrincipalContext.clear_current_principal()


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def sample_principal_id() -> str:
    """Standard principal ID for testing."""
    return "user-123"


@pytest.fixture
def valid_credential(sample_principal_id) -> Credential:
    return Credential(
        principal_id=sample_principal_id,
        access_token="access-valid",
        refresh_token="refresh-valid",
        expiry=FIXED_NOW + timedelta(hours=1),
        scope="https://www.googleapis.com/auth/drive",
    )


@pytest.fixture
def expired_credential(sample_principal_id) -> Credential:
    return Credential(
        principal_id=sample_principal_id,
        access_token="access-expired",
        refresh_token="refresh-valid",
        expiry=FIXED_NOW - timedelta(minutes=5),
        scope="https://www.googleapis.com/auth/drive",
    )
