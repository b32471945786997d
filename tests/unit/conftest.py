"""
Unit test conftest.py - Component-specific fixtures.

This module provides fixtures specific to unit testing:
- Store fixtures backed by the SQLite test session
- In-memory doubles for the external collaborators (store faults, token endpoint)
- Service fixtures wired with a recording sleep and a fixed clock
"""

from typing import Dict, List, Optional

import pytest

from oauth_gateway_core.schemas.credential_schemas import Credential, TokenGrant
from oauth_gateway_core.services.credential_lifecycle_service import CredentialLifecycleManager
from oauth_gateway_core.services.credential_store import SqlCredentialStore
from oauth_gateway_core.services.error_classifier import ErrorClassifier
from oauth_gateway_core.services.request_orchestrator import RequestOrchestrator
from oauth_gateway_core.services.resilient_reader import ResilientReader

# ==================== TEST DOUBLES ====================


class InMemoryCredentialStore:
    """CredentialStore double with scriptable fetch failures."""

    def __init__(self, credentials: Optional[Dict[str, Credential]] = None):
        self.credentials: Dict[str, Credential] = dict(credentials or {})
        self.fetch_failures: List[Exception] = []
        self.upsert_failure: Optional[Exception] = None
        self.fetch_calls = 0
        self.upserts: List[Credential] = []

    def fetch(self, principal_id: str) -> Optional[Credential]:
        self.fetch_calls += 1
        if self.fetch_failures:
            raise self.fetch_failures.pop(0)
        return self.credentials.get(principal_id)

    def upsert(self, credential: Credential) -> None:
        if self.upsert_failure is not None:
            raise self.upsert_failure
        self.upserts.append(credential)
        self.credentials[credential.principal_id] = credential

    def delete(self, principal_id: str) -> bool:
        return self.credentials.pop(principal_id, None) is not None


class FakeRefresher:
    """TokenRefresher double recording every refresh call."""

    def __init__(self, grant: Optional[TokenGrant] = None, error: Optional[Exception] = None):
        self.grant = grant or TokenGrant(access_token="access-refreshed", expires_in=3600)
        self.error = error
        self.calls: List[str] = []

    def refresh(self, refresh_token: str) -> TokenGrant:
        self.calls.append(refresh_token)
        if self.error is not None:
            raise self.error
        return self.grant


class RecordingSleep:
    def __init__(self):
        self.delays: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


# ==================== FIXTURES ====================


@pytest.fixture
def memory_store() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


@pytest.fixture(scope="function")
def sql_store(db_session) -> SqlCredentialStore:
    """SQL credential store with test session."""
    return SqlCredentialStore(session=db_session)


@pytest.fixture
def refresher() -> FakeRefresher:
    return FakeRefresher()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def classifier() -> ErrorClassifier:
    return ErrorClassifier()


@pytest.fixture
def reader(memory_store, recording_sleep, classifier) -> ResilientReader:
    return ResilientReader(memory_store, classifier=classifier, sleep=recording_sleep)


@pytest.fixture
def lifecycle(memory_store, refresher, reader, classifier, fixed_now) -> CredentialLifecycleManager:
    return CredentialLifecycleManager(
        memory_store,
        refresher,
        reader=reader,
        classifier=classifier,
        clock=lambda: fixed_now,
    )


@pytest.fixture
def orchestrator(lifecycle) -> RequestOrchestrator:
    return RequestOrchestrator(lifecycle, search_operation=lambda credential, query, page_size: [])
