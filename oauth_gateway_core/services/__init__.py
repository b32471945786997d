"""Gateway core services."""

from .credential_lifecycle_service import CredentialLifecycleManager, TokenRefresher
from .credential_store import CredentialStore, SqlCredentialStore
from .error_classifier import ErrorClassifier, classify_error
from .fallback_query_engine import FallbackQueryEngine
from .request_orchestrator import RequestOrchestrator
from .resilient_reader import ResilientReader

__all__ = [
    "CredentialLifecycleManager",
    "TokenRefresher",
    "CredentialStore",
    "SqlCredentialStore",
    "ErrorClassifier",
    "classify_error",
    "FallbackQueryEngine",
    "RequestOrchestrator",
    "ResilientReader",
]
