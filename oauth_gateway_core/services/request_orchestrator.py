"""
Request orchestrator: the gateway's single entry point.

For every call it obtains a valid credential for the principal, runs the
remote operation once with it, and returns either the operation's result
unmodified or exactly one ClassifiedError.
"""

from functools import partial
from typing import Any, Callable, List, Optional

from ..constants import LogContextKey
from ..context.principal_context import principal_context
from ..schemas.error_schemas import ClassifiedError, ErrorKind
from ..schemas.operation_result import OperationResult
from ..utils.logger import get_logger
from .credential_lifecycle_service import CredentialLifecycleManager
from .error_classifier import ErrorClassifier
from .fallback_query_engine import FallbackQueryEngine

# (credential, query, page_size) -> items
SearchOperation = Callable[[Any, str, int], List[Any]]


def _operation_name(operation: Callable) -> str:
    if isinstance(operation, partial):
        operation = operation.func
    return getattr(operation, "__qualname__", None) or getattr(operation, "__name__", None) or repr(operation)


class RequestOrchestrator:
    """Runs remote operations on behalf of principals."""

    def __init__(
        self,
        lifecycle: CredentialLifecycleManager,
        search_operation: Optional[SearchOperation] = None,
        query_engine: Optional[FallbackQueryEngine] = None,
        classifier: Optional[ErrorClassifier] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            lifecycle: Source of valid credentials
            search_operation: Remote search (default: Drive file search)
            query_engine: Fallback engine used by search()
            classifier: Error classifier (default: the lifecycle manager's)
        """
        self.lifecycle = lifecycle
        self.classifier = classifier or lifecycle.classifier
        self.query_engine = query_engine or FallbackQueryEngine(classifier=self.classifier)
        self._search_operation = search_operation
        self.logger = get_logger()

    @property
    def search_operation(self) -> SearchOperation:
        if self._search_operation is None:
            # Created on first use
            from ..clients.google_api_client import DriveFilesClient

            self._search_operation = DriveFilesClient().search_files
        return self._search_operation

    def invoke(self, principal_id: str, operation: Callable[..., Any], **params: Any) -> OperationResult:
        """
        Run ``operation(credential, **params)`` for ``principal_id``.

        The operation runs at most once. Its return value is passed through
        unmodified; any failure comes back classified, and Authentication
        failures carry the principal's login URL.
        """
        if not isinstance(principal_id, str) or not principal_id.strip():
            return OperationResult.failure_result(
                ClassifiedError(
                    kind=ErrorKind.UNKNOWN,
                    message="principal_id must be a non-empty string",
                    error_type="ValidationError",
                )
            )

        with principal_context(principal_id):
            credential_result = self.lifecycle.get_valid_credential(principal_id)
            if not credential_result.success:
                self._log_failure(principal_id, operation, credential_result.error)
                return credential_result

            try:
                value = operation(credential_result.value, **params)
            except Exception as e:
                classified = self.classifier.classify(e)
                if classified.kind == ErrorKind.AUTHENTICATION:
                    classified = classified.with_reauthorization_url(
                        self.lifecycle.build_login_url(principal_id)
                    )
                self._log_failure(principal_id, operation, classified)
                return OperationResult.failure_result(classified)

            self.logger.debug(
                "Operation succeeded",
                extra={
                    LogContextKey.PRINCIPAL_ID.value: principal_id,
                    LogContextKey.OPERATION.value: _operation_name(operation),
                },
            )
            return OperationResult.success_result(value)

    def search(
        self, principal_id: str, raw_query: str, max_results: Optional[int] = None
    ) -> OperationResult:
        """Fallback search with the principal's credential; value is a (possibly empty) list."""

        def run_search(credential):
            return self.query_engine.search(
                raw_query, partial(self.search_operation, credential), max_results
            )

        return self.invoke(principal_id, run_search)

    def _log_failure(self, principal_id: str, operation: Callable, error: ClassifiedError) -> None:
        self.logger.warning(
            "Operation failed",
            extra={
                LogContextKey.PRINCIPAL_ID.value: principal_id,
                LogContextKey.OPERATION.value: _operation_name(operation),
                LogContextKey.ERROR_KIND.value: error.kind.value,
                "retryable": error.retryable,
            },
        )
