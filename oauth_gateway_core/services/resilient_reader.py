"""
Resilient credential reads.

Separates "this principal has no credential" from "the store could not be
read". Absence is signalled only by the store returning None or raising an
explicit not-found error; every other failure, including a record of the
wrong shape, is retried with a linear backoff of ``attempt * base_delay``
seconds between attempts.
"""

import time
from typing import Any, Callable, Optional

from pydantic import ValidationError as PydanticValidationError

from ..config import get_config
from ..constants import LogContextKey
from ..exceptions import BaseError, CredentialNotFoundError, ErrorCode
from ..schemas.credential_schemas import Credential
from ..schemas.error_schemas import ClassifiedError, ErrorKind
from ..schemas.operation_result import OperationResult
from ..utils.logger import get_logger
from .credential_store import CredentialStore
from .error_classifier import ErrorClassifier


def is_absent_marker(error: Exception) -> bool:
    """True for errors a store raises to say the record does not exist."""
    if isinstance(error, CredentialNotFoundError):
        return True
    return isinstance(error, BaseError) and error.error_code == ErrorCode.NOT_FOUND


class UnexpectedRecordError(Exception):
    """A store returned something that is not a credential of the requested principal."""


class ResilientReader:
    """Reads credentials from a store, retrying transient failures."""

    def __init__(
        self,
        store: CredentialStore,
        max_attempts: Optional[int] = None,
        base_delay: Optional[float] = None,
        classifier: Optional[ErrorClassifier] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the reader.

        Args:
            store: Credential store to read from
            max_attempts: Total read attempts (default: from config)
            base_delay: Backoff unit in seconds (default: from config)
            classifier: Error classifier (default: a new ErrorClassifier)
            sleep: Blocking sleep function
        """
        retry_config = get_config().retry
        self.store = store
        self.max_attempts = max_attempts if max_attempts is not None else retry_config.max_attempts
        self.base_delay = base_delay if base_delay is not None else retry_config.base_delay_seconds
        self.classifier = classifier or ErrorClassifier()
        self.sleep = sleep
        self.logger = get_logger()

        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    def read(self, principal_id: str) -> OperationResult:
        """
        Read the credential of ``principal_id``.

        Returns:
            success with the Credential, success with None when the principal
            has no credential, or failure with a Temporary error once every
            attempt has failed
        """
        last_error: Optional[ClassifiedError] = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                credential = self._coerce(principal_id, self.store.fetch(principal_id))
            except Exception as e:
                if is_absent_marker(e):
                    return OperationResult.success_result(None)

                last_error = self.classifier.classify(e)
                self.logger.warning(
                    "Credential read failed",
                    extra={
                        LogContextKey.PRINCIPAL_ID.value: principal_id,
                        LogContextKey.ATTEMPT.value: attempt,
                        "max_attempts": self.max_attempts,
                        LogContextKey.ERROR_KIND.value: last_error.kind.value,
                        "error_type": type(e).__name__,
                    },
                )
                if attempt < self.max_attempts:
                    self.sleep(attempt * self.base_delay)
                continue

            return OperationResult.success_result(credential)

        self.logger.error(
            "Credential store unavailable after retries",
            extra={"principal_id": principal_id, "max_attempts": self.max_attempts},
        )
        return OperationResult.failure_result(
            ClassifiedError(
                kind=ErrorKind.TEMPORARY,
                message=(
                    f"Credential store unavailable after {self.max_attempts} attempts: "
                    f"{last_error.message if last_error else 'unknown failure'}"
                ),
                error_type=last_error.error_type if last_error else None,
            )
        )

    @staticmethod
    def _coerce(principal_id: str, record: Any) -> Optional[Credential]:
        if record is None:
            return None

        if not isinstance(record, Credential):
            try:
                record = Credential.model_validate(record)
            except PydanticValidationError as e:
                raise UnexpectedRecordError(
                    f"Store returned an unexpected record of type {type(record).__name__}"
                ) from e

        expected = principal_id.strip() if isinstance(principal_id, str) else principal_id
        if record.principal_id != expected:
            raise UnexpectedRecordError("Store returned a credential for a different principal")
        return record
