"""
Consolidated exception system with error codes and context.

These exceptions are raised at the edges of the gateway (credential store,
OAuth and resource API clients). The orchestration core never lets them reach
a caller directly: the error classifier converts every one of them into a
ClassifiedError before it leaves the core.
"""

import traceback
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


class ErrorCode(str, Enum):
    """Standardized error codes for gateway errors."""

    # System errors (1xxx)
    INTERNAL_ERROR = "1000"
    DATABASE_ERROR = "1001"
    CONNECTION_ERROR = "1002"
    CONFIGURATION_ERROR = "1003"
    TIMEOUT_ERROR = "1004"
    SERVICE_UNAVAILABLE = "1005"

    # Validation errors (2xxx)
    VALIDATION_FAILED = "2000"
    INVALID_FORMAT = "2001"
    MISSING_REQUIRED = "2002"

    # Resource errors (3xxx)
    NOT_FOUND = "3000"
    EXPIRED = "3004"
    LIMIT_EXCEEDED = "3005"

    # Authorization errors (4xxx)
    AUTHENTICATION_REQUIRED = "4001"
    PERMISSION_DENIED = "4003"
    RATE_LIMITED = "4029"

    # External service errors (5xxx)
    EXTERNAL_API_ERROR = "5002"
    INTEGRATION_ERROR = "5003"
    TOKEN_REFRESH_FAILED = "5005"


class BaseError(Exception):
    """Base exception with context, error codes and logging."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        status_code: int = 500,
        cause: Optional[Exception] = None,
        **context: Any,
    ):
        """
        Initialize base error with rich context.

        Args:
            message: Human-readable error message
            error_code: Standardized error code from ErrorCode enum
            status_code: HTTP status code the error corresponds to
            cause: Original exception that caused this error
            **context: Additional context information
        """
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc).isoformat()
        self.error_id = str(uuid.uuid4())
        self.context = context
        self.context["error_id"] = self.error_id

        if cause:
            self.context["cause"] = {
                "type": type(cause).__name__,
                "message": str(cause),
                "traceback": traceback.format_exception(type(cause), cause, cause.__traceback__),
            }

        self._log_error()

        super().__init__(message)

    def _log_error(self) -> None:
        """Log error with appropriate level based on status code."""
        # Lazy import: the logger reads config, which must not import exceptions first
        from .utils.logger import get_logger

        logger = get_logger()

        log_data = {
            "error_id": self.error_id,
            "error_code": self.error_code.value,
            "status_code": self.status_code,
            "error_message": self.message,
            "timestamp": self.timestamp,
            "context": {k: v for k, v in self.context.items() if k not in ["cause", "traceback"]},
        }

        if self.status_code >= 500:
            logger.error(f"Error {self.error_code.value}: {self.message}", extra=log_data)
        elif self.status_code >= 400:
            logger.warning(f"Client error {self.error_code.value}: {self.message}", extra=log_data)
        else:
            logger.info(f"Error {self.error_code.value}: {self.message}", extra=log_data)


class ServiceError(BaseError):
    """Service layer errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        operation: Optional[str] = None,
        cause: Optional[Exception] = None,
        **context,
    ):
        if operation:
            context["operation"] = operation
        super().__init__(message, error_code, 500, cause, **context)


class ValidationError(BaseError):
    """Validation errors."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_FAILED,
        cause: Optional[Exception] = None,
        **context,
    ):
        if field:
            context["field"] = field
        super().__init__(message, error_code, 400, cause, **context)


class ExternalServiceError(BaseError):
    """
    Failure reported by a remote service (OAuth provider or resource API).

    The HTTP status of the failed response is kept in ``status_code`` so the
    error classifier can map it onto an error kind.
    """

    def __init__(
        self,
        message: str,
        service_name: str,
        status_code: int = 502,
        error_code: ErrorCode = ErrorCode.EXTERNAL_API_ERROR,
        cause: Optional[Exception] = None,
        **context,
    ):
        context["service_name"] = service_name
        super().__init__(message, error_code, status_code, cause, **context)


# ==================== CREDENTIAL-SPECIFIC EXCEPTIONS ====================


class CredentialNotFoundError(BaseError):
    """Raised by a credential store when no record exists for a principal."""

    def __init__(self, message: str = "Credential not found", **kwargs):
        super().__init__(message=message, error_code=ErrorCode.NOT_FOUND, status_code=404, **kwargs)


class AuthenticationRequiredError(BaseError):
    """Raised when a principal must (re-)authorize before any call can proceed."""

    def __init__(self, message: str = "Authentication required", **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.AUTHENTICATION_REQUIRED,
            status_code=401,
            **kwargs,
        )


class TokenRefreshError(BaseError):
    """Raised when the authorization service rejects a refresh exchange."""

    def __init__(self, message: str = "Token refresh failed", **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.TOKEN_REFRESH_FAILED,
            status_code=401,
            **kwargs,
        )


class CredentialStoreUnavailableError(BaseError):
    """Raised when the credential store cannot be reached."""

    def __init__(self, message: str = "Credential store unavailable", **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.SERVICE_UNAVAILABLE,
            status_code=503,
            **kwargs,
        )
