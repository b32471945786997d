"""
Error classifier: maps any raw failure onto exactly one ErrorKind.

Classification is total. Whatever is passed in (exceptions, dicts, strings,
None, objects whose ``__str__`` or attribute access raises) comes back as a
ClassifiedError with a non-empty message.
"""

import re
from typing import Any, Mapping, Optional, Pattern, Tuple

import httpx

from ..constants import Limits, LogContextKey
from ..exceptions import BaseError, ErrorCode
from ..schemas.error_schemas import ClassifiedError, ErrorKind
from ..utils.logger import get_logger

# ErrorCodes that identify a kind on their own, regardless of status or message
ERROR_CODE_KINDS = {
    ErrorCode.NOT_FOUND: ErrorKind.NOT_FOUND,
    ErrorCode.PERMISSION_DENIED: ErrorKind.PERMISSION_DENIED,
    ErrorCode.RATE_LIMITED: ErrorKind.RATE_LIMITED,
    ErrorCode.LIMIT_EXCEEDED: ErrorKind.RATE_LIMITED,
    ErrorCode.AUTHENTICATION_REQUIRED: ErrorKind.AUTHENTICATION,
    ErrorCode.TOKEN_REFRESH_FAILED: ErrorKind.AUTHENTICATION,
    ErrorCode.EXPIRED: ErrorKind.AUTHENTICATION,
    ErrorCode.SERVICE_UNAVAILABLE: ErrorKind.TEMPORARY,
    ErrorCode.CONNECTION_ERROR: ErrorKind.TEMPORARY,
    ErrorCode.TIMEOUT_ERROR: ErrorKind.TEMPORARY,
}

TRANSIENT_EXCEPTION_TYPES = (ConnectionError, TimeoutError, httpx.TransportError)

# Evaluated in order; the first rule whose status or message matches wins.
_RULES: Tuple[Tuple[ErrorKind, frozenset, Pattern], ...] = (
    (
        ErrorKind.NOT_FOUND,
        frozenset({404}),
        re.compile(r"not\s*found|does not exist|no such file", re.IGNORECASE),
    ),
    (
        ErrorKind.PERMISSION_DENIED,
        frozenset({403}),
        re.compile(r"permission|forbidden|access denied|insufficient", re.IGNORECASE),
    ),
    (
        ErrorKind.RATE_LIMITED,
        frozenset({429}),
        re.compile(r"rate\s*limit|too many requests|quota", re.IGNORECASE),
    ),
    (
        ErrorKind.AUTHENTICATION,
        frozenset({401}),
        re.compile(
            r"unauthenticated|unauthori[sz]ed|invalid_grant|invalid_token|invalid (authentication )?credentials"
            r"|expired or (has been )?revoked|login required",
            re.IGNORECASE,
        ),
    ),
    (
        ErrorKind.TEMPORARY,
        frozenset({502, 503, 504}),
        re.compile(
            r"econnrefused|connection refused|connection reset|econnreset|etimedout"
            r"|timed? ?out|temporarily|service unavailable|socket hang up",
            re.IGNORECASE,
        ),
    ),
)


def _safe_getattr(obj: Any, name: str) -> Any:
    try:
        return getattr(obj, name, None)
    except Exception:
        return None


def _safe_str(obj: Any) -> str:
    try:
        return str(obj)
    except Exception:
        return ""


def _as_status(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        status = value
    elif isinstance(value, str) and value.strip().isdigit():
        status = int(value.strip())
    else:
        return None
    return status if 100 <= status <= 599 else None


def extract_status_code(raw_error: Any) -> Optional[int]:
    """Find an HTTP status on the error, its response, or its mapping keys."""
    if isinstance(raw_error, Mapping):
        for key in ("status_code", "status", "code"):
            try:
                status = _as_status(raw_error.get(key))
            except Exception:
                status = None
            if status is not None:
                return status
        return None

    for name in ("status_code", "status", "code"):
        status = _as_status(_safe_getattr(raw_error, name))
        if status is not None:
            return status

    for name in ("response", "resp"):
        response = _safe_getattr(raw_error, name)
        if response is None:
            continue
        for attr in ("status_code", "status"):
            status = _as_status(_safe_getattr(response, attr))
            if status is not None:
                return status
    return None


def extract_message(raw_error: Any) -> str:
    """Best-effort human-readable message; empty string if none can be produced."""
    if raw_error is None:
        return ""
    if isinstance(raw_error, str):
        return raw_error
    if isinstance(raw_error, BaseError):
        return _safe_str(raw_error.message)
    if isinstance(raw_error, Mapping):
        for key in ("message", "error_description", "error"):
            try:
                value = raw_error.get(key)
            except Exception:
                value = None
            if value:
                return _safe_str(value)
        return _safe_str(raw_error)
    return _safe_str(raw_error)


def extract_retry_after(raw_error: Any) -> Optional[float]:
    """Retry-After hint in seconds, from an attribute or the response headers."""
    candidates = [_safe_getattr(raw_error, "retry_after")]
    response = _safe_getattr(raw_error, "response")
    headers = _safe_getattr(response, "headers") if response is not None else None
    if isinstance(headers, (Mapping, httpx.Headers)):
        candidates.append(headers.get("Retry-After"))

    for candidate in candidates:
        if candidate is None or isinstance(candidate, bool):
            continue
        try:
            seconds = float(candidate)
        except (TypeError, ValueError):
            continue
        if seconds >= 0:
            return seconds
    return None


class ErrorClassifier:
    """
    Classifier for raw failures from the store, the token endpoint and remote APIs.

    Precedence, first match wins:
    1. an existing ClassifiedError, or a BaseError whose ErrorCode names a kind
    2. status 404 / not-found message -> NotFound
    3. status 403 / permission message -> PermissionDenied
    4. status 429 / rate-limit message -> RateLimited
    5. status 401 / invalid-grant message -> Authentication
    6. transport exception, status 502-504, or transient message -> Temporary
    7. anything else -> Unknown, message kept verbatim
    """

    def __init__(self):
        self.logger = get_logger()

    def classify(self, raw_error: Any) -> ClassifiedError:
        """Classify ``raw_error``. Never raises."""
        try:
            classified = self._classify(raw_error)
        except Exception as e:
            self.logger.warning(
                "Error classification fell back to Unknown",
                extra={"error_type": type(e).__name__},
            )
            classified = ClassifiedError(
                kind=ErrorKind.UNKNOWN,
                message=extract_message(raw_error),
                error_type=type(raw_error).__name__,
            )

        self.logger.debug(
            "Classified error",
            extra={
                LogContextKey.ERROR_KIND.value: classified.kind.value,
                "status_code": classified.status_code,
                "error_type": classified.error_type,
                "detail": classified.message[: Limits.MAX_ERROR_MESSAGE_LENGTH],
            },
        )
        return classified

    def _classify(self, raw_error: Any) -> ClassifiedError:
        if isinstance(raw_error, ClassifiedError):
            return raw_error

        message = extract_message(raw_error)
        status = extract_status_code(raw_error)
        error_type = type(raw_error).__name__

        kind = None
        if isinstance(raw_error, BaseError):
            kind = ERROR_CODE_KINDS.get(raw_error.error_code)

        if kind is None:
            kind = self._match_rules(status, message)

        if kind is None and isinstance(raw_error, TRANSIENT_EXCEPTION_TYPES):
            kind = ErrorKind.TEMPORARY

        if kind is None:
            kind = ErrorKind.UNKNOWN

        return ClassifiedError(
            kind=kind,
            message=message,
            status_code=status,
            error_type=error_type,
            retry_after_seconds=(
                extract_retry_after(raw_error) if kind == ErrorKind.RATE_LIMITED else None
            ),
        )

    @staticmethod
    def _match_rules(status: Optional[int], message: str) -> Optional[ErrorKind]:
        for kind, statuses, pattern in _RULES:
            if status in statuses or (message and pattern.search(message)):
                return kind
        return None


_default_classifier: Optional[ErrorClassifier] = None


def classify_error(raw_error: Any) -> ClassifiedError:
    """Classify with a shared ErrorClassifier instance."""
    global _default_classifier
    if _default_classifier is None:
        _default_classifier = ErrorClassifier()
    return _default_classifier.classify(raw_error)
