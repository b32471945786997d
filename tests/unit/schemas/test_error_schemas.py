"""Tests for ClassifiedError and OperationResult."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from oauth_gateway_core.schemas.error_schemas import ClassifiedError, ErrorKind
from oauth_gateway_core.schemas.operation_result import OperationResult

LOGIN_URL = "http://localhost:3000/oauth/start?userId=user-123"


class TestClassifiedError:
    @pytest.mark.parametrize(
        "kind, expected",
        [
            (ErrorKind.AUTHENTICATION, "Authentication required"),
            (ErrorKind.NOT_FOUND, "Resource not found"),
            (ErrorKind.TEMPORARY, "Service temporarily unavailable"),
            (ErrorKind.UNKNOWN, "Unknown error"),
        ],
    )
    @pytest.mark.parametrize("message", [None, "", "   "])
    def test_blank_message_gets_kind_default(self, kind, expected, message):
        assert ClassifiedError(kind=kind, message=message).message == expected

    @pytest.mark.parametrize(
        "kind, retryable",
        [
            (ErrorKind.TEMPORARY, True),
            (ErrorKind.RATE_LIMITED, True),
            (ErrorKind.AUTHENTICATION, False),
            (ErrorKind.NOT_FOUND, False),
            (ErrorKind.PERMISSION_DENIED, False),
            (ErrorKind.UNKNOWN, False),
        ],
    )
    def test_retryable(self, kind, retryable):
        assert ClassifiedError(kind=kind, message="x").retryable is retryable

    def test_kind_values(self):
        assert {kind.value for kind in ErrorKind} == {
            "Authentication",
            "NotFound",
            "PermissionDenied",
            "Temporary",
            "RateLimited",
            "Unknown",
        }

    def test_frozen(self):
        error = ClassifiedError(kind=ErrorKind.UNKNOWN, message="x")

        with pytest.raises(PydanticValidationError):
            error.message = "y"


class TestUserMessage:
    def test_authentication_with_url(self):
        error = ClassifiedError(
            kind=ErrorKind.AUTHENTICATION,
            message="Token has been expired or revoked.",
            reauthorization_url=LOGIN_URL,
        )

        assert error.user_message == (
            "Authentication required: Token has been expired or revoked. "
            f"Please visit {LOGIN_URL} to re-authorize."
        )

    def test_authentication_without_url(self):
        error = ClassifiedError(kind=ErrorKind.AUTHENTICATION, message="No credential")

        assert error.user_message.endswith("Please re-authorize this user.")

    def test_rate_limited_with_retry_after(self):
        error = ClassifiedError(kind=ErrorKind.RATE_LIMITED, message="Quota exceeded", retry_after_seconds=30)

        assert error.user_message == "Rate limited: Quota exceeded. Wait 30 seconds before retrying."

    @pytest.mark.parametrize(
        "kind, prefix",
        [
            (ErrorKind.NOT_FOUND, "Not found: File missing."),
            (ErrorKind.PERMISSION_DENIED, "Permission denied: File missing."),
            (ErrorKind.TEMPORARY, "Temporarily unavailable: File missing."),
            (ErrorKind.RATE_LIMITED, "Rate limited: File missing."),
        ],
    )
    def test_kind_specific_prefix(self, kind, prefix):
        assert ClassifiedError(kind=kind, message="File missing").user_message.startswith(prefix)

    def test_unknown_keeps_message_verbatim(self):
        error = ClassifiedError(kind=ErrorKind.UNKNOWN, message="weird: thing.")

        assert error.user_message == "Error: weird: thing."


class TestWithReauthorizationUrl:
    def test_adds_url_to_copy(self):
        error = ClassifiedError(kind=ErrorKind.AUTHENTICATION, message="x")

        updated = error.with_reauthorization_url(LOGIN_URL)

        assert updated.reauthorization_url == LOGIN_URL
        assert error.reauthorization_url is None

    def test_existing_url_kept(self):
        error = ClassifiedError(
            kind=ErrorKind.AUTHENTICATION, message="x", reauthorization_url="https://first"
        )

        assert error.with_reauthorization_url(LOGIN_URL) is error

    def test_empty_url_ignored(self):
        error = ClassifiedError(kind=ErrorKind.AUTHENTICATION, message="x")

        assert error.with_reauthorization_url(None) is error


class TestOperationResult:
    def test_success_passes_value_through(self):
        payload = {"files": [1, 2]}

        result = OperationResult.success_result(payload)

        assert result.success is True
        assert result.value is payload
        assert result.error is None
        assert result.unwrap() is payload

    def test_success_with_none(self):
        result = OperationResult.success_result(None)

        assert result.success is True
        assert result.unwrap() is None

    def test_failure(self):
        error = ClassifiedError(kind=ErrorKind.NOT_FOUND, message="gone")

        result = OperationResult.failure_result(error)

        assert result.success is False
        assert result.error is error
        with pytest.raises(ValueError, match="NotFound: gone"):
            result.unwrap()
