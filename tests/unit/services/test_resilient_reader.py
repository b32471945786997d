"""Unit tests for ResilientReader."""

import pytest

from oauth_gateway_core.exceptions import (
    BaseError,
    CredentialNotFoundError,
    CredentialStoreUnavailableError,
    ErrorCode,
    ExternalServiceError,
)
from oauth_gateway_core.schemas.credential_schemas import Credential
from oauth_gateway_core.schemas.error_schemas import ErrorKind
from oauth_gateway_core.services.resilient_reader import ResilientReader


class TestRead:
    def test_returns_stored_credential(self, reader, memory_store, valid_credential, recording_sleep):
        memory_store.credentials[valid_credential.principal_id] = valid_credential

        result = reader.read(valid_credential.principal_id)

        assert result.success is True
        assert result.value == valid_credential
        assert memory_store.fetch_calls == 1
        assert recording_sleep.delays == []

    def test_absent_is_success_with_none(self, reader, memory_store, recording_sleep):
        result = reader.read("nobody")

        assert result.success is True
        assert result.value is None
        assert memory_store.fetch_calls == 1
        assert recording_sleep.delays == []

    def test_not_found_error_is_absent_and_not_retried(self, reader, memory_store, recording_sleep):
        memory_store.fetch_failures = [CredentialNotFoundError()]

        result = reader.read("nobody")

        assert result.success is True
        assert result.value is None
        assert memory_store.fetch_calls == 1
        assert recording_sleep.delays == []


class TestRetries:
    def test_transient_failure_then_success(self, reader, memory_store, valid_credential, recording_sleep):
        memory_store.credentials[valid_credential.principal_id] = valid_credential
        memory_store.fetch_failures = [ConnectionError("connection refused")]

        result = reader.read(valid_credential.principal_id)

        assert result.success is True
        assert result.value == valid_credential
        assert memory_store.fetch_calls == 2
        assert recording_sleep.delays == [1.0]

    def test_exhausted_retries_fail_temporary(self, reader, memory_store, recording_sleep):
        memory_store.fetch_failures = [
            CredentialStoreUnavailableError("connection refused") for _ in range(3)
        ]

        result = reader.read("user-123")

        assert result.success is False
        assert result.error.kind == ErrorKind.TEMPORARY
        assert result.error.retryable is True
        assert "3 attempts" in result.error.message
        assert memory_store.fetch_calls == 3

    def test_backoff_delays_strictly_increase_without_final_sleep(self, reader, memory_store, recording_sleep):
        memory_store.fetch_failures = [TimeoutError("timed out") for _ in range(3)]

        reader.read("user-123")

        assert recording_sleep.delays == [1.0, 2.0]
        assert all(a < b for a, b in zip(recording_sleep.delays, recording_sleep.delays[1:]))

    def test_unknown_failures_are_retried_too(self, reader, memory_store, recording_sleep):
        memory_store.fetch_failures = [ValueError("corrupt row") for _ in range(3)]

        result = reader.read("user-123")

        assert result.success is False
        assert result.error.kind == ErrorKind.TEMPORARY
        assert "corrupt row" in result.error.message
        assert memory_store.fetch_calls == 3

    def test_custom_attempts_and_delay(self, memory_store, recording_sleep):
        reader = ResilientReader(memory_store, max_attempts=4, base_delay=0.5, sleep=recording_sleep)
        memory_store.fetch_failures = [ConnectionError("reset") for _ in range(4)]

        reader.read("user-123")

        assert memory_store.fetch_calls == 4
        assert recording_sleep.delays == [0.5, 1.0, 1.5]

    def test_defaults_come_from_config(self, memory_store):
        reader = ResilientReader(memory_store)

        assert reader.max_attempts == 3
        assert reader.base_delay == 1.0

    def test_invalid_attempts_rejected(self, memory_store):
        with pytest.raises(ValueError):
            ResilientReader(memory_store, max_attempts=0)


class TestAbsenceMarkers:
    @pytest.mark.parametrize(
        "error",
        [
            ConnectionError("credential host not found"),
            OSError("No such file or directory: /var/run/credstore.sock"),
            ExternalServiceError("Not Found", service_name="credential_store", status_code=404),
        ],
    )
    def test_not_found_wording_without_marker_is_retried(self, reader, memory_store, recording_sleep, error):
        memory_store.fetch_failures = [error] * 3

        result = reader.read("user-123")

        assert result.success is False
        assert result.error.kind == ErrorKind.TEMPORARY
        assert memory_store.fetch_calls == 3
        assert recording_sleep.delays == [1.0, 2.0]

    def test_base_error_with_not_found_code_is_absent(self, reader, memory_store):
        memory_store.fetch_failures = [BaseError("no row", error_code=ErrorCode.NOT_FOUND, status_code=404)]

        result = reader.read("user-123")

        assert result.success is True
        assert result.value is None
        assert memory_store.fetch_calls == 1


class TestRecordShape:
    def test_mapping_is_coerced_to_credential(self, reader, memory_store):
        memory_store.credentials["user-123"] = {"principal_id": "user-123", "access_token": "from-dict"}

        result = reader.read("user-123")

        assert isinstance(result.value, Credential)
        assert result.value.access_token == "from-dict"

    @pytest.mark.parametrize(
        "record",
        [
            {"access_token": "x"},
            "access-token-string",
            42,
        ],
    )
    def test_unexpected_shape_is_retried_then_temporary(self, reader, memory_store, recording_sleep, record):
        memory_store.credentials["user-123"] = record

        result = reader.read("user-123")

        assert result.success is False
        assert result.error.kind == ErrorKind.TEMPORARY
        assert memory_store.fetch_calls == 3
        assert recording_sleep.delays == [1.0, 2.0]

    def test_credential_of_other_principal_is_rejected(self, reader, memory_store, valid_credential):
        memory_store.credentials["someone-else"] = valid_credential

        result = reader.read("someone-else")

        assert result.success is False
        assert result.error.kind == ErrorKind.TEMPORARY
