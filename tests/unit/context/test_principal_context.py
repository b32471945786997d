"""
Tests for PrincipalContext.

Covers set/get/clear, validation, nesting and thread isolation.
"""

import threading

import pytest

from oauth_gateway_core.context.principal_context import PrincipalContext, principal_context
from oauth_gateway_core.exceptions import ErrorCode, ValidationError


class TestPrincipalContextBasics:
    def test_set_and_get_current_principal(self):
        assert PrincipalContext.get_current_principal_id() is None

        PrincipalContext.set_current_principal("user-123")

        assert PrincipalContext.get_current_principal_id() == "user-123"

    def test_surrounding_whitespace_stripped(self):
        PrincipalContext.set_current_principal("  user-123 ")

        assert PrincipalContext.get_current_principal_id() == "user-123"

    @pytest.mark.parametrize("invalid_principal_id", ["", "   ", None, 123])
    def test_invalid_principal_rejected(self, invalid_principal_id):
        with pytest.raises(ValidationError) as exc_info:
            PrincipalContext.set_current_principal(invalid_principal_id)

        assert exc_info.value.error_code == ErrorCode.MISSING_REQUIRED
        assert exc_info.value.context["field"] == "principal_id"
        assert PrincipalContext.get_current_principal_id() is None

    def test_clear_is_idempotent(self):
        PrincipalContext.set_current_principal("user-123")

        PrincipalContext.clear_current_principal()
        PrincipalContext.clear_current_principal()

        assert PrincipalContext.get_current_principal_id() is None


class TestPrincipalContextManager:
    def test_scope_cleared_on_exit(self):
        with principal_context("user-123") as principal_id:
            assert principal_id == "user-123"
            assert PrincipalContext.get_current_principal_id() == "user-123"

        assert PrincipalContext.get_current_principal_id() is None

    def test_nested_scopes_restore_previous(self):
        with principal_context("outer"):
            with principal_context("inner"):
                assert PrincipalContext.get_current_principal_id() == "inner"
            assert PrincipalContext.get_current_principal_id() == "outer"

    def test_cleared_when_block_raises(self):
        with pytest.raises(RuntimeError):
            with principal_context("user-123"):
                raise RuntimeError("boom")

        assert PrincipalContext.get_current_principal_id() is None


class TestThreadIsolation:
    def test_principals_do_not_leak_between_threads(self):
        barrier = threading.Barrier(3)
        seen = {}

        def worker(principal_id):
            with principal_context(principal_id):
                barrier.wait(timeout=5)
                seen[principal_id] = PrincipalContext.get_current_principal_id()

        threads = [threading.Thread(target=worker, args=(f"user-{i}",)) for i in range(3)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert seen == {"user-0": "user-0", "user-1": "user-1", "user-2": "user-2"}
        assert PrincipalContext.get_current_principal_id() is None
