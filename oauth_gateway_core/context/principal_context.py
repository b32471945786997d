"""
Principal context management for the OAuth gateway.

Holds the principal a request is being served for in thread-local storage so
log records emitted anywhere below the orchestrator can be stamped with it.
The context lives only as long as the request that set it.
"""

import threading
from contextlib import contextmanager
from typing import Generator, Optional

from ..exceptions import ErrorCode, ValidationError


class PrincipalContext:
    """Thread-local holder for the principal of the current request."""

    _thread_local = threading.local()

    @classmethod
    def set_current_principal(cls, principal_id: str) -> None:
        """
        Set the principal for the current execution context.

        Raises:
            ValidationError: If principal_id is empty or not a string
        """
        if not principal_id or not isinstance(principal_id, str) or not principal_id.strip():
            raise ValidationError(
                "principal_id must be a non-empty string",
                error_code=ErrorCode.MISSING_REQUIRED,
                field="principal_id",
                value=repr(principal_id),
            )
        cls._thread_local.principal_id = principal_id.strip()

    @classmethod
    def get_current_principal_id(cls) -> Optional[str]:
        """Get the principal of the current execution context, if any."""
        return getattr(cls._thread_local, "principal_id", None)

    @classmethod
    def clear_current_principal(cls) -> None:
        """Clear the principal from the current execution context."""
        if hasattr(cls._thread_local, "principal_id"):
            delattr(cls._thread_local, "principal_id")


@contextmanager
def principal_context(principal_id: str) -> Generator[str, None, None]:
    """
    Scope the current thread to ``principal_id`` for the duration of a block.

    The previous principal (if any) is restored on exit, so nested scopes
    behave predictably.
    """
    previous = PrincipalContext.get_current_principal_id()
    PrincipalContext.set_current_principal(principal_id)
    try:
        yield principal_id
    finally:
        if previous:
            PrincipalContext.set_current_principal(previous)
        else:
            PrincipalContext.clear_current_principal()
