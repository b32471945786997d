"""
Result structure for gateway core operations.

Every fallible core call returns one of these instead of raising, so callers
branch on ``success`` and read either ``value`` or ``error``.
"""

from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from .error_schemas import ClassifiedError

T = TypeVar("T")


class OperationResult(BaseModel, Generic[T]):
    """Outcome of a core operation: a value, or exactly one ClassifiedError."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    success: bool = Field(description="Whether the operation succeeded")
    value: Optional[Any] = Field(default=None, description="Result payload on success")
    error: Optional[ClassifiedError] = Field(default=None, description="Failure on error")

    @classmethod
    def success_result(cls, value: Any = None) -> "OperationResult":
        """
        Create a successful result.

        Args:
            value: The operation's payload, passed through unmodified
        """
        return cls(success=True, value=value)

    @classmethod
    def failure_result(cls, error: ClassifiedError) -> "OperationResult":
        """
        Create a failed result.

        Args:
            error: The classified failure
        """
        return cls(success=False, error=error)

    def unwrap(self) -> Any:
        """Return the value, raising ValueError if this is a failure."""
        if not self.success:
            raise ValueError(f"Operation failed: {self.error.kind.value}: {self.error.message}")
        return self.value
