"""
Classified error model.

Every failure that leaves the gateway core is one of these: a single kind
from a fixed taxonomy plus a non-empty message.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ErrorKind(str, Enum):
    """Semantic failure categories surfaced to callers."""

    AUTHENTICATION = "Authentication"
    NOT_FOUND = "NotFound"
    PERMISSION_DENIED = "PermissionDenied"
    TEMPORARY = "Temporary"
    RATE_LIMITED = "RateLimited"
    UNKNOWN = "Unknown"


RETRYABLE_KINDS = frozenset({ErrorKind.TEMPORARY, ErrorKind.RATE_LIMITED})

DEFAULT_MESSAGES = {
    ErrorKind.AUTHENTICATION: "Authentication required",
    ErrorKind.NOT_FOUND: "Resource not found",
    ErrorKind.PERMISSION_DENIED: "Permission denied",
    ErrorKind.TEMPORARY: "Service temporarily unavailable",
    ErrorKind.RATE_LIMITED: "Rate limit exceeded",
    ErrorKind.UNKNOWN: "Unknown error",
}


class ClassifiedError(BaseModel):
    """A failure tagged with exactly one ErrorKind."""

    model_config = ConfigDict(frozen=True)

    kind: ErrorKind
    message: str = Field(..., min_length=1)
    status_code: Optional[int] = Field(None, description="Remote HTTP status, when one was seen")
    error_type: Optional[str] = Field(None, description="Type name of the raw error")
    reauthorization_url: Optional[str] = None
    retry_after_seconds: Optional[float] = Field(None, ge=0)

    @field_validator("message", mode="before")
    @classmethod
    def ensure_message(cls, v, info):
        if v is None or not str(v).strip():
            kind = info.data.get("kind", ErrorKind.UNKNOWN)
            return DEFAULT_MESSAGES.get(kind, DEFAULT_MESSAGES[ErrorKind.UNKNOWN])
        return str(v)

    @property
    def retryable(self) -> bool:
        return self.kind in RETRYABLE_KINDS

    @property
    def user_message(self) -> str:
        """Kind-specific, actionable rendering for the calling agent."""
        detail = self.message.rstrip(". ") or self.message
        if self.kind == ErrorKind.AUTHENTICATION:
            text = f"Authentication required: {detail}."
            if self.reauthorization_url:
                text += f" Please visit {self.reauthorization_url} to re-authorize."
            else:
                text += " Please re-authorize this user."
            return text
        if self.kind == ErrorKind.NOT_FOUND:
            return f"Not found: {detail}. Check the identifier or query and try again."
        if self.kind == ErrorKind.PERMISSION_DENIED:
            return (
                f"Permission denied: {detail}. The user may need to grant "
                f"additional access or request access from the resource owner."
            )
        if self.kind == ErrorKind.RATE_LIMITED:
            wait = (
                f" Wait {self.retry_after_seconds:g} seconds before retrying."
                if self.retry_after_seconds is not None
                else " Wait a moment before retrying."
            )
            return f"Rate limited: {detail}.{wait}"
        if self.kind == ErrorKind.TEMPORARY:
            return f"Temporarily unavailable: {detail}. Retry shortly."
        return f"Error: {self.message}"

    def with_reauthorization_url(self, url: Optional[str]) -> "ClassifiedError":
        """Copy of this error carrying the login URL (kept if already set)."""
        if not url or self.reauthorization_url:
            return self
        return self.model_copy(update={"reauthorization_url": url})
