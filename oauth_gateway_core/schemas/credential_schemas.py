"""
Pydantic schemas for OAuth credentials.

Credential is the transient, in-request copy of a principal's grant.
TokenGrant is the token endpoint's answer to a code exchange or refresh.
"""

from datetime import datetime, timedelta
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..db.db_base import as_utc


class Credential(BaseModel):
    """One principal's authorization grant."""

    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    principal_id: str = Field(..., min_length=1, description="Stable principal identifier")
    access_token: str = Field(..., min_length=1, description="Short-lived access token")
    refresh_token: Optional[str] = Field(None, description="Long-lived refresh token")
    expiry: Optional[datetime] = Field(None, description="Absolute expiry; None means valid")
    token_type: str = Field(default="Bearer", description="Token type")
    scope: Optional[str] = Field(None, description="Space-delimited granted scopes")

    @field_validator("expiry")
    @classmethod
    def normalize_expiry(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Store expiry as an aware UTC datetime."""
        return as_utc(v)

    @field_validator("refresh_token", "scope")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    def is_expired(self, now: datetime) -> bool:
        """True only when an expiry is recorded and lies strictly before ``now``."""
        if self.expiry is None:
            return False
        return self.expiry < as_utc(now)

    @property
    def can_refresh(self) -> bool:
        return bool(self.refresh_token)

    @property
    def authorization_header(self) -> str:
        return f"{self.token_type} {self.access_token}"

    def __repr__(self) -> str:
        """Representation with tokens masked."""
        return (
            f"Credential(principal_id='{self.principal_id}', access_token='***', "
            f"refresh_token={'***' if self.refresh_token else None}, "
            f"expiry={self.expiry!r})"
        )

    __str__ = __repr__


class TokenGrant(BaseModel):
    """Token endpoint response."""

    model_config = ConfigDict(extra="ignore")

    access_token: str = Field(..., min_length=1)
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = Field(None, ge=0, description="Lifetime in seconds")
    scope: Optional[str] = None
    token_type: str = Field(default="Bearer")

    def to_credential(
        self,
        principal_id: str,
        now: datetime,
        previous: Optional[Credential] = None,
    ) -> Credential:
        """
        Build the credential this grant produces for ``principal_id``.

        Providers usually omit the refresh token on a refresh response; the
        previous credential's refresh token (and scope) then carry over.
        """
        expiry = None
        if self.expires_in is not None:
            expiry = as_utc(now) + timedelta(seconds=self.expires_in)

        refresh_token = self.refresh_token
        scope = self.scope
        if previous is not None:
            refresh_token = refresh_token or previous.refresh_token
            scope = scope or previous.scope

        return Credential(
            principal_id=principal_id,
            access_token=self.access_token,
            refresh_token=refresh_token,
            expiry=expiry,
            token_type=self.token_type or "Bearer",
            scope=scope,
        )

    def __repr__(self) -> str:
        return (
            f"TokenGrant(access_token='***', "
            f"refresh_token={'***' if self.refresh_token else None}, "
            f"expires_in={self.expires_in})"
        )

    __str__ = __repr__
