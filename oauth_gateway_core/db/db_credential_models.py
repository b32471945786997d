"""
Credential store table.

Just the data structure - no business logic or class methods.
One row per principal; rows are written only through atomic upserts.
"""

from sqlalchemy import Column, DateTime, String, Text

from .db_base import EncryptedBinary, TimestampMixin
from .db_config import Base


class OAuthCredentialRecord(Base, TimestampMixin):
    """Persisted OAuth grant for one principal."""

    __tablename__ = "oauth_credentials"

    principal_id = Column(String(255), primary_key=True)

    # Encrypted storage
    access_token = Column(EncryptedBinary, nullable=False)
    refresh_token = Column(EncryptedBinary, nullable=True)

    token_type = Column(String(20), nullable=False, default="Bearer")
    scope = Column(Text, nullable=True)

    # Absent expiry means the token is treated as valid
    expiry = Column(DateTime(timezone=True), nullable=True)
