"""
Simple encryption utilities for token storage.

Handles cross-database encryption (PostgreSQL pgcrypto, SQLite plaintext for testing).
"""

from typing import Optional

from sqlalchemy import text
from sqlalchemy.orm import Session


def encrypt_value(session: Session, value: str, principal_id: str, key_suffix: str = "") -> bytes:
    """
    Encrypt a value using database-specific encryption.

    Args:
        session: Database session
        value: Value to encrypt
        principal_id: Principal ID for key isolation
        key_suffix: Additional key suffix for different data types

    Returns:
        Encrypted bytes
    """
    if session.get_bind().dialect.name == "postgresql":
        encryption_key = f"{principal_id}_{key_suffix}" if key_suffix else principal_id

        return session.execute(
            text("SELECT pgp_sym_encrypt(:data, :key)"), {"data": value, "key": encryption_key}
        ).scalar()

    # SQLite for testing - return as-is
    return value.encode() if isinstance(value, str) else value


def decrypt_value(
    session: Session, encrypted_value: Optional[bytes], principal_id: str, key_suffix: str = ""
) -> Optional[str]:
    """
    Decrypt a value using database-specific decryption.

    Returns:
        Decrypted string or None
    """
    if not encrypted_value:
        return None

    if session.get_bind().dialect.name == "postgresql":
        encryption_key = f"{principal_id}_{key_suffix}" if key_suffix else principal_id

        return session.execute(
            text("SELECT pgp_sym_decrypt(:data, :key)"),
            {"data": encrypted_value, "key": encryption_key},
        ).scalar()

    if isinstance(encrypted_value, bytes):
        return encrypted_value.decode()
    return encrypted_value


def encrypt_token(session: Session, token: str, principal_id: str, token_kind: str) -> bytes:
    """Encrypt an OAuth token with principal and token-kind isolation."""
    return encrypt_value(session, token, principal_id, f"token_{token_kind}")


def decrypt_token(
    session: Session, encrypted: Optional[bytes], principal_id: str, token_kind: str
) -> Optional[str]:
    """Decrypt an OAuth token."""
    return decrypt_value(session, encrypted, principal_id, f"token_{token_kind}")
