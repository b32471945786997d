"""
Credential persistence functions built on the generic CRUD helpers.

Tokens are encrypted on the way in and decrypted on the way out; nothing
outside this module sees an OAuthCredentialRecord.
"""

from typing import Optional

from sqlalchemy.orm import Session

from ..db.db_base import as_utc
from ..db.db_credential_models import OAuthCredentialRecord
from ..schemas.credential_schemas import Credential
from .crud_helpers import delete_record, get_record, upsert_record
from .encryption_utils import decrypt_token, encrypt_token

ACCESS = "access"
REFRESH = "refresh"


def fetch_credential(session: Session, principal_id: str) -> Optional[Credential]:
    """
    Load the credential stored for ``principal_id``.

    Returns:
        The credential, or None when no record exists
    """
    record = get_record(session, OAuthCredentialRecord, {"principal_id": principal_id})
    if record is None:
        return None

    return Credential(
        principal_id=record.principal_id,
        access_token=decrypt_token(session, record.access_token, principal_id, ACCESS),
        refresh_token=decrypt_token(session, record.refresh_token, principal_id, REFRESH),
        expiry=as_utc(record.expiry),
        token_type=record.token_type or "Bearer",
        scope=record.scope,
    )


def upsert_credential(session: Session, credential: Credential) -> None:
    """Atomically create or overwrite the record keyed by the credential's principal."""
    principal_id = credential.principal_id
    refresh_token = None
    if credential.refresh_token:
        refresh_token = encrypt_token(session, credential.refresh_token, principal_id, REFRESH)

    upsert_record(
        session,
        OAuthCredentialRecord,
        {
            "principal_id": principal_id,
            "access_token": encrypt_token(session, credential.access_token, principal_id, ACCESS),
            "refresh_token": refresh_token,
            "token_type": credential.token_type,
            "scope": credential.scope,
            "expiry": credential.expiry,
        },
        conflict_columns=["principal_id"],
    )


def delete_credential(session: Session, principal_id: str) -> bool:
    """Delete the record for ``principal_id``; False if there was none."""
    return delete_record(session, OAuthCredentialRecord, {"principal_id": principal_id})
