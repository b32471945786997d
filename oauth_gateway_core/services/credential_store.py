"""
Credential store: the durable, per-principal home of OAuth credentials.

CredentialStore is the contract the lifecycle manager depends on. The
SQLAlchemy implementation keeps exactly one row per principal and writes it
with a single atomic upsert, so a reader sees either the old credential or
the new one, never a mix.
"""

from typing import Optional, Protocol, runtime_checkable

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from ..exceptions import CredentialStoreUnavailableError
from ..schemas.credential_schemas import Credential
from ..utils.credential_utils import delete_credential, fetch_credential, upsert_credential
from ..utils.logger import get_logger


@runtime_checkable
class CredentialStore(Protocol):
    """Durable key-value store of credentials keyed by principal_id."""

    def fetch(self, principal_id: str) -> Optional[Credential]:
        """Return the credential, None if absent; raise if the store is unavailable."""
        ...

    def upsert(self, credential: Credential) -> None:
        """Atomically create or overwrite the credential of ``credential.principal_id``."""
        ...

    def delete(self, principal_id: str) -> bool:
        """Destroy the credential; False if there was none."""
        ...


class SqlCredentialStore:
    """CredentialStore backed by the ``oauth_credentials`` table."""

    def __init__(self, session: Session):
        """Initialize with SQLAlchemy session."""
        self.session = session
        self.logger = get_logger()

    def fetch(self, principal_id: str) -> Optional[Credential]:
        try:
            credential = fetch_credential(self.session, principal_id)
        except OperationalError as e:
            self.session.rollback()
            raise CredentialStoreUnavailableError(
                f"Credential store unavailable: {str(e)}",
                cause=e,
                principal_id=principal_id,
            ) from e

        self.logger.debug(
            "Credential fetched",
            extra={"principal_id": principal_id, "found": credential is not None},
        )
        return credential

    def upsert(self, credential: Credential) -> None:
        upsert_credential(self.session, credential)
        self.logger.info(
            "Credential stored",
            extra={
                "principal_id": credential.principal_id,
                "expiry": credential.expiry.isoformat() if credential.expiry else None,
                "has_refresh_token": credential.can_refresh,
            },
        )

    def delete(self, principal_id: str) -> bool:
        deleted = delete_credential(self.session, principal_id)
        self.logger.info(
            "Credential deleted" if deleted else "No credential to delete",
            extra={"principal_id": principal_id},
        )
        return deleted
