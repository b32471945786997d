"""
Credential lifecycle management.

Produces a usable credential for a principal: reads it resiliently, refreshes
it when expired, and persists the refreshed credential before handing it out.
Every outcome is an OperationResult; nothing here raises to the caller.
"""

from datetime import datetime
from typing import Callable, Optional, Protocol

from ..clients.oauth_client import build_login_url
from ..config import OAuthConfig, get_config
from ..db.db_base import utc_now
from ..schemas.credential_schemas import Credential, TokenGrant
from ..schemas.error_schemas import ClassifiedError, ErrorKind
from ..schemas.operation_result import OperationResult
from ..utils.logger import get_logger
from .credential_store import CredentialStore
from .error_classifier import ErrorClassifier
from .resilient_reader import ResilientReader


class TokenRefresher(Protocol):
    """Authorization service capable of a refresh-token grant."""

    def refresh(self, refresh_token: str) -> TokenGrant:
        ...


class CredentialLifecycleManager:
    """
    Service for obtaining valid credentials on behalf of principals.

    This service provides:
    - Expiry detection and refresh through a TokenRefresher
    - Persistence of refreshed and newly authorized credentials
    - Re-authorization hints (login URL) on Authentication failures
    - Explicit revocation
    """

    def __init__(
        self,
        store: CredentialStore,
        refresher: TokenRefresher,
        reader: Optional[ResilientReader] = None,
        classifier: Optional[ErrorClassifier] = None,
        oauth_config: Optional[OAuthConfig] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.refresher = refresher
        self.classifier = classifier or ErrorClassifier()
        self.reader = reader or ResilientReader(store, classifier=self.classifier)
        self.oauth_config = oauth_config or get_config().oauth
        self.clock = clock
        self.logger = get_logger()

    def build_login_url(self, principal_id: str) -> str:
        """Reauthorization hint for ``principal_id``."""
        return build_login_url(principal_id, self.oauth_config)

    def get_valid_credential(self, principal_id: str) -> OperationResult:
        """
        Return a non-expired credential for ``principal_id``.

        Failures:
            Temporary: the store could not be read (propagated from the reader)
            Authentication: no credential, no refresh token, or refresh rejected
            any kind: the refreshed credential could not be persisted
        """
        read_result = self.reader.read(principal_id)
        if not read_result.success:
            return read_result

        credential: Optional[Credential] = read_result.value
        if credential is None:
            self.logger.info("No credential stored", extra={"principal_id": principal_id})
            return self._authentication_failure(
                principal_id, f"No credential stored for principal '{principal_id}'"
            )

        now = self.clock()
        if not credential.is_expired(now):
            return OperationResult.success_result(credential)

        self.logger.info(
            "Access token expired",
            extra={"principal_id": principal_id, "expiry": credential.expiry.isoformat()},
        )
        return self._refresh(credential, now)

    def _refresh(self, credential: Credential, now: datetime) -> OperationResult:
        principal_id = credential.principal_id

        if not credential.can_refresh:
            return self._authentication_failure(
                principal_id,
                "Access token expired and no refresh token is available; "
                "re-authorization required",
            )

        try:
            grant = self.refresher.refresh(credential.refresh_token)
        except Exception as e:
            classified = self.classifier.classify(e)
            self.logger.warning(
                "Token refresh failed",
                extra={
                    "principal_id": principal_id,
                    "error_kind": classified.kind.value,
                    "status_code": classified.status_code,
                },
            )
            return self._authentication_failure(
                principal_id,
                f"Token refresh failed ({classified.message}); re-authorization required",
                status_code=classified.status_code,
                error_type=classified.error_type,
            )

        refreshed = grant.to_credential(principal_id, now, previous=credential)
        persisted = self._persist(refreshed)
        if not persisted.success:
            return persisted

        self.logger.info(
            "Access token refreshed",
            extra={
                "principal_id": principal_id,
                "expiry": refreshed.expiry.isoformat() if refreshed.expiry else None,
            },
        )
        return OperationResult.success_result(refreshed)

    def store_authorization(self, principal_id: str, grant: TokenGrant) -> OperationResult:
        """Persist the credential produced by a completed consent handshake."""
        credential = grant.to_credential(principal_id, self.clock())
        persisted = self._persist(credential)
        if not persisted.success:
            return persisted

        self.logger.info(
            "Authorization stored",
            extra={"principal_id": principal_id, "has_refresh_token": credential.can_refresh},
        )
        return OperationResult.success_result(credential)

    def revoke(self, principal_id: str) -> OperationResult:
        """Destroy the stored credential; the value is whether one existed."""
        try:
            deleted = self.store.delete(principal_id)
        except Exception as e:
            return OperationResult.failure_result(self.classifier.classify(e))
        return OperationResult.success_result(deleted)

    def _persist(self, credential: Credential) -> OperationResult:
        try:
            self.store.upsert(credential)
        except Exception as e:
            classified = self.classifier.classify(e)
            self.logger.error(
                "Failed to persist credential",
                extra={
                    "principal_id": credential.principal_id,
                    "error_kind": classified.kind.value,
                },
            )
            return OperationResult.failure_result(classified)
        return OperationResult.success_result(credential)

    def _authentication_failure(self, principal_id: str, message: str, **fields) -> OperationResult:
        return OperationResult.failure_result(
            ClassifiedError(
                kind=ErrorKind.AUTHENTICATION,
                message=message,
                reauthorization_url=self.build_login_url(principal_id),
                **fields,
            )
        )
