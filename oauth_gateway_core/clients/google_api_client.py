"""
Google REST API client.

GoogleApiClient performs authenticated calls on behalf of one credential and
turns non-2xx responses into ExternalServiceError carrying the HTTP status and
the API's own error message. DriveFilesClient is the remote search operation
used by the fallback query engine.
"""

from typing import Any, Dict, List, Optional

import httpx

from ..config import OAuthConfig, get_config
from ..constants import DRIVE_SEARCH_FIELDS, GoogleEndpoint
from ..exceptions import ErrorCode, ExternalServiceError
from ..schemas.credential_schemas import Credential
from ..utils.logger import get_logger

SERVICE_NAME = "google_api"


class GoogleApiClient:
    """Thin bearer-token HTTP client for Google APIs."""

    def __init__(
        self,
        http_client: Optional[httpx.Client] = None,
        oauth_config: Optional[OAuthConfig] = None,
    ):
        oauth_config = oauth_config or get_config().oauth
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=oauth_config.http_timeout_seconds)
        self.logger = get_logger()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def request(
        self,
        credential: Credential,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
    ) -> Any:
        """
        Perform an authenticated request and return the decoded JSON body.

        Raises:
            ExternalServiceError: With the response status on HTTP errors, or
                503 / CONNECTION_ERROR when the request never completed
        """
        headers = {"Authorization": credential.authorization_header}

        try:
            response = self._client.request(method, url, params=params, json=json, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            detail = self._error_message(e.response)
            self.logger.warning(
                "Google API HTTP error",
                extra={
                    "principal_id": credential.principal_id,
                    "status_code": status,
                    "url": url,
                    "detail": detail[:500],
                },
            )
            raise ExternalServiceError(
                detail,
                service_name=SERVICE_NAME,
                status_code=status,
                cause=e,
                url=url,
            ) from e
        except httpx.RequestError as e:
            self.logger.error(
                "Google API request error",
                extra={"principal_id": credential.principal_id, "url": url, "error": str(e)},
            )
            raise ExternalServiceError(
                f"Request failed: {str(e)}",
                service_name=SERVICE_NAME,
                status_code=503,
                error_code=ErrorCode.CONNECTION_ERROR,
                cause=e,
                url=url,
            ) from e

        if not response.content:
            return None
        return response.json()

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        """Google wraps errors as {"error": {"code", "message", "status"}}."""
        try:
            body = response.json()
        except ValueError:
            return response.text[:500] or f"HTTP {response.status_code}"

        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str):
            return error
        return f"HTTP {response.status_code}"


class DriveFilesClient:
    """Drive file search; matches the remote search operation signature."""

    def __init__(self, api_client: Optional[GoogleApiClient] = None):
        self.api = api_client or GoogleApiClient()

    def search_files(self, credential: Credential, query: str, page_size: int) -> List[Dict[str, Any]]:
        """
        Run a Drive ``q`` query.

        Returns:
            File dicts with id, name, mimeType, modifiedTime and webViewLink
        """
        body = self.api.request(
            credential,
            "GET",
            GoogleEndpoint.DRIVE_FILES.value,
            params={"q": query, "pageSize": page_size, "fields": DRIVE_SEARCH_FIELDS},
        )
        return list((body or {}).get("files") or [])
