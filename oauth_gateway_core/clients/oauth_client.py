"""
Google OAuth 2.0 client.

Builds consent URLs and talks to the token endpoint for the two grants the
gateway needs: authorization-code exchange and refresh.
"""

from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError as PydanticValidationError

from ..config import OAuthConfig, get_config
from ..exceptions import (
    AuthenticationRequiredError,
    ErrorCode,
    ExternalServiceError,
    TokenRefreshError,
)
from ..schemas.credential_schemas import TokenGrant
from ..utils.logger import get_logger

SERVICE_NAME = "google_oauth"


def build_login_url(principal_id: str, oauth_config: Optional[OAuthConfig] = None) -> str:
    """
    URL a principal visits to (re-)authorize the gateway.

    Uses ``login_url`` when configured, otherwise the redirect URI with its
    ``/oauth/callback`` path swapped for ``/oauth/start``.
    """
    oauth_config = oauth_config or get_config().oauth
    base = oauth_config.login_url or oauth_config.redirect_uri.replace(
        "/oauth/callback", "/oauth/start"
    )
    separator = "&" if "?" in base else "?"
    return f"{base}{separator}{urlencode({'userId': principal_id})}"


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:500] or f"HTTP {response.status_code}"

    if isinstance(body, dict):
        error = body.get("error")
        description = body.get("error_description")
        if isinstance(error, dict):
            return str(error.get("message") or error)
        if error and description:
            return f"{error}: {description}"
        if error or description:
            return str(error or description)
    return f"HTTP {response.status_code}"


class GoogleOAuthClient:
    """Token endpoint client; implements the TokenRefresher protocol."""

    def __init__(
        self,
        oauth_config: Optional[OAuthConfig] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        """
        Initialize the client.

        Args:
            oauth_config: Client registration and endpoints (default: from config)
            http_client: httpx client to use; one is created (and owned) if omitted
        """
        self.config = oauth_config or get_config().oauth
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=self.config.http_timeout_seconds)
        self.logger = get_logger()

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def build_authorization_url(self, principal_id: str) -> str:
        """Consent URL requesting offline access; ``state`` carries the principal."""
        params = {
            "client_id": self.config.client_id,
            "redirect_uri": self.config.redirect_uri,
            "response_type": "code",
            "scope": " ".join(self.config.scopes),
            "access_type": "offline",
            "state": principal_id,
        }
        return f"{self.config.authorize_url}?{urlencode(params)}"

    def build_login_url(self, principal_id: str) -> str:
        return build_login_url(principal_id, self.config)

    def exchange_code(self, code: str) -> TokenGrant:
        """
        Exchange an authorization code for tokens.

        Raises:
            AuthenticationRequiredError: If the provider rejects the code
            ExternalServiceError: On transport failure or a provider-side error
        """
        try:
            return self._request_token(
                {
                    "grant_type": "authorization_code",
                    "code": code,
                    "redirect_uri": self.config.redirect_uri,
                },
                operation="exchange_code",
            )
        except httpx.HTTPStatusError as e:
            raise AuthenticationRequiredError(
                f"Authorization code exchange rejected: {_error_detail(e.response)}",
                cause=e,
                http_status=e.response.status_code,
            ) from e

    def refresh(self, refresh_token: str) -> TokenGrant:
        """
        Exchange a refresh token for a new access token.

        Raises:
            TokenRefreshError: If the provider rejects the refresh token
            ExternalServiceError: On transport failure or a provider-side error
        """
        try:
            return self._request_token(
                {"grant_type": "refresh_token", "refresh_token": refresh_token},
                operation="refresh",
            )
        except httpx.HTTPStatusError as e:
            raise TokenRefreshError(
                f"Token refresh rejected: {_error_detail(e.response)}",
                cause=e,
                http_status=e.response.status_code,
            ) from e

    def _request_token(self, data: Dict[str, Any], operation: str) -> TokenGrant:
        """POST to the token endpoint; 4xx responses surface as httpx.HTTPStatusError."""
        payload = {
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
            **data,
        }

        try:
            response = self._client.post(self.config.token_url, data=payload)
        except httpx.RequestError as e:
            self.logger.error(
                "Token endpoint request error",
                extra={"operation": operation, "error": str(e)},
            )
            raise ExternalServiceError(
                f"Token endpoint unreachable: {str(e)}",
                service_name=SERVICE_NAME,
                status_code=503,
                error_code=ErrorCode.CONNECTION_ERROR,
                cause=e,
                operation=operation,
            ) from e

        if response.status_code >= 500:
            raise ExternalServiceError(
                f"Token endpoint error: {_error_detail(response)}",
                service_name=SERVICE_NAME,
                status_code=response.status_code,
                operation=operation,
            )

        if response.is_error:
            self.logger.warning(
                "Token endpoint rejected request",
                extra={"operation": operation, "status_code": response.status_code},
            )
        response.raise_for_status()

        try:
            grant = TokenGrant.model_validate(response.json())
        except (ValueError, PydanticValidationError) as e:
            raise ExternalServiceError(
                "Malformed token endpoint response",
                service_name=SERVICE_NAME,
                status_code=502,
                error_code=ErrorCode.INTEGRATION_ERROR,
                cause=e,
                operation=operation,
            ) from e

        self.logger.info(
            "Token endpoint call succeeded",
            extra={"operation": operation, "expires_in": grant.expires_in},
        )
        return grant
