"""HTTP clients for the Google OAuth and REST endpoints."""

from .google_api_client import DriveFilesClient, GoogleApiClient
from .oauth_client import GoogleOAuthClient, build_login_url

__all__ = [
    "DriveFilesClient",
    "GoogleApiClient",
    "GoogleOAuthClient",
    "build_login_url",
]
