"""
Constants and enums for the OAuth gateway core.

This module centralizes magic strings and defaults used throughout the
package so configuration, clients and services agree on them.
"""

from enum import Enum


class QueueName(str, Enum):
    """Standard queue names used by the gateway."""

    LOGS = "logs-queue"


class LogLevel(str, Enum):
    """Standard logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class EnvironmentVariable(str, Enum):
    """Standard environment variable names."""

    AZURE_STORAGE_CONNECTION = "AzureWebJobsStorage"
    DATABASE_URL = "DATABASE_URL"
    APP_ENV = "APP_ENV"
    LOG_LEVEL = "LOG_LEVEL"
    DEBUG = "DEBUG"
    ENABLE_LOGS_QUEUE = "ENABLE_LOGS_QUEUE"
    GOOGLE_CLIENT_ID = "GOOGLE_CLIENT_ID"
    GOOGLE_CLIENT_SECRET = "GOOGLE_CLIENT_SECRET"
    GOOGLE_REDIRECT_URI = "GOOGLE_REDIRECT_URI"
    OAUTH_LOGIN_URL = "OAUTH_LOGIN_URL"
    CREDENTIAL_READ_MAX_ATTEMPTS = "CREDENTIAL_READ_MAX_ATTEMPTS"
    CREDENTIAL_READ_BASE_DELAY = "CREDENTIAL_READ_BASE_DELAY"


class LogContextKey(str, Enum):
    """Standard keys for logging context."""

    PRINCIPAL_ID = "principal_id"
    OPERATION = "operation"
    ATTEMPT = "attempt"
    STRATEGY = "strategy"
    ERROR_KIND = "error_kind"


class GoogleEndpoint(str, Enum):
    """Google OAuth and Workspace API endpoints."""

    AUTHORIZE = "https://accounts.google.com/o/oauth2/v2/auth"
    TOKEN = "https://oauth2.googleapis.com/token"
    DRIVE_FILES = "https://www.googleapis.com/drive/v3/files"


class DriveMimeType(str, Enum):
    """Drive MIME types used to narrow a file search to one subtype."""

    DOCUMENT = "application/vnd.google-apps.document"
    SPREADSHEET = "application/vnd.google-apps.spreadsheet"


# Scopes requested for every principal, covering mail, files, calendar, docs and sheets
WORKSPACE_SCOPES = [
    "https://www.googleapis.com/auth/gmail.readonly",
    "https://www.googleapis.com/auth/gmail.send",
    "https://www.googleapis.com/auth/gmail.modify",
    "https://www.googleapis.com/auth/drive",
    "https://www.googleapis.com/auth/drive.file",
    "https://www.googleapis.com/auth/calendar",
    "https://www.googleapis.com/auth/calendar.events",
    "https://www.googleapis.com/auth/documents",
    "https://www.googleapis.com/auth/spreadsheets",
]

DRIVE_SEARCH_FIELDS = "files(id, name, mimeType, modifiedTime, webViewLink)"


class Limits:
    """System limits and thresholds."""

    MAX_READ_ATTEMPTS = 3
    DEFAULT_MAX_RESULTS = 10
    PREFIX_MIN_LENGTH = 4
    PREFIX_RATIO = 0.6
    PREFIX_RECALL_MULTIPLIER = 3
    MAX_ERROR_MESSAGE_LENGTH = 500


class Timeouts:
    """Timeout values in seconds."""

    CREDENTIAL_READ_BASE_DELAY = 1.0
    EXTERNAL_API_CALL = 30.0
