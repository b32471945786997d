"""
SQLAlchemy models and database plumbing for the credential store.
"""

from .db_base import (
    EncryptedBinary,
    TimestampMixin,
    as_utc,
    utc_now,
)
from .db_config import (
    Base,
    DatabaseConfig,
    DatabaseManager,
    get_development_config,
    get_production_config,
    import_all_models,
    initialize_db,
)
from .db_credential_models import OAuthCredentialRecord

__all__ = [
    # Base definitions
    "Base",
    "EncryptedBinary",
    "TimestampMixin",
    "as_utc",
    "utc_now",
    # Configuration
    "DatabaseConfig",
    "DatabaseManager",
    "get_development_config",
    "get_production_config",
    "import_all_models",
    "initialize_db",
    # Models
    "OAuthCredentialRecord",
]
