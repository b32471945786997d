"""
Utility modules for the OAuth gateway core.

Only the dependency-free helpers are re-exported here. The persistence helpers
(credential_utils, crud_helpers, encryption_utils) depend on the db package,
which itself logs through this package, so import them by module path.
"""

# JSON helpers
from .json_utils import EnhancedJSONEncoder, dumps, loads

# Logging utilities
from .logger import (
    AzureQueueHandler,
    ContextAwareLogger,
    PrincipalContextFilter,
    configure_logging,
    get_logger,
    reset_logging,
)

__all__ = [
    "EnhancedJSONEncoder",
    "dumps",
    "loads",
    "AzureQueueHandler",
    "ContextAwareLogger",
    "PrincipalContextFilter",
    "configure_logging",
    "get_logger",
    "reset_logging",
]
