"""Request-scoped context helpers."""

from .principal_context import PrincipalContext, principal_context

__all__ = [
    "PrincipalContext",
    "principal_context",
]
