"""Pydantic schemas for credentials, classified errors, results and query plans."""

from .credential_schemas import Credential, TokenGrant
from .error_schemas import RETRYABLE_KINDS, ClassifiedError, ErrorKind
from .operation_result import OperationResult
from .query_plan_schemas import CONTAINS_PATTERN, QueryPlan, QueryStep

__all__ = [
    "Credential",
    "TokenGrant",
    "ClassifiedError",
    "ErrorKind",
    "RETRYABLE_KINDS",
    "OperationResult",
    "QueryPlan",
    "QueryStep",
    "CONTAINS_PATTERN",
]
