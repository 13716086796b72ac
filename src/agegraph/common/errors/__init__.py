"""Common error taxonomy helpers."""

from agegraph.common.errors.error_codes import (
    ErrorCode,
    error_code_for,
    error_code_group,
    error_payload,
    http_status_for,
)
from agegraph.common.errors.exceptions import (
    GraphAdapterError,
    GraphConnectionError,
    GraphTimeoutError,
    NotFoundError,
    ParseError,
    ParseErrorKind,
    QueryExecutionError,
    QueryValidationError,
)

__all__ = [
    "ErrorCode",
    "GraphAdapterError",
    "GraphConnectionError",
    "GraphTimeoutError",
    "NotFoundError",
    "ParseError",
    "ParseErrorKind",
    "QueryExecutionError",
    "QueryValidationError",
    "error_code_for",
    "error_code_group",
    "error_payload",
    "http_status_for",
]
