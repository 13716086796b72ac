"""Canonical error-code taxonomy for graph adapter flows."""

from __future__ import annotations

import uuid
from enum import Enum
from typing import Any, Optional


class ErrorCode(str, Enum):
    """Bounded canonical error codes for external contracts and observability."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    DB_CONNECTION_ERROR = "DB_CONNECTION_ERROR"
    DB_TIMEOUT = "DB_TIMEOUT"
    DB_QUERY_ERROR = "DB_QUERY_ERROR"
    PARSE_ERROR = "PARSE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


_CODE_GROUPS: dict[ErrorCode, str] = {
    ErrorCode.VALIDATION_ERROR: "CLIENT",
    ErrorCode.NOT_FOUND: "CLIENT",
    ErrorCode.DB_CONNECTION_ERROR: "DB",
    ErrorCode.DB_TIMEOUT: "DB",
    ErrorCode.DB_QUERY_ERROR: "DB",
    ErrorCode.PARSE_ERROR: "DB",
    ErrorCode.INTERNAL_ERROR: "INTERNAL",
}

_HTTP_STATUS: dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.DB_CONNECTION_ERROR: 503,
    ErrorCode.DB_TIMEOUT: 504,
    ErrorCode.DB_QUERY_ERROR: 500,
    ErrorCode.PARSE_ERROR: 500,
    ErrorCode.INTERNAL_ERROR: 500,
}

# Server-side failures never echo engine text in the top-level message.
_SAFE_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.DB_CONNECTION_ERROR: "Graph database is unavailable.",
    ErrorCode.DB_TIMEOUT: "Graph database request timed out.",
    ErrorCode.DB_QUERY_ERROR: "Graph query failed.",
    ErrorCode.PARSE_ERROR: "Graph data could not be decoded.",
    ErrorCode.INTERNAL_ERROR: "An internal error occurred.",
}


def parse_error_code(
    value: Any,
    *,
    fallback: ErrorCode = ErrorCode.INTERNAL_ERROR,
) -> ErrorCode:
    """Parse string-like values to `ErrorCode` with safe fallback."""
    if isinstance(value, ErrorCode):
        return value
    if value is None:
        return fallback
    try:
        return ErrorCode(str(value).strip())
    except ValueError:
        return fallback


def error_code_group(value: Any) -> str:
    """Return a stable coarse grouping for telemetry dimensions."""
    parsed = parse_error_code(value)
    return _CODE_GROUPS.get(parsed, "INTERNAL")


def error_code_for(exc: BaseException) -> ErrorCode:
    """Resolve the canonical code carried by an adapter exception."""
    return parse_error_code(getattr(exc, "error_code", None))


def http_status_for(exc: BaseException) -> int:
    """Map an exception to the HTTP status the web layer should answer with."""
    return _HTTP_STATUS[error_code_for(exc)]


def error_payload(exc: BaseException, correlation_id: Optional[str] = None) -> dict[str, Any]:
    """Build the JSON error body for an exception.

    Client errors (validation, not found) surface their own message. Server
    errors use a generic message and carry the underlying detail separately,
    tagged with a correlation id so logs and responses can be joined.
    """
    code = error_code_for(exc)
    if _HTTP_STATUS[code] < 500:
        message = str(exc) or code.value
    else:
        message = _SAFE_MESSAGES[code]

    detail = getattr(exc, "detail", None) or str(exc) or None
    return {
        "error": message,
        "code": code.value,
        "details": detail,
        "correlation_id": correlation_id or uuid.uuid4().hex,
    }
