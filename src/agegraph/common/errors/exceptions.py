"""Exception taxonomy for the graph adapter.

Every failure the adapter surfaces is a `GraphAdapterError` carrying a
canonical `ErrorCode`, so callers can map it to a response without string
matching. Engine messages are kept on `detail` for diagnostics.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from agegraph.common.errors.error_codes import ErrorCode


class GraphAdapterError(Exception):
    """Base class for all graph adapter errors."""

    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, *, detail: Optional[str] = None) -> None:
        """Initialize with a message and optional underlying engine detail."""
        super().__init__(message)
        self.detail = detail


class GraphConnectionError(GraphAdapterError):
    """Pool exhausted, engine unreachable, or connection lost."""

    error_code = ErrorCode.DB_CONNECTION_ERROR


class GraphTimeoutError(GraphConnectionError, TimeoutError):
    """Operation deadline expired before the engine answered."""

    error_code = ErrorCode.DB_TIMEOUT

    def __init__(self, operation_name: str, timeout_seconds: Optional[float]) -> None:
        """Initialize timeout details with operation context."""
        self.operation_name = operation_name
        self.timeout_seconds = timeout_seconds
        timeout_display = "unknown"
        if isinstance(timeout_seconds, (int, float)):
            timeout_display = f"{float(timeout_seconds):g}"
        super().__init__(f"Graph {operation_name} timed out after {timeout_display}s.")


class QueryExecutionError(GraphAdapterError):
    """Engine rejected the query text."""

    error_code = ErrorCode.DB_QUERY_ERROR


class QueryValidationError(GraphAdapterError, ValueError):
    """Caller-supplied label, key, id or value cannot be rendered safely."""

    error_code = ErrorCode.VALIDATION_ERROR


class NotFoundError(GraphAdapterError):
    """No entity matched the requested id."""

    error_code = ErrorCode.NOT_FOUND

    def __init__(self, entity_type: str, entity_id: str, message: Optional[str] = None) -> None:
        """Initialize with the kind and id of the missing entity."""
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(message or f"{entity_type.capitalize()} {entity_id} not found.")


class ParseErrorKind(str, Enum):
    """Why a serialized entity could not be decoded."""

    EMPTY_INPUT = "empty_input"
    DECODE_FAILED = "decode_failed"
    NOT_AN_OBJECT = "not_an_object"
    MISSING_FIELD = "missing_field"
    WRONG_TYPE = "wrong_type"


class ParseError(GraphAdapterError):
    """A serialized entity failed to decode or validate.

    The parser returns instances of this class as values; only
    single-entity repository calls raise them.
    """

    error_code = ErrorCode.PARSE_ERROR

    def __init__(
        self,
        raw: object,
        kind: ParseErrorKind,
        reason: str,
        *,
        field: Optional[str] = None,
    ) -> None:
        """Initialize with the original raw input and a readable reason."""
        self.raw = raw
        self.kind = kind
        self.reason = reason
        self.field = field
        super().__init__(f"Could not parse graph entity: {reason}", detail=repr(raw))

    def __eq__(self, other: object) -> bool:
        """Compare parse failures by content."""
        if not isinstance(other, ParseError):
            return NotImplemented
        return (self.raw, self.kind, self.reason, self.field) == (
            other.raw,
            other.kind,
            other.reason,
            other.field,
        )

    def __hash__(self) -> int:
        """Hash consistently with equality."""
        return hash((repr(self.raw), self.kind, self.reason, self.field))
