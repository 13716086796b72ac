from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from agegraph.common.config.env import get_env_bool
from agegraph.common.errors import (
    GraphAdapterError,
    GraphConnectionError,
    GraphTimeoutError,
    QueryExecutionError,
)

logger = logging.getLogger(__name__)

RETRYABLE_CATEGORIES = frozenset({"timeout", "connectivity", "deadlock", "serialization"})


@dataclass(frozen=True)
class ErrorClassification:
    """Driver-error classification with retryability."""

    category: str
    is_retryable: bool


def classify_error(exc: BaseException) -> str:
    """Classify a driver error into a provider-agnostic category."""
    return classify_error_info(exc).category


def classify_error_info(exc: BaseException) -> ErrorClassification:
    """Classify an asyncpg/OS/timeout error by type, class name and message."""
    message = str(exc).lower()
    class_name = exc.__class__.__name__.lower()
    module_name = exc.__class__.__module__.lower()

    if isinstance(exc, (TimeoutError, asyncio.TimeoutError)) or _matches_any(
        message, ("timeout", "timed out", "canceling statement")
    ):
        return _classification("timeout")
    if isinstance(exc, (ConnectionError, OSError)) or _matches_any(
        message,
        (
            "could not connect",
            "connection refused",
            "connection reset",
            "connection was closed",
            "too many connections",
            "pool is closed",
        ),
    ):
        return _classification("connectivity")
    if _matches_any(
        message, ("permission denied", "password authentication failed", "not authorized")
    ):
        return _classification("auth")
    if _matches_any(message, ("syntax error", "parse error", "unhandled cypher")):
        return _classification("syntax")
    if _matches_any(message, ("does not exist", "undefined function")):
        return _classification("schema")
    if _matches_any(message, ("deadlock detected",)):
        return _classification("deadlock")
    if _matches_any(message, ("serialization failure", "could not serialize")):
        return _classification("serialization")

    if module_name.startswith("asyncpg"):
        if "syntax" in class_name:
            return _classification("syntax")
        if "invalidauthorization" in class_name or "invalidpassword" in class_name:
            return _classification("auth")
        if "connection" in class_name or "interface" in class_name:
            return _classification("connectivity")

    return _classification("unknown")


def translate_driver_error(
    exc: BaseException, operation: str, timeout_seconds: Optional[float] = None
) -> GraphAdapterError:
    """Convert a driver exception into the adapter taxonomy.

    The engine message is preserved on ``detail``; callers should chain the
    original with ``raise ... from exc``.
    """
    if isinstance(exc, GraphAdapterError):
        return exc

    category = classify_error(exc)
    detail = str(exc) or exc.__class__.__name__
    if get_env_bool("GRAPH_CLASSIFIED_ERROR_LOGGING", True):
        logger.error(
            "graph_error_classified",
            extra={
                "event": "graph_error_classified",
                "operation": operation,
                "error_category": category,
                "error_type": exc.__class__.__name__,
                "is_retryable": category in RETRYABLE_CATEGORIES,
            },
        )

    if category == "timeout":
        error: GraphAdapterError = GraphTimeoutError(operation, timeout_seconds)
        error.detail = detail
        return error
    if category == "connectivity":
        return GraphConnectionError(f"Graph {operation} failed: connection error.", detail=detail)
    return QueryExecutionError(f"Graph {operation} failed: {category} error.", detail=detail)


def _matches_any(text: str, fragments: tuple[str, ...]) -> bool:
    return any(fragment in text for fragment in fragments)


def _classification(category: str) -> ErrorClassification:
    return ErrorClassification(category=category, is_retryable=category in RETRYABLE_CATEGORIES)
