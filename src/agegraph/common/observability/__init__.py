"""Observability helpers (OTEL metrics)."""

from agegraph.common.observability.metrics import (
    DUPLICATES_DROPPED_COUNTER,
    PARSE_FAILURES_COUNTER,
    OptionalMetrics,
    graph_metrics,
    is_metrics_enabled,
    record_duplicates_dropped,
    record_parse_failures,
)

__all__ = [
    "DUPLICATES_DROPPED_COUNTER",
    "PARSE_FAILURES_COUNTER",
    "OptionalMetrics",
    "graph_metrics",
    "is_metrics_enabled",
    "record_duplicates_dropped",
    "record_parse_failures",
]
