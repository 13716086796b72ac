import hashlib
from typing import Awaitable, Optional, TypeVar

from agegraph.common.observability.metrics import is_metrics_enabled

T = TypeVar("T")


def trace_enabled() -> bool:
    """Return True when graph query tracing is enabled or OTEL exporter defaults apply."""
    return is_metrics_enabled("GRAPH_TRACE_QUERIES")


def _hash_statement(sql: str) -> str:
    return hashlib.sha256(sql.encode("utf-8")).hexdigest()


async def trace_graph_operation(
    operation_name: str,
    graph_name: str,
    sql: Optional[str],
    operation: Awaitable[T],
) -> T:
    """Trace one engine round-trip with OTEL when enabled.

    Only a hash of the statement is attached; property values never reach
    span attributes.
    """
    if not trace_enabled():
        return await operation

    from opentelemetry import trace

    tracer = trace.get_tracer("agegraph")
    with tracer.start_as_current_span("graph.query.execute") as span:
        span.set_attribute("db.system", "postgresql")
        span.set_attribute("graph.name", graph_name)
        span.set_attribute("graph.operation", operation_name)
        if sql:
            span.set_attribute("db.statement_hash", _hash_statement(sql))
        try:
            result = await operation
            span.set_attribute("db.status", "ok")
            return result
        except Exception:
            span.set_attribute("db.status", "error")
            raise
