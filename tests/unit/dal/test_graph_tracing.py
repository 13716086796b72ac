import hashlib
from unittest.mock import patch

import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from agegraph.dal.tracing import trace_enabled, trace_graph_operation


def test_trace_enabled_defaults_true_when_otel_exporter_configured(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Graph tracing defaults to enabled when an OTEL exporter is configured."""
    monkeypatch.setenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://otel-collector:4317")
    monkeypatch.delenv("GRAPH_TRACE_QUERIES", raising=False)
    monkeypatch.delenv("OTEL_DISABLE_EXPORTER", raising=False)
    monkeypatch.delenv("OTEL_METRICS_EXPORTER", raising=False)

    assert trace_enabled() is True


def test_trace_enabled_respects_explicit_false_override(monkeypatch: pytest.MonkeyPatch) -> None:
    """Explicit GRAPH_TRACE_QUERIES=false disables tracing despite exporter config."""
    monkeypatch.setenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://otel-collector:4317")
    monkeypatch.setenv("GRAPH_TRACE_QUERIES", "false")

    assert trace_enabled() is False


def _provider():
    exporter = InMemorySpanExporter()
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    return provider, exporter


@pytest.mark.asyncio
async def test_trace_graph_operation_span(monkeypatch: pytest.MonkeyPatch) -> None:
    """A span carries the hashed statement, never the statement text."""
    monkeypatch.setenv("GRAPH_TRACE_QUERIES", "true")
    provider, exporter = _provider()

    async def _operation():
        return ["row"]

    sql = "SELECT 1"
    with patch("opentelemetry.trace.get_tracer") as mock_get_tracer:
        mock_get_tracer.side_effect = lambda name: provider.get_tracer(name)
        result = await trace_graph_operation("get_node", "plant", sql, _operation())

    assert result == ["row"]
    spans = exporter.get_finished_spans()
    assert len(spans) == 1
    span = spans[0]
    assert span.name == "graph.query.execute"
    assert span.attributes["graph.name"] == "plant"
    assert span.attributes["graph.operation"] == "get_node"
    assert span.attributes["db.system"] == "postgresql"
    assert span.attributes["db.statement_hash"] == hashlib.sha256(sql.encode("utf-8")).hexdigest()
    assert span.attributes["db.status"] == "ok"
    assert "db.statement" not in span.attributes


@pytest.mark.asyncio
async def test_trace_graph_operation_marks_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    """Failures are tagged and re-raised."""
    monkeypatch.setenv("GRAPH_TRACE_QUERIES", "true")
    provider, exporter = _provider()

    async def _operation():
        raise RuntimeError("engine down")

    with patch("opentelemetry.trace.get_tracer") as mock_get_tracer:
        mock_get_tracer.side_effect = lambda name: provider.get_tracer(name)
        with pytest.raises(RuntimeError):
            await trace_graph_operation("list_graph", "plant", "SELECT 1", _operation())

    span = exporter.get_finished_spans()[0]
    assert span.attributes["db.status"] == "error"


@pytest.mark.asyncio
async def test_trace_disabled_runs_operation(monkeypatch: pytest.MonkeyPatch) -> None:
    """With tracing off the operation still runs."""
    monkeypatch.setenv("GRAPH_TRACE_QUERIES", "false")

    async def _operation():
        return 3

    with patch("opentelemetry.trace.get_tracer") as mock_get_tracer:
        assert await trace_graph_operation("probe", "plant", None, _operation()) == 3

    mock_get_tracer.assert_not_called()
