"""Optional OTEL counters for graph adapter health."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from opentelemetry import metrics

from agegraph.common.config.env import get_env_bool

logger = logging.getLogger(__name__)


def is_otel_exporter_configured() -> bool:
    """Return True when OTEL exporter environment indicates external export is configured."""
    if get_env_bool("OTEL_DISABLE_EXPORTER", False):
        return False

    endpoint = (os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT") or "").strip()
    metrics_endpoint = (os.getenv("OTEL_EXPORTER_OTLP_METRICS_ENDPOINT") or "").strip()
    if (os.getenv("OTEL_METRICS_EXPORTER") or "").strip().lower() == "none":
        return False

    return bool(endpoint or metrics_endpoint)


def is_metrics_enabled(enabled_env_var: str) -> bool:
    """Resolve enablement from an explicit env override, else exporter presence."""
    raw = os.getenv(enabled_env_var)
    if raw is not None:
        try:
            return get_env_bool(enabled_env_var, False) is True
        except ValueError:
            logger.warning("Invalid %s value '%s'; metrics disabled.", enabled_env_var, raw)
            return False
    return is_otel_exporter_configured()


def _normalize_attributes(attributes: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    normalized: Dict[str, Any] = {}
    for key, value in (attributes or {}).items():
        if value is None:
            continue
        if isinstance(value, bool):
            normalized[key] = "true" if value else "false"
        elif isinstance(value, (str, int, float)):
            normalized[key] = value
        else:
            normalized[key] = str(value)
    return normalized


@dataclass
class OptionalMetrics:
    """Thin wrapper around OTEL counters with env-based enablement."""

    meter_name: str
    enabled_env_var: str
    _meter: Any = None
    _counters: dict[str, Any] = field(default_factory=dict)

    def _get_meter(self):
        if self._meter is None:
            self._meter = metrics.get_meter(self.meter_name)
        return self._meter

    def add_counter(
        self,
        name: str,
        value: int = 1,
        *,
        description: str = "",
        attributes: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Add to a monotonic counter when metrics are enabled."""
        if value <= 0 or not is_metrics_enabled(self.enabled_env_var):
            return
        try:
            counter = self._counters.get(name)
            if counter is None:
                counter = self._get_meter().create_counter(name=name, description=description)
                self._counters[name] = counter
            counter.add(int(value), _normalize_attributes(attributes))
        except Exception as exc:
            logger.debug("Counter metric emission failed for %s: %s", name, exc)


graph_metrics = OptionalMetrics(
    meter_name="agegraph",
    enabled_env_var="GRAPH_METRICS_ENABLED",
)

PARSE_FAILURES_COUNTER = "graph.parse_failures"
DUPLICATES_DROPPED_COUNTER = "graph.duplicates_dropped"


def record_parse_failures(operation: str, count: int = 1) -> None:
    """Count agtype rows an operation could not decode."""
    graph_metrics.add_counter(
        PARSE_FAILURES_COUNTER,
        count,
        description="Graph rows that could not be parsed",
        attributes={"graph.operation": operation},
    )


def record_duplicates_dropped(operation: str, entity_kind: str, count: int) -> None:
    """Count entities discarded because their id was already seen."""
    graph_metrics.add_counter(
        DUPLICATES_DROPPED_COUNTER,
        count,
        description="Duplicate graph entities discarded by id",
        attributes={"graph.operation": operation, "graph.entity": entity_kind},
    )
