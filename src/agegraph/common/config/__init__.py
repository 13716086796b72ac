"""Configuration helpers."""

from agegraph.common.config.settings import DEFAULT_GRAPH_NAME, GraphSettings

__all__ = ["DEFAULT_GRAPH_NAME", "GraphSettings"]
