"""Typed graph entities shared by the DAL and its callers."""

from agegraph.schema.graph import Edge, GraphView, Node

__all__ = ["Edge", "GraphView", "Node"]
