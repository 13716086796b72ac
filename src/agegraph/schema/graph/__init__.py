"""Graph model definitions."""

from .data import GraphView
from .edge import Edge
from .node import CANONICAL_ID_PATTERN, GraphEntity, Node, PropertyValue
from .vis import VisEdge, VisNode, to_vis_edge, to_vis_graph, to_vis_node

__all__ = [
    "CANONICAL_ID_PATTERN",
    "Edge",
    "GraphEntity",
    "GraphView",
    "Node",
    "PropertyValue",
    "VisEdge",
    "VisNode",
    "to_vis_edge",
    "to_vis_graph",
    "to_vis_node",
]
