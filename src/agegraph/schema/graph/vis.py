"""Browser-facing shapes for the network visualization.

The editor renders nodes and edges with a vis-network style schema. Ids,
``from`` and ``to`` are always JSON strings so the browser never rounds them.
"""

import json
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, JsonValue

from .data import GraphView
from .edge import Edge
from .node import Node


class VisNode(BaseModel):
    """Node as consumed by the visualization."""

    id: str
    label: str
    title: str
    group: str
    properties: Dict[str, JsonValue] = Field(default_factory=dict)


class VisEdge(BaseModel):
    """Edge as consumed by the visualization."""

    id: str
    from_id: str = Field(serialization_alias="from")
    to: str
    label: str
    title: str
    properties: Dict[str, JsonValue] = Field(default_factory=dict)


def _first_text(*candidates: Any) -> Optional[str]:
    for candidate in candidates:
        if isinstance(candidate, str) and candidate:
            return candidate
    return None


def _title(properties: Dict[str, Any]) -> str:
    return json.dumps(properties, indent=2)


def to_vis_node(node: Node) -> VisNode:
    """Map a node to its display form; name or label property wins the caption."""
    props = node.properties
    return VisNode(
        id=node.id,
        label=_first_text(props.get("name"), props.get("label"), node.label, node.id),
        title=_title(props),
        group=node.label,
        properties=dict(props),
    )


def to_vis_edge(edge: Edge) -> VisEdge:
    """Map an edge to its display form."""
    props = edge.properties
    return VisEdge(
        id=edge.id,
        from_id=edge.source_id,
        to=edge.target_id,
        label=_first_text(props.get("label"), edge.label),
        title=_title(props),
        properties=dict(props),
    )


def to_vis_graph(view: GraphView) -> Dict[str, Any]:
    """Serialize a graph view into the ``{"nodes": [...], "edges": [...]}`` payload."""
    return {
        "nodes": [to_vis_node(n).model_dump(by_alias=True) for n in view.nodes],
        "edges": [to_vis_edge(e).model_dump(by_alias=True) for e in view.edges],
    }
