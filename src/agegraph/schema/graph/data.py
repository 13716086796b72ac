from dataclasses import dataclass, field
from typing import List

from agegraph.common.errors import ParseError

from .edge import Edge
from .node import Node


@dataclass
class GraphView:
    """Result of a multi-row fetch (full graph or search).

    Rows that failed to parse are skipped and kept in ``parse_failures`` so a
    single malformed row never hides the rest of the graph.
    """

    nodes: List[Node] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)
    parse_failures: List[ParseError] = field(default_factory=list)
    duplicate_nodes_dropped: int = 0
    duplicate_edges_dropped: int = 0

    @property
    def duplicates_dropped(self) -> int:
        """Total duplicate rows discarded across nodes and edges."""
        return self.duplicate_nodes_dropped + self.duplicate_edges_dropped
