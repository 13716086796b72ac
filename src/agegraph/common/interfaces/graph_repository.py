from typing import Any, Dict, Protocol, runtime_checkable

from agegraph.schema.graph import Edge, GraphView, Node


@runtime_checkable
class GraphRepository(Protocol):
    """Protocol for node/edge CRUD and search against a property graph.

    Implementations raise `agegraph.common.errors` exceptions and always
    return ids as canonical strings.
    """

    async def create_node(self, label: str, properties: Dict[str, Any]) -> Node:
        """Create a node and return it as stored."""
        ...

    async def get_node(self, node_id: str) -> Node:
        """Fetch a node by id; raise NotFoundError when absent."""
        ...

    async def update_node(self, node_id: str, properties: Dict[str, Any]) -> Node:
        """Set properties on a node and return the updated node."""
        ...

    async def delete_node(self, node_id: str) -> str:
        """Delete a node and its edges; return the deleted id."""
        ...

    async def create_edge(
        self, source_id: str, target_id: str, label: str, properties: Dict[str, Any]
    ) -> Edge:
        """Create an edge between two existing nodes."""
        ...

    async def get_edge(self, edge_id: str) -> Edge:
        """Fetch an edge by id; raise NotFoundError when absent."""
        ...

    async def update_edge(self, edge_id: str, properties: Dict[str, Any]) -> Edge:
        """Set properties on an edge and return the updated edge."""
        ...

    async def delete_edge(self, edge_id: str) -> str:
        """Delete an edge; return the deleted id."""
        ...

    async def list_graph(self) -> GraphView:
        """Fetch every node and edge, deduplicated by id."""
        ...

    async def search_nodes_by_property(self, property_key: str, value: str) -> GraphView:
        """Case-insensitive substring search on one node property."""
        ...

    async def search_graph(self, term: str) -> GraphView:
        """Case-insensitive substring search on node labels and property values."""
        ...

    async def check_connection(self) -> bool:
        """Verify the graph is reachable."""
        ...
