"""Node/edge CRUD and search against an Apache AGE graph.

Each operation renders its statement first, so a `QueryValidationError`
surfaces before a connection is checked out. The statement then runs on a
single pooled connection under the operation deadline, and every returned
row goes through the agtype parser.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple, Type, TypeVar

from agegraph.common.config import DEFAULT_GRAPH_NAME, GraphSettings
from agegraph.common.errors import (
    GraphAdapterError,
    NotFoundError,
    ParseError,
    ParseErrorKind,
    QueryExecutionError,
)
from agegraph.common.interfaces import GraphConnectionProvider, GraphRepository
from agegraph.common.observability import record_duplicates_dropped, record_parse_failures
from agegraph.dal.age.agtype import Entity, parse_entities, parse_entity, parse_scalar
from agegraph.dal.age.cypher import (
    CypherQuery,
    build_create_edge_query,
    build_create_node_query,
    build_delete_edge_query,
    build_delete_node_query,
    build_fetch_all_edges_query,
    build_fetch_all_nodes_query,
    build_get_edge_query,
    build_get_node_query,
    build_probe_query,
    build_search_graph_query,
    build_search_nodes_by_property_query,
    build_update_edge_query,
    build_update_node_query,
    canonical_id,
    validate_label,
)
from agegraph.dal.error_classification import translate_driver_error
from agegraph.dal.tracing import trace_graph_operation
from agegraph.dal.util.timeouts import run_with_timeout
from agegraph.schema.graph import Edge, GraphView, Node

logger = logging.getLogger(__name__)

E = TypeVar("E", Node, Edge)


class AgeGraphRepository(GraphRepository):
    """`GraphRepository` backed by PostgreSQL + Apache AGE."""

    def __init__(
        self,
        pool: GraphConnectionProvider,
        graph_name: str = DEFAULT_GRAPH_NAME,
        operation_timeout_seconds: Optional[float] = 30.0,
    ) -> None:
        """Initialize with a connection provider and target graph.

        Args:
            pool: Provider of scoped connections, usually `AgeConnectionPool`.
            graph_name: AGE graph to operate on.
            operation_timeout_seconds: Deadline for one whole operation,
                connection checkout included. ``None`` or ``0`` disables it.
        """
        self._pool = pool
        self.graph_name = validate_label(graph_name, kind="graph name")
        self.operation_timeout_seconds = operation_timeout_seconds

    @classmethod
    def from_settings(
        cls, pool: GraphConnectionProvider, settings: GraphSettings
    ) -> "AgeGraphRepository":
        """Build a repository using graph name and deadline from settings."""
        return cls(
            pool,
            graph_name=settings.graph_name,
            operation_timeout_seconds=settings.operation_timeout_seconds,
        )

    async def _run(self, operation: str, queries: Sequence[CypherQuery]) -> List[List[str]]:
        """Execute the queries on one connection and return their rows in order."""

        async def _execute() -> List[List[str]]:
            results: List[List[str]] = []
            async with self._pool.acquire() as conn:
                for query in queries:
                    logger.debug("Executing %s on graph %s", query.operation, self.graph_name)
                    rows = await trace_graph_operation(
                        query.operation,
                        self.graph_name,
                        query.sql,
                        conn.fetch_column(query.sql, *query.params),
                    )
                    results.append(list(rows))
            return results

        try:
            return await run_with_timeout(
                _execute, self.operation_timeout_seconds, operation_name=operation
            )
        except GraphAdapterError:
            raise
        except Exception as exc:
            raise translate_driver_error(exc, operation, self.operation_timeout_seconds) from exc

    async def _fetch(self, query: CypherQuery) -> List[str]:
        (rows,) = await self._run(query.operation, [query])
        return rows

    def _single(self, raw: str, expected: Type[E], operation: str) -> E:
        result = parse_entity(raw)
        if not isinstance(result, ParseError) and not isinstance(result, expected):
            result = ParseError(
                raw,
                ParseErrorKind.WRONG_TYPE,
                f"expected {expected.__name__.lower()}, got {type(result).__name__.lower()}",
            )
        if isinstance(result, ParseError):
            logger.warning("Unparseable %s result: %s", operation, result.reason)
            record_parse_failures(operation)
            raise result
        return result

    def _record_failures(self, operation: str, failures: List[ParseError]) -> None:
        if not failures:
            return
        logger.warning(
            "%s skipped %d unparseable row(s); first: %s",
            operation,
            len(failures),
            failures[0].reason,
        )
        record_parse_failures(operation, len(failures))

    async def _delete(self, query: CypherQuery, entity_type: str, entity_id: str) -> str:
        rows = await self._fetch(query)
        if not rows:
            raise NotFoundError(entity_type, entity_id)
        echoed = parse_scalar(rows[0])
        if isinstance(echoed, ParseError):
            raise echoed
        if str(echoed) != entity_id:
            raise NotFoundError(
                entity_type,
                entity_id,
                f"Delete of {entity_type} {entity_id} was not confirmed (engine returned {echoed!r}).",
            )
        logger.info("Deleted %s %s from graph %s", entity_type, entity_id, self.graph_name)
        return entity_id

    async def create_node(self, label: str, properties: Dict[str, Any]) -> Node:
        """Create a node and return it as stored, engine-assigned id included."""
        query = build_create_node_query(label, properties, graph_name=self.graph_name)
        rows = await self._fetch(query)
        if not rows:
            raise QueryExecutionError(f"Creating a {label} node returned no rows.")
        node = self._single(rows[0], Node, query.operation)
        logger.info("Created node %s (%s)", node.id, node.label)
        return node

    async def get_node(self, node_id: str) -> Node:
        """Fetch one node by id."""
        query = build_get_node_query(node_id, graph_name=self.graph_name)
        rows = await self._fetch(query)
        if not rows:
            raise NotFoundError("node", canonical_id(node_id))
        return self._single(rows[0], Node, query.operation)

    async def update_node(self, node_id: str, properties: Dict[str, Any]) -> Node:
        """Set (merge) the given properties on a node."""
        query = build_update_node_query(node_id, properties, graph_name=self.graph_name)
        rows = await self._fetch(query)
        if not rows:
            raise NotFoundError("node", canonical_id(node_id))
        return self._single(rows[0], Node, query.operation)

    async def delete_node(self, node_id: str) -> str:
        """Delete a node together with its incident edges."""
        query = build_delete_node_query(node_id, graph_name=self.graph_name)
        return await self._delete(query, "node", canonical_id(node_id))

    async def create_edge(
        self, source_id: str, target_id: str, label: str, properties: Dict[str, Any]
    ) -> Edge:
        """Create a directed edge; both endpoint nodes must already exist."""
        query = build_create_edge_query(
            source_id, target_id, label, properties, graph_name=self.graph_name
        )
        rows = await self._fetch(query)
        if not rows:
            src, dst = canonical_id(source_id), canonical_id(target_id)
            raise NotFoundError(
                "node",
                f"{src},{dst}",
                f"Source node {src} or target node {dst} not found.",
            )
        edge = self._single(rows[0], Edge, query.operation)
        logger.info("Created edge %s (%s) %s->%s", edge.id, edge.label, edge.source_id, edge.target_id)
        return edge

    async def get_edge(self, edge_id: str) -> Edge:
        """Fetch one edge by id."""
        query = build_get_edge_query(edge_id, graph_name=self.graph_name)
        rows = await self._fetch(query)
        if not rows:
            raise NotFoundError("edge", canonical_id(edge_id))
        return self._single(rows[0], Edge, query.operation)

    async def update_edge(self, edge_id: str, properties: Dict[str, Any]) -> Edge:
        """Set (merge) the given properties on an edge."""
        query = build_update_edge_query(edge_id, properties, graph_name=self.graph_name)
        rows = await self._fetch(query)
        if not rows:
            raise NotFoundError("edge", canonical_id(edge_id))
        return self._single(rows[0], Edge, query.operation)

    async def delete_edge(self, edge_id: str) -> str:
        """Delete one edge."""
        query = build_delete_edge_query(edge_id, graph_name=self.graph_name)
        return await self._delete(query, "edge", canonical_id(edge_id))

    async def list_graph(self) -> GraphView:
        """Fetch every node and edge.

        Both scans share one connection. Entities are deduplicated by id with
        the first occurrence kept; malformed rows are skipped and reported on
        the returned view.
        """
        queries = [
            build_fetch_all_nodes_query(graph_name=self.graph_name),
            build_fetch_all_edges_query(graph_name=self.graph_name),
        ]
        node_rows, edge_rows = await self._run("list_graph", queries)
        entities, failures = parse_entities(node_rows + edge_rows)
        view = _build_view(entities, failures)

        self._record_failures("list_graph", failures)
        if view.duplicates_dropped:
            logger.warning(
                "list_graph dropped %d duplicate node(s) and %d duplicate edge(s)",
                view.duplicate_nodes_dropped,
                view.duplicate_edges_dropped,
            )
            record_duplicates_dropped("list_graph", "node", view.duplicate_nodes_dropped)
            record_duplicates_dropped("list_graph", "edge", view.duplicate_edges_dropped)
        logger.info(
            "Fetched graph %s: %d nodes, %d edges",
            self.graph_name,
            len(view.nodes),
            len(view.edges),
        )
        return view

    async def search_nodes_by_property(self, property_key: str, value: str) -> GraphView:
        """Find nodes whose property contains ``value``, ignoring case."""
        query = build_search_nodes_by_property_query(
            property_key, value, graph_name=self.graph_name
        )
        return await self._search(query)

    async def search_graph(self, term: str) -> GraphView:
        """Find nodes whose label or any property value contains ``term``, ignoring case."""
        query = build_search_graph_query(term, graph_name=self.graph_name)
        return await self._search(query)

    async def _search(self, query: CypherQuery) -> GraphView:
        rows = await self._fetch(query)
        entities, failures = parse_entities(rows)
        view = _build_view(entities, failures)
        self._record_failures(query.operation, failures)
        logger.info("%s matched %d node(s)", query.operation, len(view.nodes))
        return view

    async def check_connection(self) -> bool:
        """Run a one-row read against the graph; raise on failure."""
        await self._fetch(build_probe_query(graph_name=self.graph_name))
        return True


def _dedup(entities: List[E]) -> Tuple[List[E], int]:
    seen = set()
    unique: List[E] = []
    for entity in entities:
        if entity.id in seen:
            continue
        seen.add(entity.id)
        unique.append(entity)
    return unique, len(entities) - len(unique)


def _build_view(entities: List[Entity], failures: List[ParseError]) -> GraphView:
    nodes, dropped_nodes = _dedup([e for e in entities if isinstance(e, Node)])
    edges, dropped_edges = _dedup([e for e in entities if isinstance(e, Edge)])
    return GraphView(
        nodes=nodes,
        edges=edges,
        parse_failures=failures,
        duplicate_nodes_dropped=dropped_nodes,
        duplicate_edges_dropped=dropped_edges,
    )
