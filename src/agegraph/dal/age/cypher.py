"""Cypher statement rendering for Apache AGE.

AGE runs openCypher through the ``cypher(graph, query[, params])`` SQL
function. Labels, relationship types and property keys occupy schema
positions that cannot be bound as parameters, so they are interpolated and
must pass `validate_label` / `quote_property_key` first. Id predicates use
bare integer literals (``WHERE id(v) = 844424930334979``) because AGE does
not reliably accept a bound parameter there. Search terms are bound through
the third ``cypher()`` argument.

Every statement selects exactly one text column produced by
``ag_catalog.agtype_out``.
"""

from __future__ import annotations

import json
import math
import re
from dataclasses import dataclass
from typing import Any, Mapping, Tuple

from agegraph.common.config import DEFAULT_GRAPH_NAME
from agegraph.common.errors import QueryValidationError

IDENTIFIER_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
CANONICAL_ID_RE = re.compile(r"[0-9]+")

# AGE graphids and integer values are signed 64-bit.
MAX_GRAPH_ID = 2**63 - 1
MIN_INTEGER = -(2**63)
MAX_VALUE_DEPTH = 64

_DOLLAR_TAG = "cypher"


@dataclass(frozen=True)
class CypherQuery:
    """A rendered SQL statement wrapping one Cypher query.

    Attributes:
        operation: Logical operation name, used for logs and spans.
        cypher: The Cypher text embedded in the statement.
        sql: Complete SQL to send to PostgreSQL.
        params: Positional bind parameters for ``sql``.
    """

    operation: str
    cypher: str
    sql: str
    params: Tuple[Any, ...] = ()


def is_identifier(value: Any) -> bool:
    """Return True when ``value`` may appear as a bare Cypher identifier."""
    return isinstance(value, str) and bool(IDENTIFIER_RE.fullmatch(value))


def validate_label(label: Any, kind: str = "label") -> str:
    """Return ``label`` unchanged if it is a safe bare identifier, else raise."""
    if not is_identifier(label):
        raise QueryValidationError(
            f"Invalid {kind} {label!r}: must start with a letter or underscore and contain "
            "only letters, digits and underscores."
        )
    return label


def quote_property_key(key: Any) -> str:
    """Render a property key, backtick-quoting it when it is not a bare identifier."""
    if not isinstance(key, str) or not key:
        raise QueryValidationError(f"Invalid property key {key!r}: must be a non-empty string.")
    if IDENTIFIER_RE.fullmatch(key):
        return key
    return "`" + key.replace("`", "``") + "`"


def _preview(value: Any) -> str:
    text = repr(value)
    return text if len(text) <= 40 else text[:37] + "..."


def canonical_id(value: Any, kind: str = "id") -> str:
    """Validate a decimal-digit id string and return its canonical integer literal.

    Leading zeros are dropped. Ids beyond the signed 64-bit graphid range
    cannot exist in AGE and are rejected before any integer conversion.
    """
    if not isinstance(value, str) or not CANONICAL_ID_RE.fullmatch(value):
        raise QueryValidationError(
            f"Invalid {kind} {_preview(value)}: must be a decimal-digit string."
        )
    digits = value.lstrip("0") or "0"
    if len(digits) > len(str(MAX_GRAPH_ID)) or int(digits) > MAX_GRAPH_ID:
        raise QueryValidationError(
            f"Invalid {kind} {_preview(value)}: outside the 64-bit graph id range."
        )
    return digits


def render_value(value: Any, _depth: int = 0) -> str:
    """Render a property value as a Cypher literal."""
    if _depth > MAX_VALUE_DEPTH:
        raise QueryValidationError(
            f"Property values may nest at most {MAX_VALUE_DEPTH} levels deep."
        )
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        if not MIN_INTEGER <= value <= MAX_GRAPH_ID:
            raise QueryValidationError("Integer property values must fit in 64 bits.")
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise QueryValidationError(f"Cannot store non-finite number {value!r}.")
        return repr(value)
    if isinstance(value, str):
        return json.dumps(value)
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(render_value(item, _depth + 1) for item in value) + "]"
    if isinstance(value, Mapping):
        return render_map(value, _depth + 1)
    raise QueryValidationError(f"Unsupported property value type: {type(value).__name__}.")


def render_map(properties: Mapping[str, Any], _depth: int = 0) -> str:
    """Render a Cypher map literal such as ``{name: "P-101", `vib level`: 8}``."""
    items = ", ".join(
        f"{quote_property_key(key)}: {render_value(value, _depth)}"
        for key, value in properties.items()
    )
    return "{" + items + "}"


def _property_suffix(properties: Mapping[str, Any]) -> str:
    if properties is None:
        return ""
    if not isinstance(properties, Mapping):
        raise QueryValidationError("Properties must be a mapping of names to values.")
    return f" {render_map(properties)}" if properties else ""


def _set_clause(variable: str, properties: Mapping[str, Any]) -> str:
    if not isinstance(properties, Mapping) or not properties:
        raise QueryValidationError("At least one property is required for an update.")
    return ", ".join(
        f"{variable}.{quote_property_key(key)} = {render_value(value)}"
        for key, value in properties.items()
    )


def _dollar_quote(body: str) -> str:
    tag = f"${_DOLLAR_TAG}$"
    counter = 0
    while tag in body:
        counter += 1
        tag = f"${_DOLLAR_TAG}{counter}$"
    return f"{tag}{body}{tag}"


def _statement(
    operation: str,
    graph_name: str,
    cypher: str,
    column: str,
    params: Tuple[Any, ...] = (),
) -> CypherQuery:
    graph_name = validate_label(graph_name, kind="graph name")
    params_arg = ", $1" if params else ""
    sql = (
        f"SELECT ag_catalog.agtype_out(result.{column}) AS {column} "
        f"FROM ag_catalog.cypher('{graph_name}', {_dollar_quote(cypher)}{params_arg}) "
        f"AS result({column} agtype);"
    )
    return CypherQuery(operation=operation, cypher=cypher, sql=sql, params=params)


def _search_params(value: Any) -> Tuple[str]:
    if not isinstance(value, str) or not value:
        raise QueryValidationError("Search value must be a non-empty string.")
    return (json.dumps({"value": value}),)


def build_create_node_query(
    label: str, properties: Mapping[str, Any], *, graph_name: str = DEFAULT_GRAPH_NAME
) -> CypherQuery:
    """Render ``CREATE (v:Label {...}) RETURN v``."""
    cypher = f"CREATE (v:{validate_label(label)}{_property_suffix(properties)}) RETURN v"
    return _statement("create_node", graph_name, cypher, "v")


def build_get_node_query(node_id: str, *, graph_name: str = DEFAULT_GRAPH_NAME) -> CypherQuery:
    """Render a match-by-id for one vertex."""
    cypher = f"MATCH (v) WHERE id(v) = {canonical_id(node_id, 'node id')} RETURN v"
    return _statement("get_node", graph_name, cypher, "v")


def build_update_node_query(
    node_id: str, properties: Mapping[str, Any], *, graph_name: str = DEFAULT_GRAPH_NAME
) -> CypherQuery:
    """Render ``SET`` of the given properties on one vertex."""
    cypher = (
        f"MATCH (v) WHERE id(v) = {canonical_id(node_id, 'node id')} "
        f"SET {_set_clause('v', properties)} RETURN v"
    )
    return _statement("update_node", graph_name, cypher, "v")


def build_delete_node_query(node_id: str, *, graph_name: str = DEFAULT_GRAPH_NAME) -> CypherQuery:
    """Render ``DETACH DELETE`` of one vertex, echoing its id when it existed."""
    vid = canonical_id(node_id, "node id")
    cypher = f"MATCH (v) WHERE id(v) = {vid} DETACH DELETE v RETURN '{vid}'"
    return _statement("delete_node", graph_name, cypher, "deleted_id")


def build_create_edge_query(
    source_id: str,
    target_id: str,
    label: str,
    properties: Mapping[str, Any],
    *,
    graph_name: str = DEFAULT_GRAPH_NAME,
) -> CypherQuery:
    """Render creation of a directed edge between two existing vertices."""
    src = canonical_id(source_id, "source node id")
    dst = canonical_id(target_id, "target node id")
    rel = validate_label(label, kind="edge label")
    cypher = (
        f"MATCH (a), (b) WHERE id(a) = {src} AND id(b) = {dst} "
        f"CREATE (a)-[e:{rel}{_property_suffix(properties)}]->(b) RETURN e"
    )
    return _statement("create_edge", graph_name, cypher, "e")


def build_get_edge_query(edge_id: str, *, graph_name: str = DEFAULT_GRAPH_NAME) -> CypherQuery:
    """Render a match-by-id for one edge."""
    cypher = f"MATCH ()-[e]->() WHERE id(e) = {canonical_id(edge_id, 'edge id')} RETURN e"
    return _statement("get_edge", graph_name, cypher, "e")


def build_update_edge_query(
    edge_id: str, properties: Mapping[str, Any], *, graph_name: str = DEFAULT_GRAPH_NAME
) -> CypherQuery:
    """Render ``SET`` of the given properties on one edge."""
    cypher = (
        f"MATCH ()-[e]->() WHERE id(e) = {canonical_id(edge_id, 'edge id')} "
        f"SET {_set_clause('e', properties)} RETURN e"
    )
    return _statement("update_edge", graph_name, cypher, "e")


def build_delete_edge_query(edge_id: str, *, graph_name: str = DEFAULT_GRAPH_NAME) -> CypherQuery:
    """Render deletion of one edge, echoing its id when it existed."""
    eid = canonical_id(edge_id, "edge id")
    cypher = f"MATCH ()-[e]->() WHERE id(e) = {eid} DELETE e RETURN '{eid}'"
    return _statement("delete_edge", graph_name, cypher, "deleted_id")


def build_fetch_all_nodes_query(*, graph_name: str = DEFAULT_GRAPH_NAME) -> CypherQuery:
    """Render a scan of every vertex."""
    return _statement("fetch_all_nodes", graph_name, "MATCH (v) RETURN v", "v")


def build_fetch_all_edges_query(*, graph_name: str = DEFAULT_GRAPH_NAME) -> CypherQuery:
    """Render a scan of every edge.

    The pattern can yield the same edge more than once; callers dedup by id.
    """
    return _statement("fetch_all_edges", graph_name, "MATCH ()-[e]->() RETURN e", "e")


def build_search_nodes_by_property_query(
    property_key: str, value: str, *, graph_name: str = DEFAULT_GRAPH_NAME
) -> CypherQuery:
    """Render a case-insensitive substring match on one vertex property."""
    key = quote_property_key(property_key)
    params = _search_params(value)
    cypher = f"MATCH (v) WHERE toLower(toString(v.{key})) CONTAINS toLower($value) RETURN v"
    return _statement("search_nodes_by_property", graph_name, cypher, "v", params)


def build_search_graph_query(term: str, *, graph_name: str = DEFAULT_GRAPH_NAME) -> CypherQuery:
    """Render a case-insensitive substring match on any property value or the label."""
    params = _search_params(term)
    cypher = (
        "MATCH (v) WHERE any(k IN keys(properties(v)) "
        "WHERE toLower(toString(properties(v)[k])) CONTAINS toLower($value)) "
        "OR toLower(label(v)) CONTAINS toLower($value) RETURN v"
    )
    return _statement("search_graph", graph_name, cypher, "v", params)


def build_probe_query(*, graph_name: str = DEFAULT_GRAPH_NAME) -> CypherQuery:
    """Render a one-row read used to verify the graph is reachable."""
    return _statement("probe", graph_name, "MATCH (v) RETURN v LIMIT 1", "v")
