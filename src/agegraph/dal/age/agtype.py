"""Decoder for AGE ``agtype`` text into canonical graph entities.

AGE serializes a vertex as::

    {"id": 844424930334979, "label": "Pipe", "properties": {"name": "P-101"}}::vertex

and an edge the same way with ``start_id``/``end_id`` and a ``::edge`` suffix.
Graph ids are 64-bit integers. Before generic JSON decoding, the integer
literals bound to ``id``, ``start_id`` and ``end_id`` are rewritten into
quoted strings, so ids stay exact strings end-to-end even when they exceed
the 2**53 range that float-based decoders downstream (browsers included)
represent exactly.

Parsing never raises: failures come back as `ParseError` values and the
caller decides whether one bad row is fatal.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Iterable, List, Optional, Tuple, Union

from pydantic import ValidationError as ModelValidationError

from agegraph.common.errors import ParseError, ParseErrorKind
from agegraph.schema.graph import Edge, Node

logger = logging.getLogger(__name__)

ID_FIELDS = ("id", "start_id", "end_id")
EDGE_ENDPOINT_FIELDS = ("start_id", "end_id")

_TRAILING_ANNOTATION_RE = re.compile(r"::\w+\s*$")
_EDGE_ANNOTATION_RE = re.compile(r"::edge\s*$")
_TOO_DEEP = "value is nested too deeply to decode"

# One left-to-right pass over the payload. String literals are matched as a
# whole by the last alternative and returned untouched, so text inside
# property values is never rewritten.
_PRE_DECODE_RE = re.compile(
    r'"(?P<key>id|start_id|end_id)"(?P<sep>\s*:\s*)(?P<digits>-?\d+)(?![\d.eE])'
    r"|(?P<number>-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?)::numeric\b"
    r'|"(?:[^"\\]|\\.)*"'
)

Entity = Union[Node, Edge]


def _rewrite_token(match: "re.Match[str]") -> str:
    if match.group("key"):
        return f'"{match.group("key")}"{match.group("sep")}"{match.group("digits")}"'
    if match.group("number"):
        return match.group("number")
    return match.group(0)


def coerce_id_literals(payload: str) -> str:
    """Quote integer id literals and drop interior ``::numeric`` annotations.

    Must run before ``json.loads``; it is the only point where id digits are
    still available verbatim.
    """
    return _PRE_DECODE_RE.sub(_rewrite_token, payload)


def strip_annotation(text: str) -> str:
    """Remove a trailing ``::<word>`` type annotation."""
    return _TRAILING_ANNOTATION_RE.sub("", text)


def _failure(
    raw: Any, kind: ParseErrorKind, reason: str, field: Optional[str] = None
) -> ParseError:
    logger.debug("Rejected agtype value (%s): %s", kind.value, reason)
    return ParseError(raw, kind, reason, field=field)


def _require_string(raw: Any, obj: dict, field: str) -> Optional[ParseError]:
    if field not in obj:
        return _failure(raw, ParseErrorKind.MISSING_FIELD, f"missing '{field}'", field)
    if not isinstance(obj[field], str):
        return _failure(
            raw,
            ParseErrorKind.WRONG_TYPE,
            f"'{field}' must be a string, got {type(obj[field]).__name__}",
            field,
        )
    return None


def parse_entity(raw: Any) -> Union[Node, Edge, ParseError]:
    """Decode one serialized vertex or edge.

    Returns:
        A `Node`, an `Edge`, or a `ParseError` describing why the input was
        rejected. Never raises for bad input.
    """
    if not isinstance(raw, str) or not raw.strip():
        return _failure(raw, ParseErrorKind.EMPTY_INPUT, "input is empty or not a string")

    text = raw.strip()
    edge_shaped = bool(_EDGE_ANNOTATION_RE.search(text))
    payload = coerce_id_literals(strip_annotation(text))

    try:
        obj = json.loads(payload)
    except ValueError as exc:
        return _failure(raw, ParseErrorKind.DECODE_FAILED, f"invalid JSON: {exc}")
    except RecursionError:
        return _failure(raw, ParseErrorKind.DECODE_FAILED, _TOO_DEEP)

    if not isinstance(obj, dict):
        return _failure(
            raw, ParseErrorKind.NOT_AN_OBJECT, f"expected an object, got {type(obj).__name__}"
        )

    edge_shaped = edge_shaped or any(key in obj for key in EDGE_ENDPOINT_FIELDS)

    for field in ("id", "label"):
        problem = _require_string(raw, obj, field)
        if problem is not None:
            return problem
    if not obj["label"]:
        return _failure(raw, ParseErrorKind.WRONG_TYPE, "'label' must not be empty", "label")

    properties = obj.get("properties", {})
    if not isinstance(properties, dict):
        return _failure(
            raw,
            ParseErrorKind.WRONG_TYPE,
            f"'properties' must be an object, got {type(properties).__name__}",
            "properties",
        )

    if edge_shaped:
        for field in EDGE_ENDPOINT_FIELDS:
            problem = _require_string(raw, obj, field)
            if problem is not None:
                return problem

    try:
        if edge_shaped:
            return Edge(
                id=obj["id"],
                label=obj["label"],
                properties=properties,
                source_id=obj["start_id"],
                target_id=obj["end_id"],
            )
        return Node(id=obj["id"], label=obj["label"], properties=properties)
    except ModelValidationError as exc:
        first = exc.errors()[0]
        field = str(first["loc"][0]) if first.get("loc") else None
        return _failure(raw, ParseErrorKind.WRONG_TYPE, first["msg"], field)
    except RecursionError:
        return _failure(raw, ParseErrorKind.WRONG_TYPE, _TOO_DEEP, "properties")


def parse_entities(rows: Iterable[Any]) -> Tuple[List[Entity], List[ParseError]]:
    """Decode a batch of rows, collecting failures instead of stopping."""
    entities: List[Entity] = []
    failures: List[ParseError] = []
    for row in rows:
        result = parse_entity(row)
        if isinstance(result, ParseError):
            failures.append(result)
        else:
            entities.append(result)
    return entities, failures


def parse_scalar(raw: Any) -> Union[str, int, float, bool, None, ParseError]:
    """Decode a scalar agtype literal such as ``"844424930334979"`` or ``42``."""
    if not isinstance(raw, str) or not raw.strip():
        return _failure(raw, ParseErrorKind.EMPTY_INPUT, "input is empty or not a string")
    try:
        value = json.loads(strip_annotation(raw.strip()))
    except ValueError as exc:
        return _failure(raw, ParseErrorKind.DECODE_FAILED, f"invalid JSON: {exc}")
    except RecursionError:
        return _failure(raw, ParseErrorKind.DECODE_FAILED, _TOO_DEEP)
    if isinstance(value, (dict, list)):
        return _failure(
            raw, ParseErrorKind.WRONG_TYPE, f"expected a scalar, got {type(value).__name__}"
        )
    return value
