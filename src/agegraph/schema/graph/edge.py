from pydantic import Field

from .node import CANONICAL_ID_PATTERN, GraphEntity


class Edge(GraphEntity):
    """Canonical graph edge representation.

    Both endpoints are required; an edge-shaped payload missing either one is
    rejected rather than built partially.

    Attributes:
        source_id: Canonical id of the start node (serialized as ``sourceId``).
        target_id: Canonical id of the end node (serialized as ``targetId``).
    """

    source_id: str = Field(pattern=CANONICAL_ID_PATTERN, serialization_alias="sourceId")
    target_id: str = Field(pattern=CANONICAL_ID_PATTERN, serialization_alias="targetId")
