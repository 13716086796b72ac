from typing import Dict

from pydantic import BaseModel, ConfigDict, Field, JsonValue

# Canonical ids are decimal-digit strings. AGE graphids are 64-bit integers,
# which exceed the 2**53 range that float-based JSON decoders keep exact.
CANONICAL_ID_PATTERN = r"^[0-9]+$"

PropertyValue = JsonValue
"""A property value: str, int, float, bool, None, or a list/map of these."""


class GraphEntity(BaseModel):
    """Fields shared by every stored graph entity.

    Attributes:
        id: Canonical id string assigned by the store.
        label: Vertex label or edge type (e.g., "Pipe", "CONNECTS").
        properties: Property bag of arbitrary JSON values.
    """

    id: str = Field(pattern=CANONICAL_ID_PATTERN)
    label: str = Field(min_length=1)
    properties: Dict[str, PropertyValue] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)


class Node(GraphEntity):
    """Canonical graph node representation."""
