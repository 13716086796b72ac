"""DAL interfaces shared by the repository and its callers."""

from .connection_provider import GraphConnection, GraphConnectionProvider
from .graph_repository import GraphRepository

__all__ = [
    "GraphConnection",
    "GraphConnectionProvider",
    "GraphRepository",
]
