"""Apache AGE implementation of the graph repository."""

from .pool import AgeConnection, AgeConnectionPool
from .repository import AgeGraphRepository

__all__ = ["AgeConnection", "AgeConnectionPool", "AgeGraphRepository"]
