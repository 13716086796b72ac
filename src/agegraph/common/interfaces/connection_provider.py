from typing import Any, AsyncContextManager, List, Protocol, runtime_checkable


@runtime_checkable
class GraphConnection(Protocol):
    """A checked-out connection able to run one statement at a time."""

    async def fetch_column(self, sql: str, *params: Any) -> List[str]:
        """Execute ``sql`` and return the first column of every row as text."""
        ...


@runtime_checkable
class GraphConnectionProvider(Protocol):
    """Pool of graph connections with scoped acquisition."""

    def acquire(self) -> AsyncContextManager[GraphConnection]:
        """Check out a connection; it is released when the context exits."""
        ...

    async def close(self) -> None:
        """Close all pooled connections."""
        ...
