import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

from agegraph.common.errors import GraphTimeoutError

T = TypeVar("T")


async def run_with_timeout(
    operation: Callable[[], Awaitable[T]],
    timeout_seconds: Optional[float],
    *,
    operation_name: str = "operation",
) -> T:
    """Run an awaitable operation under a deadline.

    On expiry the inner task is cancelled, so any ``async with`` scopes it
    holds (pooled connections included) unwind before the timeout surfaces.
    """
    if not timeout_seconds or timeout_seconds <= 0:
        return await operation()
    try:
        return await asyncio.wait_for(operation(), timeout=timeout_seconds)
    except asyncio.TimeoutError as exc:
        if isinstance(exc, GraphTimeoutError):
            raise
        raise GraphTimeoutError(operation_name, timeout_seconds) from exc
