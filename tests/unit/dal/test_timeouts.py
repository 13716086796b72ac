"""Unit tests for the operation deadline helper."""

import asyncio

import pytest

from agegraph.common.errors import GraphConnectionError, GraphTimeoutError
from agegraph.dal.util.timeouts import run_with_timeout


@pytest.mark.asyncio
async def test_run_with_timeout_returns_result():
    """The operation result is returned when it finishes in time."""
    result = await run_with_timeout(lambda: asyncio.sleep(0, result="ok"), 1)
    assert result == "ok"


@pytest.mark.asyncio
async def test_run_with_timeout_raises_graph_timeout():
    """Expiry raises GraphTimeoutError carrying the operation context."""
    with pytest.raises(GraphTimeoutError) as exc_info:
        await run_with_timeout(lambda: asyncio.sleep(1), 0.01, operation_name="list_graph")

    assert exc_info.value.operation_name == "list_graph"
    assert exc_info.value.timeout_seconds == 0.01
    assert "list_graph timed out after 0.01s" in str(exc_info.value)
    assert isinstance(exc_info.value, GraphConnectionError)


@pytest.mark.asyncio
async def test_run_with_timeout_cancels_operation():
    """The inner operation is cancelled and its cleanup runs."""
    cleaned_up = asyncio.Event()

    async def _operation():
        try:
            await asyncio.sleep(1)
        finally:
            cleaned_up.set()

    with pytest.raises(GraphTimeoutError):
        await run_with_timeout(_operation, 0.01)

    assert cleaned_up.is_set()


@pytest.mark.asyncio
@pytest.mark.parametrize("timeout", [None, 0])
async def test_run_with_timeout_disabled(timeout):
    """A missing or zero deadline runs the operation unbounded."""
    result = await run_with_timeout(lambda: asyncio.sleep(0, result=5), timeout)
    assert result == 5
