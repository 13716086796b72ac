"""End-to-end CRUD against a live PostgreSQL + Apache AGE instance.

Requires DB_HOST (and credentials) in the environment and
RUN_INTEGRATION_TESTS=1.
"""

import uuid

import asyncpg
import pytest

from agegraph.common.config import GraphSettings
from agegraph.common.errors import NotFoundError
from agegraph.dal.age import AgeConnectionPool, AgeGraphRepository
from agegraph.dal.age.pool import init_age_connection


async def _ensure_graph(settings: GraphSettings, graph_name: str) -> None:
    conn = await asyncpg.connect(
        host=settings.host,
        port=settings.port,
        user=settings.user,
        password=settings.password,
        database=settings.database,
    )
    try:
        await init_age_connection(conn, load_extension=settings.load_extension)
        exists = await conn.fetchval(
            "SELECT count(*) FROM ag_catalog.ag_graph WHERE name = $1", graph_name
        )
        if not exists:
            await conn.execute(f"SELECT ag_catalog.create_graph('{graph_name}');")
    finally:
        await conn.close()


async def _drop_graph(settings: GraphSettings, graph_name: str) -> None:
    conn = await asyncpg.connect(
        host=settings.host,
        port=settings.port,
        user=settings.user,
        password=settings.password,
        database=settings.database,
    )
    try:
        await init_age_connection(conn, load_extension=settings.load_extension)
        await conn.execute(f"SELECT ag_catalog.drop_graph('{graph_name}', true);")
    finally:
        await conn.close()


@pytest.mark.asyncio
async def test_node_and_edge_lifecycle():
    """Create, read, update, search, list and delete against a scratch graph."""
    settings = GraphSettings.from_env()
    graph_name = f"agegraph_it_{uuid.uuid4().hex[:8]}"
    await _ensure_graph(settings, graph_name)

    try:
        async with await AgeConnectionPool.create(settings) as pool:
            repo = AgeGraphRepository(
                pool,
                graph_name=graph_name,
                operation_timeout_seconds=settings.operation_timeout_seconds,
            )
            assert await repo.check_connection() is True

            pipe = await repo.create_node("Pipe", {"name": "P-101", "vib level": 8})
            pump = await repo.create_node("Pump", {"name": "PU-7", "rate": 3.5})
            assert int(pipe.id) > 2**48
            assert pipe.properties == {"name": "P-101", "vib level": 8}

            fetched = await repo.get_node(pipe.id)
            assert fetched == pipe

            updated = await repo.update_node(pump.id, {"status": "open"})
            assert updated.properties["status"] == "open"

            edge = await repo.create_edge(pipe.id, pump.id, "CONNECTS", {"diameter": 4})
            assert (edge.source_id, edge.target_id) == (pipe.id, pump.id)
            assert await repo.get_edge(edge.id) == edge

            found = await repo.search_nodes_by_property("name", "p-1")
            assert [n.id for n in found.nodes] == [pipe.id]

            by_term = await repo.search_graph("pump")
            assert pump.id in [n.id for n in by_term.nodes]

            view = await repo.list_graph()
            assert {n.id for n in view.nodes} == {pipe.id, pump.id}
            assert [e.id for e in view.edges] == [edge.id]
            assert view.parse_failures == []

            assert await repo.delete_edge(edge.id) == edge.id
            assert await repo.delete_node(pipe.id) == pipe.id
            with pytest.raises(NotFoundError):
                await repo.get_node(pipe.id)
            with pytest.raises(NotFoundError):
                await repo.delete_node(pipe.id)
    finally:
        await _drop_graph(settings, graph_name)
