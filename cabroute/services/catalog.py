"""
Route catalog: management of the edge collaborator.

Writes are serialised on a single ``route-graph`` lock key and validated by
building the graph that would result, so the store never holds an edge set
that ``RouteGraph.build`` rejects.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable

from cabroute.domain.entities import RouteEdge, normalize_location
from cabroute.domain.errors import EdgeNotFound, InvalidEdge
from cabroute.domain.graph import RouteGraph
from cabroute.infrastructure.locks import LockManager
from cabroute.infrastructure.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

GRAPH_LOCK_KEY = "route-graph"


class RouteCatalog:
    def __init__(self, uow_factory: Callable[[], UnitOfWork], locks: LockManager):
        self.uow_factory = uow_factory
        self.locks = locks

    async def list_edges(self) -> list[RouteEdge]:
        async with self.uow_factory() as uow:
            return await uow.edges.scan()

    async def add_edge(self, source: str, target: str, duration_minutes: int) -> RouteEdge:
        edge = RouteEdge(
            source=normalize_location(source),
            target=normalize_location(target),
            duration_minutes=duration_minutes,
        )
        async with self.locks.hold(GRAPH_LOCK_KEY):
            async with self.uow_factory() as uow:
                existing = await uow.edges.scan()
                RouteGraph.build(existing + [edge])
                await uow.edges.upsert(edge)
                await uow.commit()
        logger.info("Route %s->%s added (%d min)", edge.source, edge.target, duration_minutes)
        return edge

    async def update_duration(
        self, source: str, target: str, duration_minutes: int
    ) -> RouteEdge:
        key = (normalize_location(source), normalize_location(target))
        if isinstance(duration_minutes, bool) or not isinstance(duration_minutes, int) \
                or duration_minutes <= 0:
            raise InvalidEdge("Time must be a positive number of minutes")
        async with self.locks.hold(GRAPH_LOCK_KEY):
            async with self.uow_factory() as uow:
                edge = await uow.edges.get(key)
                if edge is None:
                    raise EdgeNotFound(f"Route {key[0]}->{key[1]} not found")
                updated = replace(edge, duration_minutes=duration_minutes)
                await uow.edges.upsert(updated)
                await uow.commit()
        return updated

    async def delete_edge(self, source: str, target: str) -> None:
        key = (normalize_location(source), normalize_location(target))
        async with self.locks.hold(GRAPH_LOCK_KEY):
            async with self.uow_factory() as uow:
                if not await uow.edges.delete(key):
                    raise EdgeNotFound(f"Route {key[0]}->{key[1]} not found")
                await uow.commit()
        logger.info("Route %s->%s deleted", *key)
