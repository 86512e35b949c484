"""
Demo fleet and route network.

Five vehicles and a bidirectional network over locations A-F, used by
``seed.py`` for the SQL backend and on startup for the in-memory backend.
"""

from __future__ import annotations

import logging

from .unit_of_work import UnitOfWork
from cabroute.domain.entities import RouteEdge, Vehicle

logger = logging.getLogger(__name__)

VEHICLES = [
    {"id": "1", "name": "Economic Cab", "rate_per_minute": 2.5},
    {"id": "2", "name": "Standard Cab", "rate_per_minute": 3.0},
    {"id": "3", "name": "Premium Cab", "rate_per_minute": 4.5},
    {"id": "4", "name": "Luxury Cab", "rate_per_minute": 6.0},
    {"id": "5", "name": "SUV Cab", "rate_per_minute": 5.5},
]

# (from, to, minutes) -- each pair is seeded in both directions
CONNECTIONS = [
    ("A", "B", 5),
    ("A", "C", 10),
    ("B", "C", 8),
    ("C", "D", 7),
    ("D", "E", 12),
    ("D", "F", 20),
    ("E", "F", 15),
    ("B", "D", 25),
    ("A", "E", 30),
]


def default_vehicles() -> list[Vehicle]:
    return [Vehicle(active=True, **v) for v in VEHICLES]


def default_edges() -> list[RouteEdge]:
    edges = []
    for source, target, minutes in CONNECTIONS:
        edges.append(RouteEdge(source, target, minutes))
        edges.append(RouteEdge(target, source, minutes))
    return edges


async def seed(uow: UnitOfWork) -> bool:
    """Load the demo data unless vehicles already exist.  Returns True if seeded."""
    if await uow.vehicles.scan():
        logger.info("Store already seeded. Skipping.")
        return False
    for vehicle in default_vehicles():
        await uow.vehicles.upsert(vehicle)
    for edge in default_edges():
        await uow.edges.upsert(edge)
    await uow.commit()
    logger.info(
        "Seeded %d vehicles and %d route edges", len(VEHICLES), len(CONNECTIONS) * 2
    )
    return True
