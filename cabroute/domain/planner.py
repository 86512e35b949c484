"""
Trip planning: turns a shortest-path query into a priced, non-committing
quote for every active vehicle.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from .entities import Vehicle, normalize_location
from .errors import SameLocation
from .graph import RouteGraph
from .pricing import PerMinutePricing, PricingStrategy


@dataclass(frozen=True)
class RoutePlan:
    source: str
    destination: str
    path: tuple[str, ...]
    total_duration: int


@dataclass(frozen=True)
class VehicleOption:
    vehicle_id: str
    name: str
    rate_per_minute: float
    estimated_cost: float


@dataclass(frozen=True)
class Quote:
    source: str
    destination: str
    path: tuple[str, ...]
    total_duration: int
    options: tuple[VehicleOption, ...]


def validate_endpoints(source: str, destination: str) -> tuple[str, str]:
    """Normalise both endpoints; raise ``SameLocation`` if blank or equal."""
    src = normalize_location(source)
    dst = normalize_location(destination)
    if not src or not dst:
        raise SameLocation("Source and destination are required")
    if src == dst:
        raise SameLocation("Source and destination cannot be the same")
    return src, dst


class TripPlanner:
    """Side-effect free: nothing is reserved by planning or quoting."""

    def __init__(self, pricing: Optional[PricingStrategy] = None):
        self.pricing = pricing or PerMinutePricing()

    def plan_route(self, graph: RouteGraph, source: str, destination: str) -> RoutePlan:
        src, dst = validate_endpoints(source, destination)
        result = graph.shortest_path(src, dst)
        return RoutePlan(
            source=src,
            destination=dst,
            path=result.path,
            total_duration=result.total,
        )

    def estimate(self, route: RoutePlan, vehicle: Vehicle) -> float:
        return self.pricing.calculate(route.total_duration, vehicle.rate_per_minute)

    def quote(
        self,
        graph: RouteGraph,
        source: str,
        destination: str,
        vehicles: Iterable[Vehicle],
    ) -> Quote:
        route = self.plan_route(graph, source, destination)
        options = [
            VehicleOption(
                vehicle_id=v.id,
                name=v.name,
                rate_per_minute=v.rate_per_minute,
                estimated_cost=self.estimate(route, v),
            )
            for v in vehicles
            if v.active
        ]
        options.sort(key=lambda o: (o.estimated_cost, o.vehicle_id))
        return Quote(
            source=route.source,
            destination=route.destination,
            path=route.path,
            total_duration=route.total_duration,
            options=tuple(options),
        )
