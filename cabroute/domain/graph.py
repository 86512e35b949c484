"""
Route Graph
===========

Directed, weighted graph of locations built from ``RouteEdge`` records.
The reverse direction of an edge is a separate edge; nothing is made
symmetric implicitly.

Shortest path
-------------
Dijkstra with a binary heap keyed by ``(distance, insertion_sequence)``.
Neighbours are relaxed in lexicographic order and a distance is only
replaced on strict improvement, so identical input always yields the same
path regardless of the order edges were supplied in.

Complexity
----------
Let V = locations, E = edges.

* Build:          O(E)
* Shortest path:  O((V + E) log V)
* Reachability:   O(V + E) traversal + O(V log V) sort

The graph is rebuilt for every planning call instead of being cached; the
route network is tens of edges, so recomputation is cheaper than keeping a
shared mutable graph consistent.
"""

from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass
from typing import Iterable, Iterator, Mapping, Optional

from .entities import RouteEdge, normalize_location
from .errors import DuplicateEdge, InvalidEdge, UnknownLocation, UnreachableDestination


@dataclass(frozen=True)
class ShortestPath:
    path: tuple[str, ...]
    total: int


class RouteGraph:
    def __init__(self, adjacency: Mapping[str, Mapping[str, int]]):
        self._adjacency: dict[str, dict[str, int]] = {
            node: dict(neighbours) for node, neighbours in adjacency.items()
        }
        nodes: set[str] = set(self._adjacency)
        for neighbours in self._adjacency.values():
            nodes.update(neighbours)
        self._nodes = frozenset(nodes)

    # ── Construction ──────────────────────────────────────────────────

    @classmethod
    def build(cls, edges: Iterable[RouteEdge]) -> RouteGraph:
        """Validate *edges* and build the adjacency map.

        Raises ``InvalidEdge`` for a non-positive or non-integer duration or
        a self-loop, and ``DuplicateEdge`` when an ordered pair repeats.
        """
        adjacency: dict[str, dict[str, int]] = {}
        for edge in edges:
            source = normalize_location(edge.source)
            target = normalize_location(edge.target)
            duration = edge.duration_minutes

            if not source or not target:
                raise InvalidEdge("Edge endpoints must be non-empty")
            if source == target:
                raise InvalidEdge(f"Edge {source}->{target} connects a location to itself")
            if isinstance(duration, bool) or not isinstance(duration, int) or duration <= 0:
                raise InvalidEdge(
                    f"Edge {source}->{target} must have a positive integer duration, "
                    f"got {duration!r}"
                )

            neighbours = adjacency.setdefault(source, {})
            if target in neighbours:
                raise DuplicateEdge(f"Route {source}->{target} already exists")
            neighbours[target] = duration
        return cls(adjacency)

    # ── Queries ───────────────────────────────────────────────────────

    def __contains__(self, location: object) -> bool:
        return location in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def neighbours(self, location: str) -> dict[str, int]:
        return dict(self._adjacency.get(location, {}))

    def edge_weight(self, source: str, target: str) -> Optional[int]:
        return self._adjacency.get(source, {}).get(target)

    def all_nodes(self) -> list[str]:
        return sorted(self._nodes)

    def shortest_path(self, source: str, destination: str) -> ShortestPath:
        """Return the minimum-duration path from *source* to *destination*."""
        source = normalize_location(source)
        destination = normalize_location(destination)
        if source not in self._nodes:
            raise UnknownLocation(f"Source location '{source}' not found")

        distances: dict[str, int] = {source: 0}
        previous: dict[str, Optional[str]] = {source: None}
        settled: set[str] = set()
        sequence = itertools.count()
        heap: list[tuple[int, int, str]] = [(0, next(sequence), source)]

        while heap:
            distance, _, node = heapq.heappop(heap)
            if node in settled:
                continue
            settled.add(node)
            if node == destination:
                break

            for neighbour in sorted(self._adjacency.get(node, {})):
                if neighbour in settled:
                    continue
                candidate = distance + self._adjacency[node][neighbour]
                if neighbour not in distances or candidate < distances[neighbour]:
                    distances[neighbour] = candidate
                    previous[neighbour] = node
                    heapq.heappush(heap, (candidate, next(sequence), neighbour))

        if destination not in settled:
            raise UnreachableDestination(
                f"No path found from {source} to {destination}"
            )

        path: list[str] = []
        current: Optional[str] = destination
        while current is not None:
            path.append(current)
            current = previous[current]
        path.reverse()
        return ShortestPath(path=tuple(path), total=distances[destination])

    def reachable_from(self, source: str) -> Iterator[str]:
        """Lazily yield locations reachable from *source*, lexicographically.

        *source* itself is never yielded.  Each call starts a fresh
        traversal.
        """
        source = normalize_location(source)
        if source not in self._nodes:
            raise UnknownLocation(f"Source location '{source}' not found")
        return self._walk(source)

    def _walk(self, source: str) -> Iterator[str]:
        seen = {source}
        frontier = [source]
        while frontier:
            node = frontier.pop()
            for neighbour in self._adjacency.get(node, {}):
                if neighbour not in seen:
                    seen.add(neighbour)
                    frontier.append(neighbour)
        seen.discard(source)
        yield from sorted(seen)
