"""Unit tests for the route graph and its shortest-path search."""

import pytest

from cabroute.domain.entities import RouteEdge
from cabroute.domain.errors import (
    DuplicateEdge,
    InvalidEdge,
    UnknownLocation,
    UnreachableDestination,
)
from cabroute.domain.graph import RouteGraph
from tests.conftest import TRIANGLE_EDGES


def _path_weight(graph: RouteGraph, path) -> int:
    total = 0
    for source, target in zip(path, path[1:]):
        weight = graph.edge_weight(source, target)
        assert weight is not None, f"{source}->{target} is not an edge"
        total += weight
    return total


class TestBuild:
    def test_rejects_zero_duration(self):
        with pytest.raises(InvalidEdge):
            RouteGraph.build([RouteEdge("A", "B", 0)])

    def test_rejects_negative_duration(self):
        with pytest.raises(InvalidEdge):
            RouteGraph.build([RouteEdge("A", "B", -3)])

    def test_rejects_fractional_duration(self):
        with pytest.raises(InvalidEdge):
            RouteGraph.build([RouteEdge("A", "B", 2.5)])

    def test_rejects_self_loop_after_normalisation(self):
        with pytest.raises(InvalidEdge):
            RouteGraph.build([RouteEdge("a", " A ", 4)])

    def test_rejects_duplicate_ordered_pair(self):
        with pytest.raises(DuplicateEdge):
            RouteGraph.build([RouteEdge("A", "B", 5), RouteEdge("a", "b", 7)])

    def test_reverse_direction_is_not_a_duplicate(self):
        graph = RouteGraph.build([RouteEdge("A", "B", 5), RouteEdge("B", "A", 6)])
        assert graph.edge_weight("A", "B") == 5
        assert graph.edge_weight("B", "A") == 6

    def test_edges_are_not_made_symmetric(self):
        graph = RouteGraph.build([RouteEdge("A", "B", 5)])
        assert graph.edge_weight("B", "A") is None

    def test_all_nodes_sorted_and_normalised(self):
        graph = RouteGraph.build([RouteEdge("c", "a", 1), RouteEdge("b ", "c", 2)])
        assert graph.all_nodes() == ["A", "B", "C"]


class TestShortestPath:
    def setup_method(self):
        self.graph = RouteGraph.build(TRIANGLE_EDGES)

    def test_direct_edge_beats_detour(self):
        # A->C direct is 10, A->B->C is 13
        result = self.graph.shortest_path("A", "C")
        assert result.path == ("A", "C")
        assert result.total == 10

    def test_two_hop_path(self):
        graph = RouteGraph.build(
            [RouteEdge("A", "B", 5), RouteEdge("B", "C", 8), RouteEdge("A", "C", 20)]
        )
        result = graph.shortest_path("A", "C")
        assert result.path == ("A", "B", "C")
        assert result.total == 13

    def test_inputs_are_normalised(self):
        result = self.graph.shortest_path(" a", "c ")
        assert result.path == ("A", "C")

    def test_reported_total_matches_edge_sum(self):
        for source in "ABC":
            for destination in "ABC":
                if source == destination:
                    continue
                result = self.graph.shortest_path(source, destination)
                assert result.path[0] == source
                assert result.path[-1] == destination
                assert _path_weight(self.graph, result.path) == result.total

    def test_repeated_calls_are_identical(self):
        first = self.graph.shortest_path("B", "A")
        for _ in range(10):
            assert self.graph.shortest_path("B", "A") == first

    def test_equal_cost_tie_independent_of_edge_order(self):
        edges = [
            RouteEdge("S", "Y", 1),
            RouteEdge("S", "X", 1),
            RouteEdge("X", "T", 1),
            RouteEdge("Y", "T", 1),
        ]
        forward = RouteGraph.build(edges).shortest_path("S", "T")
        backward = RouteGraph.build(list(reversed(edges))).shortest_path("S", "T")
        assert forward == backward
        assert forward.total == 2

    def test_unknown_source(self):
        with pytest.raises(UnknownLocation):
            self.graph.shortest_path("Z", "A")

    def test_unknown_destination_is_unreachable(self):
        with pytest.raises(UnreachableDestination):
            self.graph.shortest_path("A", "Z")

    def test_one_way_edge_makes_return_unreachable(self):
        graph = RouteGraph.build([RouteEdge("A", "B", 5), RouteEdge("C", "A", 2)])
        with pytest.raises(UnreachableDestination):
            graph.shortest_path("B", "A")

    def test_sink_node_as_source_is_unreachable_not_unknown(self):
        graph = RouteGraph.build([RouteEdge("A", "B", 5)])
        with pytest.raises(UnreachableDestination):
            graph.shortest_path("B", "A")


class TestReachability:
    def test_true_reachability_only(self):
        graph = RouteGraph.build(
            [
                RouteEdge("A", "B", 1),
                RouteEdge("B", "C", 1),
                RouteEdge("D", "A", 1),
            ]
        )
        assert list(graph.reachable_from("A")) == ["B", "C"]
        assert list(graph.reachable_from("C")) == []

    def test_excludes_source_even_on_cycle(self):
        graph = RouteGraph.build(TRIANGLE_EDGES)
        assert list(graph.reachable_from("B")) == ["A", "C"]

    def test_restartable(self):
        graph = RouteGraph.build(TRIANGLE_EDGES)
        assert list(graph.reachable_from("A")) == list(graph.reachable_from("A"))

    def test_unknown_source(self):
        graph = RouteGraph.build(TRIANGLE_EDGES)
        with pytest.raises(UnknownLocation):
            graph.reachable_from("Q")
