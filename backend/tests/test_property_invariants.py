from __future__ import annotations

import math
import random

import pytest

from airroute.edge_cost import edge_cost, path_cost
from airroute.london_network import default_edges, default_network
from airroute.normalization import compute_normalization
from airroute.road_graph import GraphEdge, GraphNode, RoadNetwork, build_adjacency
from airroute.shortest_path import find_route, solve_route


def _random_graph(rng: random.Random, node_count: int, edge_count: int) -> tuple[RoadNetwork, list[GraphEdge]]:
    nodes = {
        f"N{i:02d}": GraphNode(
            id=f"N{i:02d}",
            name=f"Node {i}",
            address="",
            lat=51.4 + rng.uniform(0, 0.2),
            lng=-0.3 + rng.uniform(0, 0.3),
        )
        for i in range(node_count)
    }
    ids = sorted(nodes)
    edges: list[GraphEdge] = []
    for _ in range(edge_count):
        u, v = rng.sample(ids, 2)
        edges.append(
            GraphEdge(
                from_node=u,
                to_node=v,
                distance_km=round(rng.uniform(0.1, 6.0), 2),
                travel_time_min=round(rng.uniform(1.0, 30.0), 1),
                average_aqi=round(rng.uniform(0.0, 200.0), 1),
                street_name=f"{u}-{v}",
            )
        )
    return RoadNetwork(nodes=nodes), edges


def _bellman_ford(ids: list[str], edges: list[GraphEdge], start: str, weights, norm) -> dict[str, float]:
    dist = {node_id: math.inf for node_id in ids}
    dist[start] = 0.0
    for _ in range(len(ids) - 1):
        changed = False
        for e in edges:
            if dist[e.from_node] + edge_cost(e, weights, norm) < dist[e.to_node] - 1e-12:
                dist[e.to_node] = dist[e.from_node] + edge_cost(e, weights, norm)
                changed = True
        if not changed:
            break
    return dist


def test_solver_matches_exhaustive_relaxation_on_random_graphs() -> None:
    rng = random.Random(20260212)

    for _ in range(25):
        network, edges = _random_graph(rng, node_count=12, edge_count=30)
        ids = sorted(network.nodes)
        norm = compute_normalization(edges)
        adjacency = build_adjacency(network.nodes, edges)
        weights = (rng.uniform(0, 1), rng.uniform(0, 1), rng.uniform(0, 1))
        start, end = rng.sample(ids, 2)

        expected = _bellman_ford(ids, edges, start, weights, norm)
        result = solve_route(network.nodes, adjacency, norm, start=start, end=end, weights=weights)

        if math.isinf(expected[end]):
            assert not result.found
            assert result.path == []
            continue

        assert result.found
        assert result.total_cost == pytest.approx(expected[end])
        assert result.path[0] == start and result.path[-1] == end
        assert len(result.path) == len(result.path_edges) + 1
        assert len(set(result.path)) == len(result.path)
        assert result.total_cost == pytest.approx(path_cost(result.path_edges, weights, norm))
        assert result.total_distance_km == pytest.approx(sum(e.distance_km for e in result.path_edges))
        if result.path_edges:
            mean = sum(e.average_aqi for e in result.path_edges) / len(result.path_edges)
            assert result.average_aqi == pytest.approx(mean)


def test_aqi_exposure_non_increasing_as_aqi_weight_grows() -> None:
    network = default_network()
    edges = default_edges()
    rng = random.Random(42)
    ids = sorted(network.nodes)

    for _ in range(15):
        start, end = rng.sample(ids, 2)
        previous_exposure = math.inf
        for w_aqi in (0.0, 0.25, 0.5, 1.0, 2.0, 4.0, 16.0):
            result = find_route(network, edges, start=start, end=end, weights=(0.5, 0.5, w_aqi))
            assert result.found
            exposure = sum(e.average_aqi for e in result.path_edges)
            assert exposure <= previous_exposure + 1e-9
            previous_exposure = exposure


def test_repeated_solves_are_identical() -> None:
    rng = random.Random(7)
    network, edges = _random_graph(rng, node_count=15, edge_count=45)
    ids = sorted(network.nodes)
    for _ in range(10):
        start, end = rng.sample(ids, 2)
        weights = (rng.random(), rng.random(), rng.random())
        first = find_route(network, edges, start=start, end=end, weights=weights)
        second = find_route(network, edges, start=start, end=end, weights=weights)
        assert first == second
