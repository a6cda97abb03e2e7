from __future__ import annotations

import heapq
import math
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from .edge_cost import WeightVector, edge_cost, weight_vector
from .logging_utils import log_event
from .models import RouteResult, TraversedEdge, Weights
from .normalization import NormalizationFactors, compute_normalization
from .path_reconstruction import reconstruct_route
from .road_graph import Adjacency, GraphEdge, GraphNode, RoadNetwork, build_adjacency
from .routing_errors import invalid_node


@dataclass(frozen=True)
class SearchLabels:
    """Final labels of one single-source search.

    ``distances`` holds the best known cost per node (``inf`` when never
    reached). ``previous`` and ``via_edge`` hold the predecessor and the edge
    attributes used to reach each labelled node.
    """

    distances: dict[str, float]
    previous: dict[str, str | None]
    via_edge: dict[str, TraversedEdge]
    settled: frozenset[str]
    settled_count: int
    relaxed_count: int


def dijkstra_search(
    adjacency: Adjacency,
    *,
    start: str,
    goal: str,
    weights: Weights | WeightVector,
    norm: NormalizationFactors,
) -> SearchLabels:
    # Heap entries compare as (cost, node_id) so equal costs settle in
    # ascending id order; relaxation is strict so the first predecessor wins.
    w = weight_vector(weights)
    distances: dict[str, float] = {node_id: math.inf for node_id in adjacency}
    previous: dict[str, str | None] = {node_id: None for node_id in adjacency}
    via_edge: dict[str, TraversedEdge] = {}
    settled: set[str] = set()
    relaxed = 0

    distances[start] = 0.0
    heap: list[tuple[float, str]] = [(0.0, start)]
    while heap:
        dist, node_id = heapq.heappop(heap)
        if node_id in settled or dist > distances.get(node_id, math.inf):
            continue
        settled.add(node_id)
        if node_id == goal:
            break

        for edge in adjacency.get(node_id, ()):
            if edge.to in settled:
                continue
            candidate = dist + edge_cost(edge, w, norm)
            if candidate < distances.get(edge.to, math.inf):
                distances[edge.to] = candidate
                previous[edge.to] = node_id
                via_edge[edge.to] = TraversedEdge(
                    from_node=node_id,
                    to_node=edge.to,
                    distance_km=edge.distance_km,
                    travel_time_min=edge.travel_time_min,
                    average_aqi=edge.average_aqi,
                    street_name=edge.street_name,
                )
                relaxed += 1
                heapq.heappush(heap, (candidate, edge.to))

    return SearchLabels(
        distances=distances,
        previous=previous,
        via_edge=via_edge,
        settled=frozenset(settled),
        settled_count=len(settled),
        relaxed_count=relaxed,
    )


def solve_route(
    nodes: Mapping[str, GraphNode],
    adjacency: Adjacency,
    norm: NormalizationFactors,
    *,
    start: str,
    end: str,
    weights: Weights | WeightVector,
    with_directions: bool = True,
) -> RouteResult:
    """Solve, reconstruct and describe one route over a prepared graph."""
    if start not in adjacency:
        raise invalid_node(start, role="start")
    if end not in adjacency:
        raise invalid_node(end, role="end")
    w = weight_vector(weights)

    if start == end:
        return RouteResult(found=True, path=[start], total_cost=0.0)

    labels = dijkstra_search(adjacency, start=start, goal=end, weights=w, norm=norm)
    return reconstruct_route(
        labels,
        start=start,
        goal=end,
        nodes=nodes if with_directions else None,
    )


def find_route(
    network: RoadNetwork,
    edges: Iterable[GraphEdge],
    *,
    start: str,
    end: str,
    weights: Weights | WeightVector,
) -> RouteResult:
    t0 = time.perf_counter()
    edge_list = tuple(edges)
    adjacency = build_adjacency(network.nodes, edge_list)
    norm = compute_normalization(edge_list)
    result = solve_route(network.nodes, adjacency, norm, start=start, end=end, weights=weights)
    log_event(
        "route_computed",
        start=start,
        end=end,
        found=result.found,
        hops=max(0, len(result.path) - 1),
        total_cost=result.total_cost if result.found else None,
        duration_ms=round((time.perf_counter() - t0) * 1000, 2),
    )
    return result
