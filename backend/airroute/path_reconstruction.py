from __future__ import annotations

import math
from collections.abc import Mapping
from typing import TYPE_CHECKING

from .directions import synthesize_directions
from .models import RouteResult, TraversedEdge
from .road_graph import GraphNode

if TYPE_CHECKING:
    from .shortest_path import SearchLabels


def unreachable_route() -> RouteResult:
    return RouteResult(found=False, total_cost=math.inf)


def reconstruct_route(
    labels: SearchLabels,
    *,
    start: str,
    goal: str,
    nodes: Mapping[str, GraphNode] | None = None,
) -> RouteResult:
    """Walk predecessors back from ``goal`` and aggregate the edges used.

    Totals are exact sums; rounding only happens in direction steps. When
    ``nodes`` is omitted the result carries no directions.
    """
    if start == goal:
        return RouteResult(found=True, path=[start], total_cost=0.0)
    if labels.previous.get(goal) is None:
        return unreachable_route()

    path: list[str] = [goal]
    edges: list[TraversedEdge] = []
    current = goal
    while current != start:
        prev = labels.previous.get(current)
        if prev is None or len(path) > len(labels.previous):
            # Chain broke (or looped) before reaching start.
            return unreachable_route()
        edges.append(labels.via_edge[current])
        path.append(prev)
        current = prev
    path.reverse()
    edges.reverse()

    total_distance = sum((e.distance_km for e in edges), 0.0)
    total_time = sum((e.travel_time_min for e in edges), 0.0)
    average_aqi = sum((e.average_aqi for e in edges), 0.0) / len(edges) if edges else 0.0
    directions = synthesize_directions(path, edges, nodes) if nodes is not None else []

    return RouteResult(
        found=True,
        path=path,
        path_edges=edges,
        total_distance_km=total_distance,
        total_time_min=total_time,
        total_cost=labels.distances[goal],
        average_aqi=average_aqi,
        directions=directions,
    )
