from __future__ import annotations

import time
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

from .edge_cost import weight_vector
from .location_aqi import aqi_category
from .logging_utils import log_event
from .models import (
    CLEANEST_WEIGHTS,
    FASTEST_WEIGHTS,
    ROUTE_KINDS,
    SHORTEST_WEIGHTS,
    AlternativesBundle,
    LabeledRoute,
    RouteKind,
    Weights,
)
from .normalization import compute_normalization
from .road_graph import GraphEdge, RoadNetwork, build_adjacency
from .route_presentation import format_aqi, format_distance, format_time, label_route
from .shortest_path import solve_route

PRESET_WEIGHTS: dict[RouteKind, Weights] = {
    "shortest": SHORTEST_WEIGHTS,
    "fastest": FASTEST_WEIGHTS,
    "cleanest": CLEANEST_WEIGHTS,
}


def compute_alternatives(
    network: RoadNetwork,
    edges: Iterable[GraphEdge],
    *,
    start: str,
    end: str,
    weights: Weights,
    snapshot_version: int = 0,
) -> AlternativesBundle:
    """Custom route plus the three single-criterion presets.

    Adjacency and normalization are built once from ``edges``, so every
    route in the bundle is solved against the same snapshot.
    """
    t0 = time.perf_counter()
    weight_vector(weights)
    edge_list = tuple(edges)
    adjacency = build_adjacency(network.nodes, edge_list)
    norm = compute_normalization(edge_list)

    routes: dict[RouteKind, LabeledRoute] = {}
    for kind in ROUTE_KINDS:
        kind_weights = weights if kind == "custom" else PRESET_WEIGHTS[kind]
        result = solve_route(
            network.nodes,
            adjacency,
            norm,
            start=start,
            end=end,
            weights=kind_weights,
        )
        routes[kind] = label_route(result, kind=kind, custom_weights=weights)

    bundle = AlternativesBundle(
        snapshot_version=snapshot_version,
        start=start,
        end=end,
        weights=weights,
        computed_at_utc=datetime.now(UTC).isoformat(),
        routes=routes,
    )
    log_event(
        "alternatives_computed",
        start=start,
        end=end,
        snapshot_version=snapshot_version,
        found={kind: route.found for kind, route in routes.items()},
        normalization=norm.as_dict(),
        duration_ms=round((time.perf_counter() - t0) * 1000, 2),
    )
    return bundle


def route_summary(bundle: AlternativesBundle) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for kind, route in bundle.routes.items():
        row: dict[str, Any] = {
            "kind": kind,
            "label": route.label,
            "found": route.found,
            "hops": max(0, len(route.path) - 1),
        }
        if route.preference is not None:
            row["preference"] = route.preference
        if route.found:
            row.update(
                {
                    "distance": format_distance(route.total_distance_km),
                    "time": format_time(route.total_time_min),
                    "aqi": format_aqi(route.average_aqi),
                    "aqi_category": aqi_category(route.average_aqi)["label"],
                }
            )
        rows.append(row)
    return rows
