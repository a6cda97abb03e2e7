from __future__ import annotations

import math
from collections.abc import Mapping, Sequence

from .models import DirectionStep, TraversedEdge, TurnType
from .road_graph import GraphNode
from .route_presentation import round_half_up

STRAIGHT_THRESHOLD_DEG = 20.0
SLIGHT_THRESHOLD_DEG = 70.0
PLAIN_THRESHOLD_DEG = 120.0

TURN_ICONS: dict[str, str] = {
    "start": "🚗",
    "straight": "⬆️",
    "slight-right": "↗️",
    "right": "➡️",
    "sharp-right": "↪️",
    "slight-left": "↖️",
    "left": "⬅️",
    "sharp-left": "↩️",
    "end": "🏁",
}

TURN_PHRASES: dict[str, str] = {
    "straight": "Continue straight",
    "slight-right": "Turn slightly right",
    "right": "Turn right",
    "sharp-right": "Make a sharp right",
    "slight-left": "Turn slightly left",
    "left": "Turn left",
    "sharp-left": "Make a sharp left",
}

AQI_BAND_SUFFIX: dict[str, str] = {
    "excellent": " 🌿 (Excellent air quality)",
    "good": " 🍃 (Good air quality)",
    "moderate": "",
    "poor": " ⚠️ (Poor air quality)",
}


def initial_bearing(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle initial bearing from point 1 to point 2, in [0, 360)."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dlambda = math.radians(lng2 - lng1)
    y = math.sin(dlambda) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(dlambda)
    bearing = math.degrees(math.atan2(y, x)) % 360.0
    # -0.0 % 360 and tiny negatives can land exactly on 360.0
    return 0.0 if bearing >= 360.0 else bearing


def turn_angle(prev_bearing: float, new_bearing: float) -> float:
    """Signed heading change wrapped to (-180, 180]; positive is clockwise."""
    diff = (new_bearing - prev_bearing) % 360.0
    if diff > 180.0:
        diff -= 360.0
    return diff


def classify_turn(prev_bearing: float, new_bearing: float) -> TurnType:
    diff = turn_angle(prev_bearing, new_bearing)
    magnitude = abs(diff)
    if magnitude < STRAIGHT_THRESHOLD_DEG:
        return "straight"
    side = "right" if diff > 0 else "left"
    if magnitude < SLIGHT_THRESHOLD_DEG:
        return f"slight-{side}"  # type: ignore[return-value]
    if magnitude < PLAIN_THRESHOLD_DEG:
        return side  # type: ignore[return-value]
    return f"sharp-{side}"  # type: ignore[return-value]


def aqi_band(aqi: float) -> str:
    if aqi < 50:
        return "excellent"
    if aqi < 100:
        return "good"
    if aqi <= 120:
        return "moderate"
    return "poor"


def _node_label(nodes: Mapping[str, GraphNode], node_id: str) -> str:
    node = nodes.get(node_id)
    return node.name if node is not None else node_id


def _node_address(nodes: Mapping[str, GraphNode], node_id: str) -> str:
    node = nodes.get(node_id)
    return node.address if node is not None else ""


def synthesize_directions(
    path: Sequence[str],
    path_edges: Sequence[TraversedEdge],
    nodes: Mapping[str, GraphNode],
) -> list[DirectionStep]:
    """Turn-by-turn steps for a reconstructed path.

    One start step, one step per traversed edge and one end step. The first
    edge has no incoming heading, so it is always framed as straight on.
    Cumulative values are rounded per step (0.1 km, whole minutes) from exact
    running sums, which makes the end step agree with the path totals.
    """
    if len(path) < 2 or not path_edges:
        return []
    if len(path_edges) != len(path) - 1:
        raise ValueError("path_edges must have exactly one edge per hop in path")

    start_id = path[0]
    end_id = path[-1]
    steps: list[DirectionStep] = [
        DirectionStep(
            type="start",
            turn_type="start",
            instruction=f"Start at {_node_label(nodes, start_id)}",
            icon=TURN_ICONS["start"],
            street_name=_node_address(nodes, start_id),
            node_id=start_id,
        )
    ]

    cum_distance = 0.0
    cum_time = 0.0
    prev_bearing: float | None = None
    for idx, edge in enumerate(path_edges):
        src = nodes.get(path[idx])
        dst = nodes.get(path[idx + 1])
        bearing = (
            initial_bearing(src.lat, src.lng, dst.lat, dst.lng)
            if src is not None and dst is not None
            else None
        )
        if prev_bearing is None or bearing is None:
            turn: TurnType = "straight"
        else:
            turn = classify_turn(prev_bearing, bearing)
        if bearing is not None:
            prev_bearing = bearing

        cum_distance += edge.distance_km
        cum_time += edge.travel_time_min
        aqi = int(round_half_up(edge.average_aqi))
        steps.append(
            DirectionStep(
                type="turn",
                turn_type=turn,
                instruction=(
                    f"{TURN_PHRASES[turn]} onto {edge.street_name}"
                    f"{AQI_BAND_SUFFIX[aqi_band(edge.average_aqi)]}"
                ),
                icon=TURN_ICONS[turn],
                street_name=edge.street_name,
                distance_km=edge.distance_km,
                time_min=edge.travel_time_min,
                cumulative_distance_km=round_half_up(cum_distance, 1),
                cumulative_time_min=int(round_half_up(cum_time)),
                aqi=aqi,
                node_id=path[idx + 1],
            )
        )

    steps.append(
        DirectionStep(
            type="end",
            turn_type="end",
            instruction=f"Arrive at {_node_label(nodes, end_id)}",
            icon=TURN_ICONS["end"],
            street_name=_node_address(nodes, end_id),
            cumulative_distance_km=round_half_up(cum_distance, 1),
            cumulative_time_min=int(round_half_up(cum_time)),
            node_id=end_id,
        )
    )
    return steps
