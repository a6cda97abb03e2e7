from __future__ import annotations

import pytest

from airroute.directions import (
    aqi_band,
    classify_turn,
    initial_bearing,
    synthesize_directions,
    turn_angle,
)
from airroute.london_network import default_edges, default_network
from airroute.models import TraversedEdge
from airroute.road_graph import GraphNode
from airroute.route_presentation import round_half_up
from airroute.shortest_path import find_route


def _node(node_id: str, lat: float, lng: float) -> GraphNode:
    return GraphNode(id=node_id, name=f"Place {node_id}", address=f"{node_id} Square", lat=lat, lng=lng)


def _hop(u: str, v: str, d: float, t: float, aqi: float, street: str) -> TraversedEdge:
    return TraversedEdge(from_node=u, to_node=v, distance_km=d, travel_time_min=t, average_aqi=aqi, street_name=street)


def test_initial_bearing_cardinal_directions() -> None:
    assert initial_bearing(0, 0, 1, 0) == pytest.approx(0.0)
    assert initial_bearing(0, 0, 0, 1) == pytest.approx(90.0)
    assert initial_bearing(0, 0, -1, 0) == pytest.approx(180.0)
    assert initial_bearing(0, 0, 0, -1) == pytest.approx(270.0)


@pytest.mark.parametrize(
    ("prev", "new", "expected"),
    [
        (0, 10, 10),
        (350, 10, 20),
        (10, 350, -20),
        (0, 180, 180),
        (90, 270, 180),
        (0, 190, -170),
    ],
)
def test_turn_angle_wraps_to_half_open_range(prev: float, new: float, expected: float) -> None:
    assert turn_angle(prev, new) == pytest.approx(expected)


@pytest.mark.parametrize(
    ("prev", "new", "expected"),
    [
        (0, 0, "straight"),
        (0, 19.9, "straight"),
        (0, 20, "slight-right"),
        (0, 69.9, "slight-right"),
        (0, 70, "right"),
        (0, 95, "right"),
        (0, 120, "sharp-right"),
        (0, 180, "sharp-right"),
        (0, 340, "slight-left"),
        (0, 270, "left"),
        (0, 200, "sharp-left"),
        (350, 5, "straight"),
    ],
)
def test_classify_turn_thresholds(prev: float, new: float, expected: str) -> None:
    assert classify_turn(prev, new) == expected


@pytest.mark.parametrize(
    ("aqi", "band"),
    [(0, "excellent"), (49.9, "excellent"), (50, "good"), (99, "good"), (100, "moderate"), (120, "moderate"), (121, "poor")],
)
def test_aqi_band_edges(aqi: float, band: str) -> None:
    assert aqi_band(aqi) == band


def test_synthesize_directions_right_turn_example() -> None:
    nodes = {
        "A": _node("A", 0.0, 0.0),
        "B": _node("B", 0.01, 0.0),
        "C": _node("C", 0.009, 0.01),
    }
    path = ["A", "B", "C"]
    edges = [
        _hop("A", "B", 1.2, 2.4, 30, "North Rd"),
        _hop("B", "C", 1.1, 3.3, 130, "East St"),
    ]
    steps = synthesize_directions(path, edges, nodes)

    assert [s.type for s in steps] == ["start", "turn", "turn", "end"]
    assert steps[0].instruction == "Start at Place A"
    assert steps[0].icon == "🚗"
    assert steps[0].street_name == "A Square"
    assert steps[1].turn_type == "straight"
    assert steps[1].instruction == "Continue straight onto North Rd 🌿 (Excellent air quality)"
    assert steps[2].turn_type == "right"
    assert steps[2].icon == "➡️"
    assert steps[2].instruction == "Turn right onto East St ⚠️ (Poor air quality)"
    assert steps[2].aqi == 130
    assert steps[2].distance_km == 1.1
    assert steps[2].cumulative_distance_km == 2.3
    assert steps[2].cumulative_time_min == 6
    assert steps[-1].instruction == "Arrive at Place C"
    assert steps[-1].icon == "🏁"
    assert steps[-1].node_id == "C"
    assert steps[-1].street_name == "C Square"


def test_moderate_band_has_no_suffix() -> None:
    nodes = {"A": _node("A", 0, 0), "B": _node("B", 0.01, 0)}
    steps = synthesize_directions(["A", "B"], [_hop("A", "B", 1, 1, 110, "Mid Rd")], nodes)
    assert steps[1].instruction == "Continue straight onto Mid Rd"


def test_short_paths_yield_no_directions() -> None:
    assert synthesize_directions([], [], {}) == []
    assert synthesize_directions(["A"], [], {"A": _node("A", 0, 0)}) == []


def test_mismatched_edges_are_rejected() -> None:
    nodes = {"A": _node("A", 0, 0), "B": _node("B", 0.01, 0), "C": _node("C", 0.02, 0)}
    with pytest.raises(ValueError):
        synthesize_directions(["A", "B", "C"], [_hop("A", "B", 1, 1, 10, "X")], nodes)


def test_end_step_agrees_with_route_totals() -> None:
    result = find_route(default_network(), default_edges(), start="W", end="T", weights=(0.33, 0.33, 0.34))
    assert result.found
    steps = result.directions
    assert len(steps) == len(result.path) + 1
    assert steps[-1].cumulative_distance_km == round_half_up(result.total_distance_km, 1)
    assert steps[-1].cumulative_time_min == int(round_half_up(result.total_time_min))
    cumulative = [s.cumulative_distance_km for s in steps if s.type == "turn"]
    assert cumulative == sorted(cumulative)
