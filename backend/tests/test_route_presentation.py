from __future__ import annotations

import pytest

from airroute.models import RouteResult, Weights
from airroute.route_presentation import (
    CLEANEST_COLOR,
    FASTEST_COLOR,
    NO_PREFERENCE_COLOR,
    ROUTE_STYLES,
    SHORTEST_COLOR,
    format_aqi,
    format_distance,
    format_time,
    label_route,
    path_color,
    route_preference_label,
)


def _w(d: float, t: float, a: float) -> Weights:
    return Weights(distance=d, time=t, aqi=a)


def test_path_color_dominance_and_blend() -> None:
    assert path_color(_w(0, 0, 0)) == NO_PREFERENCE_COLOR
    assert path_color(_w(0, 0, 1)) == CLEANEST_COLOR
    assert path_color(_w(1, 0, 0)) == SHORTEST_COLOR
    assert path_color(_w(0.2, 0.6, 0.2)) == FASTEST_COLOR
    # No share above one half: blended channels.
    assert path_color(_w(1, 1, 1)) == "rgb(109, 163, 133)"


def test_path_color_checks_aqi_share_first() -> None:
    assert path_color(_w(0.0, 0.4, 0.6)) == CLEANEST_COLOR


@pytest.mark.parametrize(
    ("weights", "label"),
    [
        (_w(0, 0, 0), "No preference set"),
        (_w(1, 0, 0), "Shortest Route"),
        (_w(0.5, 0, 0.5), "Shortest & Cleanest Air Route"),
        (_w(0.33, 0.33, 0.34), "Shortest & Fastest & Cleanest Air Route"),
    ],
)
def test_route_preference_label(weights: Weights, label: str) -> None:
    assert route_preference_label(weights) == label


@pytest.mark.parametrize(
    ("minutes", "text"),
    [(0, "0 min"), (12.4, "12 min"), (59.4, "59 min"), (59.5, "1h 0m"), (75, "1h 15m"), (130.2, "2h 10m")],
)
def test_format_time(minutes: float, text: str) -> None:
    assert format_time(minutes) == text


@pytest.mark.parametrize(("km", "text"), [(0.25, "250 m"), (0.999, "999 m"), (1.0, "1.0 km"), (12.34, "12.3 km")])
def test_format_distance(km: float, text: str) -> None:
    assert format_distance(km) == text


def test_format_aqi_rounds_half_up() -> None:
    assert format_aqi(42.5) == "43"
    assert format_aqi(42.4) == "42"


def test_label_route_decorates_without_changing_result() -> None:
    result = RouteResult(found=True, path=["A", "B"], total_distance_km=1.0, total_cost=0.5)
    custom = label_route(result, kind="custom", custom_weights=_w(1, 0, 0))
    cleanest = label_route(result, kind="cleanest", custom_weights=_w(1, 0, 0))

    assert custom.label == ROUTE_STYLES["custom"]["label"] == "Custom Route"
    assert custom.color == SHORTEST_COLOR
    assert cleanest.label == "Cleanest Air Route"
    assert cleanest.color == CLEANEST_COLOR
    assert cleanest.path == result.path
    assert cleanest.total_cost == result.total_cost
    assert custom.preference == "Shortest Route"
    assert cleanest.preference is None
