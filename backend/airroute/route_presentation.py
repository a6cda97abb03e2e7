"""Display policy: labels, colours and human-readable formatting.

Nothing here feeds back into path search; swapping the colour scheme or the
formatters never changes which route is chosen.
"""

from __future__ import annotations

import math

from .models import LabeledRoute, RouteKind, RouteResult, Weights

NO_PREFERENCE_COLOR = "#667eea"
SHORTEST_COLOR = "#3b82f6"
FASTEST_COLOR = "#f59e0b"
CLEANEST_COLOR = "#10b981"

ROUTE_STYLES: dict[RouteKind, dict[str, str]] = {
    "custom": {"label": "Custom Route", "color": NO_PREFERENCE_COLOR},
    "shortest": {"label": "Shortest Route", "color": SHORTEST_COLOR},
    "fastest": {"label": "Fastest Route", "color": FASTEST_COLOR},
    "cleanest": {"label": "Cleanest Air Route", "color": CLEANEST_COLOR},
}


def round_half_up(value: float, digits: int = 0) -> float:
    scale = 10.0**digits
    return math.floor(value * scale + 0.5) / scale


def path_color(weights: Weights) -> str:
    """Colour for the custom route, driven by the dominant weight share."""
    total = weights.distance + weights.time + weights.aqi
    if total <= 0:
        return NO_PREFERENCE_COLOR
    nd, nt, na = weights.normalised()
    if na > 0.5:
        return CLEANEST_COLOR
    if nd > 0.5:
        return SHORTEST_COLOR
    if nt > 0.5:
        return FASTEST_COLOR

    r = int(round_half_up(59 + nt * 150))
    g = int(round_half_up(130 + na * 100))
    b = int(round_half_up(100 + nd * 100))
    return f"rgb({min(255, r)}, {min(255, g)}, {min(255, b)})"


def route_preference_label(weights: Weights) -> str:
    total = weights.distance + weights.time + weights.aqi
    if total <= 0:
        return "No preference set"
    nd, nt, na = weights.normalised()
    preferences: list[str] = []
    if nd > 0.3:
        preferences.append("Shortest")
    if nt > 0.3:
        preferences.append("Fastest")
    if na > 0.3:
        preferences.append("Cleanest Air")
    if not preferences:
        return "Balanced Route"
    return " & ".join(preferences) + " Route"


def label_route(result: RouteResult, *, kind: RouteKind, custom_weights: Weights) -> LabeledRoute:
    style = ROUTE_STYLES[kind]
    fields: dict[str, object] = {"kind": kind, "label": style["label"], "color": style["color"]}
    if kind == "custom":
        fields.update(color=path_color(custom_weights), preference=route_preference_label(custom_weights))
    return LabeledRoute.model_validate({**result.model_dump(), **fields})


def format_time(minutes: float) -> str:
    total = int(round_half_up(max(0.0, float(minutes))))
    if total < 60:
        return f"{total} min"
    hours, mins = divmod(total, 60)
    return f"{hours}h {mins}m"


def format_distance(km: float) -> str:
    km = max(0.0, float(km))
    if km < 1:
        return f"{int(round_half_up(km * 1000))} m"
    return f"{round_half_up(km, 1):.1f} km"


def format_aqi(aqi: float) -> str:
    return str(int(round_half_up(float(aqi))))
