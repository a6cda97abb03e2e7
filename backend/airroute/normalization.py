from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .road_graph import AdjacentEdge, GraphEdge

# Stand-in for a factor whose observed maximum is not positive, so the cost
# function never divides by zero.
SENTINEL_FACTOR = 1.0


@dataclass(frozen=True)
class NormalizationFactors:
    max_distance: float = SENTINEL_FACTOR
    max_travel_time: float = SENTINEL_FACTOR
    max_aqi: float = SENTINEL_FACTOR

    def as_dict(self) -> dict[str, float]:
        return {
            "max_distance": self.max_distance,
            "max_travel_time": self.max_travel_time,
            "max_aqi": self.max_aqi,
        }


def compute_normalization(edges: Iterable[GraphEdge | AdjacentEdge]) -> NormalizationFactors:
    """Per-criterion maxima over the current edge set, in one pass.

    An empty edge set (or an attribute that is zero everywhere) yields the
    sentinel for that factor.
    """
    max_distance = 0.0
    max_travel_time = 0.0
    max_aqi = 0.0
    for edge in edges:
        if edge.distance_km > max_distance:
            max_distance = float(edge.distance_km)
        if edge.travel_time_min > max_travel_time:
            max_travel_time = float(edge.travel_time_min)
        if edge.average_aqi > max_aqi:
            max_aqi = float(edge.average_aqi)

    return NormalizationFactors(
        max_distance=max_distance if max_distance > 0 else SENTINEL_FACTOR,
        max_travel_time=max_travel_time if max_travel_time > 0 else SENTINEL_FACTOR,
        max_aqi=max_aqi if max_aqi > 0 else SENTINEL_FACTOR,
    )
