from __future__ import annotations

import math
from collections.abc import Iterable
from typing import Protocol

from .models import Weights
from .normalization import NormalizationFactors
from .routing_errors import MalformedEdgeError, RoutingDataError

WeightVector = tuple[float, float, float]


class CostedEdge(Protocol):
    distance_km: float
    travel_time_min: float
    average_aqi: float


def weight_vector(weights: Weights | WeightVector) -> WeightVector:
    """Validated (distance, time, aqi) triple."""
    if isinstance(weights, Weights):
        vec = weights.as_tuple()
    else:
        if len(weights) != 3:
            raise RoutingDataError(
                reason_code="invalid_weights",
                message="weights must have exactly three components",
                details={"length": len(weights)},
            )
        vec = (float(weights[0]), float(weights[1]), float(weights[2]))
    for value in vec:
        if math.isnan(value) or math.isinf(value) or value < 0:
            raise RoutingDataError(
                reason_code="invalid_weights",
                message="weights must be finite and non-negative",
                details={"weights": list(vec)},
            )
    return vec


def _checked(value: float, *, field: str) -> float:
    v = float(value)
    if math.isnan(v) or math.isinf(v) or v < 0:
        raise MalformedEdgeError(
            reason_code="malformed_edge",
            message=f"edge {field} must be finite and non-negative",
            details={"field": field, "value": repr(value)},
        )
    return v


def edge_cost(
    edge: CostedEdge,
    weights: Weights | WeightVector,
    norm: NormalizationFactors,
) -> float:
    """Scalar traversal cost of one edge.

    Each term is the attribute over its normalization factor, so the result
    lies in [0, w_distance + w_time + w_aqi] when the factors are the maxima
    of the edge set the edge came from.
    """
    w_distance, w_time, w_aqi = weight_vector(weights)
    distance = _checked(edge.distance_km, field="distance_km")
    travel_time = _checked(edge.travel_time_min, field="travel_time_min")
    aqi = _checked(edge.average_aqi, field="average_aqi")
    return (
        w_distance * (distance / norm.max_distance)
        + w_time * (travel_time / norm.max_travel_time)
        + w_aqi * (aqi / norm.max_aqi)
    )


def path_cost(
    edges: Iterable[CostedEdge],
    weights: Weights | WeightVector,
    norm: NormalizationFactors,
) -> float:
    return sum((edge_cost(edge, weights, norm) for edge in edges), 0.0)
