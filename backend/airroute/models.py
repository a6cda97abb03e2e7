from __future__ import annotations

import math
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

RouteKind = Literal["custom", "shortest", "fastest", "cleanest"]
StepType = Literal["start", "turn", "end"]
TurnType = Literal[
    "start",
    "straight",
    "slight-right",
    "right",
    "sharp-right",
    "slight-left",
    "left",
    "sharp-left",
    "end",
]

ROUTE_KINDS: tuple[RouteKind, ...] = ("custom", "shortest", "fastest", "cleanest")


class Weights(BaseModel):
    """Preference weights for distance, time and AQI. No need to sum to 1."""

    distance: float = Field(..., ge=0)
    time: float = Field(..., ge=0)
    aqi: float = Field(..., ge=0)

    @model_validator(mode="before")
    @classmethod
    def accept_legacy_aliases(cls, value: object) -> object:
        if isinstance(value, (list, tuple)) and len(value) == 3:
            return {"distance": value[0], "time": value[1], "aqi": value[2]}
        if not isinstance(value, dict):
            return value
        data = dict(value)
        for canonical, aliases in (
            ("distance", ("w1", "w_distance")),
            ("time", ("w2", "w_time", "travel_time")),
            ("aqi", ("w3", "w_aqi", "air_quality")),
        ):
            if canonical in data:
                continue
            for key in aliases:
                if key in data:
                    data[canonical] = data[key]
                    break
        return data

    @field_validator("distance", "time", "aqi")
    @classmethod
    def finite(cls, v: float) -> float:
        if math.isnan(v) or math.isinf(v):
            raise ValueError("weight must be finite")
        return v

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.distance, self.time, self.aqi)

    def normalised(self) -> tuple[float, float, float]:
        s = self.distance + self.time + self.aqi
        if s <= 0:
            return (1.0 / 3.0, 1.0 / 3.0, 1.0 / 3.0)
        return (self.distance / s, self.time / s, self.aqi / s)


SHORTEST_WEIGHTS = Weights(distance=1, time=0, aqi=0)
FASTEST_WEIGHTS = Weights(distance=0, time=1, aqi=0)
CLEANEST_WEIGHTS = Weights(distance=0, time=0, aqi=1)


class TraversedEdge(BaseModel):
    model_config = ConfigDict(frozen=True)

    from_node: str
    to_node: str
    distance_km: float
    travel_time_min: float
    average_aqi: float
    street_name: str


class DirectionStep(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: StepType
    turn_type: TurnType
    instruction: str
    icon: str
    street_name: str
    distance_km: float = 0.0
    time_min: float = 0.0
    cumulative_distance_km: float = 0.0
    cumulative_time_min: int = 0
    aqi: int | None = None
    node_id: str


class RouteResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    found: bool
    path: list[str] = Field(default_factory=list)
    path_edges: list[TraversedEdge] = Field(default_factory=list)
    total_distance_km: float = 0.0
    total_time_min: float = 0.0
    # inf when unreachable; serialised as null in JSON.
    total_cost: float = 0.0
    average_aqi: float = 0.0
    directions: list[DirectionStep] = Field(default_factory=list)

    @field_validator("total_cost", mode="before")
    @classmethod
    def coerce_null_cost(cls, v: object) -> object:
        return math.inf if v is None else v

    @field_serializer("total_cost", when_used="json")
    def serialize_total_cost(self, v: float) -> float | None:
        return None if math.isinf(v) else v


class LabeledRoute(RouteResult):
    kind: RouteKind
    label: str
    color: str
    # Plain-language reading of the request weights; custom route only.
    preference: str | None = None


class AlternativesBundle(BaseModel):
    snapshot_version: int
    start: str
    end: str
    weights: Weights
    computed_at_utc: str
    routes: dict[RouteKind, LabeledRoute]


class RouteRequest(BaseModel):
    start: str = Field(..., min_length=1)
    end: str = Field(..., min_length=1)
    weights: Weights = Field(default_factory=lambda: Weights(distance=0.33, time=0.33, aqi=0.34))


class AlternativesRequest(RouteRequest):
    pass


class NodeOut(BaseModel):
    id: str
    name: str
    address: str
    lat: float
    lng: float


class NodeListResponse(BaseModel):
    nodes: list[NodeOut]
    default_start: str
    default_end: str


class EdgeIn(BaseModel):
    from_node: str = Field(..., alias="from")
    to_node: str = Field(..., alias="to")
    distance_km: float = Field(..., gt=0)
    time_min: float = Field(..., gt=0)
    aqi: float = Field(..., ge=0)
    street_name: str = "Unnamed road"

    model_config = ConfigDict(populate_by_name=True)


class EdgeReplaceRequest(BaseModel):
    edges: list[EdgeIn] = Field(..., min_length=1)


class EdgeListResponse(BaseModel):
    snapshot_version: int
    published_at_utc: str
    edges: list[EdgeIn]


class RefreshStatusResponse(BaseModel):
    watching: bool
    computed_count: int
    coalesced_count: int
    last_snapshot_version: int | None = None


class SnapshotStatusResponse(BaseModel):
    snapshot_version: int
    published_at_utc: str
    edge_count: int
    simulation_running: bool
    refresh: RefreshStatusResponse
    cache: dict[str, int] = Field(default_factory=dict)


class RouteAQIRequest(BaseModel):
    path: list[str] = Field(default_factory=list)
    coordinates: list[tuple[float, float]] = Field(default_factory=list)


class RouteAQIResponse(BaseModel):
    average: int
    min: int
    max: int
    samples: int
    provider: str


class LocationAQIResponse(BaseModel):
    lat: float
    lng: float
    aqi: int
    category: str
    color: str
    description: str
    fetched_at_utc: str
    provider: str
