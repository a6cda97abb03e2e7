from __future__ import annotations

import json
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from decimal import Decimal
from pathlib import Path
from typing import Any

from .routing_errors import MalformedEdgeError, RoutingDataError

EARTH_RADIUS_M = 6_371_000.0


@dataclass(frozen=True)
class GraphNode:
    id: str
    name: str
    address: str
    lat: float
    lng: float


@dataclass(frozen=True)
class GraphEdge:
    from_node: str
    to_node: str
    distance_km: float
    travel_time_min: float
    average_aqi: float
    street_name: str

    def with_aqi(self, average_aqi: float) -> GraphEdge:
        return replace(self, average_aqi=float(average_aqi))


@dataclass(frozen=True)
class AdjacentEdge:
    to: str
    distance_km: float
    travel_time_min: float
    average_aqi: float
    street_name: str


@dataclass(frozen=True)
class RoadNetwork:
    """Fixed node table for one graph instance. Edges travel separately as snapshots."""

    nodes: Mapping[str, GraphNode]
    source: str = "builtin"

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.nodes

    def node(self, node_id: str) -> GraphNode:
        return self.nodes[node_id]


Adjacency = dict[str, tuple[AdjacentEdge, ...]]


def _haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = phi2 - phi1
    dlambda = math.radians(lon2 - lon1)
    a = (
        math.sin(dphi / 2.0) ** 2
        + (math.cos(phi1) * math.cos(phi2) * (math.sin(dlambda / 2.0) ** 2))
    )
    return 2.0 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(max(0.0, a))))


def _finite(value: float) -> bool:
    return not (math.isnan(value) or math.isinf(value))


def validate_edge(edge: GraphEdge, nodes: Mapping[str, GraphNode] | None = None) -> GraphEdge:
    """Fail fast on an edge that would corrupt the search.

    Distance and travel time must be positive, AQI non-negative, all finite.
    When ``nodes`` is given, both endpoints must be declared.
    """
    values = {
        "distance_km": edge.distance_km,
        "travel_time_min": edge.travel_time_min,
        "average_aqi": edge.average_aqi,
    }
    details: dict[str, Any] = {"from": edge.from_node, "to": edge.to_node, "street": edge.street_name}
    for name, value in values.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not _finite(float(value)):
            raise MalformedEdgeError(
                reason_code="malformed_edge",
                message=f"edge {edge.from_node}->{edge.to_node} has non-finite {name}",
                details={**details, "field": name, "value": repr(value)},
            )
    if edge.distance_km <= 0 or edge.travel_time_min <= 0:
        raise MalformedEdgeError(
            reason_code="malformed_edge",
            message=f"edge {edge.from_node}->{edge.to_node} must have positive distance and time",
            details={**details, "distance_km": edge.distance_km, "travel_time_min": edge.travel_time_min},
        )
    if edge.average_aqi < 0:
        raise MalformedEdgeError(
            reason_code="malformed_edge",
            message=f"edge {edge.from_node}->{edge.to_node} has negative AQI",
            details={**details, "average_aqi": edge.average_aqi},
        )
    if nodes is not None:
        for endpoint in (edge.from_node, edge.to_node):
            if endpoint not in nodes:
                raise MalformedEdgeError(
                    reason_code="unknown_edge_endpoint",
                    message=f"edge {edge.from_node}->{edge.to_node} references unknown node {endpoint!r}",
                    details={**details, "node_id": endpoint},
                )
    return edge


def build_adjacency(nodes: Mapping[str, GraphNode], edges: Iterable[GraphEdge]) -> Adjacency:
    """Outgoing edges per node, in edge-list order.

    Every declared node is a key, with an empty tuple when it has no outgoing edges.
    """
    adjacency_mut: dict[str, list[AdjacentEdge]] = {node_id: [] for node_id in nodes}
    for edge in edges:
        validate_edge(edge, nodes)
        adjacency_mut[edge.from_node].append(
            AdjacentEdge(
                to=edge.to_node,
                distance_km=float(edge.distance_km),
                travel_time_min=float(edge.travel_time_min),
                average_aqi=float(edge.average_aqi),
                street_name=edge.street_name,
            )
        )
    return {node_id: tuple(out) for node_id, out in adjacency_mut.items()}


def find_nearest_node(network: RoadNetwork, lat: float, lng: float) -> GraphNode | None:
    nearest: GraphNode | None = None
    best_m = math.inf
    for node in network.nodes.values():
        d_m = _haversine_m(lat, lng, node.lat, node.lng)
        if d_m < best_m:
            best_m = d_m
            nearest = node
    return nearest


def _asset_error(message: str, **details: Any) -> RoutingDataError:
    return RoutingDataError(reason_code="malformed_network_asset", message=message, details=details or None)


def _coerce_float(raw: object) -> float | None:
    if not isinstance(raw, (int, float, str, Decimal)) or isinstance(raw, bool):
        return None
    try:
        return float(raw)
    except (TypeError, ValueError):
        return None


def _parse_node(raw: object) -> GraphNode:
    if not isinstance(raw, dict) or raw.get("id") is None:
        raise _asset_error("node record must be an object with an id")
    node_id = str(raw["id"])
    lat = _coerce_float(raw.get("lat"))
    lng = _coerce_float(raw.get("lng", raw.get("lon")))
    if lat is None or lng is None or not (-90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0):
        raise _asset_error(f"node {node_id!r} has invalid coordinates", node_id=node_id)
    return GraphNode(
        id=node_id,
        name=str(raw.get("name") or node_id),
        address=str(raw.get("address") or ""),
        lat=lat,
        lng=lng,
    )


def _parse_edges(raw: object) -> list[GraphEdge]:
    if not isinstance(raw, dict):
        raise _asset_error("edge record must be an object")
    u = raw.get("from")
    v = raw.get("to")
    if u is None or v is None:
        raise _asset_error("edge record needs from/to")
    distance = _coerce_float(raw.get("distance_km", raw.get("distance")))
    travel_time = _coerce_float(raw.get("time_min", raw.get("travelTime")))
    aqi = _coerce_float(raw.get("aqi", raw.get("averageAQI")))
    if distance is None or travel_time is None or aqi is None:
        raise _asset_error(f"edge {u}->{v} is missing distance/time/aqi", edge=f"{u}->{v}")
    street = str(raw.get("street_name", raw.get("streetName")) or "Unnamed road")
    forward = GraphEdge(
        from_node=str(u),
        to_node=str(v),
        distance_km=distance,
        travel_time_min=travel_time,
        average_aqi=aqi,
        street_name=street,
    )
    if bool(raw.get("bidirectional", False)):
        return [forward, replace(forward, from_node=forward.to_node, to_node=forward.from_node)]
    return [forward]


def parse_network_payload(payload: object, *, source: str = "payload") -> tuple[RoadNetwork, tuple[GraphEdge, ...]]:
    if not isinstance(payload, dict):
        raise _asset_error("network payload must be an object")
    raw_nodes = payload.get("nodes")
    raw_edges = payload.get("edges")
    if not isinstance(raw_nodes, list) or not isinstance(raw_edges, list):
        raise _asset_error("network payload must contain 'nodes' and 'edges' lists")

    nodes: dict[str, GraphNode] = {}
    for raw in raw_nodes:
        node = _parse_node(raw)
        if node.id in nodes:
            raise _asset_error(f"duplicate node id {node.id!r}", node_id=node.id)
        nodes[node.id] = node
    if not nodes:
        raise _asset_error("network has no nodes")

    edges: list[GraphEdge] = []
    for raw in raw_edges:
        edges.extend(_parse_edges(raw))
    for edge in edges:
        validate_edge(edge, nodes)
    return RoadNetwork(nodes=nodes, source=source), tuple(edges)


def load_network_json(path: str | Path) -> tuple[RoadNetwork, tuple[GraphEdge, ...]]:
    p = Path(path)
    try:
        payload = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise _asset_error(f"cannot read network asset {p}: {exc}", path=str(p)) from exc
    return parse_network_payload(payload, source=str(p))
