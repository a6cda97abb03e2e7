from __future__ import annotations

import asyncio
import logging
import time
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Annotated, NoReturn

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware

from .alternatives import compute_alternatives
from .aqi_feed import AQISimulator, EdgeSnapshot, EdgeSnapshotStore
from .location_aqi import PROVIDER_NAME, LocationAQIService
from .logging_utils import log_event
from .london_network import default_edges, default_network
from .models import (
    AlternativesBundle,
    AlternativesRequest,
    EdgeIn,
    EdgeListResponse,
    EdgeReplaceRequest,
    LocationAQIResponse,
    NodeListResponse,
    NodeOut,
    RefreshStatusResponse,
    RouteAQIRequest,
    RouteAQIResponse,
    RouteRequest,
    RouteResult,
    SnapshotStatusResponse,
)
from .road_graph import GraphEdge, GraphNode, RoadNetwork, find_nearest_node, load_network_json
from .route_cache import alternatives_cache_key, get_cached_alternatives, route_cache_stats, set_cached_alternatives
from .route_refresher import RouteRefresher
from .routing_errors import InvalidNodeError, RoutingDataError, invalid_node
from .settings import settings
from .shortest_path import find_route


@dataclass
class RouterRuntime:
    network: RoadNetwork
    store: EdgeSnapshotStore
    refresher: RouteRefresher
    simulator: AQISimulator
    location_aqi: LocationAQIService


def load_configured_network() -> tuple[RoadNetwork, tuple[GraphEdge, ...]]:
    if settings.network_asset_path.strip():
        return load_network_json(settings.network_asset_path.strip())
    return default_network(), default_edges()


def build_runtime() -> RouterRuntime:
    network, edges = load_configured_network()
    store = EdgeSnapshotStore(network, edges)
    refresher = RouteRefresher(network)
    store.subscribe(refresher.on_snapshot)
    simulator = AQISimulator(
        store,
        interval_s=settings.aqi_refresh_interval_s,
        ratio=settings.aqi_fluctuation_ratio,
        floor=settings.aqi_simulation_floor,
        ceiling=settings.aqi_simulation_ceiling,
        seed=settings.aqi_simulation_seed,
    )
    return RouterRuntime(
        network=network,
        store=store,
        refresher=refresher,
        simulator=simulator,
        location_aqi=LocationAQIService(),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    runtime = build_runtime()
    app.state.runtime = runtime
    if settings.aqi_simulation_enabled:
        runtime.simulator.start()
    yield
    await runtime.simulator.stop()


app = FastAPI(title="Clean-Air Router", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


def router_runtime(request: Request) -> RouterRuntime:
    runtime: RouterRuntime | None = getattr(request.app.state, "runtime", None)  # type: ignore[attr-defined]
    if runtime is None:
        raise HTTPException(status_code=503, detail="router runtime not initialised")
    return runtime


RuntimeDep = Annotated[RouterRuntime, Depends(router_runtime)]


def _reject(exc: RoutingDataError, *, request_id: str, endpoint: str) -> NoReturn:
    status = 404 if isinstance(exc, InvalidNodeError) else 422
    detail = exc.as_detail()
    log_event(
        "routing_request_rejected",
        level=logging.WARNING,
        request_id=request_id,
        endpoint=endpoint,
        status_code=status,
        reason_code=detail["reason_code"],
        reason_message=detail["message"],
        details=detail["details"],
    )
    raise HTTPException(status_code=status, detail=detail) from exc


def _node_out(node: GraphNode) -> NodeOut:
    return NodeOut(id=node.id, name=node.name, address=node.address, lat=node.lat, lng=node.lng)


def _edge_out(edge: GraphEdge) -> EdgeIn:
    return EdgeIn(
        from_node=edge.from_node,
        to_node=edge.to_node,
        distance_km=edge.distance_km,
        time_min=edge.travel_time_min,
        aqi=edge.average_aqi,
        street_name=edge.street_name,
    )


def _edge_list(snapshot: EdgeSnapshot) -> EdgeListResponse:
    return EdgeListResponse(
        snapshot_version=snapshot.version,
        published_at_utc=snapshot.published_at_utc,
        edges=[_edge_out(e) for e in snapshot.edges],
    )


def _status(runtime: RouterRuntime) -> SnapshotStatusResponse:
    snapshot = runtime.store.current()
    return SnapshotStatusResponse(
        snapshot_version=snapshot.version,
        published_at_utc=snapshot.published_at_utc,
        edge_count=len(snapshot.edges),
        simulation_running=runtime.simulator.running,
        refresh=RefreshStatusResponse(**runtime.refresher.stats()),
        cache=route_cache_stats(),
    )


@app.get("/")
async def root() -> dict[str, str]:
    return {"message": "Backend is running. Visit /docs for the API UI.", "docs": "/docs"}


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/nodes", response_model=NodeListResponse)
async def list_nodes(runtime: RuntimeDep) -> NodeListResponse:
    return NodeListResponse(
        nodes=[_node_out(n) for n in runtime.network.nodes.values()],
        default_start=settings.default_start_node,
        default_end=settings.default_end_node,
    )


@app.get("/nodes/nearest", response_model=NodeOut)
async def nearest_node(
    runtime: RuntimeDep,
    lat: Annotated[float, Query(ge=-90, le=90)],
    lng: Annotated[float, Query(ge=-180, le=180)],
) -> NodeOut:
    node = find_nearest_node(runtime.network, lat, lng)
    if node is None:
        raise HTTPException(status_code=404, detail="network has no nodes")
    return _node_out(node)


@app.post("/route", response_model=RouteResult)
async def compute_route(req: RouteRequest, runtime: RuntimeDep) -> RouteResult:
    request_id = str(uuid.uuid4())
    t0 = time.perf_counter()
    snapshot = runtime.store.current()
    try:
        result = find_route(
            runtime.network,
            snapshot.edges,
            start=req.start,
            end=req.end,
            weights=req.weights,
        )
    except RoutingDataError as e:
        _reject(e, request_id=request_id, endpoint="/route")

    log_event(
        "route_request",
        request_id=request_id,
        start=req.start,
        end=req.end,
        weights=req.weights.model_dump(),
        snapshot_version=snapshot.version,
        found=result.found,
        duration_ms=round((time.perf_counter() - t0) * 1000, 2),
    )
    return result


@app.post("/alternatives", response_model=AlternativesBundle)
async def alternatives(req: AlternativesRequest, runtime: RuntimeDep) -> AlternativesBundle:
    request_id = str(uuid.uuid4())
    t0 = time.perf_counter()
    snapshot = runtime.store.current()
    key = alternatives_cache_key(snapshot.version, req.start, req.end, req.weights)

    bundle = get_cached_alternatives(key)
    cache_hit = bundle is not None
    if bundle is None:
        try:
            bundle = compute_alternatives(
                runtime.network,
                snapshot.edges,
                start=req.start,
                end=req.end,
                weights=req.weights,
                snapshot_version=snapshot.version,
            )
        except RoutingDataError as e:
            _reject(e, request_id=request_id, endpoint="/alternatives")
        set_cached_alternatives(key, bundle)

    log_event(
        "alternatives_request",
        request_id=request_id,
        start=req.start,
        end=req.end,
        weights=req.weights.model_dump(),
        snapshot_version=snapshot.version,
        cache_hit=cache_hit,
        duration_ms=round((time.perf_counter() - t0) * 1000, 2),
    )
    return bundle


@app.post("/alternatives/watch", response_model=AlternativesBundle)
async def watch_alternatives(req: AlternativesRequest, runtime: RuntimeDep) -> AlternativesBundle:
    request_id = str(uuid.uuid4())
    t0 = time.perf_counter()
    snapshot = runtime.store.current()
    try:
        bundle = runtime.refresher.watch(req, snapshot)
    except RoutingDataError as e:
        _reject(e, request_id=request_id, endpoint="/alternatives/watch")

    log_event(
        "alternatives_watch",
        request_id=request_id,
        start=req.start,
        end=req.end,
        snapshot_version=snapshot.version,
        duration_ms=round((time.perf_counter() - t0) * 1000, 2),
    )
    return bundle


@app.get("/alternatives/latest", response_model=AlternativesBundle)
async def latest_alternatives(runtime: RuntimeDep) -> AlternativesBundle:
    bundle = runtime.refresher.latest()
    if bundle is None:
        raise HTTPException(status_code=404, detail="no watched alternatives yet")
    return bundle


@app.get("/edges", response_model=EdgeListResponse)
async def list_edges(runtime: RuntimeDep) -> EdgeListResponse:
    return _edge_list(runtime.store.current())


@app.put("/edges", response_model=EdgeListResponse)
async def replace_edges(req: EdgeReplaceRequest, runtime: RuntimeDep) -> EdgeListResponse:
    request_id = str(uuid.uuid4())
    t0 = time.perf_counter()
    edges = [
        GraphEdge(
            from_node=e.from_node,
            to_node=e.to_node,
            distance_km=e.distance_km,
            travel_time_min=e.time_min,
            average_aqi=e.aqi,
            street_name=e.street_name,
        )
        for e in req.edges
    ]
    try:
        # Subscribers recompute watched routes synchronously; keep that off the loop.
        snapshot = await asyncio.to_thread(runtime.store.publish, edges)
    except RoutingDataError as e:
        _reject(e, request_id=request_id, endpoint="/edges")

    log_event(
        "edges_replaced",
        request_id=request_id,
        snapshot_version=snapshot.version,
        edge_count=len(snapshot.edges),
        duration_ms=round((time.perf_counter() - t0) * 1000, 2),
    )
    return _edge_list(snapshot)


@app.get("/aqi/status", response_model=SnapshotStatusResponse)
async def aqi_status(runtime: RuntimeDep) -> SnapshotStatusResponse:
    return _status(runtime)


@app.post("/aqi/simulate", response_model=SnapshotStatusResponse)
async def simulate_tick(runtime: RuntimeDep) -> SnapshotStatusResponse:
    await asyncio.to_thread(runtime.simulator.step)
    return _status(runtime)


@app.get("/aqi/location", response_model=LocationAQIResponse)
async def location_aqi(
    runtime: RuntimeDep,
    lat: Annotated[float, Query(ge=-90, le=90)],
    lng: Annotated[float, Query(ge=-180, le=180)],
) -> LocationAQIResponse:
    return LocationAQIResponse(**runtime.location_aqi.location_aqi(lat, lng))


@app.post("/aqi/route", response_model=RouteAQIResponse)
async def route_aqi(req: RouteAQIRequest, runtime: RuntimeDep) -> RouteAQIResponse:
    request_id = str(uuid.uuid4())
    coordinates = list(req.coordinates)
    for node_id in req.path:
        node = runtime.network.nodes.get(node_id)
        if node is None:
            _reject(invalid_node(node_id, role="path"), request_id=request_id, endpoint="/aqi/route")
        coordinates.append((node.lat, node.lng))
    summary = runtime.location_aqi.route_aqi(coordinates)
    log_event("route_aqi_request", request_id=request_id, samples=summary["samples"], average=summary["average"])
    return RouteAQIResponse(**summary, provider=PROVIDER_NAME)
