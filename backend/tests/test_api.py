from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from airroute import route_cache
from airroute.main import app
from airroute.settings import settings


@pytest.fixture()
def client(monkeypatch: pytest.MonkeyPatch) -> Iterator[TestClient]:
    monkeypatch.setattr(settings, "aqi_simulation_enabled", False)
    monkeypatch.setattr(settings, "network_asset_path", "")
    monkeypatch.setattr(
        route_cache,
        "ROUTE_CACHE",
        route_cache.RouteCacheStore(
            ttl_s=settings.route_cache_ttl_s,
            max_entries=settings.route_cache_max_entries,
        ),
    )
    route_cache.clear_route_cache()
    with TestClient(app) as c:
        yield c
    route_cache.clear_route_cache()


def _payload(start: str = "W", end: str = "T") -> dict[str, object]:
    return {"start": start, "end": end, "weights": {"distance": 0.33, "time": 0.33, "aqi": 0.34}}


def test_root_and_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/").json()["docs"] == "/docs"


def test_nodes_listing_and_nearest(client: TestClient) -> None:
    body = client.get("/nodes").json()
    assert len(body["nodes"]) == 24
    assert body["default_start"] == "W"
    assert body["default_end"] == "T"

    nearest = client.get("/nodes/nearest", params={"lat": 51.5139, "lng": -0.2049})
    assert nearest.status_code == 200
    assert nearest.json()["id"] == "W"
    assert client.get("/nodes/nearest", params={"lat": 95, "lng": 0}).status_code == 422


def test_route_returns_directions(client: TestClient) -> None:
    resp = client.post("/route", json=_payload())
    assert resp.status_code == 200
    body = resp.json()
    assert body["found"] is True
    assert body["path"][0] == "W" and body["path"][-1] == "T"
    assert body["directions"][0]["instruction"].startswith("Start at")
    assert body["directions"][-1]["type"] == "end"


def test_route_accepts_legacy_weight_aliases(client: TestClient) -> None:
    resp = client.post("/route", json={"start": "A", "end": "J", "weights": {"w1": 1, "w2": 0, "w3": 0}})
    assert resp.status_code == 200
    assert resp.json()["path"] == ["A", "J"]


def test_unknown_node_maps_to_404(client: TestClient) -> None:
    resp = client.post("/route", json=_payload(end="ZZ"))
    assert resp.status_code == 404
    detail = resp.json()["detail"]
    assert detail["reason_code"] == "invalid_node"
    assert detail["details"]["role"] == "end"


def test_negative_weights_rejected_by_validation(client: TestClient) -> None:
    resp = client.post("/route", json={"start": "W", "end": "T", "weights": {"distance": -1, "time": 0, "aqi": 0}})
    assert resp.status_code == 422


def test_alternatives_are_cached_per_snapshot(client: TestClient) -> None:
    first = client.post("/alternatives", json=_payload())
    assert first.status_code == 200
    body = first.json()
    assert list(body["routes"]) == ["custom", "shortest", "fastest", "cleanest"]
    assert body["snapshot_version"] == 0

    second = client.post("/alternatives", json=_payload())
    assert second.json()["computed_at_utc"] == body["computed_at_utc"]

    assert client.post("/aqi/simulate").status_code == 200
    third = client.post("/alternatives", json=_payload()).json()
    assert third["snapshot_version"] == 1
    assert client.get("/aqi/status").json()["cache"]["hits"] >= 1


def test_alternatives_cache_keeps_nearby_weights_apart(client: TestClient) -> None:
    first = client.post("/alternatives", json={"start": "W", "end": "T", "weights": [0.5, 0.5, 0.0]})
    second = client.post("/alternatives", json={"start": "W", "end": "T", "weights": [0.5, 0.5, 1e-7]})
    assert first.status_code == second.status_code == 200
    assert first.json()["weights"]["aqi"] == 0.0
    assert second.json()["weights"]["aqi"] == 1e-7
    assert client.get("/aqi/status").json()["cache"]["hits"] == 0


def test_watch_then_edge_update_refreshes_latest(client: TestClient) -> None:
    assert client.get("/alternatives/latest").status_code == 404

    watched = client.post("/alternatives/watch", json=_payload("A", "J"))
    assert watched.status_code == 200
    assert watched.json()["routes"]["shortest"]["path"] == ["A", "J"]

    edges = client.get("/edges").json()["edges"]
    for edge in edges:
        if edge["from"] == "A" and edge["to"] == "J":
            edge["distance_km"] = 9.0
    updated = client.put("/edges", json={"edges": edges})
    assert updated.status_code == 200
    assert updated.json()["snapshot_version"] == 1

    latest = client.get("/alternatives/latest").json()
    assert latest["snapshot_version"] == 1
    assert latest["routes"]["shortest"]["path"] == ["A", "E", "J"]

    status = client.get("/aqi/status").json()
    assert status["snapshot_version"] == 1
    assert status["simulation_running"] is False
    assert status["refresh"]["watching"] is True
    assert status["refresh"]["last_snapshot_version"] == 1


def test_edge_update_with_unknown_endpoint_is_422(client: TestClient) -> None:
    resp = client.put(
        "/edges",
        json={"edges": [{"from": "A", "to": "NOWHERE", "distance_km": 1, "time_min": 1, "aqi": 10}]},
    )
    assert resp.status_code == 422
    assert resp.json()["detail"]["reason_code"] == "unknown_edge_endpoint"
    assert client.get("/edges").json()["snapshot_version"] == 0


def test_location_aqi_endpoint(client: TestClient) -> None:
    resp = client.get("/aqi/location", params={"lat": 51.5074, "lng": -0.1278})
    assert resp.status_code == 200
    body = resp.json()
    assert 15 <= body["aqi"] <= 200
    assert body["provider"] == "simulated"
    assert body["category"] in {"Good", "Moderate", "Unhealthy for Sensitive Groups", "Unhealthy"}


def test_route_aqi_endpoint_samples_path_nodes(client: TestClient) -> None:
    route = client.post("/route", json=_payload()).json()
    resp = client.post("/aqi/route", json={"path": route["path"]})
    assert resp.status_code == 200
    body = resp.json()
    assert body["samples"] == min(len(route["path"]), 10)
    assert body["min"] <= body["average"] <= body["max"]
    assert body["provider"] == "simulated"

    empty = client.post("/aqi/route", json={}).json()
    assert empty["samples"] == 0
    assert empty["average"] == 50


def test_route_aqi_endpoint_rejects_unknown_node(client: TestClient) -> None:
    resp = client.post("/aqi/route", json={"path": ["W", "NOWHERE"]})
    assert resp.status_code == 404
    assert resp.json()["detail"]["details"]["node_id"] == "NOWHERE"
