from __future__ import annotations

import time
from collections.abc import Callable
from threading import Lock
from typing import Any

from .alternatives import compute_alternatives
from .aqi_feed import EdgeSnapshot
from .logging_utils import log_event
from .models import AlternativesBundle, AlternativesRequest
from .road_graph import RoadNetwork

ComputeFn = Callable[..., AlternativesBundle]


class RouteRefresher:
    """Recomputes the watched alternatives whenever a new edge snapshot lands.

    At most one recomputation runs at a time. Snapshots that arrive while one
    is running go into a single pending slot; a newer one replaces an older
    one, and the running worker drains the slot before it returns.
    """

    def __init__(self, network: RoadNetwork, *, compute_fn: ComputeFn = compute_alternatives) -> None:
        self._network = network
        self._compute_fn = compute_fn
        self._lock = Lock()
        self._request: AlternativesRequest | None = None
        self._pending: EdgeSnapshot | None = None
        self._running = False
        self._latest: AlternativesBundle | None = None
        self._latest_version: int | None = None
        self._computed_count = 0
        self._coalesced_count = 0

    def _compute(self, request: AlternativesRequest, snapshot: EdgeSnapshot) -> AlternativesBundle:
        return self._compute_fn(
            self._network,
            snapshot.edges,
            start=request.start,
            end=request.end,
            weights=request.weights,
            snapshot_version=snapshot.version,
        )

    def _store_result(self, bundle: AlternativesBundle, version: int) -> None:
        # Caller holds the lock.
        self._computed_count += 1
        if self._latest_version is None or version >= self._latest_version:
            self._latest = bundle
            self._latest_version = version

    def watch(self, request: AlternativesRequest, snapshot: EdgeSnapshot) -> AlternativesBundle:
        """Make ``request`` the live one and compute it against ``snapshot`` now."""
        bundle = self._compute(request, snapshot)
        with self._lock:
            self._request = request
            self._latest = None
            self._latest_version = None
            self._store_result(bundle, snapshot.version)
        return bundle

    def unwatch(self) -> None:
        with self._lock:
            self._request = None
            self._pending = None

    def on_snapshot(self, snapshot: EdgeSnapshot) -> None:
        dropped: int | None = None
        with self._lock:
            if self._request is None:
                return
            if self._latest_version is not None and snapshot.version <= self._latest_version:
                return
            if self._pending is not None:
                self._coalesced_count += 1
                if snapshot.version < self._pending.version:
                    return
                dropped = self._pending.version
            self._pending = snapshot
            start_drain = not self._running
            self._running = True
        if dropped is not None:
            log_event(
                "route_refresh_coalesced",
                dropped_version=dropped,
                snapshot_version=snapshot.version,
            )
        if start_drain:
            self._drain()

    def _drain(self) -> None:
        while True:
            with self._lock:
                snapshot = self._pending
                request = self._request
                self._pending = None
                if snapshot is None or request is None:
                    self._running = False
                    return

            t0 = time.perf_counter()
            try:
                bundle = self._compute(request, snapshot)
            except Exception:
                with self._lock:
                    self._running = False
                raise

            with self._lock:
                # The watched request may have changed mid-flight; drop stale output.
                if self._request is request:
                    self._store_result(bundle, snapshot.version)
            log_event(
                "route_refresh_completed",
                snapshot_version=snapshot.version,
                start=request.start,
                end=request.end,
                duration_ms=round((time.perf_counter() - t0) * 1000, 2),
            )

    def latest(self) -> AlternativesBundle | None:
        with self._lock:
            return self._latest

    @property
    def watching(self) -> bool:
        with self._lock:
            return self._request is not None

    def stats(self) -> dict[str, Any]:
        with self._lock:
            return {
                "watching": self._request is not None,
                "computed_count": self._computed_count,
                "coalesced_count": self._coalesced_count,
                "last_snapshot_version": self._latest_version,
            }
