from __future__ import annotations

import asyncio
import contextlib
import logging
import random
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from threading import Lock

from .logging_utils import log_event
from .road_graph import GraphEdge, RoadNetwork, validate_edge


@dataclass(frozen=True)
class EdgeSnapshot:
    version: int
    edges: tuple[GraphEdge, ...]
    published_at_utc: str


SnapshotCallback = Callable[[EdgeSnapshot], None]


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class EdgeSnapshotStore:
    """Current edge list as an immutable, versioned snapshot.

    Readers take whatever ``current()`` returns and keep it for the whole
    computation; publishing swaps in a new tuple and never touches the old one.
    """

    def __init__(self, network: RoadNetwork, edges: Iterable[GraphEdge]) -> None:
        self._network = network
        self._lock = Lock()
        self._subscribers: dict[int, SnapshotCallback] = {}
        self._next_token = 0
        self._snapshot = EdgeSnapshot(version=0, edges=self._freeze(edges), published_at_utc=_now_iso())

    @property
    def network(self) -> RoadNetwork:
        return self._network

    def _freeze(self, edges: Iterable[GraphEdge]) -> tuple[GraphEdge, ...]:
        frozen = tuple(edges)
        for edge in frozen:
            validate_edge(edge, self._network.nodes)
        return frozen

    def current(self) -> EdgeSnapshot:
        with self._lock:
            return self._snapshot

    def publish(self, edges: Iterable[GraphEdge]) -> EdgeSnapshot:
        frozen = self._freeze(edges)
        with self._lock:
            snapshot = EdgeSnapshot(
                version=self._snapshot.version + 1,
                edges=frozen,
                published_at_utc=_now_iso(),
            )
            self._snapshot = snapshot
            subscribers = list(self._subscribers.values())

        log_event(
            "edge_snapshot_published",
            snapshot_version=snapshot.version,
            edge_count=len(frozen),
            subscriber_count=len(subscribers),
        )
        for callback in subscribers:
            try:
                callback(snapshot)
            except Exception as exc:
                log_event(
                    "edge_snapshot_subscriber_failed",
                    level=logging.ERROR,
                    snapshot_version=snapshot.version,
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
        return snapshot

    def subscribe(self, callback: SnapshotCallback) -> Callable[[], None]:
        with self._lock:
            token = self._next_token
            self._next_token += 1
            self._subscribers[token] = callback

        def unsubscribe() -> None:
            with self._lock:
                self._subscribers.pop(token, None)

        return unsubscribe


def fluctuate_aqi(
    edges: Iterable[GraphEdge],
    rng: random.Random,
    *,
    ratio: float,
    floor: float,
    ceiling: float,
) -> tuple[GraphEdge, ...]:
    out: list[GraphEdge] = []
    for edge in edges:
        aqi = edge.average_aqi
        moved = aqi + (rng.random() - 0.5) * aqi * ratio
        out.append(edge.with_aqi(max(floor, min(ceiling, moved))))
    return tuple(out)


class AQISimulator:
    """Periodically publishes a fluctuated copy of the current edge set."""

    def __init__(
        self,
        store: EdgeSnapshotStore,
        *,
        interval_s: float,
        ratio: float,
        floor: float,
        ceiling: float,
        seed: int | None = None,
    ) -> None:
        self._store = store
        self._interval_s = max(0.01, float(interval_s))
        self._ratio = ratio
        self._floor = floor
        self._ceiling = ceiling
        self._rng = random.Random(seed)
        self._task: asyncio.Task[None] | None = None
        self.tick_count = 0
        # A tick reads and publishes as one unit.
        self._step_lock = Lock()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def step(self) -> EdgeSnapshot:
        with self._step_lock:
            current = self._store.current()
            snapshot = self._store.publish(
                fluctuate_aqi(
                    current.edges,
                    self._rng,
                    ratio=self._ratio,
                    floor=self._floor,
                    ceiling=self._ceiling,
                )
            )
            self.tick_count += 1
            tick = self.tick_count
        log_event(
            "aqi_simulation_tick",
            tick=tick,
            snapshot_version=snapshot.version,
        )
        return snapshot

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval_s)
            try:
                # Subscribers recompute routes synchronously; keep that off the loop.
                await asyncio.to_thread(self.step)
            except Exception as exc:
                log_event(
                    "aqi_simulation_tick_failed",
                    level=logging.ERROR,
                    error=str(exc),
                    error_type=type(exc).__name__,
                )

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        task = self._task
        self._task = None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
