from __future__ import annotations

import time
from collections import OrderedDict
from dataclasses import dataclass
from threading import Lock

from .models import AlternativesBundle, Weights
from .settings import settings

CacheKey = tuple[int, str, str, tuple[float, float, float]]


def alternatives_cache_key(snapshot_version: int, start: str, end: str, weights: Weights) -> CacheKey:
    return (int(snapshot_version), start, end, weights.as_tuple())


@dataclass
class _RouteCacheEntry:
    inserted_at: float
    bundle: AlternativesBundle


class RouteCacheStore:
    def __init__(self, *, ttl_s: int, max_entries: int) -> None:
        self._ttl_s = max(1, int(ttl_s))
        self._max_entries = max(1, int(max_entries))
        self._lock = Lock()
        self._items: OrderedDict[CacheKey, _RouteCacheEntry] = OrderedDict()

        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def _is_expired(self, entry: _RouteCacheEntry) -> bool:
        return (time.time() - entry.inserted_at) > self._ttl_s

    def get(self, key: CacheKey) -> AlternativesBundle | None:
        with self._lock:
            entry = self._items.get(key)
            if entry is None:
                self._misses += 1
                return None

            if self._is_expired(entry):
                self._items.pop(key, None)
                self._misses += 1
                return None

            self._items.move_to_end(key)
            self._hits += 1
            return entry.bundle.model_copy(deep=True)

    def set(self, key: CacheKey, bundle: AlternativesBundle) -> None:
        stored = bundle.model_copy(deep=True)
        with self._lock:
            if key in self._items:
                self._items.move_to_end(key)
            self._items[key] = _RouteCacheEntry(inserted_at=time.time(), bundle=stored)

            while len(self._items) > self._max_entries:
                self._items.popitem(last=False)
                self._evictions += 1

    def clear(self) -> int:
        with self._lock:
            cleared = len(self._items)
            self._items.clear()
            return cleared

    def snapshot(self) -> dict[str, int]:
        with self._lock:
            return {
                "size": len(self._items),
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
                "ttl_s": self._ttl_s,
                "max_entries": self._max_entries,
            }


ROUTE_CACHE = RouteCacheStore(
    ttl_s=settings.route_cache_ttl_s,
    max_entries=settings.route_cache_max_entries,
)


def get_cached_alternatives(key: CacheKey) -> AlternativesBundle | None:
    return ROUTE_CACHE.get(key)


def set_cached_alternatives(key: CacheKey, bundle: AlternativesBundle) -> None:
    ROUTE_CACHE.set(key, bundle)


def clear_route_cache() -> int:
    return ROUTE_CACHE.clear()


def route_cache_stats() -> dict[str, int]:
    return ROUTE_CACHE.snapshot()
