"""Simulated point and route air-quality readings.

Readings come from a deterministic-shape model (distance from the city centre,
rush hour, random noise) rather than a live provider, and are cached by
coordinates rounded to three decimals.
"""

from __future__ import annotations

import math
import random
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from threading import Lock
from typing import Any

from .settings import settings

AQI_CATEGORIES: tuple[dict[str, Any], ...] = (
    {
        "max": 50,
        "label": "Good",
        "color": "#22c55e",
        "description": "Air quality is satisfactory",
    },
    {
        "max": 100,
        "label": "Moderate",
        "color": "#84cc16",
        "description": "Acceptable for most people",
    },
    {
        "max": 150,
        "label": "Unhealthy for Sensitive Groups",
        "color": "#f59e0b",
        "description": "Sensitive groups may experience health effects",
    },
    {
        "max": 200,
        "label": "Unhealthy",
        "color": "#ef4444",
        "description": "Everyone may begin to experience health effects",
    },
    {
        "max": 300,
        "label": "Very Unhealthy",
        "color": "#7c2d12",
        "description": "Health warnings of emergency conditions",
    },
    {
        "max": 500,
        "label": "Hazardous",
        "color": "#4a044e",
        "description": "Health alert: everyone may experience serious effects",
    },
)

RUSH_HOURS = frozenset({7, 8, 9, 17, 18, 19})
LOCATION_AQI_FLOOR = 15
LOCATION_AQI_CEILING = 200
EMPTY_ROUTE_AQI = 50
PROVIDER_NAME = "simulated"


def aqi_category(aqi: float) -> dict[str, Any]:
    for category in AQI_CATEGORIES:
        if aqi <= category["max"]:
            return dict(category)
    return dict(AQI_CATEGORIES[-1])


def sample_location_aqi(
    lat: float,
    lng: float,
    *,
    now: datetime,
    rng: random.Random,
    center: tuple[float, float],
) -> int:
    distance_deg = math.hypot(lat - center[0], lng - center[1])
    value = 70.0 - min(distance_deg * 100.0, 30.0)
    if now.hour in RUSH_HOURS:
        value += 20.0
    value += (rng.random() - 0.5) * 30.0
    value = max(float(LOCATION_AQI_FLOOR), min(float(LOCATION_AQI_CEILING), value))
    return int(math.floor(value + 0.5))


@dataclass
class _CachedReading:
    inserted_at: float
    aqi: int
    fetched_at_utc: str


class LocationAQIService:
    def __init__(
        self,
        *,
        ttl_s: int | None = None,
        center: tuple[float, float] | None = None,
        sample_points: int | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._ttl_s = max(1, int(ttl_s if ttl_s is not None else settings.location_aqi_cache_ttl_s))
        self._center = center or (settings.location_aqi_center_lat, settings.location_aqi_center_lon)
        self._sample_points = max(
            1, int(sample_points if sample_points is not None else settings.route_aqi_sample_points)
        )
        self._rng = rng or random.Random()
        self._clock = clock or (lambda: datetime.now().astimezone())
        self._lock = Lock()
        self._items: dict[tuple[float, float], _CachedReading] = {}

    @staticmethod
    def cache_key(lat: float, lng: float) -> tuple[float, float]:
        return (round(float(lat), 3), round(float(lng), 3))

    def _reading(self, lat: float, lng: float) -> _CachedReading:
        key = self.cache_key(lat, lng)
        with self._lock:
            entry = self._items.get(key)
            if entry is not None and (time.time() - entry.inserted_at) <= self._ttl_s:
                return entry
            aqi = sample_location_aqi(lat, lng, now=self._clock(), rng=self._rng, center=self._center)
            entry = _CachedReading(
                inserted_at=time.time(),
                aqi=aqi,
                fetched_at_utc=datetime.now(UTC).isoformat(),
            )
            self._items[key] = entry
            return entry

    def location_aqi(self, lat: float, lng: float) -> dict[str, Any]:
        entry = self._reading(lat, lng)
        category = aqi_category(entry.aqi)
        return {
            "lat": float(lat),
            "lng": float(lng),
            "aqi": entry.aqi,
            "category": category["label"],
            "color": category["color"],
            "description": category["description"],
            "fetched_at_utc": entry.fetched_at_utc,
            "provider": PROVIDER_NAME,
        }

    def route_aqi(self, coordinates: Sequence[tuple[float, float]]) -> dict[str, Any]:
        """Average, min and max over up to ``sample_points`` evenly spaced points."""
        if not coordinates:
            return {
                "average": EMPTY_ROUTE_AQI,
                "min": EMPTY_ROUTE_AQI,
                "max": EMPTY_ROUTE_AQI,
                "samples": 0,
            }
        step = max(1, len(coordinates) // self._sample_points)
        sampled = list(coordinates[::step])[: self._sample_points]
        values = [self._reading(lat, lng).aqi for lat, lng in sampled]
        return {
            "average": int(math.floor(sum(values) / len(values) + 0.5)),
            "min": min(values),
            "max": max(values),
            "samples": len(values),
        }

    def clear(self) -> int:
        with self._lock:
            cleared = len(self._items)
            self._items.clear()
            return cleared
