"""Base types and caching logic for grid emissions-factor providers."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Final

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class EmissionsReading:
    """A grid emissions factor observation in kg CO2e per kWh."""

    emissions_factor_kg_kwh: float
    provider_version: str | None = None
    conversion_version: str | None = None


@dataclass(frozen=True, slots=True, eq=False)
class CacheStats:
    """Expose cache hit/miss counters for providers."""

    hits: int
    misses: int

    def to_dict(self) -> dict[str, int]:
        return {"hits": self.hits, "misses": self.misses}

    def __eq__(self, other: object) -> bool:
        """Support equality checks against mappings."""

        if isinstance(other, CacheStats):
            return (self.hits, self.misses) == (other.hits, other.misses)
        if isinstance(other, Mapping):
            return other.get("hits") == self.hits and other.get("misses") == self.misses
        return NotImplemented

    def __getitem__(self, key: str) -> int:
        if key == "hits":
            return self.hits
        if key == "misses":
            return self.misses
        raise KeyError(key)


class EmissionsProvider(ABC):
    """Abstract base class implementing TTL caching of provider responses."""

    def __init__(self, ttl_seconds: int = 300) -> None:
        self._ttl_seconds: Final[int] = ttl_seconds
        self._cache: dict[str, tuple[float, EmissionsReading | None]] = {}
        self._cache_hits = 0
        self._cache_misses = 0

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    async def _get_reading_uncached(self, region: str) -> EmissionsReading | None:
        """Fetch an emissions reading without consulting the cache."""

    async def get_emissions(self, region: str) -> EmissionsReading | None:
        """Return an emissions reading using the built-in TTL cache.

        Args:
            region: Provider-specific region identifier.

        Returns:
            An :class:`EmissionsReading` when available, otherwise ``None``
            to indicate provider failure.
        """

        cached = self._cache.get(region)
        now = time.time()
        if cached is not None:
            cached_at, reading = cached
            if now - cached_at <= self._ttl_seconds:
                self._cache_hits += 1
                LOGGER.debug(
                    "Emissions cache hit",
                    extra={
                        "provider": self.name,
                        "region": region,
                        "cache_event": "hit",
                    },
                )
                return reading
            self._cache.pop(region, None)

        self._cache_misses += 1
        LOGGER.debug(
            "Emissions cache miss",
            extra={"provider": self.name, "region": region, "cache_event": "miss"},
        )
        reading = await self._get_reading_uncached(region)
        # Failures are not cached so the next request retries the source.
        if reading is not None:
            self._cache[region] = (now, reading)
        return reading

    def get_cache_stats(self) -> CacheStats:
        """Return cache hit/miss counters."""

        return CacheStats(hits=self._cache_hits, misses=self._cache_misses)
