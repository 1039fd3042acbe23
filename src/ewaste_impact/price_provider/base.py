"""Base types and caching logic for commodity price providers."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Final

import httpx

from ewaste_impact.emissions_provider.base import CacheStats

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PriceQuote:
    """Material prices in USD per gram."""

    gold: float
    copper: float
    rare_earths: float
    aluminum: float
    provider_version: str | None = None


class PriceProvider(ABC):
    """Abstract price provider with a single-entry TTL cache."""

    def __init__(self, ttl_seconds: int = 300) -> None:
        self._ttl_seconds: Final[int] = ttl_seconds
        self._cached: tuple[float, PriceQuote] | None = None
        self._cache_hits = 0
        self._cache_misses = 0

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    async def _get_quote_uncached(self) -> PriceQuote | None:
        """Fetch current prices without consulting the cache."""

    async def get_prices(self) -> PriceQuote | None:
        """Return current prices, or ``None`` when the source is unavailable."""

        now = time.time()
        if self._cached is not None:
            cached_at, quote = self._cached
            if now - cached_at <= self._ttl_seconds:
                self._cache_hits += 1
                return quote
            self._cached = None

        self._cache_misses += 1
        LOGGER.debug(
            "Price cache miss", extra={"provider": self.name, "cache_event": "miss"}
        )
        quote = await self._get_quote_uncached()
        if quote is not None:
            self._cached = (now, quote)
        return quote

    def get_cache_stats(self) -> CacheStats:
        return CacheStats(hits=self._cache_hits, misses=self._cache_misses)


class FallbackPriceProvider(PriceProvider):
    """Try a sequence of price providers until one succeeds."""

    def __init__(
        self, providers: Iterable[PriceProvider], ttl_seconds: int = 300
    ) -> None:
        super().__init__(ttl_seconds=ttl_seconds)
        self._providers = tuple(providers)

    @property
    def providers(self) -> tuple[PriceProvider, ...]:
        return self._providers

    async def _get_quote_uncached(self) -> PriceQuote | None:
        for provider in self._providers:
            try:
                quote = await provider.get_prices()
            except (ValueError, ConnectionError, httpx.HTTPError) as exc:
                LOGGER.warning(
                    "Fallback price provider invocation failed",
                    extra={
                        "provider": provider.name,
                        "error_type": type(exc).__name__,
                    },
                    exc_info=exc,
                )
                continue
            if quote is not None:
                return quote
        return None
