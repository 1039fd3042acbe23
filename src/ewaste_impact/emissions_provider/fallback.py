"""Fallback chaining provider for emissions-factor lookups."""

from __future__ import annotations

import logging
from collections.abc import Iterable

import httpx

from ewaste_impact.emissions_provider.base import EmissionsProvider, EmissionsReading

LOGGER = logging.getLogger(__name__)


class FallbackEmissionsProvider(EmissionsProvider):
    """Try a sequence of providers until one succeeds."""

    def __init__(
        self, providers: Iterable[EmissionsProvider], ttl_seconds: int = 300
    ) -> None:
        super().__init__(ttl_seconds=ttl_seconds)
        self._providers = tuple(providers)

    @property
    def providers(self) -> tuple[EmissionsProvider, ...]:
        return self._providers

    async def _get_reading_uncached(self, region: str) -> EmissionsReading | None:
        """Return the first successful reading from the provider chain."""

        for provider in self._providers:
            try:
                reading = await provider.get_emissions(region)
            except (ValueError, ConnectionError, httpx.HTTPError) as exc:
                LOGGER.warning(
                    "Fallback provider invocation failed",
                    extra={
                        "provider": provider.name,
                        "region": region,
                        "error_type": type(exc).__name__,
                    },
                    exc_info=exc,
                )
                continue

            if reading is not None:
                return reading
        return None
