"""Static emissions-factor provider backed by an in-memory table."""

from __future__ import annotations

from collections.abc import Mapping

from ewaste_impact.emissions_provider.base import EmissionsProvider, EmissionsReading


class StaticEmissionsProvider(EmissionsProvider):
    """Return static emissions factors (kg CO2e/kWh) from a region mapping."""

    def __init__(
        self, mapping: Mapping[str, float], default: float, ttl_seconds: int = 3600
    ) -> None:
        super().__init__(ttl_seconds=ttl_seconds)
        self._mapping = {key.upper(): float(value) for key, value in mapping.items()}
        self._default = float(default)
        self._version = "static-v1"

    async def _get_reading_uncached(self, region: str) -> EmissionsReading | None:
        value = self._mapping.get(region.upper(), self._default)
        return EmissionsReading(
            emissions_factor_kg_kwh=value,
            provider_version=self._version,
        )
