"""ElectricityMaps v3 API provider."""

from __future__ import annotations

import logging
import math

import httpx

from ewaste_impact.emissions_provider.base import EmissionsProvider, EmissionsReading
from ewaste_impact.settings import EwasteImpactSettings, get_settings

LOGGER = logging.getLogger(__name__)


class ElectricityMapsProvider(EmissionsProvider):
    """Fetch the latest grid carbon intensity from the ElectricityMaps API."""

    def __init__(
        self,
        base_url: str = "https://api.electricitymap.org/v3",
        ttl_seconds: int = 300,
        *,
        token: str | None = None,
        timeout_seconds: float = 5.0,
        settings: EwasteImpactSettings | None = None,
    ) -> None:
        super().__init__(ttl_seconds=ttl_seconds)
        self._base = base_url.rstrip("/")
        self._explicit_token = token
        self._settings = settings
        self._timeout = timeout_seconds
        self._version = "emaps-v3"

    async def _get_reading_uncached(self, region: str) -> EmissionsReading | None:
        """Fetch the most recent intensity for ``region`` (an ElectricityMaps zone).

        Returns:
            A reading converted to kg CO2e/kWh, otherwise ``None``.
        """

        token = self._resolve_token()
        if not token:
            LOGGER.warning(
                "ElectricityMaps token not configured",
                extra={"provider": self.name, "region": region},
            )
            return None

        url = f"{self._base}/carbon-intensity/latest"
        headers = {"auth-token": token}
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(
                    url, params={"zone": region}, headers=headers
                )
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as exc:
            LOGGER.warning(
                "ElectricityMaps HTTP error",
                extra={
                    "provider": self.name,
                    "region": region,
                    "status_code": exc.response.status_code,
                    "url": url,
                },
                exc_info=exc,
            )
            return None
        except httpx.HTTPError as exc:
            LOGGER.warning(
                "ElectricityMaps transport error",
                extra={"provider": self.name, "region": region, "url": url},
                exc_info=exc,
            )
            return None
        except (ValueError, TypeError) as exc:
            LOGGER.warning(
                "ElectricityMaps response parsing error",
                extra={"provider": self.name, "region": region, "url": url},
                exc_info=exc,
            )
            return None

        if not isinstance(payload, dict):
            LOGGER.warning(
                "ElectricityMaps returned a non-object payload",
                extra={"provider": self.name, "region": region, "url": url},
            )
            return None

        intensity_raw = payload.get("carbonIntensity") or payload.get("intensity")
        try:
            grams_per_kwh = float(intensity_raw)
        except (TypeError, ValueError) as exc:
            LOGGER.warning(
                "ElectricityMaps returned non-numeric intensity",
                extra={
                    "provider": self.name,
                    "region": region,
                    "url": url,
                    "value": intensity_raw,
                },
                exc_info=exc,
            )
            return None

        if not math.isfinite(grams_per_kwh) or grams_per_kwh <= 0:
            LOGGER.warning(
                "ElectricityMaps reported non-positive intensity",
                extra={
                    "provider": self.name,
                    "region": region,
                    "url": url,
                    "value": grams_per_kwh,
                },
            )
            return None

        return EmissionsReading(
            emissions_factor_kg_kwh=grams_per_kwh / 1000.0,
            provider_version=self._version,
            conversion_version="gkWh_to_kgkWh@0.001",
        )

    def _resolve_token(self) -> str | None:
        if self._explicit_token:
            return self._explicit_token
        settings_obj = self._settings or get_settings()
        return settings_obj.electricitymaps_effective_token
