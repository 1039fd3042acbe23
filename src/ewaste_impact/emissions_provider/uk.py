"""UK National Grid carbon intensity provider."""

from __future__ import annotations

import logging
import math
from typing import cast

import httpx

from ewaste_impact.emissions_provider.base import EmissionsProvider, EmissionsReading

LOGGER = logging.getLogger(__name__)

_UK_REGIONS = frozenset({"GB", "UK"})


class UKCarbonIntensityProvider(EmissionsProvider):
    """Fetch national carbon intensity data published by the UK grid."""

    def __init__(
        self,
        base_url: str = "https://api.carbonintensity.org.uk",
        ttl_seconds: int = 300,
        *,
        timeout_seconds: float = 5.0,
    ) -> None:
        super().__init__(ttl_seconds=ttl_seconds)
        self._base = base_url.rstrip("/")
        self._timeout = timeout_seconds
        self._version = "uk-ci-v2"

    async def _get_reading_uncached(self, region: str) -> EmissionsReading | None:
        """Fetch the latest UK forecast or actual intensity.

        Args:
            region: Region identifier; only ``GB``/``UK`` are served.

        Returns:
            A reading converted to kg CO2e/kWh, otherwise ``None``.
        """

        if region.upper() not in _UK_REGIONS:
            return None

        url = f"{self._base}/intensity"
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(url)
                response.raise_for_status()
                payload: object = response.json()
        except httpx.HTTPStatusError as exc:
            LOGGER.warning(
                "UK Carbon Intensity HTTP error",
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
                "UK Carbon Intensity transport error",
                extra={"provider": self.name, "region": region, "url": url},
                exc_info=exc,
            )
            return None
        except (ValueError, TypeError) as exc:
            LOGGER.warning(
                "UK Carbon Intensity response parsing error",
                extra={"provider": self.name, "region": region, "url": url},
                exc_info=exc,
            )
            return None

        payload_dict = _normalize_mapping(payload)
        entries_obj = payload_dict.get("data") if payload_dict is not None else None
        if not isinstance(entries_obj, list) or not entries_obj:
            LOGGER.warning(
                "UK Carbon Intensity response missing data",
                extra={"provider": self.name, "region": region, "url": url},
            )
            return None

        first_entry = _normalize_mapping(cast(list[object], entries_obj)[0])
        intensity_block = (
            _normalize_mapping(first_entry.get("intensity"))
            if first_entry is not None
            else None
        )
        if intensity_block is None:
            LOGGER.warning(
                "UK Carbon Intensity missing intensity block",
                extra={"provider": self.name, "region": region, "url": url},
            )
            return None

        value_candidate = intensity_block.get("forecast")
        if value_candidate is None:
            value_candidate = intensity_block.get("actual")
        value = _coerce_float(value_candidate)
        if value is None or not math.isfinite(value) or value <= 0:
            LOGGER.warning(
                "UK Carbon Intensity returned unusable intensity",
                extra={
                    "provider": self.name,
                    "region": region,
                    "url": url,
                    "value": str(value_candidate),
                },
            )
            return None

        return EmissionsReading(
            emissions_factor_kg_kwh=value / 1000.0,
            provider_version=self._version,
            conversion_version="gkWh_to_kgkWh@0.001",
        )


def _coerce_float(value: object | None) -> float | None:
    """Attempt to convert ``value`` to ``float`` while tolerating errors."""

    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def _normalize_mapping(value: object | None) -> dict[str, object] | None:
    """Return a dictionary with string keys when possible."""

    if not isinstance(value, dict):
        return None
    value_dict = cast(dict[object, object], value)
    return {key: item for key, item in value_dict.items() if isinstance(key, str)}
