"""Live-data orchestration: provider chains and fail-soft fetch helpers."""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone

import httpx

from ewaste_impact.emissions_provider import (
    ElectricityMapsProvider,
    EmissionsProvider,
    FallbackEmissionsProvider,
    StaticEmissionsProvider,
    UKCarbonIntensityProvider,
)
from ewaste_impact.impact.defaults import (
    FALLBACK_EMISSIONS_FACTOR,
    FALLBACK_MATERIAL_PRICES,
)
from ewaste_impact.price_provider import (
    FallbackPriceProvider,
    MetalsApiPriceProvider,
    PriceProvider,
    StaticPriceProvider,
)
from ewaste_impact.settings import EwasteImpactSettings

LOGGER = logging.getLogger(__name__)

FALLBACK_SOURCE = "fallback"
DEFAULT_TIMEOUT_SECONDS = 5.0


@dataclass(frozen=True, slots=True)
class EmissionsData:
    """Grid emissions factor used for a calculation."""

    region: str
    emissions_factor: float
    source: str
    last_updated: str

    @property
    def is_fallback(self) -> bool:
        return self.source == FALLBACK_SOURCE


@dataclass(frozen=True, slots=True)
class MaterialPrices:
    """Commodity prices in USD per gram used for a calculation."""

    gold: float
    copper: float
    rare_earths: float
    aluminum: float
    source: str
    last_updated: str

    @property
    def is_fallback(self) -> bool:
        return self.source == FALLBACK_SOURCE


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _usable(value: float) -> bool:
    return math.isfinite(value) and value > 0


def fallback_emissions(region: str) -> EmissionsData:
    return EmissionsData(
        region=region,
        emissions_factor=FALLBACK_EMISSIONS_FACTOR,
        source=FALLBACK_SOURCE,
        last_updated=_now_iso(),
    )


def fallback_prices() -> MaterialPrices:
    return MaterialPrices(
        gold=FALLBACK_MATERIAL_PRICES["gold"],
        copper=FALLBACK_MATERIAL_PRICES["copper"],
        rare_earths=FALLBACK_MATERIAL_PRICES["rare_earths"],
        aluminum=FALLBACK_MATERIAL_PRICES["aluminum"],
        source=FALLBACK_SOURCE,
        last_updated=_now_iso(),
    )


async def fetch_electricity_emissions(
    provider: EmissionsProvider | None,
    region: str,
    *,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> EmissionsData:
    """Return the emissions factor for ``region``; never raises.

    Any provider failure, missing value or timeout yields the fixed fallback
    factor tagged with the ``"fallback"`` source.
    """

    if provider is None:
        return fallback_emissions(region)
    try:
        reading = await asyncio.wait_for(
            provider.get_emissions(region), timeout=timeout_seconds
        )
    except TimeoutError:
        LOGGER.warning(
            "Emissions provider timed out",
            extra={
                "provider": provider.name,
                "region": region,
                "timeout_seconds": timeout_seconds,
            },
        )
        return fallback_emissions(region)
    except (ValueError, TypeError, OSError, httpx.HTTPError) as exc:
        LOGGER.warning(
            "Emissions provider failed",
            extra={"provider": provider.name, "region": region},
            exc_info=exc,
        )
        return fallback_emissions(region)
    except Exception as exc:  # pragma: no cover - defensive
        LOGGER.warning(
            "Emissions provider unexpected failure",
            extra={"provider": provider.name, "region": region},
            exc_info=exc,
        )
        return fallback_emissions(region)

    if reading is None or not _usable(reading.emissions_factor_kg_kwh):
        LOGGER.info(
            "No emissions reading available; using fallback factor",
            extra={"provider": provider.name, "region": region},
        )
        return fallback_emissions(region)
    return EmissionsData(
        region=region,
        emissions_factor=reading.emissions_factor_kg_kwh,
        source=reading.provider_version or provider.name,
        last_updated=_now_iso(),
    )


async def fetch_material_prices(
    provider: PriceProvider | None,
    *,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> MaterialPrices:
    """Return current material prices; never raises."""

    if provider is None:
        return fallback_prices()
    try:
        quote = await asyncio.wait_for(provider.get_prices(), timeout=timeout_seconds)
    except TimeoutError:
        LOGGER.warning(
            "Price provider timed out",
            extra={"provider": provider.name, "timeout_seconds": timeout_seconds},
        )
        return fallback_prices()
    except (ValueError, TypeError, OSError, httpx.HTTPError) as exc:
        LOGGER.warning(
            "Price provider failed", extra={"provider": provider.name}, exc_info=exc
        )
        return fallback_prices()
    except Exception as exc:  # pragma: no cover - defensive
        LOGGER.warning(
            "Price provider unexpected failure",
            extra={"provider": provider.name},
            exc_info=exc,
        )
        return fallback_prices()

    if quote is None or not all(
        _usable(price)
        for price in (quote.gold, quote.copper, quote.rare_earths, quote.aluminum)
    ):
        LOGGER.info(
            "No price quote available; using fallback prices",
            extra={"provider": provider.name},
        )
        return fallback_prices()
    return MaterialPrices(
        gold=quote.gold,
        copper=quote.copper,
        rare_earths=quote.rare_earths,
        aluminum=quote.aluminum,
        source=quote.provider_version or provider.name,
        last_updated=_now_iso(),
    )


def build_emissions_chain(
    *,
    provider_keys: Iterable[str],
    ttl_seconds: int,
    timeout_seconds: float,
    emission_factors: Mapping[str, float],
    settings: EwasteImpactSettings | None = None,
) -> EmissionsProvider | None:
    """Construct an emissions provider chain from ordered identifiers.

    Returns:
        A single provider, a :class:`FallbackEmissionsProvider` wrapping
        several, or ``None`` when no identifier was recognised.
    """

    providers: list[EmissionsProvider] = []
    for raw_key in provider_keys:
        name = raw_key.strip().lower()
        if name == "static":
            providers.append(
                StaticEmissionsProvider(
                    mapping=emission_factors,
                    default=FALLBACK_EMISSIONS_FACTOR,
                    ttl_seconds=max(ttl_seconds, 600),
                )
            )
        elif name == "electricitymaps":
            providers.append(
                ElectricityMapsProvider(
                    ttl_seconds=ttl_seconds,
                    timeout_seconds=timeout_seconds,
                    settings=settings,
                )
            )
        elif name == "uk":
            providers.append(
                UKCarbonIntensityProvider(
                    ttl_seconds=ttl_seconds, timeout_seconds=timeout_seconds
                )
            )
        else:
            LOGGER.warning("Unknown emissions provider key '%s'; skipping", name)

    if not providers:
        return None
    if len(providers) == 1:
        return providers[0]
    return FallbackEmissionsProvider(providers, ttl_seconds=ttl_seconds)


def build_price_chain(
    *,
    provider_keys: Iterable[str],
    ttl_seconds: int,
    timeout_seconds: float,
    static_prices: Mapping[str, float],
    settings: EwasteImpactSettings | None = None,
) -> PriceProvider | None:
    """Construct a price provider chain from ordered identifiers."""

    providers: list[PriceProvider] = []
    for raw_key in provider_keys:
        name = raw_key.strip().lower()
        if name == "static":
            providers.append(
                StaticPriceProvider(
                    gold=static_prices["gold"],
                    copper=static_prices["copper"],
                    rare_earths=static_prices["rare_earths"],
                    aluminum=static_prices["aluminum"],
                    ttl_seconds=max(ttl_seconds, 600),
                )
            )
        elif name == "metals_api":
            providers.append(
                MetalsApiPriceProvider(
                    ttl_seconds=ttl_seconds,
                    rare_earths_usd_per_gram=static_prices["rare_earths"],
                    timeout_seconds=timeout_seconds,
                    settings=settings,
                )
            )
        else:
            LOGGER.warning("Unknown price provider key '%s'; skipping", name)

    if not providers:
        return None
    if len(providers) == 1:
        return providers[0]
    return FallbackPriceProvider(providers, ttl_seconds=ttl_seconds)
