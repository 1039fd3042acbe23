"""Runtime configuration utilities for :mod:`ewaste_impact.impact`.

Reconciles caller overrides, the typed configuration file and static
defaults into the frozen structure consumed by the engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from ewaste_impact.config_loader import ImpactConfig
from ewaste_impact.device_catalog import DeviceCatalog
from ewaste_impact.emissions_provider import EmissionsProvider
from ewaste_impact.impact.providers import build_emissions_chain, build_price_chain
from ewaste_impact.price_provider import PriceProvider
from ewaste_impact.settings import EwasteImpactSettings

__all__ = ["ImpactRuntimeConfig", "build_runtime_config"]


@dataclass(slots=True, frozen=True)
class ImpactRuntimeConfig:
    """Aggregated runtime settings for the impact engine.

    Attributes:
        default_region: Region used when a request omits one.
        catalog: Device catalog consulted for brand/model overrides.
        emissions_provider: Optional emissions provider chain.
        price_provider: Optional commodity price provider chain.
        provider_timeout_seconds: Upper bound for each live-data fetch.
    """

    default_region: str
    catalog: DeviceCatalog
    emissions_provider: EmissionsProvider | None
    price_provider: PriceProvider | None
    provider_timeout_seconds: float


def build_runtime_config(
    *,
    config: ImpactConfig,
    settings: EwasteImpactSettings,
    catalog: DeviceCatalog,
    emission_factors: Mapping[str, float],
    static_prices: Mapping[str, float],
    region: str | None = None,
    emissions_provider: EmissionsProvider | None = None,
    price_provider: PriceProvider | None = None,
) -> ImpactRuntimeConfig:
    """Resolve effective runtime configuration for the engine.

    Explicitly supplied providers win over chains built from ``config``.

    Args:
        config: Typed configuration from
            :func:`ewaste_impact.config_loader.load_config`.
        settings: Environment settings forwarded to HTTP providers.
        catalog: Loaded device catalog.
        emission_factors: Static region → kg CO2e/kWh mapping.
        static_prices: Static material prices in USD per gram.
        region: Explicit default-region override.
        emissions_provider: Pre-built emissions provider.
        price_provider: Pre-built price provider.

    Returns:
        A frozen :class:`ImpactRuntimeConfig`.
    """

    provider_settings = config.providers
    resolved_emissions = emissions_provider or build_emissions_chain(
        provider_keys=provider_settings.emissions_order,
        ttl_seconds=provider_settings.ttl_seconds,
        timeout_seconds=provider_settings.timeout_seconds,
        emission_factors=emission_factors,
        settings=settings,
    )
    resolved_prices = price_provider or build_price_chain(
        provider_keys=provider_settings.prices_order,
        ttl_seconds=provider_settings.ttl_seconds,
        timeout_seconds=provider_settings.timeout_seconds,
        static_prices=static_prices,
        settings=settings,
    )

    return ImpactRuntimeConfig(
        default_region=region or config.region.default,
        catalog=catalog,
        emissions_provider=resolved_emissions,
        price_provider=resolved_prices,
        provider_timeout_seconds=float(provider_settings.timeout_seconds),
    )
