"""Grid emissions-factor provider implementations and abstractions."""

from __future__ import annotations

from ewaste_impact.emissions_provider.base import (
    CacheStats,
    EmissionsProvider,
    EmissionsReading,
)
from ewaste_impact.emissions_provider.electricitymaps import ElectricityMapsProvider
from ewaste_impact.emissions_provider.fallback import FallbackEmissionsProvider
from ewaste_impact.emissions_provider.static import StaticEmissionsProvider
from ewaste_impact.emissions_provider.uk import UKCarbonIntensityProvider

__all__ = [
    "CacheStats",
    "ElectricityMapsProvider",
    "EmissionsProvider",
    "EmissionsReading",
    "FallbackEmissionsProvider",
    "StaticEmissionsProvider",
    "UKCarbonIntensityProvider",
]
