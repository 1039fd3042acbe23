"""Commodity price provider implementations."""

from __future__ import annotations

from ewaste_impact.price_provider.base import (
    FallbackPriceProvider,
    PriceProvider,
    PriceQuote,
)
from ewaste_impact.price_provider.metals_api import MetalsApiPriceProvider
from ewaste_impact.price_provider.static import StaticPriceProvider

__all__ = [
    "FallbackPriceProvider",
    "MetalsApiPriceProvider",
    "PriceProvider",
    "PriceQuote",
    "StaticPriceProvider",
]
