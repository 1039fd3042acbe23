"""Commodity price provider backed by the metals-api.com ``latest`` endpoint."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping

import httpx

from ewaste_impact.price_provider.base import PriceProvider, PriceQuote
from ewaste_impact.settings import EwasteImpactSettings, get_settings

LOGGER = logging.getLogger(__name__)

GRAMS_PER_TROY_OUNCE = 31.1034768

_SYMBOLS = {"gold": "XAU", "copper": "XCU", "aluminum": "ALU"}


class MetalsApiPriceProvider(PriceProvider):
    """Fetch spot prices for gold, copper and aluminum.

    Rates are quoted as troy ounces per US dollar. Rare earth elements have
    no exchange quote, so ``rare_earths_usd_per_gram`` is passed through.
    """

    def __init__(
        self,
        base_url: str = "https://metals-api.com/api",
        ttl_seconds: int = 3600,
        *,
        rare_earths_usd_per_gram: float,
        api_key: str | None = None,
        timeout_seconds: float = 5.0,
        settings: EwasteImpactSettings | None = None,
    ) -> None:
        super().__init__(ttl_seconds=ttl_seconds)
        self._base = base_url.rstrip("/")
        self._rare_earths = float(rare_earths_usd_per_gram)
        self._explicit_key = api_key
        self._settings = settings
        self._timeout = timeout_seconds
        self._version = "metals-api-latest"

    async def _get_quote_uncached(self) -> PriceQuote | None:
        api_key = self._resolve_key()
        if not api_key:
            LOGGER.warning(
                "Metals API key not configured", extra={"provider": self.name}
            )
            return None

        url = f"{self._base}/latest"
        params = {
            "access_key": api_key,
            "base": "USD",
            "symbols": ",".join(_SYMBOLS.values()),
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(url, params=params)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as exc:
            LOGGER.warning(
                "Metals API HTTP error",
                extra={
                    "provider": self.name,
                    "status_code": exc.response.status_code,
                    "url": url,
                },
                exc_info=exc,
            )
            return None
        except httpx.HTTPError as exc:
            LOGGER.warning(
                "Metals API transport error",
                extra={"provider": self.name, "url": url},
                exc_info=exc,
            )
            return None
        except (ValueError, TypeError) as exc:
            LOGGER.warning(
                "Metals API response parsing error",
                extra={"provider": self.name, "url": url},
                exc_info=exc,
            )
            return None

        rates = payload.get("rates") if isinstance(payload, Mapping) else None
        if not isinstance(rates, Mapping):
            LOGGER.warning(
                "Metals API response missing rates",
                extra={"provider": self.name, "url": url},
            )
            return None

        prices: dict[str, float] = {}
        for material, symbol in _SYMBOLS.items():
            price = _usd_per_gram(rates.get(symbol))
            if price is None:
                LOGGER.warning(
                    "Metals API returned unusable rate",
                    extra={
                        "provider": self.name,
                        "symbol": symbol,
                        "value": str(rates.get(symbol)),
                    },
                )
                return None
            prices[material] = price

        return PriceQuote(
            gold=prices["gold"],
            copper=prices["copper"],
            rare_earths=self._rare_earths,
            aluminum=prices["aluminum"],
            provider_version=self._version,
        )

    def _resolve_key(self) -> str | None:
        if self._explicit_key:
            return self._explicit_key
        settings_obj = self._settings or get_settings()
        return settings_obj.metals_api_key


def _usd_per_gram(rate: object) -> float | None:
    """Convert an ounces-per-dollar rate into dollars per gram."""

    if isinstance(rate, bool) or not isinstance(rate, (int, float, str)):
        return None
    try:
        value = float(rate)
    except ValueError:
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    return (1.0 / value) / GRAMS_PER_TROY_OUNCE
