"""Static commodity prices."""

from __future__ import annotations

from ewaste_impact.price_provider.base import PriceProvider, PriceQuote


class StaticPriceProvider(PriceProvider):
    """Serve a fixed price table."""

    def __init__(
        self,
        *,
        gold: float,
        copper: float,
        rare_earths: float,
        aluminum: float,
        ttl_seconds: int = 3600,
    ) -> None:
        super().__init__(ttl_seconds=ttl_seconds)
        self._quote = PriceQuote(
            gold=float(gold),
            copper=float(copper),
            rare_earths=float(rare_earths),
            aluminum=float(aluminum),
            provider_version="static-v1",
        )

    async def _get_quote_uncached(self) -> PriceQuote | None:
        return self._quote
