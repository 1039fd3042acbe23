"""Default data loaders for impact calculation.

The module centralises resource access for the static regional emissions
factors and fallback commodity prices. Callers receive typed mappings cached
for the life of the process.
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from typing import Final

LOGGER = logging.getLogger(__name__)

# General grid average used whenever no live or regional factor is available.
FALLBACK_EMISSIONS_FACTOR: Final[float] = 0.92

FALLBACK_MATERIAL_PRICES: Final[dict[str, float]] = {
    "gold": 65.0,
    "copper": 0.01,
    "rare_earths": 0.5,
    "aluminum": 0.002,
}

_FALLBACK_EMISSION_FACTORS: Final[dict[str, float]] = {
    "US": FALLBACK_EMISSIONS_FACTOR,
    "global-average": 0.48,
}

_PRICE_KEYS: Final[dict[str, str]] = {
    "gold": "gold",
    "copper": "copper",
    "rareEarths": "rare_earths",
    "aluminum": "aluminum",
}


def _read_packaged_defaults() -> dict[str, object]:
    import importlib.resources as resources

    text = (
        resources.files("ewaste_impact.data")
        .joinpath("defaults.json")
        .read_text(encoding="utf-8")
    )
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("defaults.json must contain an object")
    return data


@lru_cache(maxsize=1)
def load_emission_factors() -> dict[str, float]:
    """Load the region → emissions factor (kg CO2e/kWh) mapping."""

    try:
        raw = _read_packaged_defaults().get("EMISSION_FACTORS_KG_PER_KWH", {})
    except Exception as exc:  # pragma: no cover - defensive fallback
        LOGGER.error("Failed to load packaged emission factors: %s", exc)
        return dict(_FALLBACK_EMISSION_FACTORS)

    if not isinstance(raw, dict):
        LOGGER.warning(
            "Unexpected EMISSION_FACTORS payload type %s; using fallback defaults",
            type(raw),
        )
        return dict(_FALLBACK_EMISSION_FACTORS)

    parsed: dict[str, float] = {}
    for key, value in raw.items():
        try:
            parsed[str(key)] = float(value)
        except (TypeError, ValueError):
            LOGGER.warning("Skipping invalid emission factor for region %s", key)
    return parsed or dict(_FALLBACK_EMISSION_FACTORS)


@lru_cache(maxsize=1)
def load_material_prices() -> dict[str, float]:
    """Load static material prices in USD per gram, keyed by snake_case name."""

    try:
        raw = _read_packaged_defaults().get("MATERIAL_PRICES_USD_PER_GRAM", {})
    except Exception as exc:  # pragma: no cover - defensive fallback
        LOGGER.error("Failed to load packaged material prices: %s", exc)
        return dict(FALLBACK_MATERIAL_PRICES)

    prices = dict(FALLBACK_MATERIAL_PRICES)
    if not isinstance(raw, dict):
        return prices
    for json_key, name in _PRICE_KEYS.items():
        if json_key not in raw:
            continue
        try:
            prices[name] = float(raw[json_key])
        except (TypeError, ValueError):
            LOGGER.warning("Skipping invalid material price for %s", json_key)
    return prices
