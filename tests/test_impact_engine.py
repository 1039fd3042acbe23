"""Behavioural tests for the impact calculation engine."""

from __future__ import annotations

import asyncio
import math

import httpx
import pytest

from ewaste_impact.config_loader import (
    ImpactConfig,
    NarrativeSettings,
    ProviderSettings,
)
from ewaste_impact.device_catalog import DeviceCatalog, load_default_catalog
from ewaste_impact.emissions_provider import EmissionsProvider, EmissionsReading
from ewaste_impact.errors import UnknownDeviceTypeError
from ewaste_impact.impact import ImpactEngine, calculate_device_impact
from ewaste_impact.impact.configuration import ImpactRuntimeConfig
from ewaste_impact.impact.engine import resolve_profile
from ewaste_impact.models import CalculationRequest
from ewaste_impact.price_provider import PriceProvider, PriceQuote
from ewaste_impact.reference_data import DEVICE_CATEGORY_PROFILES


class _DownEmissions(EmissionsProvider):
    async def _get_reading_uncached(self, region: str) -> EmissionsReading | None:
        raise httpx.ConnectError("grid api down")


class _DownPrices(PriceProvider):
    async def _get_quote_uncached(self) -> PriceQuote | None:
        raise httpx.ConnectError("price api down")


class _RecordingEmissions(EmissionsProvider):
    def __init__(self) -> None:
        super().__init__()
        self.regions: list[str] = []

    async def _get_reading_uncached(self, region: str) -> EmissionsReading | None:
        self.regions.append(region)
        return EmissionsReading(0.5, provider_version="recording")


@pytest.mark.parametrize("device_type", sorted(DEVICE_CATEGORY_PROFILES))
async def test_category_coverage(device_type, calculator_factory):
    """Every category resolves to its own profile when no brand is given."""
    calculator = calculator_factory()
    result = await calculator.calculate(
        CalculationRequest(device_type=device_type, age_months=6, condition="good")
    )
    profile = DEVICE_CATEGORY_PROFILES[device_type]
    assert result.device_info.weight_kg == profile.weight_kg
    assert result.device_info.lifespan_years == profile.lifespan_years
    assert (
        result.device_info.energy_consumption_kwh_per_year
        == profile.energy_consumption_kwh_per_year
    )
    assert result.co2_manufacturing == profile.co2_manufacturing_kg
    assert result.meta is not None and result.meta["catalog_match"] is None


async def test_smartphone_end_to_end(calculator_factory):
    calculator = calculator_factory()
    result = await calculator.calculate(
        CalculationRequest(device_type="smartphone", age_months=12, condition="fair")
    )

    assert result.co2_manufacturing == 55.0
    assert result.co2_usage == 12.14
    assert result.co2eq == 67.14
    assert math.isclose(result.raw_materials.gold, 0.034 * 0.7 * 0.95)
    assert math.isclose(result.raw_materials.copper, 15.87 * 0.7 * 0.95)
    assert result.device_info.remaining_lifespan_years == 2.0
    assert result.meta is not None
    assert result.meta["region"] == "US"
    assert result.meta["emissions_factor_kg_kwh"] == 0.92


async def test_catalog_override_end_to_end(calculator_factory):
    calculator = calculator_factory()
    result = await calculator.calculate(
        CalculationRequest(
            device_type="smartphone",
            brand="Apple",
            model="iPhone 14",
            age_months=0,
            condition="good",
        )
    )

    assert result.co2_manufacturing == 70.0
    assert math.isclose(result.raw_materials.gold, 0.0306)
    assert math.isclose(result.raw_materials.copper, 16 * 0.9)
    assert math.isclose(result.raw_materials.rare_earths, 0.5 * 0.9)
    # Fields the catalog does not carry come from the category profile.
    assert math.isclose(result.raw_materials.aluminum, 25.5 * 0.9)
    assert result.device_info.weight_kg == 0.17
    assert result.co2_usage == 0.0
    assert result.meta is not None
    assert result.meta["catalog_match"] == "Apple iPhone 14"


async def test_catalog_miss_uses_category(calculator_factory):
    calculator = calculator_factory()
    result = await calculator.calculate(
        CalculationRequest(
            device_type="smartphone",
            brand="Nokia",
            model="3310",
            age_months=0,
            condition="good",
        )
    )
    assert result.co2_manufacturing == 55.0


def test_mismatched_catalog_category_is_ignored() -> None:
    request = CalculationRequest(
        device_type="laptop",
        brand="Apple",
        model="iPhone 14",
        age_months=0,
        condition="good",
    )
    resolved = resolve_profile(request, load_default_catalog())
    assert resolved.record is None
    assert resolved.profile == DEVICE_CATEGORY_PROFILES["laptop"]


async def test_condition_monotonicity(calculator_factory):
    calculator = calculator_factory()
    golds = {}
    for condition in ("good", "fair", "poor"):
        result = await calculator.calculate(
            CalculationRequest(device_type="laptop", age_months=24, condition=condition)
        )
        golds[condition] = result.raw_materials.gold
    assert golds["good"] > golds["fair"] > golds["poor"]
    assert math.isclose(golds["good"] / golds["fair"], 0.9 / 0.7)
    assert math.isclose(golds["fair"] / golds["poor"], 0.7 / 0.4)


async def test_remaining_lifespan_floor(calculator_factory):
    calculator = calculator_factory()
    result = await calculator.calculate(
        CalculationRequest(device_type="smartphone", age_months=120, condition="poor")
    )
    assert result.device_info.remaining_lifespan_years == 0.0
    assert result.recommendations[0] == "This device should be recycled immediately."


async def test_provider_failures_fall_back(calculator_factory):
    calculator = calculator_factory(
        emissions_provider=_DownEmissions(), price_provider=_DownPrices()
    )
    result = await calculator.calculate(
        CalculationRequest(
            device_type="smartphone", age_months=12, condition="fair", region="FR"
        )
    )
    assert result.co2_usage == 12.14
    gold = 0.034 * 0.7 * 0.95
    copper = 15.87 * 0.7 * 0.95
    rare = 0.001 * 0.7 * 0.95
    aluminum = 25.5 * 0.7 * 0.95
    expected_value = gold * 65.0 + copper * 0.01 + rare * 0.5 + aluminum * 0.002
    assert result.material_value_usd == round(expected_value, 2)
    assert result.meta is not None
    assert result.meta["quality_flag"] == "fallback"


async def test_provider_timeout_falls_back(calculator_factory):
    class _Stalled(EmissionsProvider):
        async def _get_reading_uncached(self, region: str) -> EmissionsReading | None:
            await asyncio.sleep(5)
            return None

    calculator = calculator_factory(
        config=ImpactConfig(
            providers=ProviderSettings(timeout_seconds=0.05),
            narrative=NarrativeSettings(enabled=False),
        ),
        emissions_provider=_Stalled(),
    )
    result = await calculator.calculate(
        CalculationRequest(device_type="smartphone", age_months=12, condition="fair")
    )
    assert result.co2_usage == 12.14


async def test_unknown_category_rejected_before_fetch(calculator_factory):
    emissions = _RecordingEmissions()
    calculator = calculator_factory(emissions_provider=emissions)
    with pytest.raises(UnknownDeviceTypeError):
        await calculator.calculate(
            CalculationRequest(device_type="toaster", age_months=1, condition="good")
        )
    assert emissions.regions == []


async def test_rounding_contract(calculator_factory):
    calculator = calculator_factory(emissions_provider=_RecordingEmissions())
    result = await calculator.calculate(
        CalculationRequest(device_type="monitor", age_months=7, condition="fair")
    )
    for value in (
        result.co2eq,
        result.co2_manufacturing,
        result.co2_usage,
        result.material_value_usd,
    ):
        assert round(value, 2) == value
    assert math.isclose(
        result.comparisons.tree_equivalents, result.comparisons.car_miles / 2.3 / 22,
    )


async def test_region_resolution(calculator_factory):
    emissions = _RecordingEmissions()
    calculator = calculator_factory(region="GB", emissions_provider=emissions)
    await calculator.calculate(
        CalculationRequest(device_type="tablet", age_months=3, condition="good")
    )
    await calculator.calculate(
        CalculationRequest(
            device_type="tablet", age_months=3, condition="good", region="DE"
        )
    )
    assert emissions.regions == ["GB", "DE"]


async def test_engine_accepts_injected_catalog(static_emissions, static_prices):
    catalog = DeviceCatalog.from_payload(
        [
            {
                "brand": "Acme",
                "model": "Slab",
                "deviceType": "tablet",
                "co2eq": 99,
                "rawMaterials": {"gold": 1.0, "copper": 2.0, "rareEarths": 3.0},
            }
        ]
    )
    engine = ImpactEngine(
        runtime=ImpactRuntimeConfig(
            default_region="US",
            catalog=catalog,
            emissions_provider=static_emissions,
            price_provider=static_prices,
            provider_timeout_seconds=1.0,
        )
    )
    figures, resolved = await engine.calculate(
        CalculationRequest(
            device_type="tablet",
            brand="acme",
            model="slab",
            age_months=0,
            condition="good",
        )
    )
    assert figures.co2_manufacturing == 99.0
    assert math.isclose(figures.raw_materials.gold, 0.9)
    assert resolved.record is not None


async def test_calculate_device_impact_entry_point(calculator_factory):
    result = await calculate_device_impact(
        CalculationRequest(device_type="printer", age_months=30, condition="good"),
        calculator=calculator_factory(),
    )
    payload = result.to_dict()
    assert set(payload) == {
        "co2eq",
        "co2Manufacturing",
        "co2Usage",
        "rawMaterials",
        "comparisons",
        "recyclingBenefits",
        "deviceInfo",
        "materialValueUSD",
        "impactSummary",
        "recommendations",
        "meta",
    }
    assert payload["meta"]["narrative_source"] == "template"
    assert payload["rawMaterials"]["rareEarths"] > 0
