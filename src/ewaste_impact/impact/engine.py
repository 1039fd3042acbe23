"""Core impact calculation engine."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace

from ewaste_impact.device_catalog import DeviceCatalog, DeviceRecord
from ewaste_impact.impact.configuration import ImpactRuntimeConfig
from ewaste_impact.impact.providers import (
    EmissionsData,
    MaterialPrices,
    fetch_electricity_emissions,
    fetch_material_prices,
)
from ewaste_impact.impact.reporting import (
    compare_co2_equivalents,
    recycling_benefits_for,
)
from ewaste_impact.models import (
    CalculationRequest,
    DeviceInfo,
    ImpactFigures,
    MaterialMasses,
)
from ewaste_impact.reference_data import (
    DeviceCategoryProfile,
    co2_multiplier,
    condition_multiplier,
    get_category_profile,
    material_multiplier,
)

_LOGGER = logging.getLogger("ewaste_impact.impact.engine")


def _round2(value: float) -> float:
    return round(value, 2)


def _quality_flag(emissions: EmissionsData, prices: MaterialPrices) -> str:
    """Classify the live inputs as ``live``, ``static`` or ``fallback``."""

    if emissions.is_fallback or prices.is_fallback:
        return "fallback"
    if emissions.source.startswith("static") or prices.source.startswith("static"):
        return "static"
    return "live"


@dataclass(frozen=True, slots=True)
class ResolvedProfile:
    """Effective device profile after merging a catalog override."""

    device_type: str
    profile: DeviceCategoryProfile
    record: DeviceRecord | None


def resolve_profile(
    request: CalculationRequest, catalog: DeviceCatalog
) -> ResolvedProfile:
    """Merge the category profile with any catalog record for the request.

    The record replaces manufacturing CO2 and the gold, copper and rare earth
    masses; every other field comes from the category profile.

    Raises:
        UnknownDeviceTypeError: When ``request.device_type`` has no profile.
    """

    category = get_category_profile(request.device_type)
    if not request.has_device_identity:
        return ResolvedProfile(request.device_type, category, None)

    record = catalog.find(request.brand, request.model)
    if record is None:
        return ResolvedProfile(request.device_type, category, None)
    if record.device_type != request.device_type:
        _LOGGER.warning(
            "Catalog record category does not match request; ignoring record",
            extra={
                "brand": record.brand,
                "model": record.model,
                "record_device_type": record.device_type,
                "request_device_type": request.device_type,
            },
        )
        return ResolvedProfile(request.device_type, category, None)

    merged = replace(
        category,
        co2_manufacturing_kg=record.co2eq_kg,
        materials=replace(
            category.materials,
            gold=record.materials.gold,
            copper=record.materials.copper,
            rare_earths=record.materials.rare_earths,
        ),
    )
    return ResolvedProfile(request.device_type, merged, record)


def material_value_usd(materials: MaterialMasses, prices: MaterialPrices) -> float:
    """Price the recoverable metals; plastic and glass carry no commodity value."""

    return (
        materials.gold * prices.gold
        + materials.copper * prices.copper
        + materials.rare_earths * prices.rare_earths
        + materials.aluminum * prices.aluminum
    )


@dataclass(slots=True)
class ImpactEngine:
    """Turns a validated request into numeric impact figures."""

    runtime: ImpactRuntimeConfig
    logger: logging.Logger = _LOGGER

    async def fetch_live_data(
        self, region: str
    ) -> tuple[EmissionsData, MaterialPrices]:
        """Fetch the emissions factor and material prices concurrently."""

        timeout = self.runtime.provider_timeout_seconds
        emissions, prices = await asyncio.gather(
            fetch_electricity_emissions(
                self.runtime.emissions_provider, region, timeout_seconds=timeout
            ),
            fetch_material_prices(
                self.runtime.price_provider, timeout_seconds=timeout
            ),
        )
        return emissions, prices

    async def calculate(
        self, request: CalculationRequest
    ) -> tuple[ImpactFigures, ResolvedProfile]:
        """Compute impact figures for ``request``.

        Returns:
            The figures together with the resolved profile so that callers can
            pass the matched catalog record on to the narrative step.

        Raises:
            UnknownDeviceTypeError: When the device category is unknown. No
                live data is fetched in that case.
        """

        resolved = resolve_profile(request, self.runtime.catalog)
        profile = resolved.profile
        region = request.region or self.runtime.default_region

        age_years = request.age_months / 12
        condition_mult = condition_multiplier(request.condition)
        age_co2_mult = co2_multiplier(request.age_months)
        material_age_mult = material_multiplier(request.age_months)

        emissions, prices = await self.fetch_live_data(region)

        co2_manufacturing = profile.co2_manufacturing_kg
        co2_usage = (
            profile.energy_consumption_kwh_per_year
            * age_years
            * age_co2_mult
            * emissions.emissions_factor
        )
        co2eq = co2_manufacturing + co2_usage

        raw_materials = profile.materials.scaled(condition_mult * material_age_mult)
        value_usd = material_value_usd(raw_materials, prices)

        device_info = DeviceInfo(
            weight_kg=profile.weight_kg,
            lifespan_years=profile.lifespan_years,
            energy_consumption_kwh_per_year=profile.energy_consumption_kwh_per_year,
            remaining_lifespan_years=max(0.0, profile.lifespan_years - age_years),
        )

        meta: dict[str, object] = {
            "device_type": resolved.device_type,
            "region": region,
            "emissions_factor_kg_kwh": emissions.emissions_factor,
            "emissions_source": emissions.source,
            "emissions_last_updated": emissions.last_updated,
            "prices_source": prices.source,
            "prices_last_updated": prices.last_updated,
            "catalog_match": (
                resolved.record.display_name if resolved.record is not None else None
            ),
            "quality_flag": _quality_flag(emissions, prices),
        }

        figures = ImpactFigures(
            device_name=profile.name,
            co2eq=_round2(co2eq),
            co2_manufacturing=_round2(co2_manufacturing),
            co2_usage=_round2(co2_usage),
            raw_materials=raw_materials,
            comparisons=compare_co2_equivalents(co2eq),
            recycling_benefits=recycling_benefits_for(profile.weight_kg),
            device_info=device_info,
            material_value_usd=_round2(value_usd),
            unrounded_co2eq=co2eq,
            unrounded_material_value_usd=value_usd,
            meta=meta,
        )
        self.logger.info(
            "Device impact calculated",
            extra={
                "device_type": resolved.device_type,
                "catalog_match": meta["catalog_match"],
                "co2eq_kg": figures.co2eq,
                "quality_flag": meta["quality_flag"],
            },
        )
        return figures, resolved
