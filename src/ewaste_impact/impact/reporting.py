"""Equivalence and recycling-benefit conversions separate from core estimation."""

from __future__ import annotations

from ewaste_impact.models import Comparisons, RecyclingBenefits

# A mature tree absorbs roughly 22 kg CO2 per year.
KG_CO2_PER_TREE_YEAR = 22.0
# 8.9 kg CO2 per gallon at 25 mpg, expressed as miles per kg.
CAR_MILES_PER_KG_CO2 = 2.3
# Embodied emissions of a typical new smartphone.
KG_CO2_PER_SMARTPHONE = 55.0

ENERGY_SAVED_KWH_PER_KG = 15.0
WATER_SAVED_LITERS_PER_KG = 100.0
LANDFILL_M3_PER_KG = 0.5


def tree_equivalents(co2_kg: float) -> float:
    return co2_kg / KG_CO2_PER_TREE_YEAR


def car_miles(co2_kg: float) -> float:
    return co2_kg * CAR_MILES_PER_KG_CO2


def smartphone_equivalents(co2_kg: float) -> float:
    return co2_kg / KG_CO2_PER_SMARTPHONE


def energy_saved(weight_kg: float) -> float:
    return weight_kg * ENERGY_SAVED_KWH_PER_KG


def water_saved(weight_kg: float) -> float:
    return weight_kg * WATER_SAVED_LITERS_PER_KG


def landfill_space(weight_kg: float) -> float:
    return weight_kg * LANDFILL_M3_PER_KG


def compare_co2_equivalents(co2_kg: float) -> Comparisons:
    """Convert a CO2 figure into everyday equivalents."""

    return Comparisons(
        tree_equivalents=tree_equivalents(co2_kg),
        car_miles=car_miles(co2_kg),
        smartphone_equivalents=smartphone_equivalents(co2_kg),
    )


def recycling_benefits_for(weight_kg: float) -> RecyclingBenefits:
    """Estimate resources saved by recycling a device of ``weight_kg``."""

    return RecyclingBenefits(
        energy_saved_kwh=energy_saved(weight_kg),
        water_saved_liters=water_saved(weight_kg),
        landfill_space_m3=landfill_space(weight_kg),
    )
