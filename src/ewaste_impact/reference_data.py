"""Reference data for electronic device categories.

Figures are per new unit in good condition. Sources: EPA WARM, vendor
product environmental reports and the UN Global E-waste Monitor.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping

from ewaste_impact.errors import UnknownDeviceTypeError
from ewaste_impact.models import MaterialMasses


@dataclass(frozen=True, slots=True)
class DeviceCategoryProfile:
    """Physical and environmental constants for a device category."""

    name: str
    weight_kg: float
    co2_manufacturing_kg: float
    co2_per_year_kg: float
    energy_consumption_kwh_per_year: float
    materials: MaterialMasses
    lifespan_years: float

    def __post_init__(self) -> None:
        if self.weight_kg <= 0:
            raise ValueError("weight_kg must be positive")
        if self.lifespan_years <= 0:
            raise ValueError("lifespan_years must be positive")


DEVICE_CATEGORY_PROFILES: Dict[str, DeviceCategoryProfile] = {
    "smartphone": DeviceCategoryProfile(
        name="Smartphone",
        weight_kg=0.17,
        co2_manufacturing_kg=55.0,
        co2_per_year_kg=12.0,
        energy_consumption_kwh_per_year=12.0,
        materials=MaterialMasses(0.034, 15.87, 0.001, 25.5, 25.5, 25.5),
        lifespan_years=3,
    ),
    "laptop": DeviceCategoryProfile(
        name="Laptop",
        weight_kg=2.5,
        co2_manufacturing_kg=300.0,
        co2_per_year_kg=45.0,
        energy_consumption_kwh_per_year=200.0,
        materials=MaterialMasses(0.25, 200.0, 0.01, 400.0, 800.0, 50.0),
        lifespan_years=5,
    ),
    "tablet": DeviceCategoryProfile(
        name="Tablet",
        weight_kg=0.6,
        co2_manufacturing_kg=120.0,
        co2_per_year_kg=20.0,
        energy_consumption_kwh_per_year=50.0,
        materials=MaterialMasses(0.05, 50.0, 0.005, 100.0, 200.0, 150.0),
        lifespan_years=4,
    ),
    "desktop_pc": DeviceCategoryProfile(
        name="Desktop PC",
        weight_kg=8.0,
        co2_manufacturing_kg=500.0,
        co2_per_year_kg=120.0,
        energy_consumption_kwh_per_year=400.0,
        materials=MaterialMasses(0.5, 500.0, 0.02, 800.0, 1200.0, 100.0),
        lifespan_years=6,
    ),
    "television": DeviceCategoryProfile(
        name="Television",
        weight_kg=15.0,
        co2_manufacturing_kg=400.0,
        co2_per_year_kg=80.0,
        energy_consumption_kwh_per_year=300.0,
        materials=MaterialMasses(0.1, 300.0, 0.05, 500.0, 800.0, 2000.0),
        lifespan_years=8,
    ),
    "monitor": DeviceCategoryProfile(
        name="Monitor",
        weight_kg=5.0,
        co2_manufacturing_kg=200.0,
        co2_per_year_kg=60.0,
        energy_consumption_kwh_per_year=150.0,
        materials=MaterialMasses(0.15, 150.0, 0.01, 300.0, 400.0, 800.0),
        lifespan_years=7,
    ),
    "printer": DeviceCategoryProfile(
        name="Printer",
        weight_kg=3.0,
        co2_manufacturing_kg=150.0,
        co2_per_year_kg=30.0,
        energy_consumption_kwh_per_year=80.0,
        materials=MaterialMasses(0.08, 100.0, 0.005, 200.0, 600.0, 50.0),
        lifespan_years=5,
    ),
    "gaming_console": DeviceCategoryProfile(
        name="Gaming Console",
        weight_kg=4.0,
        co2_manufacturing_kg=250.0,
        co2_per_year_kg=70.0,
        energy_consumption_kwh_per_year=200.0,
        materials=MaterialMasses(0.2, 180.0, 0.015, 350.0, 500.0, 100.0),
        lifespan_years=6,
    ),
}

# Fraction of nominal material mass recoverable by physical condition.
CONDITION_MULTIPLIERS: Mapping[str, float] = {
    "good": 0.9,
    "fair": 0.7,
    "poor": 0.4,
}

MATERIAL_MULTIPLIER_FLOOR = 0.3


def co2_multiplier(age_months: float) -> float:
    """Return the usage-phase CO2 multiplier; older devices run less efficiently."""
    return 1 + (age_months / 12) * 0.1


def material_multiplier(age_months: float) -> float:
    """Return the material recoverability multiplier, floored at 30%."""
    return max(MATERIAL_MULTIPLIER_FLOOR, 1 - (age_months / 12) * 0.05)


def condition_multiplier(condition: str) -> float:
    """Return the material recovery fraction for ``condition``."""
    return CONDITION_MULTIPLIERS[condition]


def is_known_device_type(device_type: str) -> bool:
    return device_type in DEVICE_CATEGORY_PROFILES


def get_category_profile(device_type: str) -> DeviceCategoryProfile:
    """Retrieve the profile for ``device_type``.

    Raises:
        UnknownDeviceTypeError: When no profile exists for the category.
    """
    profile = DEVICE_CATEGORY_PROFILES.get(device_type)
    if profile is None:
        raise UnknownDeviceTypeError(device_type)
    return profile


def get_device_types() -> list[dict[str, str]]:
    """Return ``{"value", "label"}`` pairs for every known category."""
    return [
        {"value": key, "label": profile.name}
        for key, profile in DEVICE_CATEGORY_PROFILES.items()
    ]
