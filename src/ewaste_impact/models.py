"""Value objects exchanged by the impact calculator.

Requests and results are plain frozen dataclasses. Results serialise to the
camelCase dictionary shape consumed by the web front end and the document
store through :meth:`CalculationResult.to_dict`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, TypedDict, get_args

Condition = Literal["good", "fair", "poor"]
CONDITIONS: tuple[str, ...] = get_args(Condition)

DEFAULT_REGION = "US"


class RawMaterialsDict(TypedDict):
    """Serialised recoverable material masses in grams."""

    gold: float
    copper: float
    rareEarths: float
    aluminum: float
    plastic: float
    glass: float


class CalculationResultDict(TypedDict):
    """Serialised calculation result."""

    co2eq: float
    co2Manufacturing: float
    co2Usage: float
    rawMaterials: RawMaterialsDict
    comparisons: dict[str, float]
    recyclingBenefits: dict[str, float]
    deviceInfo: dict[str, float]
    materialValueUSD: float
    impactSummary: str
    recommendations: list[str]
    meta: dict[str, object] | None


@dataclass(frozen=True, slots=True)
class MaterialMasses:
    """Masses of the six tracked materials, in grams."""

    gold: float
    copper: float
    rare_earths: float
    aluminum: float
    plastic: float
    glass: float

    def scaled(self, factor: float) -> MaterialMasses:
        """Return a copy with every mass multiplied by ``factor``."""

        return MaterialMasses(
            gold=self.gold * factor,
            copper=self.copper * factor,
            rare_earths=self.rare_earths * factor,
            aluminum=self.aluminum * factor,
            plastic=self.plastic * factor,
            glass=self.glass * factor,
        )

    def total(self) -> float:
        """Return the combined mass of all materials."""

        return (
            self.gold
            + self.copper
            + self.rare_earths
            + self.aluminum
            + self.plastic
            + self.glass
        )

    def to_dict(self) -> RawMaterialsDict:
        return {
            "gold": self.gold,
            "copper": self.copper,
            "rareEarths": self.rare_earths,
            "aluminum": self.aluminum,
            "plastic": self.plastic,
            "glass": self.glass,
        }


@dataclass(frozen=True, slots=True)
class CalculationRequest:
    """Description of a device submitted for impact estimation.

    Use :func:`ewaste_impact.schemas.validate_request` to build one from
    untrusted input; the constructor only enforces the basic invariants.
    """

    device_type: str
    age_months: float
    condition: Condition
    brand: str | None = None
    model: str | None = None
    region: str | None = None

    def __post_init__(self) -> None:
        if not self.device_type:
            raise ValueError("device_type must be a non-empty string")
        if self.age_months < 0:
            raise ValueError("age_months must be >= 0")
        if self.condition not in CONDITIONS:
            raise ValueError(
                f"condition must be one of {', '.join(CONDITIONS)}, "
                f"got {self.condition!r}"
            )

    @property
    def has_device_identity(self) -> bool:
        """Return ``True`` when both brand and model were supplied."""

        return bool(
            self.brand and self.brand.strip() and self.model and self.model.strip()
        )

    @property
    def age_years(self) -> float:
        return self.age_months / 12


@dataclass(frozen=True, slots=True)
class Comparisons:
    """Everyday equivalents of a CO2 figure."""

    tree_equivalents: float
    car_miles: float
    smartphone_equivalents: float

    def to_dict(self) -> dict[str, float]:
        return {
            "treeEquivalents": self.tree_equivalents,
            "carMiles": self.car_miles,
            "smartphoneEquivalents": self.smartphone_equivalents,
        }


@dataclass(frozen=True, slots=True)
class RecyclingBenefits:
    """Resources saved by recycling rather than landfilling a device."""

    energy_saved_kwh: float
    water_saved_liters: float
    landfill_space_m3: float

    def to_dict(self) -> dict[str, float]:
        return {
            "energySaved": self.energy_saved_kwh,
            "waterSaved": self.water_saved_liters,
            "landfillSpace": self.landfill_space_m3,
        }


@dataclass(frozen=True, slots=True)
class DeviceInfo:
    """Physical characteristics of the evaluated device."""

    weight_kg: float
    lifespan_years: float
    energy_consumption_kwh_per_year: float
    remaining_lifespan_years: float

    def to_dict(self) -> dict[str, float]:
        return {
            "weight": self.weight_kg,
            "lifespan": self.lifespan_years,
            "energyConsumption": self.energy_consumption_kwh_per_year,
            "remainingLifespan": self.remaining_lifespan_years,
        }


@dataclass(frozen=True, slots=True)
class ImpactFigures:
    """Numeric output of the calculation engine.

    ``co2eq``, ``co2_manufacturing``, ``co2_usage`` and
    ``material_value_usd`` are rounded to two decimals. The ``unrounded_*``
    fields keep full precision for narrative thresholds.
    """

    device_name: str
    co2eq: float
    co2_manufacturing: float
    co2_usage: float
    raw_materials: MaterialMasses
    comparisons: Comparisons
    recycling_benefits: RecyclingBenefits
    device_info: DeviceInfo
    material_value_usd: float
    unrounded_co2eq: float
    unrounded_material_value_usd: float
    meta: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Narrative:
    """Prose summary and ordered disposal recommendations."""

    impact_summary: str
    recommendations: tuple[str, ...]
    source: str = "template"


@dataclass(frozen=True, slots=True)
class CalculationResult:
    """Complete impact estimate returned to callers."""

    co2eq: float
    co2_manufacturing: float
    co2_usage: float
    raw_materials: MaterialMasses
    comparisons: Comparisons
    recycling_benefits: RecyclingBenefits
    device_info: DeviceInfo
    material_value_usd: float
    impact_summary: str
    recommendations: tuple[str, ...]
    meta: dict[str, object] | None = None

    @classmethod
    def from_parts(
        cls, figures: ImpactFigures, narrative: Narrative
    ) -> CalculationResult:
        """Combine engine figures with the narrative text."""

        meta = dict(figures.meta)
        meta["narrative_source"] = narrative.source
        return cls(
            co2eq=figures.co2eq,
            co2_manufacturing=figures.co2_manufacturing,
            co2_usage=figures.co2_usage,
            raw_materials=figures.raw_materials,
            comparisons=figures.comparisons,
            recycling_benefits=figures.recycling_benefits,
            device_info=figures.device_info,
            material_value_usd=figures.material_value_usd,
            impact_summary=narrative.impact_summary,
            recommendations=tuple(narrative.recommendations),
            meta=meta,
        )

    def to_dict(self) -> CalculationResultDict:
        """Return the camelCase dictionary shape used by callers."""

        return {
            "co2eq": self.co2eq,
            "co2Manufacturing": self.co2_manufacturing,
            "co2Usage": self.co2_usage,
            "rawMaterials": self.raw_materials.to_dict(),
            "comparisons": self.comparisons.to_dict(),
            "recyclingBenefits": self.recycling_benefits.to_dict(),
            "deviceInfo": self.device_info.to_dict(),
            "materialValueUSD": self.material_value_usd,
            "impactSummary": self.impact_summary,
            "recommendations": list(self.recommendations),
            "meta": self.meta,
        }
