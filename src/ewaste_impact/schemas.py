"""Pydantic models describing the public ewaste-impact schemas."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ewaste_impact.models import CalculationRequest, CalculationResult

LOGGER = logging.getLogger(__name__)

SchemaVersionLiteral = Literal["0.1.0"]
CURRENT_IMPACT_SCHEMA_VERSION: SchemaVersionLiteral = "0.1.0"


class CalculationRequestPayload(BaseModel):
    """Wire shape of a calculation request (camelCase keys)."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    device_type: str = Field(
        ...,
        alias="deviceType",
        min_length=1,
        description="Device category key (for example, 'smartphone').",
    )
    age_months: float = Field(
        ...,
        alias="ageMonths",
        ge=0.0,
        description="Age of the device in months.",
    )
    condition: Literal["good", "fair", "poor"] = Field(
        ..., description="Physical condition of the device."
    )
    brand: str | None = Field(default=None, description="Manufacturer name.")
    model: str | None = Field(default=None, description="Model name.")
    region: str | None = Field(
        default=None,
        description="Grid region code used for the emissions factor.",
    )

    def to_request(self) -> CalculationRequest:
        """Return the validated :class:`CalculationRequest`."""

        return CalculationRequest(
            device_type=self.device_type.strip(),
            age_months=self.age_months,
            condition=self.condition,
            brand=self.brand,
            model=self.model,
            region=self.region,
        )


@dataclass(frozen=True, slots=True)
class RequestValidation:
    """Outcome of :func:`validate_request`."""

    request: CalculationRequest | None
    errors: tuple[str, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.request is not None and not self.errors


def _format_error(error: Mapping[str, Any]) -> str:
    location = ".".join(str(part) for part in error.get("loc", ())) or "request"
    return f"{location}: {error.get('msg', 'invalid value')}"


def validate_request(payload: Mapping[str, Any] | None) -> RequestValidation:
    """Validate a raw request mapping without raising.

    Args:
        payload: Decoded JSON object, typically from an HTTP body or the CLI.

    Returns:
        A :class:`RequestValidation` carrying either the request or a list of
        human-readable error messages.
    """

    if not isinstance(payload, Mapping):
        return RequestValidation(None, ("request: expected a JSON object",))
    try:
        parsed = CalculationRequestPayload.model_validate(dict(payload))
        request = parsed.to_request()
    except ValidationError as exc:
        errors = tuple(_format_error(error) for error in exc.errors())
        LOGGER.debug("Request validation failed", extra={"errors": list(errors)})
        return RequestValidation(None, errors)
    except ValueError as exc:
        return RequestValidation(None, (f"request: {exc}",))
    return RequestValidation(request)


class ImpactRecord(BaseModel):
    """Immutable, versioned schema for a stored device impact calculation."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["ewaste_impact"] = Field(
        default="ewaste_impact",
        description="Canonical namespace for e-waste impact records.",
    )
    schema_version: SchemaVersionLiteral = Field(
        default=CURRENT_IMPACT_SCHEMA_VERSION,
        description="Semantic version of the impact record schema.",
    )
    type: Literal["device_impact"] = Field(
        default="device_impact",
        description="Event type identifier within the namespace.",
    )

    device_type: str = Field(..., min_length=1, description="Device category key.")
    brand: str | None = Field(default=None, description="Manufacturer name.")
    model: str | None = Field(default=None, description="Model name.")
    age_months: float = Field(..., ge=0.0, description="Device age in months.")
    condition: Literal["good", "fair", "poor"] = Field(
        ..., description="Physical condition reported by the caller."
    )
    region: str | None = Field(
        default=None, description="Grid region used for the usage-phase estimate."
    )

    co2eq_kg: float = Field(..., ge=0.0, description="Total CO2e in kilograms.")
    co2_manufacturing_kg: float = Field(
        ..., ge=0.0, description="Manufacturing-phase CO2e in kilograms."
    )
    co2_usage_kg: float = Field(
        ..., ge=0.0, description="Usage-phase CO2e in kilograms."
    )
    raw_materials_g: dict[str, float] = Field(
        ..., description="Recoverable material masses in grams."
    )
    material_value_usd: float = Field(
        ..., ge=0.0, description="Estimated value of recoverable metals in USD."
    )
    comparisons: dict[str, float] = Field(
        ..., description="Human-scale equivalents of the CO2e total."
    )
    recycling_benefits: dict[str, float] = Field(
        ..., description="Resource savings from recycling the device."
    )
    device_info: dict[str, float] = Field(
        ..., description="Weight, lifespan and energy profile of the device."
    )
    impact_summary: str = Field(..., min_length=1, description="Prose summary.")
    recommendations: list[str] = Field(
        ..., min_length=1, description="Ordered disposal recommendations."
    )
    quality_flag: Literal["live", "static", "fallback"] = Field(
        ..., description="Quality descriptor for the live-data inputs."
    )
    meta: dict[str, object] | None = Field(
        default=None,
        description="Provenance metadata (provider sources and timestamps).",
    )
    created_at: datetime = Field(
        ..., description="Timestamp at which the calculation was recorded (UTC)."
    )

    @classmethod
    def from_result(
        cls,
        request: CalculationRequest,
        result: CalculationResult,
        *,
        created_at: datetime | None = None,
    ) -> ImpactRecord:
        """Build a record from a request and its computed result."""

        meta = dict(result.meta or {})
        quality_flag = meta.get("quality_flag", "fallback")
        payload = result.to_dict()
        return cls(
            device_type=request.device_type,
            brand=request.brand,
            model=request.model,
            age_months=request.age_months,
            condition=request.condition,
            region=meta.get("region") or request.region,  # type: ignore[arg-type]
            co2eq_kg=result.co2eq,
            co2_manufacturing_kg=result.co2_manufacturing,
            co2_usage_kg=result.co2_usage,
            raw_materials_g=dict(payload["rawMaterials"]),
            material_value_usd=result.material_value_usd,
            comparisons=payload["comparisons"],
            recycling_benefits=payload["recyclingBenefits"],
            device_info=payload["deviceInfo"],
            impact_summary=result.impact_summary,
            recommendations=list(result.recommendations),
            quality_flag=quality_flag,  # type: ignore[arg-type]
            meta=meta or None,
            created_at=created_at or datetime.now(timezone.utc),
        )

    def model_dump_json_ready(self) -> dict[str, object]:
        """Return a JSON-serialisable payload with ``None`` values removed."""

        return self.model_dump(mode="json", exclude_none=True)
