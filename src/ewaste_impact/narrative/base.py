"""Narrative generator protocol and payload validation."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ewaste_impact.device_catalog import DeviceRecord
from ewaste_impact.models import CalculationRequest, ImpactFigures, Narrative

LOGGER = logging.getLogger(__name__)

GENERATED_SOURCE = "generated"

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


@dataclass(frozen=True, slots=True)
class NarrativeContext:
    """Everything a narrative generator may use; passed as plain data."""

    request: CalculationRequest
    figures: ImpactFigures
    record: DeviceRecord | None = None

    def to_prompt_data(self) -> dict[str, object]:
        """Return a JSON-serialisable view of the context."""

        figures = self.figures
        return {
            "device": {
                "deviceType": self.request.device_type,
                "name": figures.device_name,
                "brand": self.request.brand,
                "model": self.request.model,
                "ageMonths": self.request.age_months,
                "condition": self.request.condition,
                "catalogRecord": (
                    self.record.to_dict() if self.record is not None else None
                ),
            },
            "impact": {
                "co2eq": figures.co2eq,
                "co2Manufacturing": figures.co2_manufacturing,
                "co2Usage": figures.co2_usage,
                "rawMaterials": figures.raw_materials.to_dict(),
                "materialValueUSD": figures.material_value_usd,
                "comparisons": figures.comparisons.to_dict(),
                "recyclingBenefits": figures.recycling_benefits.to_dict(),
                "deviceInfo": figures.device_info.to_dict(),
            },
        }


@runtime_checkable
class NarrativeGenerator(Protocol):
    """Collaborator that phrases the summary and recommendations."""

    async def generate(self, context: NarrativeContext) -> Narrative | None:
        """Return a narrative, or ``None`` when unavailable."""


class NarrativePayload(BaseModel):
    """Structured output expected from a generative collaborator."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    impact_summary: str = Field(..., alias="impactSummary", min_length=1)
    recommendations: list[str] = Field(..., min_length=1)

    @field_validator("impact_summary")
    @classmethod
    def _strip_summary(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("impactSummary must not be blank")
        return stripped

    @field_validator("recommendations")
    @classmethod
    def _clean_recommendations(cls, value: list[str]) -> list[str]:
        cleaned = [item.strip() for item in value]
        if any(not item for item in cleaned):
            raise ValueError("recommendations must not contain blank entries")
        return cleaned


def parse_narrative_payload(text: str) -> Narrative | None:
    """Extract and validate a JSON narrative from free-form model output.

    Returns:
        A :class:`Narrative` tagged as generated, or ``None`` when the text
        holds no well-formed payload.
    """

    match = _JSON_OBJECT.search(text)
    if match is None:
        LOGGER.warning("Narrative response contained no JSON object")
        return None
    try:
        payload = NarrativePayload.model_validate_json(match.group())
    except ValidationError as exc:
        LOGGER.warning(
            "Narrative response failed validation",
            extra={"error_count": exc.error_count()},
        )
        return None
    return Narrative(
        impact_summary=payload.impact_summary,
        recommendations=tuple(payload.recommendations),
        source=GENERATED_SOURCE,
    )


def validate_narrative(narrative: object) -> Narrative | None:
    """Return ``narrative`` cleaned of surrounding whitespace, or ``None``.

    Generator output must carry a non-blank summary and at least one
    recommendation, none of them blank.
    """

    if not isinstance(narrative, Narrative):
        return None
    try:
        payload = NarrativePayload.model_validate(
            {
                "impactSummary": narrative.impact_summary,
                "recommendations": list(narrative.recommendations),
            }
        )
    except ValidationError as exc:
        LOGGER.warning(
            "Generated narrative failed validation",
            extra={"error_count": exc.error_count()},
        )
        return None
    return Narrative(
        impact_summary=payload.impact_summary,
        recommendations=tuple(payload.recommendations),
        source=narrative.source,
    )
