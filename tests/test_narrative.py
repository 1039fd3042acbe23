"""Tests for summary templates and the generated-narrative fallback."""

from __future__ import annotations

import asyncio
import logging
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import anthropic
import httpx
import pytest

from ewaste_impact.impact.reporting import (
    compare_co2_equivalents,
    recycling_benefits_for,
)
from ewaste_impact.models import (
    CalculationRequest,
    DeviceInfo,
    ImpactFigures,
    MaterialMasses,
    Narrative,
)
from ewaste_impact.narrative import (
    AnthropicNarrator,
    NarrativeContext,
    NarrativeGenerator,
    build_impact_summary,
    build_recommendations,
    generate_narrative,
    parse_narrative_payload,
    template_narrative,
)
from ewaste_impact.settings import EwasteImpactSettings

GENERATED_JSON = (
    '{"impactSummary": "Recycle it soon.", '
    '"recommendations": ["Wipe the device.", "Use a certified recycler."]}'
)


def _figures(
    *, co2eq: float = 67.144, remaining: float = 2.0, value: float = 1.61
) -> ImpactFigures:
    return ImpactFigures(
        device_name="Smartphone",
        co2eq=round(co2eq, 2),
        co2_manufacturing=55.0,
        co2_usage=round(co2eq - 55.0, 2),
        raw_materials=MaterialMasses(0.0226, 10.5, 0.0007, 16.96, 16.96, 16.96),
        comparisons=compare_co2_equivalents(co2eq),
        recycling_benefits=recycling_benefits_for(0.17),
        device_info=DeviceInfo(
            weight_kg=0.17,
            lifespan_years=3,
            energy_consumption_kwh_per_year=12.0,
            remaining_lifespan_years=remaining,
        ),
        material_value_usd=round(value, 2),
        unrounded_co2eq=co2eq,
        unrounded_material_value_usd=value,
    )


def _context(condition: str = "fair", **figure_overrides) -> NarrativeContext:
    return NarrativeContext(
        request=CalculationRequest(
            device_type="smartphone", age_months=12, condition=condition
        ),
        figures=_figures(**figure_overrides),
    )


def _anthropic_message(text: str) -> SimpleNamespace:
    return SimpleNamespace(content=[SimpleNamespace(type="text", text=text)])


class _StaticGenerator:
    def __init__(self, narrative: object) -> None:
        self._narrative = narrative

    async def generate(self, context: NarrativeContext) -> object:
        return self._narrative


class _SlowGenerator:
    async def generate(self, context: NarrativeContext) -> Narrative | None:
        await asyncio.sleep(5)
        return None


class _FailingGenerator:
    async def generate(self, context: NarrativeContext) -> Narrative | None:
        raise RuntimeError("model unavailable")


def test_summary_sentences_in_order() -> None:
    summary = build_impact_summary(_figures(), "fair")
    assert summary == (
        "Your smartphone has an estimated carbon footprint of 67.1 kg CO2e. "
        "It has approximately 2.0 years of useful life remaining. "
        "If properly recycled, it could recover 61.4g of valuable materials, "
        "including 0.023g of gold and 10.5g of copper. "
        "The estimated material value is $1.61. "
        "The device's condition allows for moderate material recovery."
    )


def test_summary_for_expired_device_without_value() -> None:
    summary = build_impact_summary(_figures(remaining=0.0, value=0.0), "poor")
    assert "This device has exceeded its typical lifespan." in summary
    assert "material value" not in summary
    assert summary.endswith(
        "Due to poor condition, material recovery will be limited."
    )


def test_recommendations_for_young_device_in_good_condition() -> None:
    assert build_recommendations(2.5, "good", 67.0) == [
        "Consider extending the device's life through repairs or upgrades.",
        "Donate to schools, libraries, or non-profits if still functional.",
        "The device has high resale or donation value.",
        "Find certified e-waste recyclers in your area.",
        "Check if the manufacturer offers take-back programs.",
    ]


def test_recommendations_for_aging_device() -> None:
    recommendations = build_recommendations(2.0, "fair", 67.0)
    assert recommendations[:2] == [
        "Plan for responsible disposal within the next year.",
        "Back up all data before disposal.",
    ]
    assert len(recommendations) == 4


def test_recommendations_for_expired_high_emission_device() -> None:
    recommendations = build_recommendations(0.0, "poor", 250.0)
    assert recommendations == [
        "This device should be recycled immediately.",
        "Remove all personal data before recycling.",
        "Professional recycling is recommended for maximum material recovery.",
        "Consider energy-efficient alternatives for your next device.",
        "Find certified e-waste recyclers in your area.",
        "Check if the manufacturer offers take-back programs.",
    ]


def test_parse_narrative_payload_accepts_wrapped_json() -> None:
    narrative = parse_narrative_payload(f"Here you go:\n{GENERATED_JSON}\nThanks")
    assert narrative is not None
    assert narrative.source == "generated"
    assert narrative.recommendations == (
        "Wipe the device.",
        "Use a certified recycler.",
    )


@pytest.mark.parametrize(
    "text",
    [
        "no json here",
        '{"impactSummary": "", "recommendations": ["x"]}',
        '{"impactSummary": "ok", "recommendations": []}',
        '{"impactSummary": "ok", "recommendations": ["fine", "  "]}',
        '{"impactSummary": "ok"}',
        '{"impactSummary": "ok", "recommendations": "not a list"}',
    ],
)
def test_parse_narrative_payload_rejects_malformed(text: str) -> None:
    assert parse_narrative_payload(text) is None


async def test_generate_without_generator_uses_template() -> None:
    context = _context()
    narrative = await generate_narrative(context)
    assert narrative == template_narrative(context.figures, "fair")
    assert narrative.source == "template"


async def test_generated_narrative_replaces_template() -> None:
    generated = Narrative("Generated.", ("Step one.",), source="generated")
    narrative = await generate_narrative(_context(), _StaticGenerator(generated))
    assert narrative == generated


@pytest.mark.parametrize(
    "generator",
    [
        _StaticGenerator(None),
        _StaticGenerator(Narrative("", ("",), source="generated")),
        _StaticGenerator(Narrative("   ", ("Step one.",), source="generated")),
        _StaticGenerator(Narrative("Generated.", (), source="generated")),
        _StaticGenerator(Narrative("Generated.", ("ok", " "), source="generated")),
        _StaticGenerator("Generated."),
        _FailingGenerator(),
        _SlowGenerator(),
    ],
)
async def test_generator_problems_fall_back_to_template(generator) -> None:
    context = _context()
    narrative = await generate_narrative(context, generator, timeout_seconds=0.05)
    assert narrative.source == "template"
    assert narrative.recommendations[-1] == (
        "Check if the manufacturer offers take-back programs."
    )


def test_generators_satisfy_protocol() -> None:
    assert isinstance(_StaticGenerator(None), NarrativeGenerator)
    assert isinstance(AnthropicNarrator(api_key="k"), NarrativeGenerator)


async def test_anthropic_narrator_parses_response() -> None:
    client = MagicMock()
    client.messages.create = AsyncMock(return_value=_anthropic_message(GENERATED_JSON))
    narrator = AnthropicNarrator(api_key="test-key", model="test-model", client=client)

    narrative = await narrator.generate(_context())

    assert narrative is not None
    assert narrative.impact_summary == "Recycle it soon."
    _, kwargs = client.messages.create.call_args
    assert kwargs["model"] == "test-model"
    assert kwargs["max_tokens"] == 800
    assert '"co2eq": 67.14' in kwargs["messages"][0]["content"]


async def test_anthropic_narrator_malformed_response() -> None:
    client = MagicMock()
    client.messages.create = AsyncMock(
        return_value=_anthropic_message("I cannot help with that.")
    )
    narrator = AnthropicNarrator(api_key="test-key", client=client)
    assert await narrator.generate(_context()) is None


async def test_anthropic_narrator_api_error() -> None:
    request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
    client = MagicMock()
    client.messages.create = AsyncMock(
        side_effect=anthropic.APIConnectionError(request=request)
    )
    narrator = AnthropicNarrator(api_key="test-key", client=client)
    assert await narrator.generate(_context()) is None


async def test_anthropic_narrator_disabled_without_key() -> None:
    narrator = AnthropicNarrator(settings=EwasteImpactSettings())
    assert not narrator.enabled
    assert await narrator.generate(_context()) is None


def test_narrator_model_from_settings() -> None:
    settings = EwasteImpactSettings(
        ANTHROPIC_API_KEY="k", EWASTE_NARRATIVE_MODEL="claude-custom"
    )
    narrator = AnthropicNarrator(settings=settings)
    assert narrator.enabled
    assert narrator.model == "claude-custom"


async def test_calculator_uses_injected_narrator(calculator_factory):
    generated = Narrative("Generated.", ("Step one.",), source="generated")
    calculator = calculator_factory(narrator=_StaticGenerator(generated))
    result = await calculator.calculate(
        CalculationRequest(device_type="smartphone", age_months=12, condition="fair")
    )
    assert result.impact_summary == "Generated."
    assert result.recommendations == ("Step one.",)
    assert result.co2eq == 67.14
    assert result.meta is not None and result.meta["narrative_source"] == "generated"


async def test_generated_narrative_is_trimmed() -> None:
    generated = Narrative("  Generated.\n", (" Step one. ",), source="generated")
    narrative = await generate_narrative(_context(), _StaticGenerator(generated))
    assert narrative == Narrative("Generated.", ("Step one.",), source="generated")


async def test_blank_generated_narrative_through_calculator(
    calculator_factory,
) -> None:
    calculator = calculator_factory(
        narrator=_StaticGenerator(Narrative("", ("",), source="generated"))
    )
    result = await calculator.calculate(
        CalculationRequest(device_type="smartphone", age_months=12, condition="fair")
    )
    assert result.impact_summary.startswith("Your smartphone")
    assert "" not in result.recommendations
    assert result.meta["narrative_source"] == "template"


async def test_generator_failure_is_logged_with_traceback(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="ewaste_impact.narrative"):
        await generate_narrative(_context(), _FailingGenerator())

    failures = [r for r in caplog.records if r.message == "Narrative generator failed"]
    assert len(failures) == 1
    assert failures[0].exc_info is not None
    assert isinstance(failures[0].exc_info[1], RuntimeError)
