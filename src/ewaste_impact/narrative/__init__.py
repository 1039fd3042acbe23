"""Narrative generation for impact results.

The deterministic templates are always available. An optional generator
may phrase the summary and recommendations instead; any failure, timeout or
malformed output from it falls back to the templates.
"""

from __future__ import annotations

import asyncio
import logging

from ewaste_impact.models import Narrative
from ewaste_impact.narrative.anthropic_narrator import AnthropicNarrator
from ewaste_impact.narrative.base import (
    GENERATED_SOURCE,
    NarrativeContext,
    NarrativeGenerator,
    NarrativePayload,
    parse_narrative_payload,
    validate_narrative,
)
from ewaste_impact.narrative.templates import (
    TEMPLATE_SOURCE,
    build_impact_summary,
    build_recommendations,
    template_narrative,
)

__all__ = [
    "AnthropicNarrator",
    "GENERATED_SOURCE",
    "NarrativeContext",
    "NarrativeGenerator",
    "NarrativePayload",
    "TEMPLATE_SOURCE",
    "build_impact_summary",
    "build_recommendations",
    "generate_narrative",
    "parse_narrative_payload",
    "template_narrative",
    "validate_narrative",
]

LOGGER = logging.getLogger(__name__)

DEFAULT_NARRATIVE_TIMEOUT_SECONDS = 15.0


async def generate_narrative(
    context: NarrativeContext,
    generator: NarrativeGenerator | None = None,
    *,
    timeout_seconds: float = DEFAULT_NARRATIVE_TIMEOUT_SECONDS,
) -> Narrative:
    """Return a narrative for ``context``; never raises for generator faults.

    Args:
        context: Request, figures and matched catalog record.
        generator: Optional collaborator consulted before the templates.
        timeout_seconds: Upper bound on the generator call.

    Returns:
        The generated narrative when one is produced, otherwise the
        deterministic template narrative.
    """

    condition = context.request.condition
    if generator is None:
        return template_narrative(context.figures, condition)

    try:
        generated = await asyncio.wait_for(
            generator.generate(context), timeout=timeout_seconds
        )
    except TimeoutError:
        LOGGER.warning(
            "Narrative generator timed out",
            extra={"timeout_seconds": timeout_seconds},
        )
        generated = None
    except Exception as exc:
        LOGGER.warning(
            "Narrative generator failed",
            extra={"error": type(exc).__name__},
            exc_info=exc,
        )
        generated = None

    validated = validate_narrative(generated)
    if validated is not None:
        return validated
    return template_narrative(context.figures, condition)
