"""Generated narratives backed by the Anthropic Messages API."""

from __future__ import annotations

import json
import logging
from typing import Any

import anthropic

from ewaste_impact.models import Narrative
from ewaste_impact.narrative.base import NarrativeContext, parse_narrative_payload
from ewaste_impact.settings import EwasteImpactSettings, get_settings

LOGGER = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-3-5-haiku-latest"

SYSTEM_PROMPT = (
    "You are an electronics recycling advisor. Given the computed environmental "
    "impact of a device, write a short impact summary and a prioritised list of "
    "disposal recommendations. Use only the figures provided; never invent "
    "numbers. Respond with a single JSON object of the form "
    '{"impactSummary": "<prose>", "recommendations": ["<item>", ...]}.'
)


class AnthropicNarrator:
    """Narrative generator that asks a Claude model to phrase the results.

    The narrator never raises on API failures; it returns ``None`` so that the
    caller can fall back to the deterministic templates.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        model: str | None = None,
        max_tokens: int = 800,
        client: Any | None = None,
        settings: EwasteImpactSettings | None = None,
    ) -> None:
        env = settings or get_settings()
        self._api_key = api_key or env.anthropic_api_key
        self._model = model or env.narrative_model or DEFAULT_MODEL
        self._max_tokens = max_tokens
        self._client = client

    @property
    def model(self) -> str:
        return self._model

    @property
    def enabled(self) -> bool:
        """Return ``True`` when the narrator can reach the API."""

        return self._client is not None or bool(self._api_key)

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = anthropic.AsyncAnthropic(api_key=self._api_key)
        return self._client

    async def generate(self, context: NarrativeContext) -> Narrative | None:
        if not self.enabled:
            LOGGER.debug("Anthropic narrator disabled: no API key configured")
            return None

        prompt = (
            "Device impact data:\n"
            f"{json.dumps(context.to_prompt_data(), indent=2)}\n\n"
            "Return the JSON object now."
        )
        try:
            message = await self._get_client().messages.create(
                model=self._model,
                max_tokens=self._max_tokens,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as exc:
            LOGGER.warning(
                "Anthropic narrative request failed",
                extra={"model": self._model, "error": type(exc).__name__},
            )
            return None

        text = "".join(
            getattr(block, "text", "")
            for block in message.content
            if getattr(block, "type", "text") == "text"
        )
        narrative = parse_narrative_payload(text)
        if narrative is not None:
            LOGGER.info(
                "Generated narrative received",
                extra={
                    "model": self._model,
                    "recommendation_count": len(narrative.recommendations),
                },
            )
        return narrative
