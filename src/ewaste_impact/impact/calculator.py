"""High-level device impact calculation orchestration."""

from __future__ import annotations

import logging

from ewaste_impact.config_loader import ImpactConfig, load_config
from ewaste_impact.device_catalog import (
    DeviceCatalog,
    DeviceRecord,
    load_default_catalog,
)
from ewaste_impact.emissions_provider import EmissionsProvider
from ewaste_impact.impact import defaults as impact_defaults
from ewaste_impact.impact.configuration import build_runtime_config
from ewaste_impact.impact.engine import ImpactEngine
from ewaste_impact.models import CalculationRequest, CalculationResult
from ewaste_impact.narrative import (
    AnthropicNarrator,
    NarrativeContext,
    NarrativeGenerator,
    generate_narrative,
)
from ewaste_impact.price_provider import PriceProvider
from ewaste_impact.reference_data import get_device_types
from ewaste_impact.settings import EwasteImpactSettings, get_settings

__all__ = ["ImpactCalculator", "calculate_device_impact"]


class ImpactCalculator:
    """Estimate the environmental impact and material value of a device.

    Collaborators (providers, catalog, narrator) are injected at construction;
    anything omitted is built from the typed configuration and environment
    settings.
    """

    def __init__(
        self,
        region: str | None = None,
        *,
        config: ImpactConfig | None = None,
        settings: EwasteImpactSettings | None = None,
        catalog: DeviceCatalog | None = None,
        emissions_provider: EmissionsProvider | None = None,
        price_provider: PriceProvider | None = None,
        narrator: NarrativeGenerator | None = None,
        narrative_timeout_seconds: float = 15.0,
    ) -> None:
        """Initialise the calculator with optional overrides.

        Args:
            region: Default grid region for requests that omit one.
            config: Typed configuration; loaded via
                :func:`~ewaste_impact.config_loader.load_config` when omitted.
            settings: Environment settings; read with
                :func:`~ewaste_impact.settings.get_settings` when omitted.
            catalog: Device catalog; the packaged catalog when omitted.
            emissions_provider: Pre-built emissions provider chain.
            price_provider: Pre-built commodity price provider chain.
            narrator: Narrative generator. When omitted an
                :class:`~ewaste_impact.narrative.AnthropicNarrator` is used if
                narratives are enabled and an API key is configured.
            narrative_timeout_seconds: Upper bound on the narrator call.
        """

        self.logger = logging.getLogger("ewaste_impact.impact.calculator")

        env_settings = settings or get_settings()
        impact_config = config or load_config(settings=env_settings)

        runtime_config = build_runtime_config(
            config=impact_config,
            settings=env_settings,
            catalog=catalog if catalog is not None else load_default_catalog(),
            emission_factors=impact_defaults.load_emission_factors(),
            static_prices=impact_defaults.load_material_prices(),
            region=region or env_settings.default_region,
            emissions_provider=emissions_provider,
            price_provider=price_provider,
        )

        if narrator is None and impact_config.narrative.enabled:
            if env_settings.anthropic_api_key:
                narrator = AnthropicNarrator(
                    model=impact_config.narrative.model,
                    max_tokens=impact_config.narrative.max_tokens,
                    settings=env_settings,
                )

        self.region = runtime_config.default_region
        self.config = impact_config
        self.narrator = narrator
        self.narrative_timeout_seconds = narrative_timeout_seconds
        self._runtime_config = runtime_config
        self._engine = ImpactEngine(runtime=runtime_config)

        self.logger.info(
            "ImpactCalculator initialised",
            extra={
                "region": self.region,
                "catalog_records": len(runtime_config.catalog),
                "emissions_provider": type(runtime_config.emissions_provider).__name__,
                "price_provider": type(runtime_config.price_provider).__name__,
                "narrator": type(narrator).__name__ if narrator else "template",
            },
        )

    @property
    def catalog(self) -> DeviceCatalog:
        return self._runtime_config.catalog

    async def calculate(self, request: CalculationRequest) -> CalculationResult:
        """Compute the full impact result for ``request``.

        Raises:
            UnknownDeviceTypeError: When ``request.device_type`` is not a
                known category.
        """

        figures, resolved = await self._engine.calculate(request)
        narrative = await generate_narrative(
            NarrativeContext(request=request, figures=figures, record=resolved.record),
            self.narrator,
            timeout_seconds=self.narrative_timeout_seconds,
        )
        return CalculationResult.from_parts(figures, narrative)

    @staticmethod
    def get_device_types() -> list[dict[str, str]]:
        """Return the supported device categories as value/label pairs."""

        return get_device_types()

    def list_devices(self, device_type: str | None = None) -> list[DeviceRecord]:
        """Return catalog records, optionally restricted to one category."""

        return self.catalog.list_devices(device_type)


async def calculate_device_impact(
    request: CalculationRequest, *, calculator: ImpactCalculator | None = None
) -> CalculationResult:
    """Calculate the impact of a single device.

    A calculator built from the environment is used when none is supplied.
    """

    active = calculator or ImpactCalculator()
    return await active.calculate(request)
