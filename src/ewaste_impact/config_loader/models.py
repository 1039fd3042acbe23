"""Typed configuration dataclasses for :mod:`ewaste_impact.config_loader`."""

from __future__ import annotations

from dataclasses import dataclass, field

from ewaste_impact.models import DEFAULT_REGION


@dataclass(slots=True)
class ProviderSettings:
    """Settings describing the live-data provider chains.

    Attributes:
        emissions_order: Ordered emissions provider identifiers.
        prices_order: Ordered commodity price provider identifiers.
        ttl_seconds: Cache time-to-live applied to provider responses.
        timeout_seconds: Upper bound on a single live-data fetch.
    """

    emissions_order: tuple[str, ...] = ("electricitymaps", "uk", "static")
    prices_order: tuple[str, ...] = ("metals_api", "static")
    ttl_seconds: int = 300
    timeout_seconds: float = 5.0


@dataclass(slots=True)
class RegionSettings:
    """Configuration describing region defaults."""

    default: str = DEFAULT_REGION


@dataclass(slots=True)
class NarrativeSettings:
    """Controls for generated impact narratives."""

    enabled: bool = True
    model: str = "claude-3-5-haiku-latest"
    max_tokens: int = 800


@dataclass(slots=True)
class ImpactConfig:
    """Strongly typed configuration container for the impact calculator."""

    providers: ProviderSettings = field(default_factory=ProviderSettings)
    region: RegionSettings = field(default_factory=RegionSettings)
    narrative: NarrativeSettings = field(default_factory=NarrativeSettings)
