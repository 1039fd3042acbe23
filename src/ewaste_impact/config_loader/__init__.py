"""Public entry points for the :mod:`ewaste_impact` configuration loader."""

from __future__ import annotations

from ewaste_impact.config_loader.models import (
    ImpactConfig,
    NarrativeSettings,
    ProviderSettings,
    RegionSettings,
)
from ewaste_impact.config_loader.parsing import (
    apply_environment_overrides,
    apply_structured_overrides,
)
from ewaste_impact.config_loader.sources import load_structured_config
from ewaste_impact.settings import EwasteImpactSettings, get_settings

__all__ = [
    "ImpactConfig",
    "NarrativeSettings",
    "ProviderSettings",
    "RegionSettings",
    "load_config",
]


def load_config(
    path: str | None = None, *, settings: EwasteImpactSettings | None = None
) -> ImpactConfig:
    """Load configuration from defaults, the environment and an optional file.

    Args:
        path: Optional explicit path to a JSON or YAML configuration file.
            When omitted the loader checks ``EWASTE_CONFIG_PATH`` and then the
            default search locations.
        settings: Optional pre-instantiated environment settings.

    Returns:
        Fully populated :class:`ImpactConfig` instance.
    """

    env_settings = settings or get_settings()
    base = apply_environment_overrides(ImpactConfig(), env_settings)
    structured = load_structured_config(path, env_settings)
    if structured is None:
        return base
    return apply_structured_overrides(base, structured)
