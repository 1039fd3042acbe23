"""Parsing and transformation helpers for :mod:`ewaste_impact.config_loader`."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import replace

from ewaste_impact.config_loader.models import ImpactConfig
from ewaste_impact.settings import EwasteImpactSettings


def apply_environment_overrides(
    config: ImpactConfig, settings: EwasteImpactSettings
) -> ImpactConfig:
    """Apply environment-derived overrides to the configuration.

    Args:
        config: Base configuration instance.
        settings: Environment-derived settings.

    Returns:
        Configuration with environment overrides applied.
    """

    updated = config

    if settings.default_region:
        updated = replace(
            updated,
            region=replace(updated.region, default=settings.default_region),
        )

    if settings.provider_timeout_seconds is not None:
        updated = replace(
            updated,
            providers=replace(
                updated.providers,
                timeout_seconds=settings.provider_timeout_seconds,
            ),
        )

    if settings.narrative_model:
        updated = replace(
            updated,
            narrative=replace(updated.narrative, model=settings.narrative_model),
        )

    return updated


def apply_structured_overrides(
    config: ImpactConfig, data: Mapping[str, object]
) -> ImpactConfig:
    """Apply overrides sourced from structured configuration data.

    Unknown keys and values of the wrong type are ignored.
    """

    updated = config

    region_section = _expect_mapping(data.get("region"))
    if region_section is not None:
        default_value = _coerce_str(region_section.get("default"))
        if default_value is not None:
            updated = replace(
                updated, region=replace(updated.region, default=default_value)
            )

    providers_section = _expect_mapping(data.get("providers"))
    if providers_section is not None:
        updated = _apply_providers_section(updated, providers_section)

    narrative_section = _expect_mapping(data.get("narrative"))
    if narrative_section is not None:
        updated = _apply_narrative_section(updated, narrative_section)

    return updated


def _apply_providers_section(
    config: ImpactConfig, section: Mapping[str, object]
) -> ImpactConfig:
    providers = config.providers

    emissions_order = _coerce_str_sequence(section.get("emissions_order"))
    if emissions_order is not None:
        providers = replace(providers, emissions_order=emissions_order)

    prices_order = _coerce_str_sequence(section.get("prices_order"))
    if prices_order is not None:
        providers = replace(providers, prices_order=prices_order)

    ttl_value = _coerce_int(section.get("ttl_seconds"))
    if ttl_value is not None and ttl_value >= 0:
        providers = replace(providers, ttl_seconds=ttl_value)

    timeout_value = _coerce_float(section.get("timeout_seconds"))
    if timeout_value is not None and timeout_value > 0:
        providers = replace(providers, timeout_seconds=timeout_value)

    return replace(config, providers=providers)


def _apply_narrative_section(
    config: ImpactConfig, section: Mapping[str, object]
) -> ImpactConfig:
    narrative = config.narrative

    enabled = _coerce_bool(section.get("enabled"))
    if enabled is not None:
        narrative = replace(narrative, enabled=enabled)

    model = _coerce_str(section.get("model"))
    if model is not None:
        narrative = replace(narrative, model=model)

    max_tokens = _coerce_int(section.get("max_tokens"))
    if max_tokens is not None and max_tokens > 0:
        narrative = replace(narrative, max_tokens=max_tokens)

    return replace(config, narrative=narrative)


def _coerce_float(value: object) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def _coerce_int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _coerce_bool(value: object) -> bool | None:
    """Parse a boolean from arbitrary input.

    Accepts real booleans, ``true/false/yes/no/1/0`` strings and the
    integers 0 and 1.
    """

    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "1", "yes"}:
            return True
        if lowered in {"false", "0", "no"}:
            return False
    if isinstance(value, int):
        if value == 0:
            return False
        if value == 1:
            return True
    return None


def _coerce_str(value: object) -> str | None:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return None


def _coerce_str_sequence(value: object) -> tuple[str, ...] | None:
    if not isinstance(value, Sequence) or isinstance(value, (str, bytes)):
        return None
    items: list[str] = []
    for element in value:
        if not isinstance(element, str):
            return None
        items.append(element)
    return tuple(items)


def _expect_mapping(value: object) -> Mapping[str, object] | None:
    if not isinstance(value, Mapping):
        return None
    if not all(isinstance(key, str) for key in value.keys()):
        return None
    return value
