"""Pytest configuration and fixtures."""

from __future__ import annotations

import asyncio
import inspect
import os
import sys
from collections.abc import Callable, Iterator
from typing import Any

import pytest

# Ensure src/ is on sys.path for tests so the src layout is used during test runs
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC = os.path.join(ROOT, "src")
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from ewaste_impact.config_loader import ImpactConfig, NarrativeSettings  # noqa: E402
from ewaste_impact.device_catalog import load_default_catalog  # noqa: E402
from ewaste_impact.emissions_provider import StaticEmissionsProvider  # noqa: E402
from ewaste_impact.impact import ImpactCalculator  # noqa: E402
from ewaste_impact.impact import defaults as impact_defaults  # noqa: E402
from ewaste_impact.price_provider import StaticPriceProvider  # noqa: E402
from ewaste_impact.settings import EwasteImpactSettings  # noqa: E402

_ENVIRONMENT_KEYS = (
    "EWASTE_DEFAULT_REGION",
    "EWASTE_CONFIG_PATH",
    "EWASTE_PROVIDER_TIMEOUT",
    "EWASTE_DEVICE_CATALOG_FILE",
    "EWASTE_NARRATIVE_MODEL",
    "ELECTRICITYMAPS_TOKEN",
    "ELECTRICITYMAPS_API_KEY",
    "METALS_API_KEY",
    "ANTHROPIC_API_KEY",
)


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "asyncio: mark test as requiring an event loop")


def pytest_pyfunc_call(pyfuncitem: Any) -> bool | None:
    """Execute async test functions without requiring pytest-asyncio."""

    if inspect.iscoroutinefunction(pyfuncitem.obj):
        call_kwargs = {
            name: pyfuncitem.funcargs[name]
            for name in pyfuncitem._fixtureinfo.argnames  # type: ignore[attr-defined]
        }

        event_loop = asyncio.new_event_loop()
        try:
            event_loop.run_until_complete(pyfuncitem.obj(**call_kwargs))
        finally:
            event_loop.close()
        return True
    return None


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Strip credentials and overrides so tests never reach live services."""

    for key in _ENVIRONMENT_KEYS:
        monkeypatch.delenv(key, raising=False)
    load_default_catalog.cache_clear()
    impact_defaults.load_emission_factors.cache_clear()
    impact_defaults.load_material_prices.cache_clear()
    yield
    load_default_catalog.cache_clear()


@pytest.fixture
def static_emissions() -> StaticEmissionsProvider:
    return StaticEmissionsProvider(
        impact_defaults.load_emission_factors(), default=0.92
    )


@pytest.fixture
def static_prices() -> StaticPriceProvider:
    return StaticPriceProvider(
        gold=65.0, copper=0.01, rare_earths=0.5, aluminum=0.002
    )


@pytest.fixture
def calculator_factory(
    static_emissions: StaticEmissionsProvider, static_prices: StaticPriceProvider
) -> Callable[..., ImpactCalculator]:
    """Build calculators wired to static providers unless overridden."""

    def _build(**overrides: Any) -> ImpactCalculator:
        options: dict[str, Any] = {
            "config": ImpactConfig(narrative=NarrativeSettings(enabled=False)),
            "settings": EwasteImpactSettings(),
            "emissions_provider": static_emissions,
            "price_provider": static_prices,
        }
        options.update(overrides)
        return ImpactCalculator(**options)

    return _build
