"""E-waste impact - environmental footprint and material value of devices."""

from __future__ import annotations

from importlib import import_module
from typing import Any, TYPE_CHECKING

__all__ = [
    "CalculationRequest",
    "CalculationResult",
    "ImpactCalculator",
    "ImpactRecord",
    "UnknownDeviceTypeError",
    "calculate_device_impact",
    "find_device",
    "get_device_types",
    "validate_request",
]

if TYPE_CHECKING:
    from .device_catalog import find_device
    from .errors import UnknownDeviceTypeError
    from .impact import ImpactCalculator, calculate_device_impact
    from .models import CalculationRequest, CalculationResult
    from .reference_data import get_device_types
    from .schemas import ImpactRecord, validate_request


def __getattr__(name: str) -> Any:
    """Lazily import heavy modules to avoid eager dependency loading."""

    module_map = {
        "CalculationRequest": "models",
        "CalculationResult": "models",
        "ImpactCalculator": "impact",
        "ImpactRecord": "schemas",
        "UnknownDeviceTypeError": "errors",
        "calculate_device_impact": "impact",
        "find_device": "device_catalog",
        "get_device_types": "reference_data",
        "validate_request": "schemas",
    }

    if name not in module_map:
        raise AttributeError(name)

    module = import_module(f".{module_map[name]}", __name__)
    return getattr(module, name)
