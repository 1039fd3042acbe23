"""Device impact calculation package.

Provides the high-level :class:`ImpactCalculator` API along with the
engine, live-data orchestration and reporting helpers it is built from.
"""

from __future__ import annotations

from .calculator import ImpactCalculator, calculate_device_impact
from .engine import ImpactEngine

__all__ = ["ImpactCalculator", "ImpactEngine", "calculate_device_impact"]
