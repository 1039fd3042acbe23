"""Exception types raised by :mod:`ewaste_impact`."""

from __future__ import annotations

__all__ = ["CatalogError", "EwasteImpactError", "UnknownDeviceTypeError"]


class EwasteImpactError(Exception):
    """Base class for library errors."""


class UnknownDeviceTypeError(EwasteImpactError, ValueError):
    """Raised when a request names a device category with no profile."""

    def __init__(self, device_type: str) -> None:
        super().__init__(f"Unknown device type: {device_type}")
        self.device_type = device_type


class CatalogError(EwasteImpactError, ValueError):
    """Raised when the device catalog cannot be loaded or is inconsistent."""
