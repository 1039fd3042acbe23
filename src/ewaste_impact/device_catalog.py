"""Curated catalog of known devices with authoritative impact figures."""

from __future__ import annotations

import json
import logging
import pathlib
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from functools import lru_cache

from ewaste_impact.errors import CatalogError
from ewaste_impact.reference_data import is_known_device_type
from ewaste_impact.settings import EwasteImpactSettings, get_settings

LOGGER = logging.getLogger(__name__)

__all__ = [
    "DeviceCatalog",
    "DeviceRecord",
    "RecordMaterials",
    "find_device",
    "load_default_catalog",
]


@dataclass(frozen=True, slots=True)
class RecordMaterials:
    """Material masses (grams) carried by a catalog record."""

    gold: float
    copper: float
    rare_earths: float


@dataclass(frozen=True, slots=True)
class DeviceRecord:
    """Catalog entry for a specific brand and model."""

    brand: str
    model: str
    device_type: str
    co2eq_kg: float
    materials: RecordMaterials

    @property
    def display_name(self) -> str:
        return f"{self.brand} {self.model}"

    def to_dict(self) -> dict[str, object]:
        return {
            "brand": self.brand,
            "model": self.model,
            "deviceType": self.device_type,
            "co2eq": self.co2eq_kg,
            "rawMaterials": {
                "gold": self.materials.gold,
                "copper": self.materials.copper,
                "rareEarths": self.materials.rare_earths,
            },
        }


def _identity(brand: str, model: str) -> tuple[str, str]:
    return (brand.strip().lower(), model.strip().lower())


class DeviceCatalog:
    """Read-only catalog indexed by case-insensitive brand and model.

    Duplicate brand/model pairs and records referencing unknown device
    categories are rejected at construction time.
    """

    def __init__(self, records: Iterable[DeviceRecord]) -> None:
        self._records: tuple[DeviceRecord, ...] = tuple(records)
        index: dict[tuple[str, str], DeviceRecord] = {}
        for record in self._records:
            if not is_known_device_type(record.device_type):
                raise CatalogError(
                    f"Catalog record {record.display_name!r} references unknown "
                    f"device type {record.device_type!r}"
                )
            key = _identity(record.brand, record.model)
            if key in index:
                raise CatalogError(
                    f"Duplicate catalog entry for {record.display_name!r}"
                )
            index[key] = record
        self._index = index

    def __len__(self) -> int:
        return len(self._records)

    def find(self, brand: str | None, model: str | None) -> DeviceRecord | None:
        """Return the record matching ``brand`` and ``model`` exactly.

        Matching ignores case and surrounding whitespace but is otherwise an
        exact comparison. Returns ``None`` when either value is missing.
        """

        if not brand or not model:
            return None
        record = self._index.get(_identity(brand, model))
        LOGGER.debug(
            "Catalog lookup",
            extra={"brand": brand, "model": model, "found": record is not None},
        )
        return record

    def list_devices(self, device_type: str | None = None) -> list[DeviceRecord]:
        """Return catalog records, optionally restricted to one category."""

        if device_type is None:
            return list(self._records)
        return [r for r in self._records if r.device_type == device_type]

    @classmethod
    def from_payload(cls, payload: object) -> DeviceCatalog:
        """Build a catalog from parsed JSON (a list of record objects)."""

        if not isinstance(payload, list):
            raise CatalogError("Device catalog must be a JSON array")
        return cls(
            _parse_record(entry, position) for position, entry in enumerate(payload)
        )

    @classmethod
    def from_path(cls, path: pathlib.Path) -> DeviceCatalog:
        if not path.exists():
            raise CatalogError(f"EWASTE_DEVICE_CATALOG_FILE not found: {path}")
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise CatalogError(f"Failed to parse device catalog {path}") from exc
        return cls.from_payload(payload)


def _parse_record(entry: object, position: int) -> DeviceRecord:
    if not isinstance(entry, Mapping):
        raise CatalogError(f"Catalog entry #{position} is not an object")
    materials = entry.get("rawMaterials")
    if not isinstance(materials, Mapping):
        raise CatalogError(f"Catalog entry #{position} is missing rawMaterials")
    try:
        return DeviceRecord(
            brand=str(entry["brand"]),
            model=str(entry["model"]),
            device_type=str(entry["deviceType"]),
            co2eq_kg=float(entry["co2eq"]),
            materials=RecordMaterials(
                gold=float(materials["gold"]),
                copper=float(materials["copper"]),
                rare_earths=float(materials["rareEarths"]),
            ),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise CatalogError(f"Catalog entry #{position} is malformed: {exc}") from exc


@lru_cache(maxsize=1)
def load_default_catalog() -> DeviceCatalog:
    """Load the catalog from ``EWASTE_DEVICE_CATALOG_FILE`` or package data.

    Raises:
        CatalogError: When the override file is missing or any record is
            invalid.
    """

    return _load_catalog(get_settings())


def _load_catalog(settings: EwasteImpactSettings) -> DeviceCatalog:
    override_path = settings.device_catalog_file
    if override_path:
        catalog = DeviceCatalog.from_path(pathlib.Path(override_path))
        source = override_path
    else:
        import importlib.resources as resources

        data_text = (
            resources.files("ewaste_impact.data")
            .joinpath("device_catalog.json")
            .read_text(encoding="utf-8")
        )
        catalog = DeviceCatalog.from_payload(json.loads(data_text))
        source = "package"
    LOGGER.info(
        "Device catalog loaded", extra={"records": len(catalog), "source": source}
    )
    return catalog


def find_device(brand: str | None, model: str | None) -> DeviceRecord | None:
    """Look up ``brand``/``model`` in the default catalog."""

    return load_default_catalog().find(brand, model)
