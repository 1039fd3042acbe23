"""Environment-backed settings primitives for :mod:`ewaste_impact`."""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["EwasteImpactSettings", "get_settings"]


class EwasteImpactSettings(BaseSettings):
    """Expose environment-derived configuration knobs.

    All environment lookups go through this class. Attributes default to
    ``None`` (or an inline default) when the variable is not present.

    Attributes:
        default_region: Grid region used when a request omits one.
        config_path: Explicit path to the structured configuration file.
        provider_timeout_seconds: Upper bound on each live-data fetch.
        device_catalog_file: Optional path to a replacement catalog JSON file.
        electricitymaps_token: Primary ElectricityMaps API token.
        electricitymaps_legacy_token: Legacy ElectricityMaps token alias.
        metals_api_key: Access key for the commodity price API.
        anthropic_api_key: API key enabling generated narratives.
        narrative_model: Model identifier used for generated narratives.
    """

    default_region: str | None = Field(default=None, alias="EWASTE_DEFAULT_REGION")
    config_path: str | None = Field(default=None, alias="EWASTE_CONFIG_PATH")
    provider_timeout_seconds: float | None = Field(
        default=None, alias="EWASTE_PROVIDER_TIMEOUT"
    )
    device_catalog_file: str | None = Field(
        default=None, alias="EWASTE_DEVICE_CATALOG_FILE"
    )
    electricitymaps_token: str | None = Field(
        default=None, alias="ELECTRICITYMAPS_TOKEN"
    )
    electricitymaps_legacy_token: str | None = Field(
        default=None, alias="ELECTRICITYMAPS_API_KEY"
    )
    metals_api_key: str | None = Field(default=None, alias="METALS_API_KEY")
    anthropic_api_key: str | None = Field(default=None, alias="ANTHROPIC_API_KEY")
    narrative_model: str | None = Field(default=None, alias="EWASTE_NARRATIVE_MODEL")

    model_config = SettingsConfigDict(env_file=None, extra="ignore")

    @field_validator("provider_timeout_seconds", mode="before")
    @classmethod
    def _parse_optional_float(cls, value: object) -> float | None:
        """Parse optional float fields while tolerating malformed input.

        Args:
            value: Raw environment value.

        Returns:
            Parsed positive float when conversion succeeds, otherwise ``None``.
        """

        parsed: float | None = None
        if isinstance(value, (int, float)):
            parsed = float(value)
        elif isinstance(value, str):
            try:
                parsed = float(value.strip())
            except ValueError:
                return None
        if parsed is None or parsed <= 0:
            return None
        return parsed

    @field_validator("device_catalog_file", "config_path", mode="before")
    @classmethod
    def _blank_as_none(cls, value: object) -> str | None:
        if value in (None, ""):
            return None
        return str(value)

    @property
    def electricitymaps_effective_token(self) -> str | None:
        """Return the ElectricityMaps token considering legacy aliases."""

        return self.electricitymaps_token or self.electricitymaps_legacy_token


def get_settings() -> EwasteImpactSettings:
    """Return a :class:`EwasteImpactSettings` instance parsed from the environment."""

    return EwasteImpactSettings()
