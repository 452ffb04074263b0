"""
Configuration Management for Fruit Invoice

Uses pydantic-settings for type-safe configuration from environment variables.

All tunables live here: where the data is kept, which keys hold the
collections, how prices are typed in and how long the audit trail grows.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Local key-value store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FRUIT_INVOICE_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path("~/.fruit_invoice"),
        description="Directory holding one JSON file per storage key"
    )

    # Well-known keys
    invoices_key: str = Field(
        default="invoices",
        min_length=1,
        description="Key holding the saved invoice list"
    )
    presets_key: str = Field(
        default="fruitPresets",
        min_length=1,
        description="Key holding the fruit preset list"
    )
    audit_key: str = Field(
        default="auditLog",
        min_length=1,
        description="Key holding the capped audit trail"
    )

    write_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times a failing file write is attempted"
    )

    @field_validator('data_dir')
    @classmethod
    def expand_data_dir(cls, v: Path) -> Path:
        """Resolve ~ so every component sees the same absolute directory."""
        return v.expanduser()


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="FRUIT_INVOICE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    environment: str = Field(
        default="development",
        description="Application environment"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum log level"
    )

    currency_symbol: str = Field(
        default="₫",
        description="Symbol appended to formatted amounts"
    )
    price_input_unit: int = Field(
        default=1000,
        ge=1,
        description="Preset prices are typed in multiples of this many đồng"
    )

    audit_log_max_events: int = Field(
        default=500,
        ge=1,
        description="Oldest audit events are dropped beyond this count"
    )

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept any casing but only real level names."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus an
    "<name>_error" entry for every section that failed to load.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
