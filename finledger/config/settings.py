"""
Configuration Management for the Ledger

Uses pydantic-settings for type-safe configuration from environment
variables and an optional .env file. Every tunable constant of the ledger
(storage keys, debounce window, autosave interval, report thresholds,
default categories) lives here.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from finledger.models.ledger import DEFAULT_TYPES


class StorageSettings(BaseSettings):
    """Where and under which keys the document is stored."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path("ledger-data"),
        description="Directory holding one file per storage key"
    )
    document_key: str = Field(
        default="fin-state",
        min_length=1,
        description="Key of the JSON blob holding the whole document"
    )
    onboarding_completed_key: str = Field(
        default="onboarding-completed",
        min_length=1,
    )
    onboarding_step_key: str = Field(
        default="onboarding-step",
        min_length=1,
    )
    quota_bytes: int = Field(
        default=5 * 1024 * 1024,
        ge=0,
        description="Maximum size of a stored value; 0 disables the check"
    )

    @field_validator('document_key', 'onboarding_completed_key', 'onboarding_step_key')
    @classmethod
    def validate_key(cls, v: str) -> str:
        """Keys become file names, so no path separators."""
        if "/" in v or "\\" in v or v in (".", ".."):
            raise ValueError(f"Invalid storage key: {v!r}")
        return v


class PersistenceSettings(BaseSettings):
    """Timing of deferred writes."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_PERSIST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    debounce_ms: int = Field(
        default=500,
        ge=0,
        le=60_000,
        description="Quiet interval before a debounced write happens"
    )
    autosave_interval_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Backstop interval for flushing pending writes"
    )

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000


class LedgerSettings(BaseSettings):
    """
    Ledger behaviour settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    default_types: list[str] = Field(
        default_factory=lambda: list(DEFAULT_TYPES),
        description="Categories a fresh document starts with"
    )
    income_category: str = Field(
        default="Income",
        description="Category stamped on every income entry"
    )
    uncategorized_label: str = Field(
        default="Uncategorized",
        description="Report label for expenses without a category"
    )
    max_recurrence_months: int = Field(
        default=120,
        ge=0,
        description="Largest recurrence count accepted from a form"
    )
    excellent_threshold: Decimal = Field(
        default=Decimal("500"),
        ge=0,
        description="Remaining amount above which a period is 'excellent'"
    )
    history_months: int = Field(
        default=6,
        ge=1,
        le=120,
        description="How many periods the monthly history shows"
    )
    export_filename_prefix: str = Field(
        default="ledger",
        min_length=1,
    )


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
    def persistence(self) -> PersistenceSettings:
        return PersistenceSettings()

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()


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

    Returns a dict of {setting_name: is_valid}, with an extra
    "<name>_error" entry for each group that failed.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "persistence", "ledger"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
