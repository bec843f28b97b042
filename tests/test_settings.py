"""Tests for configuration."""

from decimal import Decimal
from pathlib import Path

import pytest
from pydantic import ValidationError

from finledger.config import (
    LedgerSettings,
    PersistenceSettings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)
from finledger.models.ledger import DEFAULT_TYPES


class TestDefaults:
    """Tests for default values."""

    def test_storage_defaults(self):
        settings = StorageSettings()
        assert settings.document_key == "fin-state"
        assert settings.onboarding_completed_key == "onboarding-completed"
        assert settings.onboarding_step_key == "onboarding-step"
        assert settings.data_dir == Path("ledger-data")

    def test_persistence_defaults(self):
        settings = PersistenceSettings()
        assert settings.debounce_ms == 500
        assert settings.debounce_seconds == 0.5
        assert settings.autosave_interval_seconds == 30.0

    def test_ledger_defaults(self):
        settings = LedgerSettings()
        assert settings.default_types == DEFAULT_TYPES
        assert settings.excellent_threshold == Decimal("500")
        assert settings.history_months == 6


class TestEnvironment:
    """Tests for environment overrides."""

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("LEDGER_PERSIST_DEBOUNCE_MS", "250")
        monkeypatch.setenv("LEDGER_STORAGE_DOCUMENT_KEY", "my-ledger")
        monkeypatch.setenv("LEDGER_HISTORY_MONTHS", "12")

        assert PersistenceSettings().debounce_seconds == 0.25
        assert StorageSettings().document_key == "my-ledger"
        assert LedgerSettings().history_months == 12

    def test_invalid_storage_key(self):
        with pytest.raises(ValidationError):
            StorageSettings(document_key="../escape")

    def test_invalid_autosave_interval(self):
        with pytest.raises(ValidationError):
            PersistenceSettings(autosave_interval_seconds=0)

    def test_validate_all_settings(self):
        get_settings.cache_clear()
        results = validate_all_settings()
        assert results == {"storage": True, "persistence": True, "ledger": True}

    def test_validate_all_settings_reports_errors(self, monkeypatch):
        monkeypatch.setenv("LEDGER_HISTORY_MONTHS", "0")
        get_settings.cache_clear()
        results = validate_all_settings()
        assert results["ledger"] is False
        assert "ledger_error" in results


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
