"""Tests for configuration loading."""

from decimal import Decimal

import pytest

from splitter.config import (
    AppSettings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)


class TestSettings:
    """Tests for pydantic-settings configuration."""

    def test_defaults(self):
        app = AppSettings()
        assert app.default_currency == "USD"
        assert app.unknown_participant_name == "Unknown"
        assert app.settlement_epsilon == Decimal("0.01")

    def test_storage_env_override(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SPLITTER_STORAGE_FRIENDS_KEY", "roster")
        storage = StorageSettings()
        assert storage.friends_key == "roster"
        assert storage.data_dir == tmp_path / "data"

    def test_storage_key_rejects_paths(self, monkeypatch):
        monkeypatch.setenv("SPLITTER_STORAGE_EXPENSES_KEY", "../escape")
        with pytest.raises(ValueError):
            StorageSettings()

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    def test_validate_all_settings(self, monkeypatch):
        assert validate_all_settings() == {"storage": True, "sharing": True, "app": True}

        monkeypatch.setenv("SPLITTER_STORAGE_WRITE_ATTEMPTS", "0")
        results = validate_all_settings()
        assert results["storage"] is False
        assert "storage_error" in results
