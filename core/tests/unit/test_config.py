"""Unit tests for schema_core.config."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from schema_core.config import LedgerEnv, Settings, load_settings
from schema_core.errors import ConfigurationError

# ---------------------------------------------------------------------------
# Settings - default values
# ---------------------------------------------------------------------------


class TestSettingsDefaults:
    def test_default_env(self):
        settings = Settings()
        assert settings.env == LedgerEnv.DEV

    def test_default_layout(self):
        settings = Settings()
        assert settings.project_dir == Path(".")
        assert settings.schemas_dir == Path("schemas")
        assert settings.versions_dir == Path(".schema-ledger/versions")

    def test_default_retention_and_driver(self):
        settings = Settings()
        assert settings.max_versions == 100
        assert settings.driver == "mysql"

    def test_default_logging(self):
        settings = Settings()
        assert settings.structured_logging is False
        assert settings.log_level == "WARNING"


# ---------------------------------------------------------------------------
# Settings - environment overrides
# ---------------------------------------------------------------------------


class TestSettingsEnvironment:
    def test_env_var_overrides_max_versions(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("SCHEMA_LEDGER_MAX_VERSIONS", "5")
        assert Settings().max_versions == 5

    def test_env_var_overrides_env(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("SCHEMA_LEDGER_ENV", "ci")
        assert Settings().env == LedgerEnv.CI

    def test_env_var_overrides_structured_logging(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("SCHEMA_LEDGER_STRUCTURED_LOGGING", "true")
        assert Settings().structured_logging is True

    def test_max_versions_must_be_positive(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("SCHEMA_LEDGER_MAX_VERSIONS", "0")
        with pytest.raises(ValidationError):
            Settings()


# ---------------------------------------------------------------------------
# Validation and path resolution
# ---------------------------------------------------------------------------


class TestSettingsValidation:
    def test_log_level_normalised(self):
        assert Settings(log_level="info").log_level == "INFO"

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValidationError):
            Settings(log_level="chatty")

    def test_relative_dirs_resolve_against_project(self, tmp_path: Path):
        settings = load_settings(project_dir=tmp_path)
        assert settings.resolved_schemas_dir() == tmp_path / "schemas"
        assert settings.resolved_versions_dir() == tmp_path / ".schema-ledger" / "versions"

    def test_absolute_dirs_kept(self, tmp_path: Path):
        settings = load_settings(project_dir=tmp_path / "project", schemas_dir=tmp_path / "elsewhere")
        assert settings.resolved_schemas_dir() == tmp_path / "elsewhere"

    def test_load_settings_overrides(self):
        settings = load_settings(driver="postgres", max_versions=3)
        assert settings.driver == "postgres"
        assert settings.max_versions == 3

    def test_load_settings_wraps_invalid_values(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("SCHEMA_LEDGER_MAX_VERSIONS", "0")
        with pytest.raises(ConfigurationError) as exc_info:
            load_settings()
        assert exc_info.value.code == "INVALID_SETTINGS"
        assert isinstance(exc_info.value.__cause__, ValidationError)
