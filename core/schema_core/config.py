"""Schema Ledger configuration loaded from environment variables."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from schema_core.errors import ConfigurationError

logger = logging.getLogger(__name__)


class LedgerEnv(str, Enum):
    DEV = "dev"
    CI = "ci"


class Settings(BaseSettings):
    """Settings loaded from environment variables with SCHEMA_LEDGER_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="SCHEMA_LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    env: LedgerEnv = LedgerEnv.DEV
    debug: bool = False

    # Project layout
    project_dir: Path = Path(".")
    schemas_dir: Path = Path("schemas")
    versions_dir: Path = Path(".schema-ledger/versions")

    # Version history
    max_versions: int = Field(default=100, ge=1)
    driver: str = "mysql"

    # Logging
    structured_logging: bool = False
    log_level: str = "WARNING"

    @field_validator("log_level", mode="before")
    @classmethod
    def normalise_log_level(cls, v: str) -> str:
        level = str(v).upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v!r}")
        return level

    def resolved_schemas_dir(self) -> Path:
        return self._resolve(self.schemas_dir)

    def resolved_versions_dir(self) -> Path:
        return self._resolve(self.versions_dir)

    def _resolve(self, path: Path) -> Path:
        if path.is_absolute():
            return path
        return self.project_dir / path


def load_settings(**overrides: object) -> Settings:
    """Load settings from environment, with optional overrides for testing."""
    try:
        settings = Settings(**overrides)  # type: ignore[arg-type]
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid settings: {exc}") from exc

    if settings.debug:
        logger.info("Loaded settings for project: %s", settings.project_dir)

    return settings
