"""
Configuration management for the retention engine.

Supports YAML config files with environment variable overrides.
"""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from sdrs.exceptions import ConfigurationError


class TransferConfig(BaseModel):
    """Configuration for translating retention rules into transfer jobs."""

    suffix: str = Field(
        default="shadow",
        description="Suffix appended to the source bucket to name the shadow bucket",
    )
    default_project_id: str = Field(
        default="global-default",
        description="Sentinel project id meaning no project is assigned",
    )
    max_prefix_count: int = Field(
        default=1000,
        ge=1,
        description="Maximum number of prefixes the transfer service accepts",
    )
    lookback_in_days: int = Field(
        default=365,
        ge=0,
        description="How far back prefixes are ever generated for dataset rules",
    )


class TransferApiConfig(BaseModel):
    """Configuration for the Storage Transfer REST endpoint."""

    base_url: str = Field(
        default="https://storagetransfer.googleapis.com/v1",
        description="Base URL of the transfer service API",
    )
    timeout_seconds: float = Field(default=30.0, description="Request timeout in seconds")
    access_token: str | None = Field(default=None, description="OAuth2 bearer token")
    user_agent: str = Field(default="sdrs/0.1", description="User-Agent header value")


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="json", description="Log format (json, plain)")
    file: str | None = Field(default=None, description="Log file path (None for stdout)")


class Config(BaseSettings):
    """Main configuration for the retention engine."""

    model_config = SettingsConfigDict(
        env_prefix="SDRS_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    transfer: TransferConfig = Field(default_factory=TransferConfig)
    transfer_api: TransferApiConfig = Field(default_factory=TransferApiConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> Config:
        """
        Load configuration from a YAML file.

        A missing file yields defaults.

        Raises:
            ConfigurationError: If the file is not valid YAML, is not a
                mapping, or holds invalid values.
        """
        path = Path(path)
        if not path.exists():
            return cls()

        with path.open() as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError.validation_failed(
                    str(path), "<file>", f"invalid YAML: {e}", cause=e
                ) from e

        if not isinstance(data, dict):
            raise ConfigurationError.validation_failed(
                str(path), type(data).__name__, "top level must be a mapping"
            )

        try:
            return cls(**data)
        except ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first["loc"])
            raise ConfigurationError.validation_failed(
                field, first.get("input"), first["msg"], cause=e
            ) from e

    @classmethod
    def load(cls, config_path: str | None = None) -> Config:
        """
        Load configuration with precedence:
        1. Config file (highest)
        2. Environment variables
        3. Defaults (lowest)
        """
        if config_path is None:
            config_path = os.getenv("SDRS_CONFIG")

        if config_path is None:
            for candidate in [
                "sdrs.yaml",
                "sdrs.yml",
                "config/sdrs.yaml",
                ".sdrs.yaml",
            ]:
                if Path(candidate).exists():
                    config_path = candidate
                    break

        if config_path and Path(config_path).exists():
            return cls.from_yaml(config_path)

        return cls()

    def to_yaml(self, path: str | Path) -> None:
        """Save configuration to a YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with path.open("w") as f:
            yaml.dump(self.model_dump(), f, default_flow_style=False)


_config: Config | None = None


def get_config() -> Config:
    """Get the process-wide configuration instance."""
    global _config
    if _config is None:
        _config = Config.load()
    return _config


def set_config(config: Config) -> None:
    """Replace the process-wide configuration instance."""
    global _config
    _config = config
