"""Typed configuration models for searchjobs runtime settings."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "searchjobs" / "searchjobs.yaml"


class LoggingSettings(BaseModel):
    """Structured logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    json_output: bool = True
    service: str = "searchjobs"
    environment: str = "dev"


class ServiceSettings(BaseModel):
    """Connection defaults for the remote search service."""

    base_url: str = "https://localhost:8089"
    timeout_seconds: float = Field(default=10.0, gt=0)
    headers: dict[str, str] = Field(default_factory=dict)
    owner: str | None = None
    app: str | None = None


class PollingSettings(BaseModel):
    """Backoff bounds used while waiting for a job dispatch state."""

    initial_delay_seconds: float = Field(default=0.5, gt=0)
    max_delay_seconds: float = Field(default=5.0, gt=0)
    backoff_multiplier: float = Field(default=2.0, ge=1.0)

    @model_validator(mode="after")
    def _max_not_below_initial(self) -> PollingSettings:
        """Reject a ceiling lower than the first delay."""
        if self.max_delay_seconds < self.initial_delay_seconds:
            raise ValueError(
                "polling.max_delay_seconds must be >= polling.initial_delay_seconds"
            )
        return self


class SearchJobsSettings(BaseSettings):
    """Root runtime settings resolved from init/env/yaml/defaults sources."""

    model_config = SettingsConfigDict(
        env_prefix="SEARCHJOBS_",
        env_nested_delimiter="__",
        extra="ignore",
        nested_model_default_partial_update=True,
        yaml_file=DEFAULT_CONFIG_PATH,
        yaml_file_encoding="utf-8",
    )

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    service: ServiceSettings = Field(default_factory=ServiceSettings)
    polling: PollingSettings = Field(default_factory=PollingSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Apply precedence: init > env > yaml > model defaults."""
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls),
        )
