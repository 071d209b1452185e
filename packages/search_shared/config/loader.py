"""Settings loading with deterministic precedence.

The cascade is always:
1) CLI params
2) Environment variables
3) YAML config file (``~/.config/searchjobs/searchjobs.yaml`` by default)
4) Built-in defaults

Environment variable format:
- Prefix: ``SEARCHJOBS_``
- Nested keys: ``__`` separator
- Example: ``SEARCHJOBS_POLLING__MAX_DELAY_SECONDS=2`` -> ``polling.max_delay_seconds = 2``
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from pydantic_settings import SettingsConfigDict

from .models import SearchJobsSettings


def load_settings(
    *,
    cli_params: Mapping[str, Any] | None = None,
    config_path: str | Path | None = None,
) -> SearchJobsSettings:
    """Resolve settings from CLI params, environment, YAML, and defaults."""
    settings_cls = (
        SearchJobsSettings
        if config_path is None
        else _settings_for_file(Path(config_path).expanduser())
    )
    return settings_cls(**dict(cli_params or {}))


def _settings_for_file(path: Path) -> type[SearchJobsSettings]:
    """Return a settings class that reads YAML from ``path``."""

    class _FileScopedSettings(SearchJobsSettings):
        model_config = SettingsConfigDict(yaml_file=path)

    return _FileScopedSettings
