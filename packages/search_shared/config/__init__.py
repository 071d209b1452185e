"""Public API for searchjobs configuration."""

from .loader import load_settings
from .models import (
    DEFAULT_CONFIG_PATH,
    LoggingSettings,
    PollingSettings,
    SearchJobsSettings,
    ServiceSettings,
)

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "LoggingSettings",
    "PollingSettings",
    "SearchJobsSettings",
    "ServiceSettings",
    "load_settings",
]
