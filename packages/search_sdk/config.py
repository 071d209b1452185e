"""Runtime configuration primitives for search SDK clients."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Mapping

from packages.search_shared.config import SearchJobsSettings

DEFAULT_BASE_URL = "https://localhost:8089"
DEFAULT_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True, slots=True)
class PollPolicy:
    """Bounded exponential backoff between dispatch-state polls."""

    initial_delay_seconds: float = 0.5
    max_delay_seconds: float = 5.0
    backoff_multiplier: float = 2.0

    def delays(self) -> Iterator[float]:
        """Yield successive inter-poll delays, capped at ``max_delay_seconds``."""
        delay = self.initial_delay_seconds
        while True:
            yield delay
            delay = min(delay * self.backoff_multiplier, self.max_delay_seconds)


@dataclass(frozen=True, slots=True)
class SearchSdkConfig:
    """Connection and polling defaults for one search SDK client."""

    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    headers: Mapping[str, str] = field(default_factory=dict)
    owner: str | None = None
    app: str | None = None
    poll: PollPolicy = field(default_factory=PollPolicy)

    @classmethod
    def from_settings(cls, settings: SearchJobsSettings) -> SearchSdkConfig:
        """Build SDK config from resolved runtime settings."""
        return cls(
            base_url=settings.service.base_url,
            timeout_seconds=settings.service.timeout_seconds,
            headers=dict(settings.service.headers),
            owner=settings.service.owner,
            app=settings.service.app,
            poll=PollPolicy(
                initial_delay_seconds=settings.polling.initial_delay_seconds,
                max_delay_seconds=settings.polling.max_delay_seconds,
                backoff_multiplier=settings.polling.backoff_multiplier,
            ),
        )
