"""Errors raised while decoding event records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar


@dataclass(eq=False)
class EventFormatError(ValueError):
    """Raw input is not a well-formed ``<event>`` record."""

    message: str
    detail: str = ""

    code: ClassVar[str] = "EVENT_FORMAT"

    def __str__(self) -> str:
        """Return human-readable error message."""
        return self.message
