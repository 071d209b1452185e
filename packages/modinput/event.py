"""Event record value object for streamed ingestion."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class Event:
    """One event record destined for the ingestion ``<stream>``.

    ``time=None`` lets the receiving service assign the ingestion time, or
    continue the timestamp of the unbroken event this record extends.
    ``done`` marks the end of a logical event so buffered fragments can be
    flushed. ``unbroken`` marks the record as a fragment of a larger event.
    """

    data: str | None = None
    source: str | None = None
    source_type: str | None = None
    index: str | None = None
    host: str | None = None
    time: datetime | None = None
    done: bool = False
    unbroken: bool = False
    stanza: str | None = None
