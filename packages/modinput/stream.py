"""Streaming writer for event records and unbroken-event chunking."""

from __future__ import annotations

from dataclasses import replace
from typing import BinaryIO, Iterable

from packages.search_shared.logging import fields, get_logger, log_context

from .codec import encode_event
from .event import Event

logger = get_logger(__name__)

STREAM_OPEN = b"<stream>"
STREAM_CLOSE = b"</stream>"


def split_unbroken(event: Event, max_chars: int) -> list[Event]:
    """Split one logical event into unbroken fragments of ``max_chars`` or fewer.

    Every fragment is marked unbroken and keeps the event metadata. Only the
    first fragment carries ``time``; the receiver continues it for the rest.
    Only the last fragment carries ``done``. An event without data comes back
    as one done fragment whose data is still ``None``.
    """
    if max_chars <= 0:
        raise ValueError("max_chars must be positive")

    data = event.data
    if not data:
        return [replace(event, done=True, unbroken=True)]

    chunks = [
        data[start : start + max_chars] for start in range(0, len(data), max_chars)
    ]

    last = len(chunks) - 1
    return [
        replace(
            event,
            data=chunk,
            time=event.time if position == 0 else None,
            done=position == last,
            unbroken=True,
        )
        for position, chunk in enumerate(chunks)
    ]


class EventStreamWriter:
    """Write encoded events inside one ``<stream>`` element.

    The opening tag is written lazily with the first event; :meth:`close`
    always leaves a complete document, even when no event was written.
    """

    def __init__(self, output: BinaryIO) -> None:
        self._output = output
        self._opened = False
        self._closed = False
        self._count = 0

    @property
    def event_count(self) -> int:
        return self._count

    def write_event(self, event: Event) -> None:
        if self._closed:
            raise ValueError("cannot write to a closed event stream")
        self._open()
        self._output.write(encode_event(event))
        self._count += 1
        if event.done:
            self._output.flush()

    def write_events(self, events: Iterable[Event]) -> None:
        for event in events:
            self.write_event(event)

    def close(self) -> None:
        if self._closed:
            return
        self._open()
        self._output.write(STREAM_CLOSE)
        self._output.flush()
        self._closed = True
        with log_context({fields.EVENT_COUNT: self._count}):
            logger.debug("Event stream closed")

    def __enter__(self) -> EventStreamWriter:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def _open(self) -> None:
        if self._opened:
            return
        self._output.write(STREAM_OPEN)
        self._opened = True
        logger.debug("Event stream opened")
