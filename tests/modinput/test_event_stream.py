"""Unit tests for the event stream writer and unbroken splitting."""

from __future__ import annotations

import io
from datetime import UTC, datetime

import pytest

from packages.modinput import (
    Event,
    EventFormatError,
    EventStreamWriter,
    encode_event,
    split_unbroken,
)


def test_writer_wraps_events_in_one_stream() -> None:
    output = io.BytesIO()

    with EventStreamWriter(output) as writer:
        writer.write_events([Event(data="a"), Event(data="b", done=True)])

    assert writer.event_count == 2
    assert output.getvalue() == (
        b"<stream>"
        b'<event unbroken="0"><data>a</data></event>'
        b'<event unbroken="0"><data>b</data><done /></event>'
        b"</stream>"
    )


def test_writer_closes_empty_stream_once() -> None:
    output = io.BytesIO()
    writer = EventStreamWriter(output)

    writer.close()
    writer.close()

    assert output.getvalue() == b"<stream></stream>"


def test_writer_rejects_events_after_close() -> None:
    writer = EventStreamWriter(io.BytesIO())
    writer.close()

    with pytest.raises(ValueError):
        writer.write_event(Event(data="late"))


def test_writer_rejects_unencodable_event_without_partial_output() -> None:
    output = io.BytesIO()
    writer = EventStreamWriter(output)
    writer.write_event(Event(data="ok", done=True))

    with pytest.raises(EventFormatError):
        writer.write_event(Event(data="bad\x01"))
    writer.close()

    assert writer.event_count == 1
    assert output.getvalue() == (
        b'<stream><event unbroken="0"><data>ok</data><done /></event></stream>'
    )


def test_split_unbroken_marks_fragments() -> None:
    """Only the first fragment keeps time and only the last one is done."""
    moment = datetime(2024, 1, 1, tzinfo=UTC)
    event = Event(data="abcdefg", host="h1", time=moment, stanza="tail://x")

    fragments = split_unbroken(event, 3)

    assert [fragment.data for fragment in fragments] == ["abc", "def", "g"]
    assert all(fragment.unbroken for fragment in fragments)
    assert all(fragment.host == "h1" for fragment in fragments)
    assert all(fragment.stanza == "tail://x" for fragment in fragments)
    assert [fragment.time for fragment in fragments] == [moment, None, None]
    assert [fragment.done for fragment in fragments] == [False, False, True]


def test_split_unbroken_keeps_missing_data_as_none() -> None:
    """An event without data must not gain an empty <data/> element."""
    moment = datetime(2024, 1, 1, tzinfo=UTC)

    fragments = split_unbroken(Event(host="h1", time=moment), 10)

    assert len(fragments) == 1
    assert fragments[0].data is None
    assert fragments[0].time == moment
    assert fragments[0].done is True
    assert fragments[0].unbroken is True
    assert b"<data" not in encode_event(fragments[0])


def test_split_unbroken_keeps_empty_data_as_single_empty_fragment() -> None:
    fragments = split_unbroken(Event(data=""), 10)

    assert [fragment.data for fragment in fragments] == [""]
    assert fragments[0].done is True


def test_split_unbroken_rejects_non_positive_size() -> None:
    with pytest.raises(ValueError):
        split_unbroken(Event(data="x"), 0)
