"""Wire encoding for event records.

Element and attribute names follow the ingestion schema::

    <event unbroken="0" stanza="...">
      <data/> <source/> <sourcetype/> <index/> <host/> <time/> <done/>
    </event>

Optional children are written only when set. ``time`` is whole seconds since
the Unix epoch, truncated toward negative infinity. Receivers read ``-1`` as
"no time", so a moment in the last second before the epoch is rejected rather
than silently dropped. ``done`` is an empty element written only when true.
``unbroken`` is always written as ``1``/``0``.

``encode_event`` writes carriage returns in text as ``&#13;``; a raw one would
be normalized away by the parser on the other side. Characters XML 1.0 cannot
represent at all are rejected with ``EventFormatError``.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from datetime import UTC, datetime, timedelta
from decimal import Decimal, InvalidOperation

from .errors import EventFormatError
from .event import Event

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
ONE_SECOND = timedelta(seconds=1)
NO_TIME = -1

_NOT_XML_CHAR = re.compile("[^\t\n\r\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")

_TEXT_FIELDS: tuple[tuple[str, str], ...] = (
    ("data", "data"),
    ("source", "source"),
    ("source_type", "sourcetype"),
    ("index", "index"),
    ("host", "host"),
)


def epoch_seconds(value: datetime) -> int:
    """Return whole seconds between the epoch and ``value``; naive means UTC."""
    return (_as_utc(value) - EPOCH) // ONE_SECOND


def event_to_element(event: Event) -> ET.Element:
    """Build the ``<event>`` element for one record."""
    element = ET.Element("event")
    element.set("unbroken", "1" if event.unbroken else "0")
    if event.stanza is not None:
        element.set("stanza", _xml_text("stanza", event.stanza))

    for attribute, tag in _TEXT_FIELDS:
        value = getattr(event, attribute)
        if value is not None:
            ET.SubElement(element, tag).text = _xml_text(tag, value)

    if event.time is not None:
        seconds = epoch_seconds(event.time)
        if seconds == NO_TIME:
            raise EventFormatError(
                message="time floors to -1, which receivers read as no time",
                detail=event.time.isoformat(),
            )
        ET.SubElement(element, "time").text = str(seconds)
    if event.done:
        ET.SubElement(element, "done")
    return element


def encode_event(event: Event) -> bytes:
    """Serialize one record as UTF-8 XML without a declaration."""
    encoded = ET.tostring(
        event_to_element(event), encoding="utf-8", xml_declaration=False
    )
    # Attribute values already arrive escaped, so any raw CR is element text.
    return encoded.replace(b"\r", b"&#13;")


def decode_event(raw: bytes | str) -> Event:
    """Parse one serialized ``<event>`` record."""
    try:
        element = ET.fromstring(raw)
    except ET.ParseError as exc:
        raise EventFormatError(
            message="event is not well-formed XML", detail=str(exc)
        ) from exc
    return element_to_event(element)


def element_to_event(element: ET.Element) -> Event:
    """Convert one parsed ``<event>`` element back to a record."""
    if element.tag != "event":
        raise EventFormatError(
            message=f"expected <event> root element, got <{element.tag}>",
            detail=element.tag,
        )

    unbroken = element.get("unbroken", "0")
    if unbroken not in ("0", "1"):
        raise EventFormatError(
            message="unbroken attribute must be '0' or '1'", detail=unbroken
        )

    values = {
        attribute: _child_text(element, tag) for attribute, tag in _TEXT_FIELDS
    }
    time_text = _child_text(element, "time")
    return Event(
        **values,
        time=None if time_text is None else _parse_time(time_text),
        done=element.find("done") is not None,
        unbroken=unbroken == "1",
        stanza=element.get("stanza"),
    )


def _xml_text(name: str, value: str) -> str:
    match = _NOT_XML_CHAR.search(value)
    if match is not None:
        raise EventFormatError(
            message=f"{name} contains a character XML 1.0 cannot represent",
            detail=repr(match.group()),
        )
    return value


def _child_text(element: ET.Element, tag: str) -> str | None:
    child = element.find(tag)
    if child is None:
        return None
    return child.text or ""


def _parse_time(text: str) -> datetime:
    try:
        seconds = Decimal(text.strip())
    except InvalidOperation as exc:
        raise EventFormatError(
            message="time must be epoch seconds", detail=text
        ) from exc
    if not seconds.is_finite():
        raise EventFormatError(message="time must be epoch seconds", detail=text)
    try:
        return EPOCH + timedelta(seconds=float(seconds))
    except OverflowError as exc:
        raise EventFormatError(message="time is out of range", detail=text) from exc


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
