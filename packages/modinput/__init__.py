"""Event record encoding for streamed ingestion inputs."""

from .codec import (
    decode_event,
    element_to_event,
    encode_event,
    epoch_seconds,
    event_to_element,
)
from .errors import EventFormatError
from .event import Event
from .stream import EventStreamWriter, split_unbroken

__all__ = [
    "Event",
    "EventFormatError",
    "EventStreamWriter",
    "decode_event",
    "element_to_event",
    "encode_event",
    "epoch_seconds",
    "event_to_element",
    "split_unbroken",
]
