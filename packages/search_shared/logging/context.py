"""Task-local structured logging fields.

Fields live in a ``ContextVar`` holding an immutable mapping, so each
asyncio task inherits the fields bound when it was created and later
bindings never leak between concurrent jobs.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from types import MappingProxyType
from typing import Iterator, Mapping

_EMPTY: Mapping[str, str] = MappingProxyType({})
_LOG_CONTEXT: ContextVar[Mapping[str, str]] = ContextVar(
    "searchjobs_log_context", default=_EMPTY
)


def get_context() -> dict[str, str]:
    """Return a copy of the fields bound in the current task."""
    return dict(_LOG_CONTEXT.get())


def bind_context(**values: object) -> None:
    """Bind fields until cleared; ``None`` values are skipped."""
    _LOG_CONTEXT.set(_merged(values))


def clear_context(*keys: str) -> None:
    """Drop the named fields, or every field when none are named."""
    if not keys:
        _LOG_CONTEXT.set(_EMPTY)
        return
    remaining = {
        key: value for key, value in _LOG_CONTEXT.get().items() if key not in keys
    }
    _LOG_CONTEXT.set(MappingProxyType(remaining))


@contextmanager
def log_context(values: Mapping[str, object]) -> Iterator[None]:
    """Bind ``values`` for the duration of the block only."""
    token = _LOG_CONTEXT.set(_merged(values))
    try:
        yield
    finally:
        _LOG_CONTEXT.reset(token)


def _merged(values: Mapping[str, object]) -> Mapping[str, str]:
    merged = dict(_LOG_CONTEXT.get())
    merged.update(
        (str(key), str(value)) for key, value in values.items() if value is not None
    )
    return MappingProxyType(merged)
