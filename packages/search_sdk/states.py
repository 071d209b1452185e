"""Ordered dispatch states for search jobs."""

from __future__ import annotations

from enum import IntEnum


class DispatchState(IntEnum):
    """Search job execution stages, ordered by progress.

    ``FAILED`` sorts last but is terminal: it never counts as having reached
    any other state. Use :meth:`reached` rather than raw comparisons.
    """

    NONE = 0
    QUEUED = 1
    PARSING = 2
    RUNNING = 3
    PAUSED = 4
    FINALIZING = 5
    DONE = 6
    FAILED = 7

    @classmethod
    def parse(cls, label: str) -> DispatchState:
        """Map one service-provided ``dispatchState`` label to a member.

        Raises ``KeyError`` for labels this client does not know.
        """
        normalized = label.strip().upper()
        if normalized in _CANCELLED_LABELS:
            return cls.FAILED
        return cls[normalized]

    @property
    def is_terminal(self) -> bool:
        return self in (DispatchState.DONE, DispatchState.FAILED)

    def reached(self, target: DispatchState) -> bool:
        """Return True when this state is at or past ``target``."""
        if self is DispatchState.FAILED or target is DispatchState.FAILED:
            return self is target
        return self >= target


_CANCELLED_LABELS = frozenset(
    {"INTERNAL_CANCEL", "USER_CANCEL", "BAD_INPUT_CANCEL", "QUIT"}
)
