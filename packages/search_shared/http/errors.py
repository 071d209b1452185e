"""Typed errors raised by the shared async HTTP client."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(eq=False)
class HttpError(Exception):
    """Base error for one outbound request that did not yield a usable response.

    Not frozen: the interpreter and ``contextlib`` assign ``__traceback__``
    on exceptions as they propagate.
    """

    message: str
    method: str
    url: str

    def __str__(self) -> str:
        """Return the human-readable error message."""
        return self.message

    @property
    def retryable(self) -> bool:
        return False


@dataclass(eq=False)
class HttpRequestError(HttpError):
    """No response was received: connect, read, or protocol failure."""

    cause: Exception | None = None
    timed_out: bool = False

    @property
    def retryable(self) -> bool:
        return True


@dataclass(eq=False)
class HttpJsonDecodeError(HttpError):
    """A response body that should have been JSON could not be decoded."""

    status_code: int = 0
    response_body: str = ""
    cause: Exception | None = None
