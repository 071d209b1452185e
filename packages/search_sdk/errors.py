"""Error taxonomy and transport/status mapping for search SDK calls."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

import httpx

from packages.search_shared.http import HttpRequestError, response_text


@dataclass(eq=False)
class SearchSdkError(Exception):
    """Base error type for search SDK failures."""

    message: str

    code: ClassVar[str] = "SEARCH_SDK_ERROR"

    def __str__(self) -> str:
        """Return human-readable error message."""
        return self.message


@dataclass(eq=False)
class CommunicationError(SearchSdkError):
    """Transport-level failure; the request may not have reached the service."""

    operation: str
    method: str
    url: str
    retryable: bool = True
    cause: Exception | None = None

    code: ClassVar[str] = "COMMUNICATION_FAILURE"


@dataclass(eq=False)
class UnexpectedStatusError(SearchSdkError):
    """The service answered, but not with the status the operation requires."""

    operation: str
    url: str
    expected_status: int
    status_code: int
    response_body: str = ""

    code: ClassVar[str] = "UNEXPECTED_STATUS"


@dataclass(eq=False)
class NotFoundError(SearchSdkError):
    """The referenced resource no longer exists on the service."""

    operation: str
    url: str
    resource: str

    code: ClassVar[str] = "NOT_FOUND"


@dataclass(eq=False)
class TerminalStateError(SearchSdkError):
    """A job reached its failure state before the requested dispatch state."""

    sid: str
    state: str
    target_state: str
    messages: tuple[str, ...] = ()

    code: ClassVar[str] = "TERMINAL_STATE"


@dataclass(eq=False)
class ConfigurationError(SearchSdkError, ValueError):
    """Caller-supplied options are invalid or mutually incompatible."""

    field: str
    value: object = None

    code: ClassVar[str] = "INVALID_CONFIGURATION"


@dataclass(eq=False)
class ResponseFormatError(SearchSdkError):
    """A successful response body did not have the expected shape."""

    operation: str
    detail: str

    code: ClassVar[str] = "RESPONSE_FORMAT"


def map_transport_error(
    *, operation: str, error: HttpRequestError
) -> CommunicationError:
    """Map one shared HTTP transport error into a typed SDK error."""
    return CommunicationError(
        message=f"{operation} transport failure: {error.message}",
        operation=operation,
        method=error.method,
        url=error.url,
        retryable=error.retryable,
        cause=error.cause,
    )


def ensure_status(
    response: httpx.Response,
    *,
    operation: str,
    expected_status: int,
    resource: str,
) -> None:
    """Raise a typed error unless ``response`` carries ``expected_status``."""
    status_code = response.status_code
    if status_code == expected_status:
        return

    url = str(response.request.url)
    if status_code == httpx.codes.NOT_FOUND:
        raise NotFoundError(
            message=f"{operation}: {resource} not found",
            operation=operation,
            url=url,
            resource=resource,
        )
    raise UnexpectedStatusError(
        message=(
            f"{operation}: expected HTTP {expected_status} for {resource}, "
            f"got {status_code}"
        ),
        operation=operation,
        url=url,
        expected_status=expected_status,
        status_code=status_code,
        response_body=response_text(response),
    )
