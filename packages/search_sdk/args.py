"""Request argument bundles for job creation and job listing."""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Iterable, Sequence

from packages.search_sdk.errors import ConfigurationError

Argument = tuple[str, str]

DEFAULT_COUNT = 30
DEFAULT_OFFSET = 0
DEFAULT_SORT_KEY = "dispatch_time"


class SortDirection(str, Enum):
    """Listing sort order."""

    ASCENDING = "asc"
    DESCENDING = "desc"


class ExecutionMode(str, Enum):
    """How the service runs a submitted search."""

    NORMAL = "normal"
    BLOCKING = "blocking"
    ONESHOT = "oneshot"


class SearchMode(str, Enum):
    """Search execution mode."""

    NORMAL = "normal"
    REALTIME = "realtime"


@dataclass(frozen=True, slots=True)
class JobFilter:
    """Criteria for retrieving one slice of the search job collection.

    ``count=0`` asks for every available entry. Fields left at their
    documented defaults are not sent; the service applies the same values.
    """

    count: int = DEFAULT_COUNT
    offset: int = DEFAULT_OFFSET
    search: str | None = None
    sort_direction: SortDirection = SortDirection.DESCENDING
    sort_key: str = DEFAULT_SORT_KEY

    def __post_init__(self) -> None:
        if self.count < 0:
            raise ConfigurationError(
                message="count must be zero (unlimited) or positive",
                field="count",
                value=self.count,
            )
        if self.offset < 0:
            raise ConfigurationError(
                message="offset is zero-based and cannot be negative",
                field="offset",
                value=self.offset,
            )
        if self.sort_key.strip() == "":
            raise ConfigurationError(
                message="sort_key must be a non-empty property name",
                field="sort_key",
                value=self.sort_key,
            )

    def as_arguments(self) -> list[Argument]:
        arguments: list[Argument] = []
        if self.count != DEFAULT_COUNT:
            arguments.append(("count", str(self.count)))
        if self.offset != DEFAULT_OFFSET:
            arguments.append(("offset", str(self.offset)))
        if self.search is not None:
            arguments.append(("search", self.search))
        if self.sort_direction is not SortDirection.DESCENDING:
            arguments.append(("sort_dir", self.sort_direction.value))
        if self.sort_key != DEFAULT_SORT_KEY:
            arguments.append(("sort_key", self.sort_key))
        return arguments


@dataclass(frozen=True, slots=True)
class JobArgs:
    """Structured options for ``POST search/jobs``; unset options are not sent."""

    exec_mode: ExecutionMode | None = None
    earliest_time: str | None = None
    latest_time: str | None = None
    max_count: int | None = None
    max_time: int | None = None
    status_buckets: int | None = None
    search_mode: SearchMode | None = None
    search_id: str | None = None
    ttl: int | None = None
    auto_cancel: int | None = None
    auto_pause: int | None = None
    enable_lookups: bool | None = None
    required_fields: tuple[str, ...] = ()

    def as_arguments(self) -> list[Argument]:
        arguments: list[Argument] = []
        for item in fields(self):
            if item.name == "required_fields":
                continue
            value = getattr(self, item.name)
            if value is None:
                continue
            name = _WIRE_NAMES.get(item.name, item.name)
            arguments.append((name, _wire_value(value)))
        arguments.extend(("rf", name) for name in self.required_fields)
        return arguments


_WIRE_NAMES = {"search_id": "id"}


def _wire_value(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def build_job_arguments(
    search: str,
    args: JobArgs | None = None,
    custom_args: Iterable[Argument] | None = None,
) -> list[Argument]:
    """Merge the search text, structured options, and caller extras in order.

    Later entries never replace earlier ones; repeated names are kept.
    """
    arguments: list[Argument] = [("search", search)]
    if args is not None:
        arguments.extend(args.as_arguments())
    if custom_args is not None:
        arguments.extend((str(name), str(value)) for name, value in custom_args)
    return arguments


def parse_argument_pairs(pairs: Sequence[str]) -> list[Argument]:
    """Parse ``name=value`` strings into ordered arguments."""
    arguments: list[Argument] = []
    for pair in pairs:
        name, separator, value = pair.partition("=")
        if separator == "" or name.strip() == "":
            raise ConfigurationError(
                message=f"argument {pair!r} must look like name=value",
                field="custom_args",
                value=pair,
            )
        arguments.append((name.strip(), value))
    return arguments
