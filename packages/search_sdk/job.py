"""Search job entity: snapshot fetching and dispatch-state polling."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Mapping

import httpx

from packages.search_sdk.addressing import Namespace, ResourceName
from packages.search_sdk.config import PollPolicy
from packages.search_sdk.context import Context, read_json
from packages.search_sdk.errors import (
    ConfigurationError,
    ResponseFormatError,
    TerminalStateError,
    ensure_status,
)
from packages.search_sdk.states import DispatchState
from packages.search_shared.logging import (
    fields,
    get_logger,
    log_context,
    operation_logged,
)

logger = get_logger(__name__)

JOBS_RESOURCE = ResourceName("search", "jobs")

Sleeper = Callable[[float], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class JobMessage:
    """One diagnostic message attached to a job by the service."""

    type: str
    text: str

    def __str__(self) -> str:
        return f"{self.type}: {self.text}"


@dataclass(frozen=True, slots=True)
class JobSnapshot:
    """Job properties as observed by one fetch.

    Only accurate at the moment of the fetch; later fetches replace it.
    """

    sid: str
    dispatch_state: DispatchState
    is_done: bool = False
    is_failed: bool = False
    is_paused: bool = False
    is_finalized: bool = False
    done_progress: float = 0.0
    event_count: int = 0
    result_count: int = 0
    scan_count: int = 0
    run_duration: float = 0.0
    ttl: int = 0
    owner: str | None = None
    app: str | None = None
    messages: tuple[JobMessage, ...] = ()
    content: Mapping[str, Any] = field(default_factory=dict)

    @property
    def state(self) -> DispatchState:
        """Effective state; ``is_failed`` wins over the dispatch label."""
        if self.is_failed:
            return DispatchState.FAILED
        return self.dispatch_state

    @classmethod
    def from_entry(cls, entry: object, *, operation: str) -> JobSnapshot:
        """Build a snapshot from one ``entry`` element of a jobs response."""
        if not isinstance(entry, Mapping):
            raise _format_error(operation, "job entry is not an object")
        content = entry.get("content")
        if not isinstance(content, Mapping):
            raise _format_error(operation, "job entry has no content object")

        sid = content.get("sid")
        if not isinstance(sid, str) or sid == "":
            raise _format_error(operation, "job entry has no sid")

        label = content.get("dispatchState")
        if not isinstance(label, str):
            raise _format_error(operation, f"job {sid} has no dispatchState")
        try:
            dispatch_state = DispatchState.parse(label)
        except KeyError as exc:
            raise _format_error(
                operation, f"job {sid} has unknown dispatchState {label!r}"
            ) from exc

        acl = entry.get("acl")
        acl = acl if isinstance(acl, Mapping) else {}
        return cls(
            sid=sid,
            dispatch_state=dispatch_state,
            is_done=_as_bool(content.get("isDone")),
            is_failed=_as_bool(content.get("isFailed")),
            is_paused=_as_bool(content.get("isPaused")),
            is_finalized=_as_bool(content.get("isFinalized")),
            done_progress=_as_float(content.get("doneProgress")),
            event_count=_as_int(content.get("eventCount")),
            result_count=_as_int(content.get("resultCount")),
            scan_count=_as_int(content.get("scanCount")),
            run_duration=_as_float(content.get("runDuration")),
            ttl=_as_int(content.get("ttl")),
            owner=_as_optional_str(acl.get("owner")),
            app=_as_optional_str(acl.get("app")),
            messages=_messages(content.get("messages")),
            content=dict(content),
        )


class Job:
    """One dispatched search, addressed by its search id (``sid``).

    The held snapshot goes stale as soon as it is fetched; call
    :meth:`fetch_snapshot` or :meth:`await_state` to refresh it.
    """

    def __init__(
        self,
        context: Context,
        namespace: Namespace,
        sid: str,
        *,
        resource: ResourceName = JOBS_RESOURCE,
        poll: PollPolicy | None = None,
        sleeper: Sleeper = asyncio.sleep,
        snapshot: JobSnapshot | None = None,
    ) -> None:
        if sid == "":
            raise ValueError("sid must be non-empty")
        self._context = context
        self._namespace = namespace
        self._sid = sid
        self._resource = resource.child(sid)
        self._poll = PollPolicy() if poll is None else poll
        self._sleeper = sleeper
        self._snapshot = snapshot

    @classmethod
    def from_entry(
        cls,
        context: Context,
        namespace: Namespace,
        entry: object,
        *,
        resource: ResourceName = JOBS_RESOURCE,
        poll: PollPolicy | None = None,
        sleeper: Sleeper = asyncio.sleep,
    ) -> Job:
        """Build a job from one listing entry without issuing a request."""
        snapshot = JobSnapshot.from_entry(entry, operation="jobs.list")
        return cls(
            context,
            namespace,
            snapshot.sid,
            resource=resource,
            poll=poll,
            sleeper=sleeper,
            snapshot=snapshot,
        )

    @property
    def sid(self) -> str:
        return self._sid

    @property
    def namespace(self) -> Namespace:
        return self._namespace

    @property
    def snapshot(self) -> JobSnapshot | None:
        return self._snapshot

    @property
    def state(self) -> DispatchState:
        """Effective state of the held snapshot, ``NONE`` before any fetch."""
        if self._snapshot is None:
            return DispatchState.NONE
        return self._snapshot.state

    @operation_logged(logger=logger, operation="job.fetch_snapshot", id_fields=("sid",))
    async def fetch_snapshot(self) -> JobSnapshot:
        """Fetch the current job properties and replace the held snapshot."""
        return await self._fetch()

    @operation_logged(
        logger=logger, operation="job.await_state", id_fields=("sid", "target")
    )
    async def await_state(self, target: DispatchState) -> JobSnapshot:
        """Poll until the job reaches ``target`` or fails.

        Raises ``TerminalStateError`` if the job fails first. Cancellation
        interrupts the wait at the next network call or sleep.
        """
        if target is DispatchState.FAILED:
            raise ConfigurationError(
                message="FAILED cannot be awaited as a target dispatch state",
                field="target_state",
                value=target.name,
            )

        snapshot = self._snapshot if self._snapshot is not None else await self._fetch()
        delays = self._poll.delays()
        attempt = 0
        while True:
            state = snapshot.state
            if state.reached(target):
                return snapshot
            if state is DispatchState.FAILED:
                raise TerminalStateError(
                    message=(
                        f"job {self._sid} failed before reaching {target.name}"
                    ),
                    sid=self._sid,
                    state=state.name,
                    target_state=target.name,
                    messages=tuple(str(message) for message in snapshot.messages),
                )

            attempt += 1
            delay = next(delays)
            with log_context(
                {
                    fields.SID: self._sid,
                    fields.DISPATCH_STATE: state.name,
                    fields.TARGET_STATE: target.name,
                    fields.POLL_ATTEMPT: attempt,
                    fields.POLL_DELAY_SECONDS: delay,
                }
            ):
                logger.debug("Waiting for dispatch state")
            await self._sleeper(delay)
            snapshot = await self._fetch()

    async def _fetch(self) -> JobSnapshot:
        operation = "job.fetch_snapshot"
        response: httpx.Response = await self._context.get(
            self._namespace, self._resource, operation=operation
        )
        ensure_status(
            response,
            operation=operation,
            expected_status=httpx.codes.OK,
            resource=f"job {self._sid}",
        )
        payload = read_json(response, operation=operation)
        entries = payload.get("entry")
        if not isinstance(entries, list) or len(entries) == 0:
            raise _format_error(operation, f"job {self._sid} response has no entry")
        self._snapshot = JobSnapshot.from_entry(entries[0], operation=operation)
        return self._snapshot

    def __repr__(self) -> str:
        return f"Job(sid={self._sid!r}, state={self.state.name})"


def _format_error(operation: str, detail: str) -> ResponseFormatError:
    return ResponseFormatError(
        message=f"{operation}: {detail}", operation=operation, detail=detail
    )


def _messages(value: object) -> tuple[JobMessage, ...]:
    """Normalize ``messages`` from either a type->texts map or a list of objects."""
    if isinstance(value, Mapping):
        return tuple(
            JobMessage(type=str(kind), text=str(text))
            for kind, texts in value.items()
            for text in (texts if isinstance(texts, list) else [texts])
        )
    if isinstance(value, list):
        return tuple(
            JobMessage(type=str(item.get("type", "")), text=str(item.get("text", "")))
            for item in value
            if isinstance(item, Mapping)
        )
    return ()


def _as_bool(value: object) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "t", "yes"}
    return bool(value)


def _as_int(value: object) -> int:
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0


def _as_float(value: object) -> float:
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0


def _as_optional_str(value: object) -> str | None:
    if value in (None, ""):
        return None
    return str(value)
