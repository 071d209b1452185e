"""Search job collection: job creation and filtered job listing."""

from __future__ import annotations

import asyncio
from typing import Iterable, Iterator, Sequence

from packages.search_sdk.addressing import Namespace, ResourceName
from packages.search_sdk.args import (
    Argument,
    ExecutionMode,
    JobArgs,
    JobFilter,
    build_job_arguments,
)
from packages.search_sdk.collection import ResourceCollection
from packages.search_sdk.config import PollPolicy
from packages.search_sdk.context import Context
from packages.search_sdk.errors import ConfigurationError, ResponseFormatError
from packages.search_sdk.job import JOBS_RESOURCE, Job, Sleeper
from packages.search_sdk.states import DispatchState
from packages.search_shared.logging import get_logger, operation_logged

logger = get_logger(__name__)


class JobCollection:
    """Search jobs visible in one namespace.

    ``resource`` can point at another jobs listing, such as the dispatch
    history of a saved search; new jobs are always submitted to
    ``search/jobs``.
    """

    def __init__(
        self,
        context: Context,
        namespace: Namespace,
        *,
        resource: ResourceName = JOBS_RESOURCE,
        poll: PollPolicy | None = None,
        sleeper: Sleeper = asyncio.sleep,
    ) -> None:
        self._context = context
        self._namespace = namespace
        self._poll = PollPolicy() if poll is None else poll
        self._sleeper = sleeper
        self._page: ResourceCollection[Job] = ResourceCollection(
            context, namespace, resource, self._job_from_entry, kind="jobs"
        )
        self._submit: ResourceCollection[Job] = (
            self._page
            if resource == JOBS_RESOURCE
            else ResourceCollection(
                context, namespace, JOBS_RESOURCE, self._job_from_entry, kind="jobs"
            )
        )

    @property
    def namespace(self) -> Namespace:
        return self._namespace

    @property
    def resource(self) -> ResourceName:
        return self._page.resource

    @property
    def items(self) -> tuple[Job, ...]:
        return self._page.items

    @property
    def total(self) -> int:
        return self._page.total

    def __iter__(self) -> Iterator[Job]:
        return iter(self._page)

    def __len__(self) -> int:
        return len(self._page)

    def __getitem__(self, index: int) -> Job:
        return self._page[index]

    def job(self, sid: str) -> Job:
        """Return a handle for an existing job without fetching it."""
        return Job(
            self._context,
            self._namespace,
            sid,
            poll=self._poll,
            sleeper=self._sleeper,
        )

    async def create(
        self,
        search: str,
        args: JobArgs | None = None,
        custom_args: Iterable[Argument] | None = None,
        *,
        target_state: DispatchState = DispatchState.RUNNING,
    ) -> Job:
        """Submit a search and return its job once it reaches ``target_state``.

        Raises ``ConfigurationError`` before submitting when ``search`` is
        empty or ``args`` asks for one-shot execution, which never produces a
        job to wait on.
        """
        if search.strip() == "":
            raise ConfigurationError(
                message="search must be a non-empty search string",
                field="search",
                value=search,
            )
        if args is not None and args.exec_mode is ExecutionMode.ONESHOT:
            raise ConfigurationError(
                message=(
                    "oneshot execution returns results inline and cannot reach "
                    f"dispatch state {target_state.name}"
                ),
                field="exec_mode",
                value=args.exec_mode.value,
            )
        arguments = build_job_arguments(search, args, custom_args)
        return await self.create_from_arguments(arguments, target_state=target_state)

    @operation_logged(logger=logger, operation="jobs.create")
    async def create_from_arguments(
        self,
        arguments: Sequence[Argument],
        *,
        target_state: DispatchState = DispatchState.RUNNING,
    ) -> Job:
        """Submit pre-built arguments, then wait for ``target_state``."""
        payload = await self._submit.post(arguments, operation="jobs.create")
        sid = payload.get("sid")
        if not isinstance(sid, str) or sid == "":
            raise ResponseFormatError(
                message="jobs.create: response has no sid",
                operation="jobs.create",
                detail=f"keys={sorted(payload)}",
            )

        job = self.job(sid)
        await job.fetch_snapshot()
        await job.await_state(target_state)
        return job

    @operation_logged(logger=logger, operation="jobs.fetch_slice")
    async def fetch_slice(self, criteria: JobFilter | None = None) -> JobCollection:
        """Replace the current page with one filtered slice of jobs."""
        resolved = JobFilter() if criteria is None else criteria
        await self._page.fetch_slice(resolved.as_arguments())
        return self

    def _job_from_entry(
        self, context: Context, namespace: Namespace, entry: object
    ) -> Job:
        return Job.from_entry(
            context,
            namespace,
            entry,
            poll=self._poll,
            sleeper=self._sleeper,
        )
