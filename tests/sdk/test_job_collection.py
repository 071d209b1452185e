"""Unit tests for job creation and filtered job listing."""

from __future__ import annotations

import asyncio
from typing import Any
from urllib.parse import parse_qsl

import httpx
import pytest
import respx

from packages.search_sdk import (
    ConfigurationError,
    DispatchState,
    ExecutionMode,
    JobArgs,
    JobFilter,
    Namespace,
    ResourceName,
    ResponseFormatError,
    SearchClient,
    SearchSdkConfig,
    SortDirection,
    TerminalStateError,
    UnexpectedStatusError,
)

JOBS_PATH = "/services/search/jobs"


def _form(request: httpx.Request) -> list[tuple[str, str]]:
    return parse_qsl(request.content.decode("utf-8"), keep_blank_values=True)


@pytest.mark.asyncio
async def test_create_waits_until_job_is_running(
    service: Any, make_client: Any, sleeper: Any
) -> None:
    """create should submit, then poll until the job reports RUNNING."""
    service.script_job("1700000000.42", "QUEUED", "PARSING", "RUNNING")

    async with make_client() as client:
        job = await client.jobs().create("search index=main | head 10")

    assert job.sid == "1700000000.42"
    assert job.state is DispatchState.RUNNING
    assert sleeper.delays == [0.5, 1.0]

    posts = service.requests_for("POST", JOBS_PATH)
    assert len(posts) == 1
    assert posts[0].url.params["output_mode"] == "json"
    assert posts[0].headers["content-type"] == "application/x-www-form-urlencoded"
    assert _form(posts[0]) == [("search", "search index=main | head 10")]
    assert len(service.requests_for("GET", f"{JOBS_PATH}/1700000000.42")) == 3


@pytest.mark.asyncio
async def test_create_keeps_argument_order_and_repeats(
    service: Any, make_client: Any
) -> None:
    """Structured options come first, then caller extras, duplicates intact."""
    service.script_job("1700000000.42", "DONE")

    async with make_client() as client:
        await client.jobs().create(
            "search error",
            JobArgs(
                exec_mode=ExecutionMode.BLOCKING,
                earliest_time="-15m",
                enable_lookups=False,
                search_id="nightly-1",
                required_fields=("host", "source"),
            ),
            [("namespace", "search"), ("rf", "sourcetype")],
            target_state=DispatchState.DONE,
        )

    (post,) = service.requests_for("POST", JOBS_PATH)
    assert _form(post) == [
        ("search", "search error"),
        ("exec_mode", "blocking"),
        ("earliest_time", "-15m"),
        ("id", "nightly-1"),
        ("enable_lookups", "false"),
        ("rf", "host"),
        ("rf", "source"),
        ("namespace", "search"),
        ("rf", "sourcetype"),
    ]


@pytest.mark.asyncio
async def test_create_rejects_oneshot_without_sending(
    service: Any, make_client: Any
) -> None:
    """One-shot searches never produce a job handle to wait on."""
    async with make_client() as client:
        with pytest.raises(ConfigurationError) as exc_info:
            await client.jobs().create(
                "search *", JobArgs(exec_mode=ExecutionMode.ONESHOT)
            )

    assert exc_info.value.field == "exec_mode"
    assert service.requests == []


@pytest.mark.asyncio
async def test_create_rejects_blank_search_without_sending(
    service: Any, make_client: Any
) -> None:
    async with make_client() as client:
        with pytest.raises(ConfigurationError):
            await client.jobs().create("   ")

    assert service.requests == []


@pytest.mark.asyncio
async def test_create_requires_created_status(service: Any, make_client: Any) -> None:
    """A 200 answer to a creation request is not success."""
    service.create_status = 200

    async with make_client() as client:
        with pytest.raises(UnexpectedStatusError) as exc_info:
            await client.jobs().create("search *")

    assert exc_info.value.expected_status == 201
    assert exc_info.value.status_code == 200
    assert service.requests_for("GET", f"{JOBS_PATH}/1700000000.42") == []


@pytest.mark.asyncio
async def test_create_rejects_response_without_sid(
    service: Any, make_client: Any
) -> None:
    service.create_body = {"messages": []}

    async with make_client() as client:
        with pytest.raises(ResponseFormatError) as exc_info:
            await client.jobs().create("search *")

    assert exc_info.value.operation == "jobs.create"


@pytest.mark.asyncio
async def test_create_surfaces_failure_before_target(
    service: Any, make_client: Any
) -> None:
    """A job that fails while parsing should not be returned as created."""
    service.script_job("1700000000.42", "QUEUED", "FAILED")

    async with make_client() as client:
        with pytest.raises(TerminalStateError) as exc_info:
            await client.jobs().create("search | bogus")

    assert exc_info.value.sid == "1700000000.42"
    assert exc_info.value.target_state == "RUNNING"


@pytest.mark.asyncio
async def test_create_posts_into_configured_namespace(sleeper: Any) -> None:
    """Owner and app settings route requests through servicesNS."""
    config = SearchSdkConfig(base_url="https://search.test", owner="admin", app="search")

    with respx.mock(assert_all_called=True) as router:
        create = router.post(
            "https://search.test/servicesNS/admin/search/search/jobs"
        ).respond(201, json={"sid": "ns-1"})
        status = router.get(
            "https://search.test/servicesNS/admin/search/search/jobs/ns-1"
        ).respond(
            200,
            json={"entry": [{"content": {"sid": "ns-1", "dispatchState": "DONE"}}]},
        )

        async with SearchClient(config=config, sleeper=sleeper) as client:
            job = await client.jobs().create("search *")

    assert job.namespace == Namespace(owner="admin", app="search")
    assert create.call_count == 1
    assert status.call_count == 1
    assert create.calls[0].request.url.params["output_mode"] == "json"


@pytest.mark.asyncio
async def test_fetch_slice_with_default_filter_sends_only_output_mode(
    service: Any, make_client: Any
) -> None:
    service.listing = {
        "entry": [
            service.entry("a", "DONE"),
            service.entry("b", "RUNNING", doneProgress=0.5),
        ],
        "paging": {"total": 57, "offset": 0},
    }

    async with make_client() as client:
        jobs = client.jobs()
        result = await jobs.fetch_slice()

    assert result is jobs
    assert [job.sid for job in jobs] == ["a", "b"]
    assert jobs[1].state is DispatchState.RUNNING
    assert jobs[1].snapshot is not None
    assert jobs[1].snapshot.owner == "admin"
    assert jobs.total == 57
    (request,) = service.requests_for("GET", JOBS_PATH)
    assert list(request.url.params.multi_items()) == [("output_mode", "json")]


@pytest.mark.asyncio
async def test_fetch_slice_sends_non_default_criteria(
    service: Any, make_client: Any
) -> None:
    """count=0 means all entries and must still be sent."""
    async with make_client() as client:
        await client.jobs().fetch_slice(
            JobFilter(
                count=0,
                offset=20,
                search="isDone=1",
                sort_direction=SortDirection.ASCENDING,
                sort_key="runDuration",
            )
        )

    (request,) = service.requests_for("GET", JOBS_PATH)
    assert list(request.url.params.multi_items()) == [
        ("output_mode", "json"),
        ("count", "0"),
        ("offset", "20"),
        ("search", "isDone=1"),
        ("sort_dir", "asc"),
        ("sort_key", "runDuration"),
    ]


@pytest.mark.asyncio
async def test_fetch_slice_replaces_previous_page(
    service: Any, make_client: Any
) -> None:
    """Each slice replaces the held page instead of merging into it."""
    service.listing = {
        "entry": [service.entry("a", "DONE"), service.entry("b", "DONE")],
        "paging": {"total": 3, "offset": 0},
    }

    async with make_client() as client:
        jobs = client.jobs()
        await jobs.fetch_slice(JobFilter(count=2))
        service.listing = {
            "entry": [service.entry("c", "QUEUED")],
            "paging": {"total": 3, "offset": 2},
        }
        await jobs.fetch_slice(JobFilter(count=2, offset=2))

    assert len(jobs) == 1
    assert jobs.items[0].sid == "c"
    assert jobs.total == 3


@pytest.mark.asyncio
async def test_fetch_slice_reads_alternate_jobs_resource(sleeper: Any) -> None:
    """A saved search's dispatch history lists through the same collection."""
    history = ResourceName("saved", "searches", "nightly_report", "history")
    config = SearchSdkConfig(base_url="https://search.test")

    with respx.mock(assert_all_called=True) as router:
        route = router.get(
            "https://search.test/services/saved/searches/nightly_report/history"
        ).respond(
            200,
            json={
                "entry": [{"content": {"sid": "scheduler_1", "dispatchState": "DONE"}}],
                "paging": {"total": 1, "offset": 0},
            },
        )

        async with SearchClient(config=config, sleeper=sleeper) as client:
            jobs = await client.jobs(resource=history).fetch_slice()

    assert [job.sid for job in jobs] == ["scheduler_1"]
    assert route.call_count == 1


def test_job_filter_rejects_negative_count() -> None:
    with pytest.raises(ConfigurationError) as exc_info:
        JobFilter(count=-1)

    assert exc_info.value.field == "count"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("blocked_method", "expected_methods"),
    [("POST", ["POST"]), ("GET", ["POST", "GET"])],
    ids=["during-submit", "during-first-fetch"],
)
async def test_create_cancelled_in_flight_sends_no_further_requests(
    blocked_method: str, expected_methods: list[str], sleeper: Any
) -> None:
    """Cancelling create while a request is outstanding stops the whole flow."""
    seen: list[httpx.Request] = []
    entered = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.method == blocked_method:
            entered.set()
            await asyncio.Event().wait()
        if request.method == "POST":
            return httpx.Response(201, json={"sid": "sid-1"})
        return httpx.Response(
            200,
            json={"entry": [{"content": {"sid": "sid-1", "dispatchState": "QUEUED"}}]},
        )

    async with SearchClient(
        config=SearchSdkConfig(base_url="https://search.test"),
        transport=httpx.MockTransport(handler),
        sleeper=sleeper,
    ) as client:
        task = asyncio.create_task(client.jobs().create("search index=main"))
        await entered.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        await asyncio.sleep(0)

    assert [request.method for request in seen] == expected_methods
    assert sleeper.delays == []
