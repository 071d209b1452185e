"""Shared fakes for search SDK tests."""

from __future__ import annotations

import asyncio
from typing import Any, Callable

import httpx
import pytest

JOBS_PATH = "/services/search/jobs"
BASE_URL = "https://search.test"


class FakeSearchService:
    """Scripted stand-in for the search service REST endpoints.

    Each scripted job returns its next content on every fetch and keeps
    returning the last one once the script runs out.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.create_status = 201
        self.create_body: dict[str, Any] = {"sid": "1700000000.42"}
        self.listing: dict[str, Any] = {
            "entry": [],
            "paging": {"total": 0, "offset": 0},
        }
        self.jobs: dict[str, list[dict[str, Any]]] = {}
        self.fail_with: Callable[[httpx.Request], httpx.Response] | None = None

    @staticmethod
    def entry(sid: str, state: str, **content: Any) -> dict[str, Any]:
        return {
            "name": f"search {sid}",
            "content": {"sid": sid, "dispatchState": state, **content},
            "acl": {"owner": "admin", "app": "search"},
        }

    def script_job(self, sid: str, *states: str, **content: Any) -> None:
        self.jobs[sid] = [{"dispatchState": state, **content} for state in states]

    def script_contents(self, sid: str, *contents: dict[str, Any]) -> None:
        self.jobs[sid] = [dict(item) for item in contents]

    def requests_for(self, method: str, path: str) -> list[httpx.Request]:
        return [
            request
            for request in self.requests
            if request.method == method and request.url.path == path
        ]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            return self.fail_with(request)

        path = request.url.path
        if request.method == "POST" and path == JOBS_PATH:
            return httpx.Response(self.create_status, json=self.create_body)
        if request.method == "GET" and path == JOBS_PATH:
            return httpx.Response(200, json=self.listing)
        if request.method == "GET" and path.startswith(f"{JOBS_PATH}/"):
            sid = path[len(JOBS_PATH) + 1 :]
            script = self.jobs.get(sid)
            if script is None:
                return httpx.Response(
                    404,
                    json={"messages": [{"type": "ERROR", "text": "Unknown sid."}]},
                )
            content = script[0] if len(script) == 1 else script.pop(0)
            return httpx.Response(
                200,
                json={"entry": [{"name": "search", "content": {"sid": sid, **content}}]},
            )
        return httpx.Response(405)


class RecordingSleeper:
    """Async sleeper that records requested delays without waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        await asyncio.sleep(0)


@pytest.fixture
def service() -> FakeSearchService:
    """Return a fresh scripted search service."""
    return FakeSearchService()


@pytest.fixture
def sleeper() -> RecordingSleeper:
    """Return a sleeper that records poll delays."""
    return RecordingSleeper()


@pytest.fixture
def make_client(
    service: FakeSearchService, sleeper: RecordingSleeper
) -> Callable[..., Any]:
    """Return a factory for SDK clients wired to the fake service."""
    from packages.search_sdk import PollPolicy, SearchClient, SearchSdkConfig

    def _make(**config: Any) -> SearchClient:
        values: dict[str, Any] = {
            "base_url": BASE_URL,
            "poll": PollPolicy(
                initial_delay_seconds=0.5,
                max_delay_seconds=2.0,
                backoff_multiplier=2.0,
            ),
        }
        values.update(config)
        return SearchClient(
            config=SearchSdkConfig(**values),
            transport=service.transport(),
            sleeper=sleeper,
        )

    return _make
