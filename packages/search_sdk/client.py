"""Asynchronous search service client for CLI and embedding callers."""

from __future__ import annotations

import asyncio

import httpx

from packages.search_sdk.addressing import Namespace, ResourceName
from packages.search_sdk.config import SearchSdkConfig
from packages.search_sdk.context import Context
from packages.search_sdk.job import JOBS_RESOURCE, Job, Sleeper
from packages.search_sdk.job_collection import JobCollection
from packages.search_shared.http import AsyncHttpClient


class SearchClient:
    """Thin async client owning one HTTP connection pool."""

    def __init__(
        self,
        *,
        config: SearchSdkConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        http: AsyncHttpClient | None = None,
        sleeper: Sleeper = asyncio.sleep,
    ) -> None:
        """Create one client from config, or around an injected HTTP client."""
        self._config = SearchSdkConfig() if config is None else config
        self._owns_http = http is None
        self._http = (
            AsyncHttpClient(
                base_url=self._config.base_url,
                timeout_seconds=self._config.timeout_seconds,
                headers=self._config.headers,
                transport=transport,
            )
            if http is None
            else http
        )
        self._context = Context(self._http)
        self._sleeper = sleeper

    @property
    def config(self) -> SearchSdkConfig:
        return self._config

    @property
    def default_namespace(self) -> Namespace:
        return Namespace(owner=self._config.owner, app=self._config.app)

    async def aclose(self) -> None:
        """Close the HTTP client when this instance created it."""
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> SearchClient:
        """Enter async context manager scope."""
        return self

    async def __aexit__(self, *_: object) -> None:
        """Exit async context manager scope and close transport resources."""
        await self.aclose()

    def jobs(
        self,
        namespace: Namespace | None = None,
        *,
        resource: ResourceName = JOBS_RESOURCE,
    ) -> JobCollection:
        """Return an empty job collection; call ``fetch_slice`` to populate it."""
        return JobCollection(
            self._context,
            self.default_namespace if namespace is None else namespace,
            resource=resource,
            poll=self._config.poll,
            sleeper=self._sleeper,
        )

    def job(self, sid: str, namespace: Namespace | None = None) -> Job:
        """Return a handle for one existing job without fetching it."""
        return self.jobs(namespace).job(sid)
