"""Async HTTP client wrapper over httpx with typed transport failures."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx

from .errors import HttpJsonDecodeError, HttpRequestError


class AsyncHttpClient:
    """Own one ``httpx.AsyncClient`` and translate its transport failures.

    Responses come back whatever their status; callers decide which status
    each operation requires.
    """

    def __init__(
        self,
        *,
        base_url: str = "",
        timeout_seconds: float = 10.0,
        headers: Mapping[str, str] | None = None,
        follow_redirects: bool = False,
        transport: httpx.AsyncBaseTransport | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._owns_client = client is None
        if client is None:
            client = httpx.AsyncClient(
                base_url=base_url,
                timeout=timeout_seconds,
                headers=dict(headers or {}),
                follow_redirects=follow_redirects,
                transport=transport,
            )
        self._client = client

    async def aclose(self) -> None:
        """Close the underlying client if this wrapper created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> AsyncHttpClient:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send one request; extra keyword arguments go to httpx unchanged."""
        try:
            return await self._client.request(method, url, **kwargs)
        except httpx.RequestError as exc:
            sent_method, sent_url = _describe(exc, method, url)
            timed_out = isinstance(exc, httpx.TimeoutException)
            raise HttpRequestError(
                message=(
                    f"{'Timed out' if timed_out else 'Request failed'} "
                    f"for {sent_method} {sent_url}: {exc}"
                ),
                method=sent_method,
                url=sent_url,
                cause=exc,
                timed_out=timed_out,
            ) from exc


def decode_json(response: httpx.Response) -> Any:
    """Decode one response body as JSON or raise ``HttpJsonDecodeError``."""
    try:
        return response.json()
    except ValueError as exc:
        request = response.request
        raise HttpJsonDecodeError(
            message=f"Invalid JSON response for {request.method} {request.url}",
            method=request.method,
            url=str(request.url),
            status_code=response.status_code,
            response_body=response_text(response),
            cause=exc,
        ) from exc


def response_text(response: httpx.Response) -> str:
    """Return the decoded body, or an empty string if it cannot be decoded."""
    try:
        return response.text
    except (UnicodeDecodeError, LookupError, httpx.ResponseNotRead):
        return ""


def _describe(exc: httpx.RequestError, method: str, url: str) -> tuple[str, str]:
    """Return the method and absolute URL of the failed request when known."""
    try:
        request = exc.request
    except RuntimeError:
        return method.upper(), url
    return request.method, str(request.url)
