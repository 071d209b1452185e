"""Session context binding the search SDK to one HTTP client."""

from __future__ import annotations

from typing import Any, Sequence
from urllib.parse import urlencode

import httpx

from packages.search_sdk.addressing import Namespace, ResourceName, resource_path
from packages.search_sdk.args import Argument
from packages.search_sdk.errors import ResponseFormatError, map_transport_error
from packages.search_shared.http import (
    AsyncHttpClient,
    HttpJsonDecodeError,
    HttpRequestError,
    decode_json,
)
from packages.search_shared.logging import get_logger

logger = get_logger(__name__)

OUTPUT_MODE: Argument = ("output_mode", "json")
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class Context:
    """Issue namespaced requests and surface transport failures as SDK errors.

    Status codes are left for callers to check, since each operation expects
    a different success status.
    """

    def __init__(self, http: AsyncHttpClient) -> None:
        self._http = http

    async def get(
        self,
        namespace: Namespace,
        resource: ResourceName,
        *,
        operation: str,
        params: Sequence[Argument] = (),
    ) -> httpx.Response:
        """Issue one GET for ``resource`` with ordered query arguments."""
        return await self._send(
            "GET",
            resource_path(namespace, resource),
            operation=operation,
            params=[OUTPUT_MODE, *params],
        )

    async def post(
        self,
        namespace: Namespace,
        resource: ResourceName,
        *,
        operation: str,
        arguments: Sequence[Argument] = (),
    ) -> httpx.Response:
        """Issue one form POST; argument order and repeats are preserved."""
        return await self._send(
            "POST",
            resource_path(namespace, resource),
            operation=operation,
            params=[OUTPUT_MODE],
            content=urlencode(list(arguments)),
            headers={"Content-Type": FORM_CONTENT_TYPE},
        )

    async def _send(
        self, method: str, path: str, *, operation: str, **kwargs: Any
    ) -> httpx.Response:
        logger.debug("Sending %s %s for %s", method, path, operation)
        try:
            return await self._http.request(method, path, **kwargs)
        except HttpRequestError as exc:
            raise map_transport_error(operation=operation, error=exc) from exc


def read_json(response: httpx.Response, *, operation: str) -> dict[str, Any]:
    """Decode one JSON object body or raise ``ResponseFormatError``."""
    try:
        payload = decode_json(response)
    except HttpJsonDecodeError as exc:
        raise ResponseFormatError(
            message=f"{operation}: response body is not valid JSON",
            operation=operation,
            detail=exc.response_body[:200],
        ) from exc
    if not isinstance(payload, dict):
        raise ResponseFormatError(
            message=f"{operation}: expected a JSON object",
            operation=operation,
            detail=type(payload).__name__,
        )
    return payload
