"""Generic namespaced resource collection with filtered slice retrieval."""

from __future__ import annotations

from typing import Any, Callable, Generic, Iterator, Mapping, Sequence, TypeVar

import httpx

from packages.search_sdk.addressing import Namespace, ResourceName
from packages.search_sdk.args import Argument
from packages.search_sdk.context import Context, read_json
from packages.search_sdk.errors import ResponseFormatError, ensure_status
from packages.search_shared.logging import get_logger

logger = get_logger(__name__)

TEntity = TypeVar("TEntity")

EntityFactory = Callable[[Context, Namespace, object], TEntity]


class ResourceCollection(Generic[TEntity]):
    """One page of remote resources of a single kind.

    Entities are built by the injected factory from listing entries. Every
    slice fetch replaces the page; nothing is cached across requests.
    """

    def __init__(
        self,
        context: Context,
        namespace: Namespace,
        resource: ResourceName,
        entity_factory: EntityFactory[TEntity],
        *,
        kind: str | None = None,
    ) -> None:
        self._context = context
        self._namespace = namespace
        self._resource = resource
        self._entity_factory = entity_factory
        self._kind = kind or resource.parts[-1]
        self._items: tuple[TEntity, ...] = ()
        self._total = 0
        self._offset = 0

    @property
    def context(self) -> Context:
        return self._context

    @property
    def namespace(self) -> Namespace:
        return self._namespace

    @property
    def resource(self) -> ResourceName:
        return self._resource

    @property
    def items(self) -> tuple[TEntity, ...]:
        return self._items

    @property
    def total(self) -> int:
        """Entry count the service reported for the whole filtered set."""
        return self._total

    @property
    def offset(self) -> int:
        return self._offset

    def __iter__(self) -> Iterator[TEntity]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> TEntity:
        return self._items[index]

    async def fetch_slice(
        self, arguments: Sequence[Argument] = ()
    ) -> ResourceCollection[TEntity]:
        """Retrieve one filtered page and replace the current contents."""
        operation = f"{self._kind}.list"
        response = await self._context.get(
            self._namespace, self._resource, operation=operation, params=arguments
        )
        ensure_status(
            response,
            operation=operation,
            expected_status=httpx.codes.OK,
            resource=str(self._resource),
        )
        payload = read_json(response, operation=operation)
        entries = payload.get("entry", [])
        if not isinstance(entries, list):
            raise ResponseFormatError(
                message=f"{operation}: entry is not a list",
                operation=operation,
                detail=type(entries).__name__,
            )

        items = tuple(
            self._entity_factory(self._context, self._namespace, entry)
            for entry in entries
        )
        paging = payload.get("paging")
        paging = paging if isinstance(paging, Mapping) else {}
        self._items = items
        self._total = _as_int(paging.get("total"), default=len(items))
        self._offset = _as_int(paging.get("offset"), default=0)
        logger.debug(
            "Fetched %d of %d %s from %s",
            len(items),
            self._total,
            self._kind,
            self._namespace,
        )
        return self

    async def post(
        self,
        arguments: Sequence[Argument],
        *,
        operation: str | None = None,
        expected_status: int = httpx.codes.CREATED,
    ) -> dict[str, Any]:
        """Submit one creation request and return the decoded response body."""
        resolved_operation = operation or f"{self._kind}.create"
        response = await self._context.post(
            self._namespace,
            self._resource,
            operation=resolved_operation,
            arguments=arguments,
        )
        ensure_status(
            response,
            operation=resolved_operation,
            expected_status=expected_status,
            resource=str(self._resource),
        )
        return read_json(response, operation=resolved_operation)


def _as_int(value: object, *, default: int) -> int:
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
