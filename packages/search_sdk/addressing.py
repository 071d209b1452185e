"""Namespace and resource path addressing for the search service REST API."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote

WILDCARD = "-"


@dataclass(frozen=True, slots=True)
class Namespace:
    """Owner/app scope for one resource request.

    A namespace with neither owner nor app addresses the global ``services``
    tree; otherwise requests go through ``servicesNS`` with ``-`` standing
    in for any unspecified part.
    """

    owner: str | None = None
    app: str | None = None

    @property
    def is_default(self) -> bool:
        return self.owner is None and self.app is None

    def path_prefix(self) -> str:
        if self.is_default:
            return "services"
        return "/".join(
            (
                "servicesNS",
                _segment(self.owner or WILDCARD),
                _segment(self.app or WILDCARD),
            )
        )

    def __str__(self) -> str:
        return self.path_prefix()


@dataclass(frozen=True, slots=True)
class ResourceName:
    """Relative resource path such as ``search/jobs``."""

    parts: tuple[str, ...]

    def __init__(self, *parts: str) -> None:
        if not parts or any(part == "" for part in parts):
            raise ValueError("resource name parts must be non-empty")
        object.__setattr__(self, "parts", tuple(parts))

    def child(self, name: str) -> ResourceName:
        """Return the resource name of one entity under this collection."""
        return ResourceName(*self.parts, name)

    def __str__(self) -> str:
        return "/".join(_segment(part) for part in self.parts)


def resource_path(namespace: Namespace, resource: ResourceName) -> str:
    """Return the service-relative URL path for ``resource`` in ``namespace``."""
    return f"/{namespace.path_prefix()}/{resource}"


def _segment(value: str) -> str:
    return quote(value, safe="")
