from __future__ import annotations

from abc import ABC, abstractmethod

from ..schemas import RouteContext

MISS_DESCRIPTION = "No specific information available for this route."


def normalize_route(route: str | None) -> str:
    """Trim whitespace and trailing slashes; a bare ``/`` stays ``/``."""
    value = (route or "").strip()
    stripped = value.rstrip("/")
    if not stripped and value:
        return "/"
    return stripped


def default_context(route: str) -> RouteContext:
    """Minimal context returned when nothing is known about ``route``."""
    return RouteContext(route=route, description=MISS_DESCRIPTION)


class ContextResolver(ABC):
    """Resolves a UI route to the context used to ground the assistant."""

    @abstractmethod
    async def resolve(self, route: str) -> RouteContext:
        """Return a context for ``route``. Must not raise."""

    async def warm(self) -> None:
        """Precompute whatever the strategy needs. No-op by default."""
