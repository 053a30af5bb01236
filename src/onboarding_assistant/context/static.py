from __future__ import annotations

from collections.abc import Mapping

from ..schemas import RouteContext
from .base import ContextResolver, default_context, normalize_route


class StaticContextResolver(ContextResolver):
    """Exact-match lookup in a route table built at startup."""

    def __init__(self, contexts: Mapping[str, RouteContext]):
        self.contexts = contexts

    async def resolve(self, route: str) -> RouteContext:
        normalized = normalize_route(route)
        match = self.contexts.get(normalized)
        if match is not None:
            return match
        return default_context(normalized)
