"""Nearest-route context lookup using embedding cosine similarity."""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING

from ..schemas import RouteContext
from .base import ContextResolver, default_context, normalize_route

if TYPE_CHECKING:
    from ..providers.openai import OpenAIClient

logger = logging.getLogger(__name__)

DEFAULT_SIMILARITY_THRESHOLD = 0.7


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two vectors; 0.0 for empty, mismatched or zero vectors."""
    if len(a) != len(b) or not a:
        return 0.0
    dot = math.fsum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(math.fsum(x * x for x in a))
    norm_b = math.sqrt(math.fsum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (norm_a * norm_b)


def find_most_similar(
    query: Sequence[float],
    candidates: Mapping[str, Sequence[float]],
) -> tuple[str | None, float]:
    """Return the candidate key closest to ``query`` and its similarity."""
    best_key: str | None = None
    best_score = -1.0
    for key, vector in candidates.items():
        score = cosine_similarity(query, vector)
        if score > best_score:
            best_key, best_score = key, score
    return best_key, best_score


class EmbeddingContextResolver(ContextResolver):
    """
    Exact match first, then the most similar known route.

    Route embeddings are computed once (``warm()`` at startup, or lazily on
    the first miss) and kept for the life of the process. A candidate is
    only accepted when its similarity is strictly above ``threshold``;
    otherwise, and on any embedding failure, the miss context is returned.
    """

    def __init__(
        self,
        contexts: Mapping[str, RouteContext],
        client: OpenAIClient,
        model: str,
        threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    ):
        self.contexts = contexts
        self.client = client
        self.model = model
        self.threshold = threshold
        self._route_embeddings: dict[str, list[float]] | None = None
        self._lock = asyncio.Lock()

    async def warm(self) -> None:
        await self._get_route_embeddings()

    async def _get_route_embeddings(self) -> dict[str, list[float]]:
        if self._route_embeddings is None:
            async with self._lock:
                if self._route_embeddings is None:
                    routes = list(self.contexts)
                    vectors = await self.client.create_embeddings(routes, self.model)
                    self._route_embeddings = dict(zip(routes, vectors))
                    logger.info("[CONTEXT] Embedded %d known routes", len(routes))
        return self._route_embeddings

    async def resolve(self, route: str) -> RouteContext:
        normalized = normalize_route(route)

        match = self.contexts.get(normalized)
        if match is not None:
            return match

        if not self.contexts or not normalized:
            return default_context(normalized)

        try:
            route_embeddings = await self._get_route_embeddings()
            vectors = await self.client.create_embeddings([normalized], self.model)
        except Exception as e:
            logger.warning("[CONTEXT] Embedding lookup failed for %s: %s", normalized, e)
            return default_context(normalized)

        if not vectors:
            return default_context(normalized)

        best_route, score = find_most_similar(vectors[0], route_embeddings)
        if best_route is not None and score > self.threshold:
            logger.info(
                "[CONTEXT] Matched %s to %s (similarity %.3f)", normalized, best_route, score
            )
            return self.contexts[best_route]

        logger.debug(
            "[CONTEXT] No similar route for %s (best %s, similarity %.3f)", normalized, best_route, score
        )
        return default_context(normalized)
