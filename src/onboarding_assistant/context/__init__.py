"""Route context resolution."""

from __future__ import annotations

from ..config import Settings
from ..providers.openai import OpenAIClient
from .base import MISS_DESCRIPTION, ContextResolver, default_context, normalize_route
from .embedding import EmbeddingContextResolver, cosine_similarity
from .loader import load_route_contexts
from .static import StaticContextResolver


def build_context_resolver(settings: Settings, client: OpenAIClient) -> ContextResolver:
    """Load the route table and wrap it in the configured strategy."""
    contexts = load_route_contexts(settings.context_data_dir)
    if settings.context_strategy == "embedding":
        return EmbeddingContextResolver(
            contexts,
            client,
            model=settings.openai_embedding_model,
            threshold=settings.context_similarity_threshold,
        )
    return StaticContextResolver(contexts)


__all__ = [
    "MISS_DESCRIPTION",
    "ContextResolver",
    "EmbeddingContextResolver",
    "StaticContextResolver",
    "build_context_resolver",
    "cosine_similarity",
    "default_context",
    "load_route_contexts",
    "normalize_route",
]
