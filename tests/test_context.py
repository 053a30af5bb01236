"""Tests for route context loading and resolution."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from onboarding_assistant.context import (
    MISS_DESCRIPTION,
    EmbeddingContextResolver,
    StaticContextResolver,
    build_context_resolver,
    cosine_similarity,
    load_route_contexts,
    normalize_route,
)
from onboarding_assistant.providers.openai import OpenAIProviderError


@pytest.fixture
def contexts_dir(tmp_path):
    (tmp_path / "dashboard.json").write_text(
        json.dumps(
            {
                "route": "/dashboard/",
                "description": "Account overview",
                "elements": [{"id": "new-project-btn", "description": "New project"}],
                "apiCalls": ["GET /api/usage"],
                "userActions": ["Create a project"],
            }
        ),
        encoding="utf-8",
    )
    (tmp_path / "profile.json").write_text(
        json.dumps(
            {
                "route": "/settings/profile",
                "description": "Profile settings",
                "api_calls": ["PUT /api/profile"],
                "dependencies": ["/dashboard"],
            }
        ),
        encoding="utf-8",
    )
    (tmp_path / "broken.json").write_text("{not json", encoding="utf-8")
    (tmp_path / "wrong_shape.json").write_text(json.dumps({"route": "/x", "elements": "nope"}), encoding="utf-8")
    (tmp_path / "no_route.json").write_text(json.dumps({"description": "orphan"}), encoding="utf-8")
    (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")
    return tmp_path


class TestNormalizeRoute:
    def test_strips_trailing_slash(self):
        assert normalize_route("/dashboard/") == "/dashboard"
        assert normalize_route("/dashboard//") == "/dashboard"

    def test_root_and_empty(self):
        assert normalize_route("/") == "/"
        assert normalize_route("") == ""
        assert normalize_route(None) == ""

    def test_trims_whitespace(self):
        assert normalize_route("  /settings/ ") == "/settings"


class TestLoadRouteContexts:
    def test_loads_valid_files_and_skips_bad_ones(self, contexts_dir):
        contexts = load_route_contexts(contexts_dir)

        assert set(contexts) == {"/dashboard", "/settings/profile"}
        assert contexts["/dashboard"].route == "/dashboard"
        assert contexts["/dashboard"].api_calls == ["GET /api/usage"]
        assert contexts["/settings/profile"].api_calls == ["PUT /api/profile"]
        assert contexts["/settings/profile"].dependencies == ["/dashboard"]

    def test_missing_directory_is_empty(self, tmp_path):
        assert dict(load_route_contexts(tmp_path / "does-not-exist")) == {}

    def test_mapping_is_read_only(self, contexts_dir):
        contexts = load_route_contexts(contexts_dir)

        with pytest.raises(TypeError):
            contexts["/new"] = contexts["/dashboard"]


class TestStaticContextResolver:
    @pytest.mark.asyncio
    async def test_exact_match(self, contexts_dir):
        resolver = StaticContextResolver(load_route_contexts(contexts_dir))

        context = await resolver.resolve("/dashboard")

        assert context.description == "Account overview"

    @pytest.mark.asyncio
    async def test_trailing_slash_gives_same_result(self, contexts_dir):
        resolver = StaticContextResolver(load_route_contexts(contexts_dir))

        for route in ("/dashboard", "/settings/profile", "/unknown", "/"):
            assert await resolver.resolve(route) == await resolver.resolve(route + "/")

    @pytest.mark.asyncio
    async def test_miss_returns_minimal_context(self, contexts_dir):
        resolver = StaticContextResolver(load_route_contexts(contexts_dir))

        context = await resolver.resolve("/billing/")

        assert context.route == "/billing"
        assert context.description == MISS_DESCRIPTION
        assert context.elements == []
        assert context.api_calls == []
        assert context.user_actions == []


class TestCosineSimilarity:
    def test_identical_vectors(self):
        assert cosine_similarity([1.0, 2.0], [1.0, 2.0]) == pytest.approx(1.0)

    def test_orthogonal_vectors(self):
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)

    def test_degenerate_vectors(self):
        assert cosine_similarity([], []) == 0.0
        assert cosine_similarity([1.0], [1.0, 2.0]) == 0.0
        assert cosine_similarity([0.0, 0.0], [1.0, 1.0]) == 0.0


def _embedding_client(route_vectors, query_vector):
    """Client whose first embeddings call embeds the known routes, later calls the query."""
    client = MagicMock()

    async def create_embeddings(texts, model):
        if len(texts) == 1 and texts[0] not in route_vectors:
            return [query_vector]
        return [route_vectors[text] for text in texts]

    client.create_embeddings = AsyncMock(side_effect=create_embeddings)
    return client


class TestEmbeddingContextResolver:
    @pytest.mark.asyncio
    async def test_exact_match_skips_embeddings(self, contexts_dir):
        client = _embedding_client({}, [1.0, 0.0])
        resolver = EmbeddingContextResolver(load_route_contexts(contexts_dir), client, model="m")

        context = await resolver.resolve("/dashboard/")

        assert context.description == "Account overview"
        client.create_embeddings.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_similar_route_above_threshold(self, contexts_dir):
        client = _embedding_client(
            {"/dashboard": [1.0, 0.0], "/settings/profile": [0.0, 1.0]},
            [0.9, 0.1],
        )
        resolver = EmbeddingContextResolver(load_route_contexts(contexts_dir), client, model="m")
        await resolver.warm()

        context = await resolver.resolve("/dashboards")

        assert context.route == "/dashboard"

    @pytest.mark.asyncio
    async def test_below_threshold_is_a_miss(self, contexts_dir):
        client = _embedding_client(
            {"/dashboard": [1.0, 0.0], "/settings/profile": [0.0, 1.0]},
            [0.7, 0.7],
        )
        resolver = EmbeddingContextResolver(
            load_route_contexts(contexts_dir), client, model="m", threshold=0.8
        )

        context = await resolver.resolve("/somewhere")

        assert context.route == "/somewhere"
        assert context.description == MISS_DESCRIPTION

    @pytest.mark.asyncio
    async def test_route_embeddings_computed_once(self, contexts_dir):
        client = _embedding_client(
            {"/dashboard": [1.0, 0.0], "/settings/profile": [0.0, 1.0]},
            [0.0, 1.0],
        )
        resolver = EmbeddingContextResolver(load_route_contexts(contexts_dir), client, model="m")

        await resolver.resolve("/a")
        await resolver.resolve("/b")

        # one call for the table, one per query
        assert client.create_embeddings.await_count == 3

    @pytest.mark.asyncio
    async def test_embedding_failure_falls_back(self, contexts_dir):
        client = MagicMock()
        client.create_embeddings = AsyncMock(side_effect=OpenAIProviderError("down"))
        resolver = EmbeddingContextResolver(load_route_contexts(contexts_dir), client, model="m")

        context = await resolver.resolve("/elsewhere/")

        assert context.route == "/elsewhere"
        assert context.description == MISS_DESCRIPTION

    @pytest.mark.asyncio
    async def test_trailing_slash_gives_same_result(self, contexts_dir):
        client = _embedding_client(
            {"/dashboard": [1.0, 0.0], "/settings/profile": [0.0, 1.0]},
            [0.95, 0.05],
        )
        resolver = EmbeddingContextResolver(load_route_contexts(contexts_dir), client, model="m")

        assert await resolver.resolve("/dash") == await resolver.resolve("/dash/")


class TestBuildContextResolver:
    def test_static_by_default(self, settings, contexts_dir):
        settings.context_data_dir = str(contexts_dir)

        resolver = build_context_resolver(settings, MagicMock())

        assert isinstance(resolver, StaticContextResolver)
        assert "/dashboard" in resolver.contexts

    def test_embedding_strategy(self, settings, contexts_dir):
        settings.context_data_dir = str(contexts_dir)
        settings.context_strategy = "embedding"
        settings.context_similarity_threshold = 0.9

        resolver = build_context_resolver(settings, MagicMock())

        assert isinstance(resolver, EmbeddingContextResolver)
        assert resolver.threshold == 0.9
        assert resolver.model == settings.openai_embedding_model
