"""Shared test fixtures and configuration."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from onboarding_assistant.config import Settings
from onboarding_assistant.schemas import RouteContext, UiElement


@pytest.fixture
def settings():
    """Real settings with test credentials and no polling delay."""
    return Settings(
        _env_file=None,
        OPENAI_API_KEY="sk-test",
        OPENAI_ASSISTANT_ID="asst_test123",
        RUN_POLL_INTERVAL_SECONDS=0,
        RUN_MAX_POLL_ATTEMPTS=5,
    )


@pytest.fixture
def mock_client():
    """OpenAIClient stand-in; every remote operation is an AsyncMock."""
    client = MagicMock()
    client.create_thread = AsyncMock(return_value="thread_new123")
    client.add_message = AsyncMock(return_value={"id": "msg_1"})
    client.create_run = AsyncMock(return_value="run_abc")
    client.get_run = AsyncMock(return_value={"id": "run_abc", "status": "completed"})
    client.list_messages = AsyncMock(return_value=[])
    client.create_embeddings = AsyncMock(return_value=[])
    return client


@pytest.fixture
def dashboard_context():
    return RouteContext(
        route="/dashboard",
        description="Overview of the account",
        elements=[UiElement(id="new-project-btn", description="Opens the new project dialog")],
        api_calls=["GET /api/usage"],
        user_actions=["Create a new project"],
    )
