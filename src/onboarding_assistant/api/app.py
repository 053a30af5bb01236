"""FastAPI application setup."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import Settings, get_settings
from ..context import build_context_resolver
from ..providers.openai import OpenAIClient
from ..schemas import HealthResponse
from ..service import AssistantService
from .routes import assistant

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings: Settings = app.state.settings
    logger.info("Onboarding assistant starting...")

    client = OpenAIClient(settings)
    resolver = build_context_resolver(settings, client)
    try:
        await resolver.warm()
    except Exception as e:
        logger.warning(f"Failed to warm context resolver (will retry on demand): {e}")

    app.state.openai_client = client
    app.state.context_resolver = resolver
    app.state.assistant_service = AssistantService(client, settings)

    yield

    logger.info("Onboarding assistant shutting down...")
    await client.aclose()
    logger.info("Onboarding assistant shutdown complete")


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Settings are read here, so missing credentials fail at startup rather
    than on the first request.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Onboarding Assistant",
        description="Answers in-page onboarding questions through a hosted assistant",
        version="0.1.0",
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(assistant.router, prefix="/api", tags=["assistant"])

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        """Health check endpoint."""
        return HealthResponse()

    return app
