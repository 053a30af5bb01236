"""Runtime configuration for the onboarding assistant service."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the onboarding assistant service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", populate_by_name=True
    )

    # OpenAI Assistants API
    openai_api_key: str = Field(..., alias="OPENAI_API_KEY", min_length=1)
    openai_assistant_id: str = Field(..., alias="OPENAI_ASSISTANT_ID", min_length=1)
    openai_verbose_logging: bool = Field(default=False, alias="OPENAI_VERBOSE_LOGGING")
    openai_api_base_url: str = Field(default="https://api.openai.com/v1", alias="OPENAI_API_BASE_URL")
    openai_beta_header: str = Field(default="assistants=v2", alias="OPENAI_BETA_HEADER")
    openai_request_timeout_seconds: float = Field(default=30.0, alias="OPENAI_REQUEST_TIMEOUT_SECONDS", gt=0)
    openai_embedding_model: str = Field(default="text-embedding-ada-002", alias="OPENAI_EMBEDDING_MODEL")

    # How the user message is built
    include_route_in_message: bool = Field(default=True, alias="OPENAI_INCLUDE_ROUTE_IN_MESSAGE")
    include_context_on_new_thread: bool = Field(default=True, alias="OPENAI_INCLUDE_CONTEXT_ON_NEW_THREAD")

    # Run polling: fixed interval, bounded attempts (30 x 1s by default)
    run_poll_interval_seconds: float = Field(default=1.0, alias="RUN_POLL_INTERVAL_SECONDS", ge=0)
    run_max_poll_attempts: int = Field(default=30, alias="RUN_MAX_POLL_ATTEMPTS", ge=1, le=600)
    message_list_limit: int = Field(default=10, alias="MESSAGE_LIST_LIMIT", ge=1, le=100)

    # Route contexts
    context_data_dir: str = Field(default="data/contexts", alias="CONTEXT_DATA_DIR")
    context_strategy: Literal["static", "embedding"] = Field(default="static", alias="CONTEXT_STRATEGY")
    context_similarity_threshold: float = Field(
        default=0.7, alias="CONTEXT_SIMILARITY_THRESHOLD", ge=-1.0, le=1.0
    )

    # FastAPI
    cors_allowed_origins: str = Field(default="*", alias="CORS_ALLOWED_ORIGINS")
    app_host: str = Field(default="0.0.0.0", alias="APP_HOST")
    app_port: int = Field(default=8080, alias="APP_PORT")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @property
    def cors_origins_list(self) -> list[str]:
        origins = [o.strip() for o in self.cors_allowed_origins.split(",") if o.strip()]
        return origins or ["*"]


@lru_cache
def get_settings() -> Settings:
    """Return memoized settings so multiple imports share a single instance."""

    return Settings()  # type: ignore[call-arg]
