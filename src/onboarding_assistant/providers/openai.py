"""OpenAI Assistants API provider (threads, messages, runs, embeddings)."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

import httpx

from ..config import Settings

logger = logging.getLogger(__name__)

# v2 thread ids always carry the ``thread_`` prefix
THREAD_ID_PATTERN = re.compile(r"^thread_[A-Za-z0-9]+$")


class OpenAIProviderError(Exception):
    """Error from the OpenAI provider."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.cause = cause


def is_valid_thread_id(thread_id: str | None) -> bool:
    """Return True if ``thread_id`` is a thread identifier the v2 API accepts."""
    if not thread_id:
        return False
    return THREAD_ID_PATTERN.fullmatch(thread_id) is not None


def _require(data: dict[str, Any], key: str, operation: str) -> Any:
    value = data.get(key)
    if value is None or value == "":
        raise OpenAIProviderError(f"{operation}: response is missing '{key}'")
    return value


class OpenAIClient:
    """
    Thin async adapter over the OpenAI REST API.

    One ``httpx.AsyncClient`` is created lazily and shared by every call;
    it carries the bearer credential and the ``OpenAI-Beta`` feature header.
    Call ``aclose()`` on shutdown.

    Args:
        settings: Runtime settings (credential, base URL, timeouts).
        transport: Optional httpx transport, used by tests to stub the API.
    """

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self.verbose = settings.openai_verbose_logging

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._settings.openai_api_base_url,
                headers={
                    "Authorization": f"Bearer {self._settings.openai_api_key}",
                    "OpenAI-Beta": self._settings.openai_beta_header,
                    "Content-Type": "application/json",
                },
                timeout=self._settings.openai_request_timeout_seconds,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send one request and return the decoded JSON object."""
        client = self._get_client()

        if self.verbose:
            logger.info(
                "[OPENAI] %s request: %s %s params=%s body=%s",
                operation,
                method,
                path,
                params or {},
                json.dumps(body) if body is not None else "",
            )

        try:
            response = await client.request(method, path, json=body, params=params)
        except httpx.HTTPError as e:
            raise OpenAIProviderError(f"Failed to {operation}: {e}", cause=e) from e

        if self.verbose:
            logger.info(
                "[OPENAI] %s response: %s %s",
                operation,
                response.status_code,
                response.text,
            )
        else:
            logger.debug("[OPENAI] %s -> %s", operation, response.status_code)

        if not response.is_success:
            raise OpenAIProviderError(
                f"Failed to {operation} ({response.status_code}): {response.text}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise OpenAIProviderError(
                f"Failed to {operation}: response is not valid JSON",
                status_code=response.status_code,
                cause=e,
            ) from e

        if not isinstance(data, dict):
            raise OpenAIProviderError(
                f"Failed to {operation}: expected a JSON object",
                status_code=response.status_code,
            )
        return data

    async def create_thread(self) -> str:
        """Create an empty thread and return its id."""
        data = await self._request("create thread", "POST", "threads", body={})
        thread_id = _require(data, "id", "create thread")

        if not is_valid_thread_id(thread_id):
            logger.warning(
                "[OPENAI] Created thread id %s does not have the expected 'thread_' format",
                thread_id,
            )
        logger.info("[OPENAI] Created thread %s", thread_id)
        return thread_id

    async def add_message(
        self,
        thread_id: str,
        content: str,
        role: str = "user",
    ) -> dict[str, Any]:
        """Append a message to a thread."""
        return await self._request(
            "add message to thread",
            "POST",
            f"threads/{thread_id}/messages",
            body={"role": role, "content": content},
        )

    async def create_run(self, thread_id: str, assistant_id: str) -> str:
        """Start a run of ``assistant_id`` on the thread and return the run id."""
        data = await self._request(
            "create run",
            "POST",
            f"threads/{thread_id}/runs",
            body={"assistant_id": assistant_id},
        )
        run_id = _require(data, "id", "create run")
        logger.info("[OPENAI] Created run %s on thread %s", run_id, thread_id)
        return run_id

    async def get_run(self, thread_id: str, run_id: str) -> dict[str, Any]:
        """Fetch a run; the payload always carries ``status``."""
        data = await self._request(
            "get run status",
            "GET",
            f"threads/{thread_id}/runs/{run_id}",
        )
        _require(data, "status", "get run status")
        return data

    async def list_messages(
        self,
        thread_id: str,
        limit: int = 10,
        order: str = "desc",
    ) -> list[dict[str, Any]]:
        """List the thread's messages, newest first by default."""
        data = await self._request(
            "list messages",
            "GET",
            f"threads/{thread_id}/messages",
            params={"limit": limit, "order": order},
        )
        messages = data.get("data")
        if not isinstance(messages, list):
            raise OpenAIProviderError("list messages: response is missing 'data'")
        return messages

    async def create_embeddings(self, texts: list[str], model: str) -> list[list[float]]:
        """Embed ``texts`` and return vectors in input order."""
        if not texts:
            return []

        data = await self._request(
            "create embeddings",
            "POST",
            "embeddings",
            body={"model": model, "input": texts},
        )
        items = data.get("data")
        if not isinstance(items, list) or len(items) != len(texts):
            raise OpenAIProviderError("create embeddings: unexpected 'data' in response")

        items = sorted(items, key=lambda item: item.get("index", 0))
        return [list(item.get("embedding") or []) for item in items]
