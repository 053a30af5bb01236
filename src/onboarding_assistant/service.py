"""Conversation thread driver: one query in, one reply out."""

from __future__ import annotations

import logging
from typing import Any

from .actions import parse_actions
from .config import Settings
from .context.base import MISS_DESCRIPTION
from .providers.openai import OpenAIClient, is_valid_thread_id
from .runs import RunResult, RunStatus, wait_for_run
from .schemas import QueryResponse, RouteContext

logger = logging.getLogger(__name__)

QUOTA_EXCEEDED_MESSAGE = (
    "The OpenAI API quota has been exceeded. Please check your billing details "
    "in the OpenAI dashboard or contact your administrator."
)
RUN_FAILED_MESSAGE = (
    "The assistant encountered an error while processing your request. "
    "This might be because the assistant doesn't have access to the necessary files. "
    "Please check your assistant configuration in the OpenAI dashboard and ensure "
    "it has the required files uploaded."
)
RUN_TIMEOUT_MESSAGE = "The assistant took too long to respond. Please try again later."
RUN_NOT_COMPLETED_MESSAGE = (
    "I'm sorry, but I couldn't process your request at this time. Please try again later."
)
NO_RESPONSE_MESSAGE = "I'm sorry, but I couldn't generate a response at this time."
GENERIC_ERROR_MESSAGE = (
    "I'm sorry, but I encountered an error processing your request. Our team has been "
    "notified and is working to resolve the issue. Please try again later."
)


def classify_run_result(result: RunResult) -> str:
    """Map a non-completed run to the message shown to the user."""
    if result.status == RunStatus.FAILED:
        if result.is_rate_limited:
            return QUOTA_EXCEEDED_MESSAGE
        return RUN_FAILED_MESSAGE
    if result.status == RunStatus.TIMEOUT:
        return RUN_TIMEOUT_MESSAGE
    return RUN_NOT_COMPLETED_MESSAGE


def extract_assistant_text(messages: list[dict[str, Any]]) -> str | None:
    """
    Return the text of the newest assistant message.

    ``messages`` must be ordered newest first. Assistant messages without a
    text block (e.g. image-only) are skipped.
    """
    for message in messages:
        if message.get("role") != "assistant":
            continue
        for block in message.get("content") or []:
            if not isinstance(block, dict) or block.get("type", "text") != "text":
                continue
            text = block.get("text")
            if isinstance(text, dict) and isinstance(text.get("value"), str):
                return text["value"]
            if isinstance(text, str):
                return text
    return None


def _has_details(context: RouteContext) -> bool:
    described = bool(context.description) and context.description != MISS_DESCRIPTION
    return bool(
        described
        or context.elements
        or context.api_calls
        or context.user_actions
        or context.dependencies
    )


def summarize_context(context: RouteContext) -> str:
    """Render a route context as plain text for the assistant."""
    lines = [f"Page context for {context.route or 'the current page'}:"]
    if context.description and context.description != MISS_DESCRIPTION:
        lines.append(context.description)
    if context.elements:
        lines.append("UI elements:")
        lines.extend(f"- {element.id}: {element.description}" for element in context.elements)
    if context.api_calls:
        lines.append("API calls: " + ", ".join(context.api_calls))
    if context.user_actions:
        lines.append("User actions:")
        lines.extend(f"- {action}" for action in context.user_actions)
    if context.dependencies:
        lines.append("Depends on: " + ", ".join(context.dependencies))
    return "\n".join(lines)


class AssistantService:
    """
    Drives one query through the assistant backend.

    For every call: resolve (or create) the thread, add the user message,
    start a run, poll it, then either extract the reply or turn the failure
    into a user-facing message. Nothing is cached between calls and
    concurrent calls on the same thread are not serialized.
    """

    def __init__(self, client: OpenAIClient, settings: Settings):
        self.client = client
        self.settings = settings
        self.assistant_id = settings.openai_assistant_id

        logger.info("[ASSISTANT] Using assistant %s", self.assistant_id)
        logger.info(
            "[ASSISTANT] Verbose logging is %s",
            "enabled" if settings.openai_verbose_logging else "disabled",
        )

    def build_user_message(self, query: str, context: RouteContext, new_thread: bool) -> str:
        route = context.route if context else ""
        if self.settings.include_route_in_message and route:
            content = f"The user is currently on {route} and has asked: {query}"
        else:
            content = query

        if new_thread and self.settings.include_context_on_new_thread and context and _has_details(context):
            content = f"{content}\n\n{summarize_context(context)}"
        return content

    async def _resolve_thread(self, thread_id: str | None) -> tuple[str, bool]:
        if not thread_id:
            return await self.client.create_thread(), True
        if not is_valid_thread_id(thread_id):
            logger.warning(
                "[ASSISTANT] Thread id %s is not in v2 format. Creating a new thread.", thread_id
            )
            return await self.client.create_thread(), True
        return thread_id, False

    async def _latest_reply(self, thread_id: str) -> str:
        messages = await self.client.list_messages(
            thread_id, limit=self.settings.message_list_limit, order="desc"
        )
        logger.debug("[ASSISTANT] Found %d messages in thread %s", len(messages), thread_id)

        text = extract_assistant_text(messages)
        if text is None:
            logger.warning("[ASSISTANT] No assistant messages found in thread %s", thread_id)
            return NO_RESPONSE_MESSAGE
        return text

    async def process_query(
        self,
        query: str,
        context: RouteContext,
        thread_id: str | None = None,
    ) -> QueryResponse:
        """
        Answer ``query`` on a new or existing thread.

        Never raises: every failure comes back as a ``QueryResponse`` whose
        message is safe to show and whose ``thread_id`` is the best one known.
        """
        route = context.route if context else "unknown"
        logger.info(
            "[ASSISTANT] Processing query for route '%s' with thread id '%s'",
            route,
            thread_id or "<none>",
        )

        current_thread_id: str | None = None
        try:
            current_thread_id, new_thread = await self._resolve_thread(thread_id)
            logger.info("[ASSISTANT] Using thread %s", current_thread_id)

            content = self.build_user_message(query, context, new_thread)
            await self.client.add_message(current_thread_id, content)
            logger.info("[ASSISTANT] Added user message to thread %s", current_thread_id)

            run_id = await self.client.create_run(current_thread_id, self.assistant_id)

            result = await wait_for_run(
                self.client,
                current_thread_id,
                run_id,
                max_attempts=self.settings.run_max_poll_attempts,
                poll_interval=self.settings.run_poll_interval_seconds,
            )

            if result.status != RunStatus.COMPLETED:
                logger.warning(
                    "[ASSISTANT] Run %s did not complete successfully. Status: %s",
                    run_id,
                    result.status.value,
                )
                return QueryResponse(
                    message=classify_run_result(result),
                    thread_id=current_thread_id,
                    actions=[],
                )

            reply = await self._latest_reply(current_thread_id)
            message, actions = parse_actions(reply)
            logger.info(
                "[ASSISTANT] Retrieved assistant response of length %d with %d actions",
                len(message),
                len(actions),
            )
            return QueryResponse(message=message, thread_id=current_thread_id, actions=actions)

        except Exception as e:
            logger.exception("[ASSISTANT] Error processing query: %s", e)
            if current_thread_id is None and is_valid_thread_id(thread_id):
                current_thread_id = thread_id
            return QueryResponse(
                message=GENERIC_ERROR_MESSAGE,
                thread_id=current_thread_id or "",
                actions=[],
            )
