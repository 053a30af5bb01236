"""Shared test helpers for building Assistants API payloads."""

from __future__ import annotations


def text_message(role: str, text: str, message_id: str = "msg_1") -> dict:
    """Build a message as returned by the list messages endpoint."""
    return {
        "id": message_id,
        "object": "thread.message",
        "role": role,
        "content": [{"type": "text", "text": {"value": text, "annotations": []}}],
    }


def assistant_message(text: str, message_id: str = "msg_a") -> dict:
    return text_message("assistant", text, message_id)


def user_message(text: str, message_id: str = "msg_u") -> dict:
    return text_message("user", text, message_id)


def run_payload(status: str, last_error: dict | None = None, run_id: str = "run_abc") -> dict:
    """Build a run object as returned by the get run endpoint."""
    return {
        "id": run_id,
        "object": "thread.run",
        "status": status,
        "last_error": last_error,
    }
