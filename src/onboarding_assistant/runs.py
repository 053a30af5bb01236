"""Run lifecycle: status model and the completion polling loop."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .providers.openai import OpenAIClient

logger = logging.getLogger(__name__)

RATE_LIMIT_ERROR_CODES = frozenset({"rate_limit_exceeded", "insufficient_quota"})


class RunStatus(str, Enum):
    """Status of an assistant run, plus the synthetic ``timeout``."""

    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    REQUIRES_ACTION = "requires_action"
    CANCELLING = "cancelling"
    CANCELLED = "cancelled"
    FAILED = "failed"
    COMPLETED = "completed"
    INCOMPLETE = "incomplete"
    EXPIRED = "expired"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> RunStatus:
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


PENDING_STATUSES = frozenset({RunStatus.QUEUED, RunStatus.IN_PROGRESS})


@dataclass
class RunError:
    code: str
    message: str

    @classmethod
    def from_payload(cls, payload: Any) -> RunError | None:
        if not isinstance(payload, dict):
            return None
        return cls(
            code=str(payload.get("code") or "unknown"),
            message=str(payload.get("message") or "Unknown error"),
        )


@dataclass
class RunResult:
    """Final state of a run once polling has stopped."""

    run_id: str
    status: RunStatus
    last_error: RunError | None = None
    attempts: int = 0

    @property
    def is_rate_limited(self) -> bool:
        return self.last_error is not None and self.last_error.code in RATE_LIMIT_ERROR_CODES


async def wait_for_run(
    client: OpenAIClient,
    thread_id: str,
    run_id: str,
    *,
    max_attempts: int = 30,
    poll_interval: float = 1.0,
) -> RunResult:
    """
    Poll a run until it leaves ``queued``/``in_progress``.

    Each attempt sleeps ``poll_interval`` and then fetches the run once.
    When ``max_attempts`` fetches have been made and the run is still
    pending, the result is ``RunStatus.TIMEOUT`` and no further request is
    sent. Errors from the provider propagate to the caller.

    Args:
        client: Provider used to fetch the run.
        thread_id: Thread the run belongs to.
        run_id: The run to wait for.
        max_attempts: Poll budget.
        poll_interval: Seconds between polls.

    Returns:
        RunResult with the terminal (or synthetic timeout) status.
    """
    status = RunStatus.QUEUED
    last_error: RunError | None = None
    attempts = 0

    logger.info("[RUNS] Waiting for run %s to complete", run_id)

    while status in PENDING_STATUSES:
        if attempts >= max_attempts:
            logger.warning(
                "[RUNS] Maximum polling attempts (%d) reached for run %s. Last status: %s",
                max_attempts,
                run_id,
                status.value,
            )
            status = RunStatus.TIMEOUT
            break

        attempts += 1
        await asyncio.sleep(poll_interval)

        run = await client.get_run(thread_id, run_id)
        status = RunStatus.parse(run.get("status"))
        last_error = RunError.from_payload(run.get("last_error"))

        # Log the first poll, every 5th poll and the exit poll
        if attempts == 1 or attempts % 5 == 0 or status not in PENDING_STATUSES:
            logger.info(
                "[RUNS] Run %s status: %s (attempt %d/%d)",
                run_id,
                status.value,
                attempts,
                max_attempts,
            )

    if status == RunStatus.FAILED and last_error is not None:
        logger.error(
            "[RUNS] Run %s failed with error code: %s, message: %s",
            run_id,
            last_error.code,
            last_error.message,
        )

    return RunResult(run_id=run_id, status=status, last_error=last_error, attempts=attempts)
