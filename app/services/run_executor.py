"""
Run executor: submits a message to a remote thread, starts a run and polls it
to a terminal state.

States: queued -> in_progress -> completed | failed | other terminal status,
or a local timeout once the poll budget is spent. A failed status check
(network or malformed body) is logged and uses up a regular attempt.
Cancelling the awaiting task stops polling at the next suspension point.
"""

from __future__ import annotations

import asyncio

from app.infra.logging_config import get_logger
from app.assistants.client import AssistantClient
from app.assistants.errors import (
    AssistantAPIError,
    AssistantRunEndedError,
    AssistantRunFailedError,
    AssistantRunTimeoutError,
    MalformedResponseError,
)
from app.schemas.assistant import RUN_STATUS_COMPLETED, RUN_STATUS_FAILED, RemoteRun

logger = get_logger("run_executor")


class RunExecutor:
    def __init__(
        self,
        client: AssistantClient,
        poll_interval: float = 1.0,
        max_attempts: int = 60,
    ) -> None:
        self.client = client
        self.poll_interval = poll_interval
        self.max_attempts = max_attempts

    async def submit_message(self, thread_id: str, content: str) -> None:
        await self.client.add_message(thread_id, content)

    async def start_run(self, thread_id: str) -> RemoteRun:
        return await self.client.create_run(thread_id)

    async def wait_for_completion(self, thread_id: str, run: RemoteRun) -> RemoteRun:
        """
        Poll ``run`` until it leaves queued/in_progress.

        Returns:
            RemoteRun: the run in ``completed`` state.

        Raises:
            AssistantRunFailedError: the run reported ``failed``.
            AssistantRunEndedError: the run ended in any other non-active status.
            AssistantRunTimeoutError: still active after ``max_attempts`` checks.
        """
        for attempt in range(1, self.max_attempts + 1):
            await asyncio.sleep(self.poll_interval)
            try:
                run = await self.client.get_run(thread_id, run.id)
            except (AssistantAPIError, MalformedResponseError) as e:
                logger.warning(
                    "Status check %d/%d for run %s failed: %s",
                    attempt,
                    self.max_attempts,
                    run.id,
                    e,
                )
                continue

            if run.status == RUN_STATUS_COMPLETED:
                return run
            if run.is_active:
                continue
            if run.status == RUN_STATUS_FAILED:
                detail = run.last_error.message if run.last_error else None
                raise AssistantRunFailedError(run.id, detail)
            raise AssistantRunEndedError(run.id, run.status)

        raise AssistantRunTimeoutError(run.id, self.max_attempts)
