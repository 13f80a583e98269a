"""Turns a completed run into the assistant reply text plus usage metadata."""

from __future__ import annotations

import time
from dataclasses import dataclass

from app.assistants.client import AssistantClient
from app.assistants.errors import MalformedResponseError
from app.schemas.assistant import RemoteRun

DEFAULT_REPLY_MODEL = "assistant"


@dataclass(frozen=True)
class AssistantReply:
    text: str
    tokens_used: int
    model: str
    response_time_ms: int


class ResponseExtractor:
    def __init__(self, client: AssistantClient) -> None:
        self.client = client

    async def extract(
        self, thread_id: str, run: RemoteRun, started_at: float
    ) -> AssistantReply:
        """
        Pick the newest assistant message of the thread, preferring the one
        written by ``run``. ``started_at`` is a ``time.monotonic()`` reading
        taken before the message was submitted.
        """
        messages = await self.client.list_messages(thread_id, order="desc")
        replies = [m for m in messages.data if m.role == "assistant"]
        if not replies:
            raise MalformedResponseError(f"No assistant message on thread {thread_id}")

        reply = next((m for m in replies if m.run_id == run.id), replies[0])
        text = reply.text
        if not text:
            raise MalformedResponseError(f"Assistant message {reply.id} has no text")

        return AssistantReply(
            text=text,
            tokens_used=run.usage.total_tokens if run.usage else 0,
            model=run.model or DEFAULT_REPLY_MODEL,
            response_time_ms=int((time.monotonic() - started_at) * 1000),
        )
