"""
Chat orchestration: one user message in, one persisted assistant reply out.

Order of effects for a send:
1. resolve (or create) the remote thread for the session,
2. submit the message to the thread,
3. persist the user turn,
4. start the run and poll it to completion,
5. extract the reply and persist the assistant turn.

A failure in 1-2 leaves nothing stored for the message; a failure from 4 on
leaves the user turn stored so the user can simply send again. The whole send
holds the per-session lock, so turns of one session never interleave.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, replace
from typing import List, Optional
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session as DBSession

from app.infra.logging_config import get_logger
from app.assistants.client import AssistantClient
from app.assistants.errors import (
    USER_MESSAGE_UNAVAILABLE,
    AssistantError,
    ChatProcessingError,
    ConfigurationError,
)
from app.config import Settings, get_settings
from app.models.conversation_turn import ConversationTurn
from app.services.conversation_turn_service import ConversationTurnService
from app.services.response_extractor import AssistantReply, ResponseExtractor
from app.services.run_executor import RunExecutor
from app.services.thread_registry import SessionLockRegistry, ThreadRegistry

logger = get_logger("chat_orchestrator")


@dataclass
class ChatResult:
    session_id: str
    reply: AssistantReply
    conversation: List[ConversationTurn]


class ChatOrchestrator:
    def __init__(
        self,
        db: DBSession,
        client: Optional[AssistantClient],
        locks: SessionLockRegistry,
        settings: Optional[Settings] = None,
    ) -> None:
        self.db = db
        self.settings = settings or get_settings()
        self.client = client
        self.locks = locks
        self.turn_service = ConversationTurnService(db)

    async def send_message(
        self, user_id: str, message: str, session_id: Optional[str] = None
    ) -> ChatResult:
        """
        Raises:
            ChatProcessingError: any orchestration failure, already logged and
                translated to a user-facing message.
        """
        session_id = session_id or str(uuid4())
        started_at = time.monotonic()
        thread_id: Optional[str] = None

        try:
            client = self._require_client()
            registry = ThreadRegistry(
                self.turn_service,
                client,
                always_fresh_thread=self.settings.assistant_always_fresh_thread,
            )
            executor = RunExecutor(
                client,
                poll_interval=self.settings.assistant_poll_interval_seconds,
                max_attempts=self.settings.assistant_poll_max_attempts,
            )
            async with self.locks.hold(user_id, session_id):
                thread_id = await registry.get_or_create_thread(user_id, session_id)
                await executor.submit_message(thread_id, message)
                self.turn_service.create_turn(
                    user_id=user_id,
                    session_id=session_id,
                    role="user",
                    content=self._cap(message),
                    thread_id=thread_id,
                )
                run = await executor.start_run(thread_id)
                run = await executor.wait_for_completion(thread_id, run)
                reply = await ResponseExtractor(client).extract(
                    thread_id, run, started_at
                )
                reply = replace(reply, text=self._cap(reply.text))
                self.turn_service.create_turn(
                    user_id=user_id,
                    session_id=session_id,
                    role="assistant",
                    content=reply.text,
                    thread_id=thread_id,
                    tokens_used=reply.tokens_used,
                    model=reply.model,
                    response_time_ms=reply.response_time_ms,
                )
            conversation = self.turn_service.get_turns(
                user_id, session_id, limit=self.settings.chat_history_limit
            )
        except AssistantError as e:
            self._log_failure(e, user_id, session_id, thread_id, started_at)
            raise ChatProcessingError.from_assistant_error(e) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            self._log_failure(e, user_id, session_id, thread_id, started_at)
            raise ChatProcessingError(
                ChatProcessingError.UNAVAILABLE, f"{USER_MESSAGE_UNAVAILABLE}."
            ) from e

        logger.info(
            "Chat reply user=%s session=%s thread=%s tokens=%d elapsed_ms=%d",
            user_id,
            session_id,
            thread_id,
            reply.tokens_used,
            reply.response_time_ms,
        )
        return ChatResult(session_id=session_id, reply=reply, conversation=conversation)

    def _log_failure(
        self,
        error: Exception,
        user_id: str,
        session_id: str,
        thread_id: Optional[str],
        started_at: float,
    ) -> None:
        logger.error(
            "Chat send failed (%s) user=%s session=%s thread=%s elapsed_ms=%d: %s",
            type(error).__name__,
            user_id,
            session_id,
            thread_id,
            int((time.monotonic() - started_at) * 1000),
            error,
        )

    def _require_client(self) -> AssistantClient:
        if not self.settings.is_assistant_configured or self.client is None:
            raise ConfigurationError("OPENAI_API_KEY and OPENAI_ASSISTANT_ID are required")
        return self.client

    def _cap(self, content: str) -> str:
        return content[: self.settings.chat_turn_max_length]
