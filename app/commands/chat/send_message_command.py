"""
Command to send a user message to the assistant and return the updated conversation.

Validates the message, runs the orchestrator, and maps failures to HTTP errors.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.assistants.client import AssistantClient
from app.assistants.errors import ChatProcessingError
from app.config import get_settings
from app.schemas.chat import ConversationEntry, SendMessageRequest, SendMessageResponse
from app.services.chat_orchestrator import ChatOrchestrator
from app.services.thread_registry import SessionLockRegistry


class SendMessageCommand:
    """
    Command to send one chat message.
    400 for an empty or oversized message, 500 with a user-facing message for
    any assistant failure.
    """

    def __init__(
        self,
        db: Session,
        client: Optional[AssistantClient],
        locks: SessionLockRegistry,
    ) -> None:
        self.db = db
        self.settings = get_settings()
        self.orchestrator = ChatOrchestrator(db, client, locks, settings=self.settings)
        self.logger = logging.getLogger(__name__)

    async def execute(self, user_id: str, body: SendMessageRequest) -> SendMessageResponse:
        """
        Execute the send.

        Args:
            user_id: Identity of the caller
            body: Message text and optional session id

        Returns:
            SendMessageResponse: Reply, usage metadata and the session conversation
        """
        message = self._validate_message(body.message)
        try:
            result = await self.orchestrator.send_message(
                user_id, message, session_id=body.session_id
            )
        except ChatProcessingError as e:
            raise HTTPException(status_code=500, detail=e.user_message) from e

        return SendMessageResponse(
            session_id=result.session_id,
            assistant_message=result.reply.text,
            tokens_used=result.reply.tokens_used,
            model=result.reply.model,
            response_time_ms=result.reply.response_time_ms,
            conversation=[ConversationEntry.from_turn(t) for t in result.conversation],
        )

    def _validate_message(self, raw: str) -> str:
        message = (raw or "").strip()
        if not message:
            raise HTTPException(status_code=400, detail="Message cannot be empty")
        max_length = self.settings.chat_message_max_length
        if len(message) > max_length:
            raise HTTPException(
                status_code=400,
                detail=f"Message must be between 1 and {max_length} characters",
            )
        return message
