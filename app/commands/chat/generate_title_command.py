"""Command to title a chat session. Always succeeds from the caller's side."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.assistants.title_writer import TitleWriter
from app.schemas.chat import StatusResponse
from app.services.conversation_turn_service import ConversationTurnService
from app.services.title_service import TitleService


class GenerateTitleCommand:
    def __init__(self, db: Session, title_writer: Optional[TitleWriter]) -> None:
        self.db = db
        self.title_service = TitleService(ConversationTurnService(db), title_writer)
        self.logger = logging.getLogger(__name__)

    async def execute(self, user_id: str, session_id: str) -> StatusResponse:
        try:
            title = await self.title_service.generate_title(user_id, session_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            self.logger.error(
                "Title generation failed user=%s session=%s: %s",
                user_id,
                session_id,
                e,
            )
            return StatusResponse(message="Title not generated")
        if title is None:
            self.logger.info("Session %s left untitled (no usable turns)", session_id)
            return StatusResponse(message="No messages to title")
        return StatusResponse(message="Title generated")
