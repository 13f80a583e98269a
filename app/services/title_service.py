"""Best-effort session titles: model summary first, first user message as fallback."""

from __future__ import annotations

from typing import List, Optional

from app.infra.logging_config import get_logger
from app.assistants.title_writer import TitleWriter
from app.models.conversation_turn import ConversationTurn
from app.services.conversation_turn_service import ConversationTurnService

logger = get_logger("title_service")

TITLE_SOURCE_TURNS = 5
TITLE_MAX_LENGTH = 50


def clean_title(raw: str) -> str:
    title = raw.replace('"', "").replace("'", "").strip()
    return title[:TITLE_MAX_LENGTH].strip()


def fallback_title(turns: List[ConversationTurn]) -> Optional[str]:
    first_user = next(
        (t for t in turns if t.role == "user" and t.content.strip()), None
    )
    if first_user is None:
        return None
    content = first_user.content.strip()
    if len(content) > TITLE_MAX_LENGTH:
        return content[: TITLE_MAX_LENGTH - 3] + "..."
    return content


def build_transcript(turns: List[ConversationTurn]) -> str:
    return "\n".join(f"{t.role}: {t.content}" for t in turns)


class TitleService:
    def __init__(
        self,
        turn_service: ConversationTurnService,
        title_writer: Optional[TitleWriter] = None,
    ) -> None:
        self.turn_service = turn_service
        self.title_writer = title_writer

    async def generate_title(self, user_id: str, session_id: str) -> Optional[str]:
        """
        Title the session unless it already has one. Never raises for
        summarization problems; returns the stored title, or None when the
        session has no usable turns.
        """
        existing = self.turn_service.get_session_title(user_id, session_id)
        if existing:
            return existing

        turns = self.turn_service.get_first_turns(
            user_id, session_id, TITLE_SOURCE_TURNS
        )
        if not turns:
            return None

        title = await self._summarize(turns, session_id)
        if not title:
            title = fallback_title(turns)
        if not title:
            return None

        self.turn_service.set_session_title(user_id, session_id, title)
        logger.info("Titled session %s: %s", session_id, title)
        return title

    async def _summarize(
        self, turns: List[ConversationTurn], session_id: str
    ) -> Optional[str]:
        if self.title_writer is None:
            return None
        try:
            raw = await self.title_writer.summarize(build_transcript(turns))
        except Exception as e:
            logger.warning(
                "Title summarization failed for session %s, using fallback: %s",
                session_id,
                e,
            )
            return None
        return clean_title(raw or "") or None
