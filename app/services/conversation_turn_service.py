"""ConversationTurn persistence: inserts, ordered reads and the two bulk updates."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session as DBSession

from app.models.conversation_turn import THREAD_MARKER_CONTENT, ConversationTurn


class ConversationTurnService:
    def __init__(self, db: DBSession) -> None:
        self.db = db

    def create_turn(
        self,
        user_id: str,
        session_id: str,
        role: str,
        content: str,
        thread_id: Optional[str] = None,
        tokens_used: Optional[int] = None,
        model: Optional[str] = None,
        response_time_ms: Optional[int] = None,
        is_thread_marker: bool = False,
    ) -> ConversationTurn:
        """Append a turn; it inherits the session title if one is already set."""
        turn = ConversationTurn(
            user_id=user_id,
            session_id=session_id,
            session_title=self.get_session_title(user_id, session_id),
            thread_id=thread_id,
            role=role,
            content=content,
            tokens_used=tokens_used,
            model=model,
            response_time_ms=response_time_ms,
            is_thread_marker=is_thread_marker,
        )
        self.db.add(turn)
        self.db.commit()
        self.db.refresh(turn)
        return turn

    def create_thread_marker(
        self, user_id: str, session_id: str, thread_id: str
    ) -> ConversationTurn:
        return self.create_turn(
            user_id=user_id,
            session_id=session_id,
            role="user",
            content=THREAD_MARKER_CONTENT,
            thread_id=thread_id,
            is_thread_marker=True,
        )

    def _active_query(self, user_id: str, session_id: str):
        return self.db.query(ConversationTurn).filter(
            ConversationTurn.user_id == user_id,
            ConversationTurn.session_id == session_id,
            ConversationTurn.is_active.is_(True),
        )

    def get_turns(
        self,
        user_id: str,
        session_id: str,
        limit: Optional[int] = None,
        include_markers: bool = False,
    ) -> List[ConversationTurn]:
        """
        Active turns of a session in conversation order (created_at, then id).
        With ``limit``, the most recent ``limit`` turns are returned, still oldest first.
        """
        query = self._active_query(user_id, session_id)
        if not include_markers:
            query = query.filter(ConversationTurn.is_thread_marker.is_(False))
        if limit is None:
            return query.order_by(
                ConversationTurn.created_at, ConversationTurn.id
            ).all()
        recent = (
            query.order_by(
                ConversationTurn.created_at.desc(), ConversationTurn.id.desc()
            )
            .limit(limit)
            .all()
        )
        return list(reversed(recent))

    def get_first_turns(
        self, user_id: str, session_id: str, count: int
    ) -> List[ConversationTurn]:
        return (
            self._active_query(user_id, session_id)
            .filter(ConversationTurn.is_thread_marker.is_(False))
            .order_by(ConversationTurn.created_at, ConversationTurn.id)
            .limit(count)
            .all()
        )

    def get_latest_thread_id(self, user_id: str, session_id: str) -> Optional[str]:
        turn = (
            self._active_query(user_id, session_id)
            .filter(ConversationTurn.thread_id.isnot(None))
            .order_by(ConversationTurn.created_at.desc(), ConversationTurn.id.desc())
            .first()
        )
        return turn.thread_id if turn else None

    def has_visible_turns(self, user_id: str, session_id: str) -> bool:
        """True when the session has an active turn other than a thread marker."""
        query = self._active_query(user_id, session_id).filter(
            ConversationTurn.is_thread_marker.is_(False)
        )
        return self.db.query(query.exists()).scalar()

    def get_session_title(self, user_id: str, session_id: str) -> Optional[str]:
        turn = (
            self._active_query(user_id, session_id)
            .filter(ConversationTurn.session_title.isnot(None))
            .order_by(ConversationTurn.id.desc())
            .first()
        )
        return turn.session_title if turn else None

    def set_session_title(self, user_id: str, session_id: str, title: str) -> int:
        """Write ``title`` on every active turn of the session in one statement."""
        result = self.db.execute(
            update(ConversationTurn)
            .where(
                ConversationTurn.user_id == user_id,
                ConversationTurn.session_id == session_id,
                ConversationTurn.is_active.is_(True),
            )
            .values(session_title=title)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount

    def soft_delete_session(self, user_id: str, session_id: str) -> int:
        """Deactivate every active turn of the session in one statement; returns rows hit."""
        result = self.db.execute(
            update(ConversationTurn)
            .where(
                ConversationTurn.user_id == user_id,
                ConversationTurn.session_id == session_id,
                ConversationTurn.is_active.is_(True),
            )
            .values(is_active=False)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount

    def get_inactive_turns(self, user_id: str, session_id: str) -> List[ConversationTurn]:
        """Audit read: soft-deleted turns of a session, never exposed through the API."""
        return (
            self.db.query(ConversationTurn)
            .filter(
                ConversationTurn.user_id == user_id,
                ConversationTurn.session_id == session_id,
                ConversationTurn.is_active.is_(False),
            )
            .order_by(ConversationTurn.created_at, ConversationTurn.id)
            .all()
        )
