"""Per-user session listing, history and soft delete over the turn table."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional, Union

from sqlalchemy import func
from sqlalchemy.orm import Session as DBSession

from app.models.conversation_turn import ConversationTurn
from app.schemas.chat import DEFAULT_SESSION_TITLE, SessionSummary
from app.services.conversation_turn_service import ConversationTurnService


def format_session_time(
    value: Union[datetime, str, None], now: Optional[datetime] = None
) -> str:
    """
    Relative label for a session's last activity: "Just now", "Nh ago",
    "Nd ago", or M/D/YYYY past a week. Missing or unparseable values give "Just now".
    """
    if value is None:
        return "Just now"
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return "Just now"
    if not isinstance(value, datetime):
        return "Just now"

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    hours = (now - value).total_seconds() / 3600
    if hours < 1:
        return "Just now"
    if hours < 24:
        return f"{int(hours)}h ago"
    if hours < 24 * 7:
        return f"{int(hours // 24)}d ago"
    return f"{value.month}/{value.day}/{value.year}"


class SessionDirectory:
    """
    A session is visible to a user while it has at least one active turn
    other than its thread marker; listing, history and delete share that rule.
    """

    def __init__(self, db: DBSession) -> None:
        self.db = db
        self.turn_service = ConversationTurnService(db)

    def list_sessions(
        self, user_id: str, now: Optional[datetime] = None
    ) -> List[SessionSummary]:
        """Active sessions of ``user_id``, most recently active first."""
        last_message_time = func.max(ConversationTurn.created_at)
        rows = (
            self.db.query(
                ConversationTurn.session_id,
                func.max(ConversationTurn.session_title),
                last_message_time,
                func.count(ConversationTurn.id),
            )
            .filter(
                ConversationTurn.user_id == user_id,
                ConversationTurn.is_active.is_(True),
                ConversationTurn.is_thread_marker.is_(False),
            )
            .group_by(ConversationTurn.session_id)
            .order_by(last_message_time.desc())
            .all()
        )
        return [
            SessionSummary(
                session_id=session_id,
                title=title or DEFAULT_SESSION_TITLE,
                last_message_time=_as_utc(last_at),
                message_count=count,
                formatted_time=format_session_time(last_at, now=now),
            )
            for session_id, title, last_at, count in rows
        ]

    def get_history(
        self, user_id: str, session_id: str, limit: int
    ) -> Optional[List[ConversationTurn]]:
        """
        Most recent ``limit`` visible turns, oldest first. None when the session
        is not visible to the user, whether it exists for someone else or not.
        """
        if not self.turn_service.has_visible_turns(user_id, session_id):
            return None
        return self.turn_service.get_turns(user_id, session_id, limit=limit)

    def delete_session(self, user_id: str, session_id: str) -> bool:
        """Soft delete a visible session, marker turns included. False when not visible."""
        if not self.turn_service.has_visible_turns(user_id, session_id):
            return False
        return self.turn_service.soft_delete_session(user_id, session_id) > 0


def _as_utc(value) -> Optional[datetime]:
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return None
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
