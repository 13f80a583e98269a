"""ConversationTurn model: one row per user or assistant message in a chat session."""

from __future__ import annotations

from sqlalchemy import Boolean, Column, Index, Integer, String, Text

from app.db import Base
from app.models.mixins import TimestampMixin

THREAD_MARKER_CONTENT = "__THREAD_CREATED__"


class ConversationTurn(Base, TimestampMixin):
    """
    One row per message; role is 'user' or 'assistant'.

    Sessions are not stored separately: a session is the set of turns sharing
    a session_id. The title is denormalized onto every turn of the session.
    A turn flagged is_thread_marker only records the session-to-thread
    mapping and is never shown; its content is THREAD_MARKER_CONTENT.
    """

    __tablename__ = "chat_turns"

    __table_args__ = (
        Index("ix_chat_turns_session_id_created_at", "session_id", "created_at"),
        Index("ix_chat_turns_user_id_is_active", "user_id", "is_active"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False)
    session_id = Column(String(255), nullable=False)
    session_title = Column(String(500), nullable=True)
    thread_id = Column(String(255), nullable=True)
    role = Column(String(16), nullable=False)  # 'user' | 'assistant'
    content = Column(Text, nullable=False)
    tokens_used = Column(Integer, nullable=True)
    model = Column(String(100), nullable=True)
    response_time_ms = Column(Integer, nullable=True)
    is_thread_marker = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
