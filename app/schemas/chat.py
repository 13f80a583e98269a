"""Pydantic schemas for the chat API (request bodies and camelCase responses)."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

TurnRole = Literal["user", "assistant"]

DEFAULT_SESSION_TITLE = "New Chat"


class CamelModel(BaseModel):
    """Base for response bodies: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# -----------------------------------------------------------------------------
# Requests
# -----------------------------------------------------------------------------


class SendMessageRequest(BaseModel):
    """Body of POST /chat/send. Length of the trimmed message is checked by the command."""

    message: str
    session_id: Optional[str] = Field(
        default=None, alias="sessionId", min_length=1, max_length=255
    )

    model_config = ConfigDict(populate_by_name=True)


# -----------------------------------------------------------------------------
# Responses
# -----------------------------------------------------------------------------


class ConversationEntry(CamelModel):
    id: int
    type: TurnRole
    content: str
    timestamp: datetime
    tokens_used: Optional[int] = None
    model: Optional[str] = None

    @classmethod
    def from_turn(cls, turn) -> "ConversationEntry":
        created_at = turn.created_at or datetime.now(timezone.utc)
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return cls(
            id=turn.id,
            type=turn.role,
            content=turn.content,
            timestamp=created_at,
            tokens_used=turn.tokens_used,
            model=turn.model,
        )


class SendMessageResponse(CamelModel):
    session_id: str
    assistant_message: str
    tokens_used: int
    model: str
    response_time_ms: int
    conversation: list[ConversationEntry]


class HistoryResponse(CamelModel):
    session_id: str
    conversation: list[ConversationEntry]


class SessionSummary(CamelModel):
    session_id: str
    title: str = DEFAULT_SESSION_TITLE
    last_message_time: Optional[datetime] = None
    message_count: int = 0
    formatted_time: str


class SessionListResponse(CamelModel):
    sessions: list[SessionSummary]


class StatusResponse(CamelModel):
    success: bool = True
    message: str
