"""Chat API: send, sessions, history, generate-title, delete."""

from __future__ import annotations

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from sqlalchemy.orm import Session

from app.assistants.client import AssistantClient
from app.assistants.title_writer import TitleWriter
from app.commands.chat.generate_title_command import GenerateTitleCommand
from app.commands.chat.send_message_command import SendMessageCommand
from app.config import get_settings
from app.db import get_db
from app.routers.utils.dependencies import (
    enforce_chat_rate_limit,
    get_assistant_client,
    get_current_user_id,
    get_session_locks,
    get_title_writer,
)
from app.schemas.chat import (
    ConversationEntry,
    HistoryResponse,
    SendMessageRequest,
    SendMessageResponse,
    SessionListResponse,
    StatusResponse,
)
from app.services.session_directory import SessionDirectory
from app.services.thread_registry import SessionLockRegistry

chat_router = APIRouter(prefix="/chat", tags=["Chat"])

SessionIdPath = Annotated[str, Path(min_length=1, max_length=255)]


@chat_router.post(
    "/send",
    response_model=SendMessageResponse,
    dependencies=[Depends(enforce_chat_rate_limit)],
)
async def send_message(
    body: SendMessageRequest,
    user_id: str = Depends(get_current_user_id),
    client: Optional[AssistantClient] = Depends(get_assistant_client),
    locks: SessionLockRegistry = Depends(get_session_locks),
    db: Session = Depends(get_db),
) -> SendMessageResponse:
    """Send a message to the assistant; returns the reply and the conversation so far."""
    command = SendMessageCommand(db, client, locks)
    return await command.execute(user_id, body)


@chat_router.get("/sessions", response_model=SessionListResponse)
def list_sessions(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> SessionListResponse:
    """List the caller's active sessions, most recent first."""
    return SessionListResponse(sessions=SessionDirectory(db).list_sessions(user_id))


@chat_router.get(
    "/history/{session_id}",
    response_model=HistoryResponse,
    dependencies=[Depends(enforce_chat_rate_limit)],
)
def get_history(
    session_id: SessionIdPath,
    limit: Optional[int] = Query(None, ge=1, le=500),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> HistoryResponse:
    """Get the conversation of a session owned by the caller."""
    limit = limit or get_settings().chat_history_limit
    turns = SessionDirectory(db).get_history(user_id, session_id, limit)
    if turns is None:
        raise HTTPException(status_code=404, detail="Chat session not found")
    return HistoryResponse(
        session_id=session_id,
        conversation=[ConversationEntry.from_turn(t) for t in turns],
    )


@chat_router.post("/generate-title/{session_id}", response_model=StatusResponse)
async def generate_title(
    session_id: SessionIdPath,
    user_id: str = Depends(get_current_user_id),
    title_writer: Optional[TitleWriter] = Depends(get_title_writer),
    db: Session = Depends(get_db),
) -> StatusResponse:
    """Title the session if it has no title yet."""
    command = GenerateTitleCommand(db, title_writer)
    return await command.execute(user_id, session_id)


@chat_router.delete("/session/{session_id}", response_model=StatusResponse)
def delete_session(
    session_id: SessionIdPath,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> StatusResponse:
    """Soft delete every turn of the session."""
    if not SessionDirectory(db).delete_session(user_id, session_id):
        raise HTTPException(status_code=404, detail="Chat session not found")
    return StatusResponse(message="Chat session deleted successfully")
