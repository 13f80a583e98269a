from typing import Optional

from fastapi import Depends, HTTPException, Request

from app.assistants.client import AssistantClient
from app.assistants.title_writer import TitleWriter
from app.config import get_settings
from app.services.thread_registry import SessionLockRegistry
from app.utils.rate_limit import check_chat_rate_limit

USER_ID_HEADER = "X-User-Id"


def get_current_user_id(request: Request) -> str:
    """
    FastAPI dependency for the caller's identity.
    Uses request.state.user_id when an upstream auth layer set it, else the X-User-Id header.
    """
    user_id = getattr(request.state, "user_id", None) or request.headers.get(
        USER_ID_HEADER
    )
    if not user_id or not str(user_id).strip():
        raise HTTPException(status_code=401, detail="Authentication required")
    return str(user_id).strip()


def get_assistant_client(request: Request) -> Optional[AssistantClient]:
    """Shared remote assistant client built at startup; None when not configured."""
    return getattr(request.app.state, "assistant_client", None)


def get_session_locks(request: Request) -> SessionLockRegistry:
    return request.app.state.session_locks


def get_title_writer(request: Request) -> Optional[TitleWriter]:
    return getattr(request.app.state, "title_writer", None)


def enforce_chat_rate_limit(
    request: Request,
    user_id: str = Depends(get_current_user_id),
) -> None:
    """FastAPI dependency answering 429 once the user exceeds the chat rate limit."""
    settings = get_settings()
    allowed = check_chat_rate_limit(
        user_id,
        getattr(request.app.state, "redis_client", None),
        settings.chat_rate_limit_per_user,
        settings.chat_rate_limit_window_seconds,
    )
    if not allowed:
        raise HTTPException(
            status_code=429,
            detail="Too many chat requests, please try again later",
        )
