"""
Schemas for the remote assistant API payloads (threads, messages, runs).

Every response body is validated against one of these at the client boundary;
a body that does not fit is reported as a malformed response instead of
surfacing as an attribute error deeper in the orchestration.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

RUN_STATUS_QUEUED = "queued"
RUN_STATUS_IN_PROGRESS = "in_progress"
RUN_STATUS_COMPLETED = "completed"
RUN_STATUS_FAILED = "failed"

ACTIVE_RUN_STATUSES = frozenset({RUN_STATUS_QUEUED, RUN_STATUS_IN_PROGRESS})


class RemoteThread(BaseModel):
    id: str


class RemoteMessageRef(BaseModel):
    """Acknowledgement of an added message; only the id is used."""

    id: str


class RunError(BaseModel):
    code: Optional[str] = None
    message: Optional[str] = None


class RunUsage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class RemoteRun(BaseModel):
    id: str
    status: str
    thread_id: Optional[str] = None
    model: Optional[str] = None
    last_error: Optional[RunError] = None
    usage: Optional[RunUsage] = None

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_RUN_STATUSES


class TextValue(BaseModel):
    value: str = ""


class MessageContentPart(BaseModel):
    type: str
    text: Optional[TextValue] = None


class RemoteMessage(BaseModel):
    id: str
    role: str
    run_id: Optional[str] = None
    content: list[MessageContentPart] = Field(default_factory=list)

    @property
    def text(self) -> str:
        """Concatenated value of all text parts, stripped."""
        values = [
            part.text.value
            for part in self.content
            if part.type == "text" and part.text is not None
        ]
        return "\n".join(v for v in values if v).strip()


class RemoteMessageList(BaseModel):
    data: list[RemoteMessage] = Field(default_factory=list)
