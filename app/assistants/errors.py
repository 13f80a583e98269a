"""Errors raised while talking to the remote assistant and driving a run."""

from __future__ import annotations

from typing import Optional

USER_MESSAGE_TIMEOUT = (
    "The AI assistant is taking longer than expected to respond. Please try again."
)
USER_MESSAGE_MISCONFIGURED = (
    "AI assistant is not properly configured. Please contact support."
)
USER_MESSAGE_UNAVAILABLE = "AI Assistant is currently unavailable"


class AssistantError(Exception):
    """Base class for assistant orchestration failures."""


class ConfigurationError(AssistantError):
    """API key or assistant id missing; raised before any network call."""


class AssistantAPIError(AssistantError):
    """A single remote call failed (transport error, timeout or non-2xx status)."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ThreadCreationError(AssistantError):
    pass


class AssistantRunTimeoutError(AssistantError):
    def __init__(self, run_id: str, attempts: int) -> None:
        super().__init__(f"Run {run_id} still active after {attempts} status checks")
        self.run_id = run_id
        self.attempts = attempts


class AssistantRunFailedError(AssistantError):
    def __init__(self, run_id: str, detail: Optional[str] = None) -> None:
        super().__init__(detail or "Assistant run failed")
        self.run_id = run_id
        self.detail = detail


class AssistantRunEndedError(AssistantError):
    """Run reached a terminal status other than completed or failed."""

    def __init__(self, run_id: str, status: str) -> None:
        super().__init__(f"Assistant run ended with status: {status}")
        self.run_id = run_id
        self.status = status


class MalformedResponseError(AssistantError):
    """Remote payload did not match the expected shape or carried no usable text."""


class ChatProcessingError(Exception):
    """
    User-facing failure of a send. ``category`` is one of ``unavailable``,
    ``timeout`` or ``misconfigured``; ``user_message`` is safe to return to the caller.
    """

    UNAVAILABLE = "unavailable"
    TIMEOUT = "timeout"
    MISCONFIGURED = "misconfigured"

    def __init__(self, category: str, user_message: str) -> None:
        super().__init__(user_message)
        self.category = category
        self.user_message = user_message

    @classmethod
    def from_assistant_error(cls, error: AssistantError) -> "ChatProcessingError":
        if isinstance(error, AssistantRunTimeoutError):
            return cls(cls.TIMEOUT, USER_MESSAGE_TIMEOUT)
        if isinstance(error, ConfigurationError):
            return cls(cls.MISCONFIGURED, USER_MESSAGE_MISCONFIGURED)
        detail = None
        if isinstance(error, AssistantRunFailedError):
            detail = error.detail
        elif isinstance(error, AssistantRunEndedError):
            detail = f"run {error.status}"
        if detail:
            return cls(cls.UNAVAILABLE, f"{USER_MESSAGE_UNAVAILABLE}: {detail}")
        return cls(cls.UNAVAILABLE, f"{USER_MESSAGE_UNAVAILABLE}.")
