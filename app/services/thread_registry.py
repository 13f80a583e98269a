"""
Session to remote thread mapping.

The mapping is persisted as a marker turn carrying the thread id, so it
survives restarts without a separate table. Get-or-create is serialized per
(user_id, session_id) with an in-process lock to keep two concurrent first
messages from creating two remote threads.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
from contextlib import asynccontextmanager
from typing import AsyncIterator

from app.infra.logging_config import get_logger
from app.assistants.client import AssistantClient
from app.assistants.errors import AssistantError, ThreadCreationError
from app.services.conversation_turn_service import ConversationTurnService

logger = get_logger("thread_registry")


class SessionLockRegistry:
    """asyncio locks keyed by (user_id, session_id), dropped once nobody holds or waits on them."""

    def __init__(self) -> None:
        self._locks: dict[tuple[str, str], asyncio.Lock] = {}
        self._users: dict[tuple[str, str], int] = defaultdict(int)

    @asynccontextmanager
    async def hold(self, user_id: str, session_id: str) -> AsyncIterator[None]:
        key = (user_id, session_id)
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] += 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                self._locks.pop(key, None)

    def __len__(self) -> int:
        return len(self._locks)


class ThreadRegistry:
    def __init__(
        self,
        turn_service: ConversationTurnService,
        client: AssistantClient,
        always_fresh_thread: bool = False,
    ) -> None:
        self.turn_service = turn_service
        self.client = client
        self.always_fresh_thread = always_fresh_thread

    async def get_or_create_thread(self, user_id: str, session_id: str) -> str:
        """
        Return the remote thread id for the session, creating one if needed.

        Raises:
            ThreadCreationError: the remote create-thread call failed.
        """
        if not self.always_fresh_thread:
            thread_id = self.turn_service.get_latest_thread_id(user_id, session_id)
            if thread_id:
                return thread_id

        try:
            thread = await self.client.create_thread()
        except AssistantError as e:
            raise ThreadCreationError(f"Failed to create thread: {e}") from e

        self.turn_service.create_thread_marker(user_id, session_id, thread.id)
        logger.info(
            "Created thread %s for session %s (user %s)", thread.id, session_id, user_id
        )
        return thread.id
