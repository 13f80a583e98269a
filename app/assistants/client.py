"""
HTTP client for the remote assistant threads/runs API.

One instance is built at application startup and shared by every request; it
owns a single ``httpx.AsyncClient`` connection pool. Each call carries its own
timeout and every response body is validated against the schemas in
``app.schemas.assistant``.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from app.assistants.errors import AssistantAPIError, MalformedResponseError
from app.config import Settings, get_settings
from app.schemas.assistant import (
    RemoteMessageList,
    RemoteMessageRef,
    RemoteRun,
    RemoteThread,
)

logger = logging.getLogger(__name__)

ASSISTANTS_BETA_HEADER = "assistants=v2"

ModelT = TypeVar("ModelT", bound=BaseModel)


class AssistantClient:
    def __init__(
        self,
        api_key: str,
        assistant_id: str,
        base_url: str = "https://api.openai.com/v1",
        request_timeout: float = 30.0,
        status_timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.assistant_id = assistant_id
        self.request_timeout = request_timeout
        self.status_timeout = status_timeout
        self.client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
                "OpenAI-Beta": ASSISTANTS_BETA_HEADER,
            },
            timeout=request_timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "AssistantClient":
        settings = settings or get_settings()
        return cls(
            api_key=settings.openai_api_key or "",
            assistant_id=settings.openai_assistant_id or "",
            base_url=settings.openai_api_base,
            request_timeout=settings.assistant_request_timeout_seconds,
            status_timeout=settings.assistant_status_timeout_seconds,
            transport=transport,
        )

    async def close(self) -> None:
        await self.client.aclose()

    async def create_thread(self) -> RemoteThread:
        data = await self._request("POST", "/threads", json={})
        return self._parse(RemoteThread, data)

    async def add_message(self, thread_id: str, content: str) -> RemoteMessageRef:
        data = await self._request(
            "POST",
            f"/threads/{thread_id}/messages",
            json={"role": "user", "content": content},
        )
        return self._parse(RemoteMessageRef, data)

    async def create_run(self, thread_id: str) -> RemoteRun:
        data = await self._request(
            "POST",
            f"/threads/{thread_id}/runs",
            json={"assistant_id": self.assistant_id},
        )
        return self._parse(RemoteRun, data)

    async def get_run(self, thread_id: str, run_id: str) -> RemoteRun:
        data = await self._request(
            "GET",
            f"/threads/{thread_id}/runs/{run_id}",
            timeout=self.status_timeout,
        )
        return self._parse(RemoteRun, data)

    async def list_messages(
        self, thread_id: str, order: str = "desc", limit: int = 20
    ) -> RemoteMessageList:
        data = await self._request(
            "GET",
            f"/threads/{thread_id}/messages",
            params={"order": order, "limit": limit},
        )
        return self._parse(RemoteMessageList, data)

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        try:
            response = await self.client.request(
                method,
                path,
                json=json,
                params=params,
                timeout=timeout if timeout is not None else self.request_timeout,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning("%s %s -> %s", method, path, e.response.status_code)
            # the body may echo request details; keep only the status
            raise AssistantAPIError(
                f"{method} {path} returned {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %r", method, path, e)
            raise AssistantAPIError(f"{method} {path} failed: {e!r}") from e

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(f"{method} {path} returned non-JSON body") from e

    @staticmethod
    def _parse(model: Type[ModelT], data: Any) -> ModelT:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise MalformedResponseError(
                f"Unexpected {model.__name__} payload: {e.error_count()} errors"
            ) from e
