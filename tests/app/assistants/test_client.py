"""Tests for AssistantClient request shaping and response validation."""

import httpx
import pytest

from app.assistants.client import AssistantClient
from app.assistants.errors import AssistantAPIError, MalformedResponseError
from app.config import Settings


def _client(handler, **kwargs):
    return AssistantClient(
        api_key="sk-test",
        assistant_id="asst_123",
        base_url="https://assistant.test/v1/",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_requests_carry_auth_and_beta_headers():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"id": "thread_abc"})

    client = _client(handler)
    thread = await client.create_thread()
    await client.close()

    assert thread.id == "thread_abc"
    request = seen[0]
    assert request.url == "https://assistant.test/v1/threads"
    assert request.headers["Authorization"] == "Bearer sk-test"
    assert request.headers["OpenAI-Beta"] == "assistants=v2"


@pytest.mark.asyncio
async def test_status_checks_use_the_shorter_timeout():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"id": "run_1", "status": "queued"})

    client = _client(handler, request_timeout=30.0, status_timeout=10.0)
    await client.get_run("thread_1", "run_1")
    await client.create_run("thread_1")

    assert seen[0].extensions["timeout"]["read"] == 10.0
    assert seen[1].extensions["timeout"]["read"] == 30.0


@pytest.mark.asyncio
async def test_list_messages_asks_newest_first():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"data": []})

    messages = await _client(handler).list_messages("thread_1")

    assert messages.data == []
    assert seen[0].url.params["order"] == "desc"


@pytest.mark.asyncio
async def test_non_2xx_becomes_api_error():
    client = _client(lambda r: httpx.Response(401, json={"error": {"message": "bad key"}}))

    with pytest.raises(AssistantAPIError) as exc_info:
        await client.create_thread()

    assert exc_info.value.status_code == 401
    assert "bad key" not in str(exc_info.value)


@pytest.mark.asyncio
async def test_transport_error_becomes_api_error():
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    with pytest.raises(AssistantAPIError) as exc_info:
        await _client(handler).create_thread()

    assert exc_info.value.status_code is None


@pytest.mark.asyncio
async def test_unexpected_shape_becomes_malformed_response():
    client = _client(lambda r: httpx.Response(200, json={"status": "queued"}))

    with pytest.raises(MalformedResponseError):
        await client.get_run("thread_1", "run_1")


@pytest.mark.asyncio
async def test_non_json_body_becomes_malformed_response():
    client = _client(lambda r: httpx.Response(200, text="<html>oops</html>"))

    with pytest.raises(MalformedResponseError):
        await client.create_thread()


def test_from_settings():
    settings = Settings(
        openai_api_key="sk-live",
        openai_assistant_id="asst_live",
        assistant_status_timeout_seconds=5.0,
    )
    client = AssistantClient.from_settings(settings)

    assert client.assistant_id == "asst_live"
    assert client.status_timeout == 5.0
    assert client.client.headers["Authorization"] == "Bearer sk-live"
