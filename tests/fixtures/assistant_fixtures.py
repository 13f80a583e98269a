"""In-memory fake of the remote assistant threads/runs API, served over httpx.MockTransport."""

import itertools
import json
import re

import httpx
import pytest

from app.assistants.client import AssistantClient

BASE_URL = "https://assistant.test/v1"

_THREADS = re.compile(r"^/v1/threads$")
_MESSAGES = re.compile(r"^/v1/threads/(?P<thread>[^/]+)/messages$")
_RUNS = re.compile(r"^/v1/threads/(?P<thread>[^/]+)/runs$")
_RUN = re.compile(r"^/v1/threads/(?P<thread>[^/]+)/runs/(?P<run>[^/]+)$")


def text_message(message_id, role, text, run_id=None):
    return {
        "id": message_id,
        "object": "thread.message",
        "role": role,
        "run_id": run_id,
        "content": [{"type": "text", "text": {"value": text, "annotations": []}}],
    }


class FakeAssistantAPI:
    """
    Minimal stateful stand-in for the remote API.

    ``run_statuses`` is the sequence returned by successive status checks of a
    run; the last entry repeats. ``failing`` holds operation names that answer 500.
    """

    def __init__(self):
        self.threads = {}
        self.runs = {}
        self.run_statuses = ["in_progress", "completed"]
        self.reply_text = "Hello! How can I help you today?"
        self.total_tokens = 42
        self.run_error_message = None
        self.failing = set()
        self.requests = []
        self._ids = itertools.count(1)

    def calls(self, operation):
        return [op for op, _ in self.requests if op == operation]

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        method = request.method

        if method == "POST" and _THREADS.match(path):
            return self._dispatch("create_thread", request, self._create_thread)
        m = _MESSAGES.match(path)
        if m and method == "POST":
            return self._dispatch(
                "add_message", request, lambda r: self._add_message(m["thread"], r)
            )
        if m and method == "GET":
            return self._dispatch(
                "list_messages", request, lambda r: self._list_messages(m["thread"], r)
            )
        m = _RUNS.match(path)
        if m and method == "POST":
            return self._dispatch(
                "create_run", request, lambda r: self._create_run(m["thread"], r)
            )
        m = _RUN.match(path)
        if m and method == "GET":
            return self._dispatch(
                "get_run", request, lambda r: self._get_run(m["thread"], m["run"])
            )
        return httpx.Response(404, json={"error": {"message": "not found"}})

    def _dispatch(self, operation, request, fn):
        self.requests.append((operation, request))
        if operation in self.failing:
            return httpx.Response(500, json={"error": {"message": "upstream broke"}})
        return fn(request)

    def _create_thread(self, request):
        thread_id = f"thread_{next(self._ids)}"
        self.threads[thread_id] = []
        return httpx.Response(200, json={"id": thread_id, "object": "thread"})

    def _add_message(self, thread_id, request):
        body = json.loads(request.content)
        message = text_message(f"msg_{next(self._ids)}", "user", body["content"])
        self.threads[thread_id].append(message)
        return httpx.Response(200, json=message)

    def _list_messages(self, thread_id, request):
        messages = list(self.threads.get(thread_id, []))
        if request.url.params.get("order", "desc") == "desc":
            messages.reverse()
        return httpx.Response(200, json={"object": "list", "data": messages})

    def _create_run(self, thread_id, request):
        run_id = f"run_{next(self._ids)}"
        self.runs[run_id] = {"thread_id": thread_id, "polls": 0, "replied": False}
        return httpx.Response(
            200, json={"id": run_id, "thread_id": thread_id, "status": "queued"}
        )

    def _get_run(self, thread_id, run_id):
        run = self.runs[run_id]
        status = self.run_statuses[min(run["polls"], len(self.run_statuses) - 1)]
        run["polls"] += 1
        body = {"id": run_id, "thread_id": thread_id, "status": status}
        if status == "completed":
            if not run["replied"]:
                self.threads[thread_id].append(
                    text_message(
                        f"msg_{next(self._ids)}", "assistant", self.reply_text, run_id
                    )
                )
                run["replied"] = True
            body["model"] = "gpt-4o"
            body["usage"] = {
                "prompt_tokens": 10,
                "completion_tokens": self.total_tokens - 10,
                "total_tokens": self.total_tokens,
            }
        if status == "failed" and self.run_error_message:
            body["last_error"] = {
                "code": "server_error",
                "message": self.run_error_message,
            }
        return httpx.Response(200, json=body)


@pytest.fixture
def fake_assistant():
    return FakeAssistantAPI()


@pytest.fixture
def assistant_client(fake_assistant):
    """AssistantClient wired to the in-memory fake."""
    return AssistantClient(
        api_key="test-key",
        assistant_id="asst_test",
        base_url=BASE_URL,
        transport=httpx.MockTransport(fake_assistant.handler),
    )
