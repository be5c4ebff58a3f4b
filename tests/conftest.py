from __future__ import annotations

import json
import os

# Keep import-time app construction from writing server.log into the cwd.
os.environ["LOG_FILE"] = ""

import httpx
import pytest
from fastapi.testclient import TestClient

from src.config.settings import Settings
from src.main import create_app


def make_settings(**overrides) -> Settings:
    values = {"groq_api_key": None, "openai_api_key": None, "log_file": ""}
    values.update(overrides)
    return Settings(_env_file=None, **values)


def chat_completion(content: str) -> dict:
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "choices": [
            {"index": 0, "message": {"role": "assistant", "content": content}}
        ],
    }


class FakeUpstream:
    """Scripted upstream: each call pops the next queued response or exception."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._queue: list[httpx.Response | Exception] = []

    def queue(self, *items: httpx.Response | Exception) -> None:
        self._queue.extend(items)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._queue:
            return httpx.Response(500, text="no scripted response")
        item = self._queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    @property
    def payloads(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests]

    @property
    def models(self) -> list[str]:
        return [p["model"] for p in self.payloads]


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def relay_client(upstream):  # type: ignore[no-untyped-def]
    def _build(**overrides) -> TestClient:
        overrides.setdefault("groq_api_key", "gsk_test")
        app = create_app(
            make_settings(**overrides),
            transport=httpx.MockTransport(upstream.handler),
        )
        return TestClient(app)

    return _build
