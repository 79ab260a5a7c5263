"""
Integration tests for the HTTP surface: /api/chat, /api/health and the
shared error body shape.
"""

import asyncio
import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from mathbot.routes.chat import RelayStreamingResponse
from mathbot.services.chat import relay_events

from tests.conftest import ndjson, refuse_connection, token_frame


def sse_payloads(text):
    return [frame[len("data: "):] for frame in text.split("\n\n") if frame]


class TestChatStream:
    """Successful relays."""

    def test_streams_tokens_and_done(self, client):
        response = client.post("/api/chat", json={"messages": [{"role": "user", "text": "hi"}]})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.headers["cache-control"] == "no-cache"
        assert sse_payloads(response.text) == [
            json.dumps({"token": "Hello"}),
            json.dumps({"token": " world"}),
            "[DONE]",
        ]

    def test_forwards_system_prompt_and_history(self, client, fake_ollama):
        client.post("/api/chat", json={"messages": [
            {"role": "user", "text": "2+2?"},
            {"role": "assistant", "text": "4"},
            {"role": "user", "text": "and 3+3?"},
        ]})

        sent = fake_ollama.requests[0]
        assert sent["model"] == "text-model"
        assert [m["role"] for m in sent["messages"]] == ["system", "user", "assistant", "user"]
        assert sent["messages"][-1]["content"] == "and 3+3?"

    def test_image_selects_vision_model(self, client, fake_ollama):
        client.post("/api/chat", json={"messages": [{
            "role": "user",
            "text": "",
            "fileData": {"name": "a.png", "type": "image", "data": "data:image/png;base64,QUJD"},
        }]})

        sent = fake_ollama.requests[0]
        assert sent["model"] == "vision-model"
        assert sent["messages"][1]["images"] == ["QUJD"]

    def test_interrupted_upstream_ends_with_error_frame(self, client, fake_ollama):
        fake_ollama.chunks = [ndjson(token_frame("x = "))]
        fake_ollama.fail_after = True

        response = client.post("/api/chat", json={"messages": [{"role": "user", "text": "solve"}]})

        assert response.status_code == 200
        assert sse_payloads(response.text) == [
            json.dumps({"token": "x = "}),
            json.dumps({"error": "Stream interrupted"}),
        ]

    def test_upstream_closed_after_relay(self, client, fake_ollama):
        client.post("/api/chat", json={"messages": [{"role": "user", "text": "hi"}]})

        assert fake_ollama.streams[0].closed


class FakeUpstream:
    def __init__(self):
        self.closed = False

    async def aiter_bytes(self):
        yield ndjson(token_frame("never read"))

    async def aclose(self):
        self.closed = True


class TestRelayStreamingResponse:
    """The response closes the upstream even when the relay never starts."""

    @pytest.mark.asyncio
    async def test_failed_header_send_closes_upstream(self):
        upstream = FakeUpstream()
        response = RelayStreamingResponse(relay_events(upstream), upstream=upstream, media_type="text/event-stream")
        scope = {"type": "http", "asgi": {"version": "3.0", "spec_version": "2.4"}, "method": "POST", "path": "/api/chat"}

        async def receive():
            await asyncio.Event().wait()

        async def send(message):
            raise RuntimeError("socket gone")

        with pytest.raises(Exception):
            await response(scope, receive, send)

        assert upstream.closed


class TestChatErrors:
    """Failures before streaming are JSON bodies, never SSE."""

    def test_upstream_error_status(self, client, fake_ollama):
        fake_ollama.handler = lambda request: httpx.Response(500, json={"detail": "oom"})

        response = client.post("/api/chat", json={"messages": [{"role": "user", "text": "hi"}]})

        assert response.status_code == 502
        assert response.headers["content-type"].startswith("application/json")
        body = response.json()
        assert "oom" in body["error"]
        assert body["type"] == "ollama_protocol_error"
        assert "token" not in response.text

    def test_ollama_offline(self, client, fake_ollama):
        fake_ollama.handler = refuse_connection

        response = client.post("/api/chat", json={"messages": [{"role": "user", "text": "hi"}]})

        assert response.status_code == 503
        body = response.json()
        assert body["type"] == "ollama_offline"
        assert "Make sure Ollama is running" in body["error"]

    def test_empty_messages_rejected(self, client, fake_ollama):
        response = client.post("/api/chat", json={"messages": []})

        assert response.status_code == 400
        assert response.json()["type"] == "validation_failed"
        assert fake_ollama.requests == []

    def test_malformed_body_rejected(self, client):
        response = client.post("/api/chat", json={"messages": [{"role": "robot", "text": "hi"}]})

        assert response.status_code == 400
        body = response.json()
        assert body["error"].startswith("Validation failed")
        assert body["details"]["field"].startswith("messages.0.role")

    def test_unexpected_error_is_generic_500(self, client):
        with patch("mathbot.routes.chat.start_chat_relay", new_callable=AsyncMock) as mock:
            mock.side_effect = RuntimeError("boom")
            response = client.post("/api/chat", json={"messages": [{"role": "user", "text": "hi"}]})

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Something went wrong"
        assert body["type"] == "internal_error"


class TestHealth:
    """GET /api/health always answers 200 with a status field."""

    def test_healthy(self, client):
        health = {"status": "healthy", "message": "Ollama is running", "models": ["qwen2.5:7b"]}
        with patch("mathbot.routes.health.ErrorHandler.check_ollama_health", new_callable=AsyncMock) as mock:
            mock.return_value = health
            response = client.get("/api/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["model"] == "text-model"
        assert body["vision_model"] == "vision-model"

    def test_unhealthy(self, client):
        health = {"status": "unhealthy", "message": "Ollama is not running", "error": "refused", "help": "..."}
        with patch("mathbot.routes.health.ErrorHandler.check_ollama_health", new_callable=AsyncMock) as mock:
            mock.return_value = health
            response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "unhealthy"
