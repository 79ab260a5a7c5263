"""
Shared pytest fixtures for MathBot tests.

Provides:
- A fake Ollama built on httpx.MockTransport
- Test settings and a FastAPI TestClient wired to the fake
- A temporary JSON store for client-side tests
"""

import json
from pathlib import Path
from typing import Callable, Iterable, List

import httpx
import pytest
from fastapi.testclient import TestClient

from mathbot.app_factory import create_app
from mathbot.client.storage import JsonStore
from mathbot.config import MathBotSettings, get_settings
from mathbot.services.ollama_client import OllamaClient, get_ollama_client

OLLAMA_URL = "http://ollama.test"


def ndjson(*frames: dict) -> bytes:
    """Encode frames the way Ollama streams them"""
    return b"".join(json.dumps(f).encode("utf-8") + b"\n" for f in frames)


def token_frame(content: str, done: bool = False) -> dict:
    return {"model": "test", "message": {"role": "assistant", "content": content}, "done": done}


class ChunkedStream(httpx.AsyncByteStream):
    """Response body delivered in exactly the given chunks"""

    def __init__(self, chunks: Iterable[bytes], fail_after: bool = False):
        self._chunks = list(chunks)
        self._fail_after = fail_after
        self.closed = False

    async def __aiter__(self):
        for chunk in self._chunks:
            yield chunk
        if self._fail_after:
            raise httpx.ReadError("connection reset by peer")

    async def aclose(self) -> None:
        self.closed = True


class FakeOllama:
    """
    Records requests to /api/chat and answers with a canned response.

    Set `handler` to customise the reply; the default streams `chunks`.
    """

    def __init__(self):
        self.requests: List[dict] = []
        self.chunks: List[bytes] = [ndjson(token_frame("Hello"), token_frame(" world"), token_frame("", done=True))]
        self.status_code = 200
        self.fail_after = False
        self.handler: Callable[[httpx.Request], httpx.Response] = None
        self.streams: List[ChunkedStream] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/chat":
            self.requests.append(json.loads(request.content))
        if self.handler is not None:
            return self.handler(request)
        stream = ChunkedStream(self.chunks, fail_after=self.fail_after)
        self.streams.append(stream)
        return httpx.Response(self.status_code, stream=stream)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


def refuse_connection(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("[Errno 111] Connection refused", request=request)


@pytest.fixture
def fake_ollama() -> FakeOllama:
    return FakeOllama()


@pytest.fixture
def ollama_client(fake_ollama: FakeOllama) -> OllamaClient:
    return OllamaClient(OLLAMA_URL, transport=fake_ollama.transport)


@pytest.fixture
def settings() -> MathBotSettings:
    return MathBotSettings(
        environment="testing",
        ollama_base_url=OLLAMA_URL,
        ollama_model="text-model",
        ollama_vision_model="vision-model",
    )


@pytest.fixture
def app(settings: MathBotSettings, ollama_client: OllamaClient):
    app = create_app(settings)
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_ollama_client] = lambda: ollama_client
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    # Unhandled errors must come back as 500 responses, not re-raise
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def store(tmp_path: Path) -> JsonStore:
    return JsonStore(tmp_path / "store.json")
