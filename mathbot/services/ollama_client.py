"""
Ollama Client - HTTP interface to the local model server.

Handles:
- Opening a streaming /api/chat request (status checked before any byte is relayed)
- Single-shot /api/chat requests for practice mode
- Translating connection failures into UpstreamUnavailable
"""

import logging
from typing import Any, AsyncIterator, Dict, Optional

import httpx

from mathbot.config import get_settings
from mathbot.errors import ErrorHandler, UpstreamProtocolError
from mathbot.schemas.chat_models import ModelRequest

logger = logging.getLogger(__name__)


class OllamaStream:
    """An open streaming response together with the client that owns it"""

    def __init__(self, client: httpx.AsyncClient, response: httpx.Response):
        self._client = client
        self._response = response
        self.closed = False

    @property
    def status_code(self) -> int:
        return self._response.status_code

    def aiter_bytes(self) -> AsyncIterator[bytes]:
        return self._response.aiter_bytes()

    async def aclose(self) -> None:
        """Close the upstream response and its connection pool; safe to call twice"""
        if self.closed:
            return
        self.closed = True
        try:
            await self._response.aclose()
        finally:
            await self._client.aclose()


class OllamaClient:
    """Client for the Ollama HTTP API"""

    def __init__(
        self,
        base_url: str,
        connect_timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        # No read timeout: a generation may legitimately take minutes
        self.timeout = httpx.Timeout(None, connect=connect_timeout)
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def open_chat_stream(self, request: ModelRequest) -> OllamaStream:
        """
        Start a streaming chat request

        The response status is checked before returning, so callers can
        still answer with a plain JSON error when Ollama rejects the call.

        Raises:
            UpstreamUnavailable: Ollama could not be reached
            UpstreamProtocolError: Ollama answered with a non-success status
        """
        url = f"{self.base_url}/api/chat"
        client = self._client()

        try:
            http_request = client.build_request("POST", url, json=request.to_payload())
            response = await client.send(http_request, stream=True)
        except httpx.HTTPError as e:
            await client.aclose()
            logger.error(f"Cannot connect to Ollama at {self.base_url}: {e}")
            raise ErrorHandler.handle_ollama_error(e) from e

        if response.is_success:
            logger.info(f"Streaming chat from Ollama (model={request.model})")
            return OllamaStream(client, response)

        try:
            body = (await response.aread()).decode("utf-8", errors="replace")
        finally:
            await response.aclose()
            await client.aclose()

        logger.error(f"Ollama rejected chat request ({response.status_code}): {body}")
        raise UpstreamProtocolError(
            message=f"Ollama error ({response.status_code}): {body}",
            upstream_status=response.status_code,
            details={"model": request.model},
        )

    async def chat(self, request: ModelRequest) -> Dict[str, Any]:
        """
        Send a chat request to Ollama (non-streaming)

        Returns:
            Response dict with 'message' and metadata
        """
        url = f"{self.base_url}/api/chat"
        payload = request.to_payload()
        payload["stream"] = False

        try:
            async with self._client() as client:
                response = await client.post(url, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Ollama request failed: {e}")
            raise ErrorHandler.handle_ollama_error(e) from e

        if not response.is_success:
            logger.error(f"Ollama rejected chat request ({response.status_code}): {response.text}")
            raise UpstreamProtocolError(
                message=f"Ollama error ({response.status_code}): {response.text}",
                upstream_status=response.status_code,
                details={"model": request.model},
            )

        return response.json()


def get_ollama_client() -> OllamaClient:
    """Build a client from settings (FastAPI dependency)"""
    settings = get_settings()
    return OllamaClient(
        base_url=settings.ollama_base_url,
        connect_timeout=settings.ollama_connect_timeout,
    )
