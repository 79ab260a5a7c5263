"""
Chat Routes - streaming relay to Ollama

POST /api/chat takes the whole conversation and answers with a
text/event-stream of token frames. Failures that happen before streaming
starts (Ollama down, Ollama error status) are JSON {"error": ...} bodies.
"""

import logging
from typing import AsyncIterator

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from starlette.types import Receive, Scope, Send

from mathbot.config import MathBotSettings, get_settings
from mathbot.schemas.chat_models import ChatRequest
from mathbot.services.chat import relay_events, start_chat_relay
from mathbot.services.ollama_client import OllamaClient, OllamaStream, get_ollama_client

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["chat"]
)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no"
}


class RelayStreamingResponse(StreamingResponse):
    """
    StreamingResponse that owns an open upstream stream.

    The relay generator closes the upstream when it runs, but it never starts
    if sending the response headers fails, so the response closes it too.
    """

    def __init__(self, content: AsyncIterator[str], upstream: OllamaStream, **kwargs):
        super().__init__(content, **kwargs)
        self.upstream = upstream

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            await self.upstream.aclose()


@router.post(
    "/chat",
    name="chat_stream",
    summary="Send conversation (streaming)",
    description="Relay a conversation to Ollama and stream the reply as Server-Sent Events"
)
async def chat(
    body: ChatRequest,
    client: OllamaClient = Depends(get_ollama_client),
    settings: MathBotSettings = Depends(get_settings),
) -> StreamingResponse:
    """Send a conversation and get a streaming response"""
    logger.info(f"Chat request with {len(body.messages)} message(s)")

    upstream = await start_chat_relay(
        body.messages,
        client,
        default_model=settings.ollama_model,
        vision_model=settings.ollama_vision_model,
    )

    return RelayStreamingResponse(
        relay_events(upstream),
        upstream=upstream,
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
