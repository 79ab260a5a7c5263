"""
Chat Service Package

Public API:
- start_chat_relay: build the Ollama request and open the upstream stream
  (relay_events turns it into SSE frames)
- build_model_request, clean_latex, relay_events for direct use
"""

from typing import List

from mathbot.schemas.chat_models import ConversationMessage
from mathbot.services.ollama_client import OllamaClient, OllamaStream
from .latex import CLEANUP_RULES, LatexRule, clean_latex
from .request_builder import build_model_request, needs_vision, strip_data_uri
from .streaming import NDJSONDecoder, frame_content, frame_events, parse_frame, relay_events


async def start_chat_relay(
    messages: List[ConversationMessage],
    client: OllamaClient,
    default_model: str,
    vision_model: str,
) -> OllamaStream:
    """
    Open the upstream stream for a conversation

    Upstream failures (unreachable server, non-success status) raise here,
    before any SSE frame exists, so the route can still answer with JSON.
    The caller owns the returned stream and must close it.
    """
    request = build_model_request(messages, default_model=default_model, vision_model=vision_model)
    return await client.open_chat_stream(request)


__all__ = [
    "start_chat_relay",
    "CLEANUP_RULES",
    "LatexRule",
    "clean_latex",
    "build_model_request",
    "needs_vision",
    "strip_data_uri",
    "NDJSONDecoder",
    "frame_content",
    "frame_events",
    "parse_frame",
    "relay_events",
]
