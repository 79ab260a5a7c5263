"""
Chat Stream Relay

Reads Ollama's newline-delimited JSON stream and re-emits it as SSE frames:

    data: {"token": "..."}\\n\\n     one per content fragment, in receipt order
    data: {"error": "..."}\\n\\n     terminal, when the upstream read fails
    data: [DONE]\\n\\n               when Ollama reports done

Network reads do not line up with JSON lines or UTF-8 characters, so bytes
go through an incremental decoder and only complete lines are parsed.
"""

import asyncio
import codecs
import json
import logging
from typing import Any, AsyncIterator, Callable, Dict, List

from mathbot.errors import MalformedFrame, StreamInterrupted
from mathbot.schemas.chat_models import RelayEvent
from mathbot.services.chat.latex import clean_latex
from mathbot.services.ollama_client import OllamaStream

logger = logging.getLogger(__name__)


def parse_frame(line: str) -> Dict[str, Any]:
    """
    Parse one stream line

    Raises:
        MalformedFrame: line is not a JSON object (keepalives, partial garbage)
    """
    try:
        data = json.loads(line)
    except json.JSONDecodeError:
        raise MalformedFrame(line) from None
    if not isinstance(data, dict):
        raise MalformedFrame(line)
    return data


def frame_content(frame: Dict[str, Any]) -> str:
    """Content fragment carried by a frame, or "" when there is none"""
    message = frame.get("message") or {}
    if isinstance(message, dict):
        content = message.get("content") or ""
    elif isinstance(message, str):
        content = message
    else:
        content = ""
    return content if isinstance(content, str) else ""


class NDJSONDecoder:
    """Incremental decoder for a newline-delimited JSON byte stream"""

    def __init__(self):
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self.skipped = 0

    def feed(self, chunk: bytes) -> List[Dict[str, Any]]:
        """Add bytes; return every frame completed by them"""
        self._buffer += self._decoder.decode(chunk)
        *lines, self._buffer = self._buffer.split("\n")
        return self._parse_lines(lines)

    def flush(self) -> List[Dict[str, Any]]:
        """Parse whatever is left once the upstream has closed"""
        tail = self._buffer + self._decoder.decode(b"", final=True)
        self._buffer = ""
        return self._parse_lines([tail])

    def _parse_lines(self, lines: List[str]) -> List[Dict[str, Any]]:
        frames = []
        for line in lines:
            if not line.strip():
                continue
            try:
                frames.append(parse_frame(line))
            except MalformedFrame as e:
                self.skipped += 1
                logger.debug(f"Skipping malformed stream line: {e.details['line']!r}")
        return frames


def frame_events(
    frame: Dict[str, Any],
    transform: Callable[[str], str] = clean_latex,
) -> List[RelayEvent]:
    """Events produced by a single upstream frame, in emission order"""
    events = []
    content = frame_content(frame)
    if content:
        events.append(RelayEvent(token=transform(content)))
    if frame.get("done"):
        events.append(RelayEvent(done=True))
    return events


async def relay_events(
    stream: OllamaStream,
    transform: Callable[[str], str] = clean_latex,
) -> AsyncIterator[str]:
    """
    Relay an open Ollama stream as SSE frames

    Each fragment is forwarded as soon as its line is complete. The upstream
    response is always closed on exit, including when the client goes away.
    """
    decoder = NDJSONDecoder()
    relayed = 0

    try:
        async for chunk in stream.aiter_bytes():
            for frame in decoder.feed(chunk):
                for event in frame_events(frame, transform):
                    yield event.encode()
                    if event.done:
                        logger.info(f"Stream complete ({relayed} fragments)")
                        return
                    relayed += 1

        for frame in decoder.flush():
            for event in frame_events(frame, transform):
                yield event.encode()
                if event.done:
                    logger.info(f"Stream complete ({relayed} fragments)")
                    return
                relayed += 1

        logger.info(f"Upstream closed without done flag ({relayed} fragments)")

    except asyncio.CancelledError:
        logger.info(f"Client disconnected after {relayed} fragments; closing upstream")
        raise

    except Exception as e:
        error = StreamInterrupted(details={"fragments": relayed, "cause": str(e)})
        logger.error(f"{error.message} after {relayed} fragments: {e}")
        yield RelayEvent(error=error.message).encode()

    finally:
        await stream.aclose()
