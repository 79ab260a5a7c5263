"""
Stream Consumer - client side of the chat relay

Posts a conversation to /api/chat, decodes the SSE frames as they arrive
and grows a single assistant message in the caller's transcript.

State machine:

    IDLE -> SENDING -> STREAMING -> DONE | ERROR | CANCELLED
            SENDING -> ERROR | CANCELLED

A consumer serves one conversation slot; send() is rejected while an
exchange is in flight.
"""

import asyncio
import codecs
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import httpx

from mathbot.errors import ErrorType, is_connectivity_failure
from mathbot.schemas.chat_models import DONE_SENTINEL, ConversationMessage, Role

logger = logging.getLogger(__name__)

UpdateCallback = Callable[[ConversationMessage], None]


class ConsumerState(Enum):
    IDLE = "idle"
    SENDING = "sending"
    STREAMING = "streaming"
    DONE = "done"
    ERROR = "error"
    CANCELLED = "cancelled"


IN_FLIGHT_STATES = (ConsumerState.SENDING, ConsumerState.STREAMING)


class ConsumerBusyError(RuntimeError):
    """send() called while an exchange is already in flight"""


class RelayError(Exception):
    """The relay reported a failure (JSON error body or an error frame)"""

    def __init__(self, message: str, error_type: Optional[str] = None):
        self.message = message
        self.error_type = error_type
        super().__init__(message)

    @property
    def setup_required(self) -> bool:
        """True when the failure means Ollama is not running or not reachable"""
        return self.error_type == ErrorType.OLLAMA_OFFLINE.value or is_connectivity_failure(self.message)


@dataclass
class ExchangeResult:
    """Terminal outcome of one send()"""
    state: ConsumerState
    text: str = ""
    error: Optional[str] = None
    setup_required: bool = False
    placeholder_added: bool = False


def error_diagnostic(message: str) -> str:
    """User-facing text shown in place of (or after) the assistant reply"""
    return f"Error: {message}. Make sure Ollama is running."


class SSEFrameDecoder:
    """Splits the relay's byte stream into frame payloads on blank lines"""

    def __init__(self):
        self._buffer = ""
        self._utf8 = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def feed(self, chunk: bytes) -> List[str]:
        self._buffer += self._utf8.decode(chunk)
        *frames, self._buffer = self._buffer.split("\n\n")
        return [p for p in (self._payload(f) for f in frames) if p]

    @staticmethod
    def _payload(frame: str) -> str:
        """Strip the data: prefix; empty for blank and sentinel frames"""
        payload = frame.strip()
        if payload.startswith("data:"):
            payload = payload[len("data:"):].strip()
        if payload == DONE_SENTINEL:
            return ""
        return payload


def error_from_response(response: httpx.Response) -> RelayError:
    """Build a RelayError from a non-success relay response"""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict) and body.get("error"):
        return RelayError(str(body["error"]), body.get("type"))
    return RelayError(response.text or f"Request failed ({response.status_code})")


def error_from_exception(error: httpx.HTTPError) -> RelayError:
    """Wrap a transport failure talking to the relay"""
    message = str(error) or type(error).__name__
    if isinstance(error, (httpx.ConnectError, httpx.ConnectTimeout)) or is_connectivity_failure(message):
        return RelayError(message, ErrorType.OLLAMA_OFFLINE.value)
    return RelayError(message)


class StreamConsumer:
    """Consumes /api/chat for one conversation slot"""

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:3000",
        transport: Optional[httpx.AsyncBaseTransport] = None,
        connect_timeout: float = 10.0,
    ):
        self.base_url = base_url.rstrip("/")
        self._transport = transport
        self._timeout = httpx.Timeout(None, connect=connect_timeout)
        self._state = ConsumerState.IDLE
        self._task: Optional[asyncio.Task] = None
        self._cancel_requested = False
        self._placeholder: Optional[ConversationMessage] = None
        self._text = ""

    @property
    def state(self) -> ConsumerState:
        return self._state

    @property
    def in_flight(self) -> bool:
        return self._state in IN_FLIGHT_STATES

    def cancel(self) -> None:
        """
        Abort the in-flight exchange

        Safe to call from an update callback: no frame after the current one
        is applied, and the HTTP request is torn down at the next read.
        """
        if not self.in_flight:
            return
        self._cancel_requested = True
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def send(
        self,
        transcript: List[ConversationMessage],
        on_update: Optional[UpdateCallback] = None,
    ) -> ExchangeResult:
        """
        Send the transcript and stream the reply into it

        The assistant placeholder is appended to transcript once the relay
        confirms a stream; on_update fires synchronously for every token.

        Raises:
            ConsumerBusyError: an exchange is already in flight
        """
        if self.in_flight:
            raise ConsumerBusyError(f"Exchange already {self._state.value}")

        self._state = ConsumerState.SENDING
        self._cancel_requested = False
        self._placeholder = None
        self._text = ""

        body = {"messages": [m.model_dump(mode="json", exclude_none=True) for m in transcript]}
        self._task = asyncio.ensure_future(self._exchange(body, transcript, on_update))

        try:
            await self._task
        except asyncio.CancelledError:
            self._state = ConsumerState.CANCELLED
            if not self._cancel_requested:
                raise
            logger.info(f"Exchange cancelled after {len(self._text)} chars")
            return self._result()
        except RelayError as e:
            return self._fail(e, transcript, on_update)
        except httpx.HTTPError as e:
            return self._fail(error_from_exception(e), transcript, on_update)
        except Exception as e:
            logger.exception("Unexpected failure during exchange")
            return self._fail(RelayError(str(e) or type(e).__name__), transcript, on_update)
        else:
            self._state = ConsumerState.CANCELLED if self._cancel_requested else ConsumerState.DONE
            return self._result()
        finally:
            self._task = None
            # Never leave the slot locked
            if self.in_flight:
                self._state = ConsumerState.ERROR

    async def _exchange(
        self,
        body: Dict[str, Any],
        transcript: List[ConversationMessage],
        on_update: Optional[UpdateCallback],
    ) -> None:
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            async with client.stream("POST", f"{self.base_url}/api/chat", json=body) as response:
                if not response.is_success:
                    await response.aread()
                    raise error_from_response(response)

                self._state = ConsumerState.STREAMING
                self._placeholder = ConversationMessage(role=Role.ASSISTANT, text="")
                transcript.append(self._placeholder)
                if on_update:
                    on_update(self._placeholder)

                decoder = SSEFrameDecoder()
                async for chunk in response.aiter_bytes():
                    for payload in decoder.feed(chunk):
                        if self._cancel_requested:
                            return
                        self._apply(payload, on_update)
                    if self._cancel_requested:
                        return

    def _apply(self, payload: str, on_update: Optional[UpdateCallback]) -> None:
        try:
            event = json.loads(payload)
        except json.JSONDecodeError:
            logger.debug(f"Ignoring undecodable frame: {payload[:80]!r}")
            return
        if not isinstance(event, dict):
            return

        token = event.get("token")
        if token:
            self._text += token
            self._placeholder.text = self._text
            if on_update:
                on_update(self._placeholder)

        if event.get("error"):
            raise RelayError(str(event["error"]), ErrorType.STREAM_INTERRUPTED.value)

    def _fail(
        self,
        error: RelayError,
        transcript: List[ConversationMessage],
        on_update: Optional[UpdateCallback],
    ) -> ExchangeResult:
        message = error.message
        self._state = ConsumerState.ERROR
        logger.warning(f"Exchange failed: {message}")

        diagnostic = error_diagnostic(message)
        if self._placeholder is None:
            self._placeholder = ConversationMessage(role=Role.ASSISTANT, text=diagnostic)
            transcript.append(self._placeholder)
        elif self._text:
            # Partial text stays; the diagnostic follows it
            self._placeholder.text = f"{self._text}\n\n{diagnostic}"
        else:
            self._placeholder.text = diagnostic

        result = self._result()
        result.error = message
        result.setup_required = error.setup_required

        if on_update:
            on_update(self._placeholder)
        return result

    def _result(self) -> ExchangeResult:
        return ExchangeResult(
            state=self._state,
            text=self._text,
            placeholder_added=self._placeholder is not None,
        )
