"""
Tests for the NDJSON -> SSE relay.

The upstream is a plain object yielding preset byte chunks, so chunk
boundaries can be placed anywhere: inside a JSON line, between lines, or
in the middle of a multi-byte UTF-8 character.
"""

import json

import pytest

from mathbot.services.chat.streaming import NDJSONDecoder, frame_content, parse_frame, relay_events
from mathbot.errors import MalformedFrame

from tests.conftest import ndjson, token_frame


class FakeStream:
    def __init__(self, chunks, error=None):
        self.chunks = list(chunks)
        self.error = error
        self.closed = False
        self.read = 0

    async def aiter_bytes(self):
        for chunk in self.chunks:
            self.read += 1
            yield chunk
        if self.error is not None:
            raise self.error

    async def aclose(self):
        self.closed = True


async def collect(stream, transform=None):
    kwargs = {"transform": transform} if transform else {}
    return [frame async for frame in relay_events(stream, **kwargs)]


def tokens_of(frames):
    out = []
    for frame in frames:
        payload = frame[len("data: "):].strip()
        if payload == "[DONE]":
            continue
        data = json.loads(payload)
        if "token" in data:
            out.append(data["token"])
    return out


class TestRelayFrames:
    """Basic frame emission."""

    @pytest.mark.asyncio
    async def test_tokens_then_done(self):
        stream = FakeStream([ndjson(token_frame("Hel"), token_frame("lo"), token_frame("", done=True))])
        frames = await collect(stream)
        assert frames == [
            'data: {"token": "Hel"}\n\n',
            'data: {"token": "lo"}\n\n',
            "data: [DONE]\n\n",
        ]
        assert stream.closed

    @pytest.mark.asyncio
    async def test_done_frame_with_content_emits_token_first(self):
        stream = FakeStream([ndjson(token_frame("!", done=True))])
        frames = await collect(stream)
        assert frames == ['data: {"token": "!"}\n\n', "data: [DONE]\n\n"]

    @pytest.mark.asyncio
    async def test_nothing_after_done(self):
        stream = FakeStream([
            ndjson(token_frame("a", done=True)),
            ndjson(token_frame("late")),
        ])
        frames = await collect(stream)
        assert tokens_of(frames) == ["a"]
        assert frames[-1] == "data: [DONE]\n\n"

    @pytest.mark.asyncio
    async def test_empty_content_not_relayed(self):
        stream = FakeStream([ndjson(token_frame(""), {"done": False}, token_frame("x"))])
        frames = await collect(stream)
        assert frames == ['data: {"token": "x"}\n\n']

    @pytest.mark.asyncio
    async def test_close_without_done_has_no_sentinel(self):
        stream = FakeStream([ndjson(token_frame("a"), token_frame("b"))])
        frames = await collect(stream)
        assert tokens_of(frames) == ["a", "b"]
        assert "data: [DONE]\n\n" not in frames
        assert stream.closed

    @pytest.mark.asyncio
    async def test_markup_cleanup_applied(self):
        stream = FakeStream([ndjson(token_frame("[ $x^2$ ]"))])
        frames = await collect(stream)
        assert tokens_of(frames) == ["$x^2$"]


class TestChunkBoundaries:
    """Output does not depend on how the upstream bytes are split."""

    @pytest.mark.asyncio
    async def test_split_at_every_offset(self):
        body = ndjson(token_frame("π ≈ 3.14"), token_frame(" √2"), token_frame("", done=True))
        expected = await collect(FakeStream([body]))

        for cut in range(1, len(body)):
            frames = await collect(FakeStream([body[:cut], body[cut:]]))
            assert frames == expected, f"split at byte {cut}"

    @pytest.mark.asyncio
    async def test_one_byte_at_a_time(self):
        body = ndjson(token_frame("∫ x dx"), token_frame("", done=True))
        frames = await collect(FakeStream([body[i:i + 1] for i in range(len(body))]))
        assert tokens_of(frames) == ["∫ x dx"]
        assert frames[-1] == "data: [DONE]\n\n"

    @pytest.mark.asyncio
    async def test_trailing_line_without_newline(self):
        body = ndjson(token_frame("a")) + json.dumps(token_frame("b", done=True)).encode()
        frames = await collect(FakeStream([body]))
        assert tokens_of(frames) == ["a", "b"]
        assert frames[-1] == "data: [DONE]\n\n"


class TestMalformedInput:
    """Undecodable lines are skipped, not fatal."""

    @pytest.mark.asyncio
    async def test_garbage_line_skipped(self):
        body = ndjson(token_frame("a")) + b"not json\n" + b"[1, 2]\n" + ndjson(token_frame("b"))
        frames = await collect(FakeStream([body]))
        assert tokens_of(frames) == ["a", "b"]

    def test_decoder_counts_skipped_lines(self):
        decoder = NDJSONDecoder()
        frames = decoder.feed(b'{"a": 1}\n{broken\n\n')
        assert frames == [{"a": 1}]
        assert decoder.skipped == 1

    def test_parse_frame_rejects_non_object(self):
        with pytest.raises(MalformedFrame):
            parse_frame('"just a string"')

    def test_frame_content_tolerates_missing_message(self):
        assert frame_content({"done": True}) == ""
        assert frame_content({"message": {"role": "assistant"}}) == ""
        assert frame_content({"message": {"content": None}}) == ""


class TestInterruption:
    """Upstream failures and client disconnects."""

    @pytest.mark.asyncio
    async def test_read_error_becomes_terminal_error_frame(self):
        stream = FakeStream([ndjson(token_frame("partial"))], error=ConnectionResetError("reset"))
        frames = await collect(stream)
        assert frames == [
            'data: {"token": "partial"}\n\n',
            'data: {"error": "Stream interrupted"}\n\n',
        ]
        assert stream.closed

    @pytest.mark.asyncio
    async def test_client_disconnect_closes_upstream(self):
        stream = FakeStream([
            ndjson(token_frame("a")),
            ndjson(token_frame("b")),
            ndjson(token_frame("c")),
        ])
        events = relay_events(stream)
        first = await events.__anext__()
        assert first == 'data: {"token": "a"}\n\n'

        await events.aclose()
        assert stream.closed
        assert stream.read == 1
