from __future__ import annotations

import asyncio
import json

import aiohttp
import pytest

from slack_log_transport.http import Operation, build_request
from slack_log_transport.streaming import StreamSession
from slack_log_transport.transport import SlackTransport


class DummyContent:
    def __init__(self, chunks, *, block: bool = False):
        self._chunks = chunks
        self._block = block

    async def iter_any(self):
        for chunk in self._chunks:
            yield chunk
        if self._block:
            await asyncio.Event().wait()


class DummyResponse:
    def __init__(self, content):
        self.content = content
        self.closed = False

    def close(self):
        self.closed = True


class DummyClient:
    def __init__(self, chunks=(), *, error: Exception | None = None, block: bool = False):
        self.operation = None
        self.response = DummyResponse(DummyContent(list(chunks), block=block))
        self._error = error

    async def open(self, operation):
        self.operation = operation
        if self._error is not None:
            raise self._error
        return self.response

    async def close(self):
        return None


def record_events(session: StreamSession) -> dict[str, list]:
    events: dict[str, list] = {"log": [], "error": [], "close": []}
    session.on("log", events["log"].append)
    session.on("error", events["error"].append)
    session.on("close", lambda: events["close"].append(True))
    return events


def make_session() -> StreamSession:
    return StreamSession(DummyClient(), Operation("stream"))


def test_feed_joins_records_split_across_chunks() -> None:
    session = make_session()
    events = record_events(session)
    session.feed(b'{"a":1}\n{"b":2')
    session.feed(b"}\n")
    assert events["log"] == [{"a": 1}, {"b": 2}]
    assert events["error"] == []
    assert session.buffer == ""


def test_feed_bad_line_emits_error_and_continues() -> None:
    session = make_session()
    events = record_events(session)
    session.feed(b"not-json\n")
    session.feed(b'{"ok":true}\n')
    assert len(events["error"]) == 1
    assert isinstance(events["error"][0], json.JSONDecodeError)
    assert events["log"] == [{"ok": True}]


def test_feed_collapses_blank_lines() -> None:
    session = make_session()
    events = record_events(session)
    session.feed('{"a":1}\n\n\n{"b":2}\n')
    assert events["log"] == [{"a": 1}, {"b": 2}]
    assert events["error"] == []


def test_feed_handles_split_utf8_sequence() -> None:
    session = make_session()
    events = record_events(session)
    encoded = '{"msg":"café"}\n'.encode("utf-8")
    cut = encoded.index(b"\xc3") + 1
    session.feed(encoded[:cut])
    session.feed(encoded[cut:])
    assert events["log"] == [{"msg": "café"}]


def test_destroy_silences_events() -> None:
    session = make_session()
    events = record_events(session)
    session.destroy()
    session.feed(b'{"a":1}\n')
    assert events["log"] == []
    assert session.destroyed is True


def test_destroy_from_listener_stops_remaining_lines() -> None:
    session = make_session()
    seen = []

    def _on_log(record):
        seen.append(record)
        session.destroy()

    session.on("log", _on_log)
    session.feed(b'{"a":1}\n{"b":2}\n')
    assert seen == [{"a": 1}]


@pytest.mark.asyncio
async def test_transport_stream_relocates_path_and_auth(webhook_config) -> None:
    client = DummyClient([b'{"a":1}\n{"b"', b":2}\n"])
    transport = SlackTransport(webhook_config, async_http_client=client)
    session = transport.stream({"path": "/tail", "auth": ("u", "p"), "level": "info"})
    events = record_events(session)
    await session.task
    assert client.operation.method == "stream"
    assert client.operation.path == "/tail"
    assert client.operation.auth == ("u", "p")
    assert client.operation.params == {"level": "info"}
    assert events["log"] == [{"a": 1}, {"b": 2}]
    assert events["close"] == [True]
    assert client.response.closed is True


@pytest.mark.asyncio
async def test_stream_connection_error_is_emitted(webhook_config) -> None:
    client = DummyClient(error=aiohttp.ClientConnectionError("refused"))
    session = SlackTransport(webhook_config, async_http_client=client).stream()
    events = record_events(session)
    await session.task
    assert len(events["error"]) == 1
    assert isinstance(events["error"][0], aiohttp.ClientConnectionError)
    assert events["close"] == []


@pytest.mark.asyncio
async def test_stream_destroy_cancels_connection(webhook_config) -> None:
    client = DummyClient([b'{"a":1}\n'], block=True)
    session = SlackTransport(webhook_config, async_http_client=client).stream()
    events = record_events(session)
    for _ in range(5):
        await asyncio.sleep(0)
    assert events["log"] == [{"a": 1}]
    session.destroy()
    with pytest.raises(asyncio.CancelledError):
        await session.task
    assert client.response.closed is True
    assert events["close"] == []


def test_stream_requires_running_loop(webhook_config) -> None:
    transport = SlackTransport(webhook_config, async_http_client=DummyClient())
    with pytest.raises(RuntimeError):
        transport.stream()


@pytest.mark.asyncio
async def test_stream_bad_auth_is_emitted_as_error(webhook_config) -> None:
    class OpeningClient(DummyClient):
        async def open(self, operation):
            self.operation = operation
            build_request(operation, webhook_config)
            return self.response

    client = OpeningClient()
    session = SlackTransport(webhook_config, async_http_client=client).stream({"auth": {"password": "x"}})
    events = record_events(session)
    await session.task
    assert len(events["error"]) == 1
    assert isinstance(events["error"][0], ValueError)
    assert events["close"] == []


@pytest.mark.asyncio
async def test_stream_listener_failure_is_emitted_as_error(webhook_config) -> None:
    client = DummyClient([b'{"a":1}\n'])
    session = SlackTransport(webhook_config, async_http_client=client).stream()
    errors = []

    def _explode(record):
        raise KeyError("listener")

    session.on("log", _explode)
    session.on("error", errors.append)
    await session.task
    assert len(errors) == 1
    assert isinstance(errors[0], KeyError)
    assert client.response.closed is True
