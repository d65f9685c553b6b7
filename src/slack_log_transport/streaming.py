"""
Stream session: one long-lived connection emitting parsed records.

Notes:
- The service answers with newline-delimited JSON over a chunked response.
- Chunks may split records (and UTF-8 sequences) at any byte.

Logic flow:
1) SlackTransport.stream() builds a session and calls start().
2) start() schedules run() on the running event loop and returns at once.
3) run() opens the connection and passes each chunk to feed().
4) feed() joins the chunk onto the buffer, splits on runs of newlines,
   emits "log" per complete line ("error" if a line is not JSON) and keeps
   the trailing partial line as the new buffer.
5) destroy() cancels the task and closes the connection; nothing is
   emitted afterwards.
"""

from __future__ import annotations

from typing import Any
import asyncio
import codecs
import json
import logging
import re

from .async_http import SlackAsyncHttpClient
from .events import EventEmitter
from .http import Operation

LINE_SPLIT = re.compile(r"\n+")

logger = logging.getLogger(__name__)


class StreamSession(EventEmitter):
    """
    Event-emitting wrapper around one open stream connection.

    Events:
    - "log": one decoded JSON record.
    - "error": a bad line (json.JSONDecodeError), a connection error, or any
      other failure while opening or reading the stream.
    - "close": the server ended the stream.
    """

    def __init__(self, client: SlackAsyncHttpClient, operation: Operation) -> None:
        super().__init__()
        self._client = client
        self._operation = operation
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self._response: Any = None
        self._task: asyncio.Task | None = None
        self._destroyed = False

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    @property
    def buffer(self) -> str:
        return self._buffer

    @property
    def task(self) -> asyncio.Task | None:
        return self._task

    def emit(self, event: str, *args: Any) -> bool:
        if self._destroyed:
            return False
        return super().emit(event, *args)

    def feed(self, chunk: bytes | str) -> None:
        """
        Consume one raw chunk from the connection.
        """

        text = chunk if isinstance(chunk, str) else self._decoder.decode(chunk)
        segments = LINE_SPLIT.split(self._buffer + text)
        for line in segments[:-1]:
            if self._destroyed:
                return
            try:
                record = json.loads(line)
            except json.JSONDecodeError as exc:
                self.emit("error", exc)
                continue
            self.emit("log", record)
        self._buffer = segments[-1]

    def start(self) -> asyncio.Task:
        """
        Schedule the read loop on the running event loop.
        """

        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(self.run())
        return self._task

    async def run(self) -> None:
        try:
            self._response = await self._client.open(self._operation)
            async for chunk in self._response.content.iter_any():
                if self._destroyed:
                    break
                self.feed(chunk)
        except Exception as exc:
            logger.debug("Stream session failed: %s", exc)
            self.emit("error", exc)
        else:
            self.emit("close")
        finally:
            self._close_response()

    def _close_response(self) -> None:
        if self._response is not None:
            self._response.close()
            self._response = None

    def destroy(self) -> None:
        """
        Tear down the connection; no further events are emitted.
        """

        if self._destroyed:
            return
        self._destroyed = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._close_response()
