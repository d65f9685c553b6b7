"""
Transport facade: log / query / stream against the incoming-webhook endpoint.

Logic flow (log):
1) silent transports succeed immediately without a request.
2) Otherwise a "collect" Operation is dispatched via SlackHttpClient.
3) A non-200 status becomes a StatusError, even without a transport error.
4) On success the "logged" event fires and the callback gets (None, True).

Callbacks follow the (error, result) convention. Without a callback the
result is returned and the error is raised instead.
"""

from __future__ import annotations

from typing import Any, Callable
import json
import logging

import requests

from .async_http import SlackAsyncHttpClient
from .config import SlackConfig
from .errors import StatusError
from .events import EventEmitter
from .http import METHOD_COLLECT, METHOD_QUERY, METHOD_STREAM, Operation, SlackHttpClient
from .query import normalize_query
from .streaming import StreamSession

Callback = Callable[[BaseException | None, Any], Any]

logger = logging.getLogger(__name__)


def _finish(callback: Callback | None, error: BaseException | None, result: Any) -> Any:
    if callback is not None:
        callback(error, result)
        return result if error is None else None
    if error is not None:
        raise error
    return result


class SlackTransport(EventEmitter):
    """
    Forwards log records to a chat webhook; one request per call.
    """

    name = "Slack"

    def __init__(
        self,
        config: SlackConfig,
        *,
        http_client: SlackHttpClient | None = None,
        async_http_client: SlackAsyncHttpClient | None = None,
        silent: bool = False,
    ) -> None:
        super().__init__()
        self.config = config
        self.silent = silent
        self._http = http_client or SlackHttpClient(config)
        self._async_http = async_http_client

    def close(self) -> None:
        self._http.close()

    async def aclose(self) -> None:
        self.close()
        if self._async_http is not None:
            await self._async_http.close()

    def _send(self, operation: Operation) -> tuple[BaseException | None, requests.Response | None]:
        try:
            return None, self._http.send(operation)
        except requests.RequestException as exc:
            logger.debug("Slack %s request failed: %s", operation.method, exc)
            return exc, None

    def log(
        self,
        level: str,
        message: Any,
        meta: Any = None,
        callback: Callback | None = None,
    ) -> Any:
        """
        Send one record.

        Inputs:
        - level: level tag (error, warn, info, ...).
        - message: message text (or template input).
        - meta: optional metadata; a callable here is taken as the callback.
        - callback: optional (error, result) continuation.

        Outputs:
        - True on success (also passed to the callback).
        """

        if callable(meta) and callback is None:
            callback, meta = meta, {}

        if self.silent:
            return _finish(callback, None, True)

        operation = Operation(
            METHOD_COLLECT,
            params={"message": message, "meta": meta, "level": level},
        )
        error, response = self._send(operation)
        if response is not None and response.status_code != 200:
            error = StatusError(response.status_code, prefix="slack: ")
        if error is not None:
            return _finish(callback, error, None)

        self.emit("logged")
        return _finish(callback, None, True)

    def query(
        self,
        options: dict[str, Any] | Callback | None = None,
        callback: Callback | None = None,
    ) -> Any:
        """
        Request historical records.

        Outputs:
        - Parsed JSON body; a JSON parse failure goes to the callback.
        """

        if callable(options) and callback is None:
            callback, options = options, None

        try:
            params = normalize_query(options)
        except ValueError as exc:
            return _finish(callback, exc, None)

        operation = Operation(METHOD_QUERY, params=params)
        error, response = self._send(operation)
        if response is not None and response.status_code != 200:
            error = StatusError(response.status_code)
        if error is not None:
            return _finish(callback, error, None)

        body: Any = response.text
        if isinstance(body, str):
            try:
                body = json.loads(body)
            except json.JSONDecodeError as exc:
                return _finish(callback, exc, None)
        return _finish(callback, None, body)

    def stream(self, options: dict[str, Any] | None = None) -> StreamSession:
        """
        Open a stream session and return it without waiting for the connection.

        "path" and "auth" are lifted out of the params into the request.
        Must be called with a running event loop.
        """

        params = dict(options or {})
        operation = Operation(
            METHOD_STREAM,
            params=params,
            path=params.pop("path", None),
            auth=params.pop("auth", None),
        )
        if self._async_http is None:
            self._async_http = SlackAsyncHttpClient(self.config)
        session = StreamSession(self._async_http, operation)
        session.start()
        return session
