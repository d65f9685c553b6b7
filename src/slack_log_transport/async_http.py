"""
Async client used for long-lived stream connections.

Logic flow:
1) StreamSession asks open() for a connection to the resolved URL.
2) open() issues the same POST that http.build_request() describes.
3) The aiohttp response is handed back unread; the session owns closing it.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging

import aiohttp

from .config import SlackConfig
from .http import Operation, build_request

logger = logging.getLogger(__name__)


@dataclass
class SlackAsyncHttpClient:
    """
    Async counterpart of SlackHttpClient for streaming.
    """

    config: SlackConfig
    _session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "SlackAsyncHttpClient":
        self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            # Stream connections are long-lived; only an explicit timeout applies.
            timeout = aiohttp.ClientTimeout(total=self.config.timeout_seconds)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def open(self, operation: Operation) -> aiohttp.ClientResponse:
        """
        Open a connection for a stream Operation and return the response.

        Raises:
        - aiohttp.ClientError for transport-level failures.
        """

        session = self._ensure_session()
        spec = build_request(operation, self.config)
        if self.config.debug_logging:
            logger.info("HTTP %s %s (%s)", spec.method, spec.url, operation.method)
        auth = aiohttp.BasicAuth(*spec.auth) if spec.auth else None
        return await session.request(
            spec.method,
            spec.url,
            params=spec.params,
            data=spec.body.encode("utf-8"),
            headers=spec.headers,
            auth=auth,
        )
