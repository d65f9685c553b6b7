"""
Request dispatcher for the incoming-webhook endpoint.

Purpose:
- Provide a single place to resolve the target URL, token and body.
- Keep the transport facade focused on completion handling.

Sources:
- SlackConfig: webhook_url, or domain + token (see config.py).
- Operation: method tag (collect/query/stream) + params from the facade.

Logic flow:
1) The facade wraps its call in an Operation.
2) build_request() turns (Operation, SlackConfig) into a RequestSpec:
   - POST, always
   - token as a query parameter when no webhook URL is configured
   - JSON body built from the operation params via payload.py
3) SlackHttpClient.send() delegates the RequestSpec to requests.
4) The raw requests.Response is returned; status handling is the caller's.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any
import json
import logging

import requests

from .config import SlackConfig
from .payload import build_payload

METHOD_COLLECT = "collect"
METHOD_QUERY = "query"
METHOD_STREAM = "stream"
OPERATION_METHODS = (METHOD_COLLECT, METHOD_QUERY, METHOD_STREAM)

logger = logging.getLogger(__name__)


@dataclass
class Operation:
    """
    What the facade wants done: method tag plus service params.

    path/auth are transport-level fields lifted out of params by stream().
    """

    method: str
    params: dict[str, Any] = field(default_factory=dict)
    path: str | None = None
    auth: Any = None

    def __post_init__(self) -> None:
        if self.method not in OPERATION_METHODS:
            raise ValueError(
                f"Unsupported operation '{self.method}'. "
                f"Use one of: {', '.join(OPERATION_METHODS)}."
            )


@dataclass(frozen=True)
class RequestSpec:
    """
    Fully resolved HTTP request, independent of the client library.
    """

    method: str
    url: str
    params: dict[str, str] | None
    body: str
    headers: dict[str, str]
    auth: tuple[str, str] | None = None


def _normalize_auth(auth: Any) -> tuple[str, str] | None:
    if auth is None:
        return None
    if isinstance(auth, Mapping):
        user = auth.get("user", auth.get("username"))
        password = auth.get("pass", auth.get("password", ""))
        if user is None:
            raise ValueError("auth mapping needs a 'user' or 'username' key.")
        return str(user), str(password)
    if isinstance(auth, str):
        user, _, password = auth.partition(":")
        return user, password
    user, password = auth
    return str(user), str(password)


def build_request(operation: Operation, config: SlackConfig) -> RequestSpec:
    """
    Resolve an Operation into a RequestSpec.

    Inputs:
    - operation: method tag + params (message/meta/level for collect).
    - config: endpoint selection and display options.

    Outputs:
    - RequestSpec with POST method, URL, token query and JSON body.
    """

    params = operation.params or {}
    payload = build_payload(
        params.get("level"), params.get("message"), params.get("meta"), config
    )

    url = config.resolved_url
    if operation.path:
        url = f"{url.rstrip('/')}/{operation.path.lstrip('/')}"

    return RequestSpec(
        method="POST",
        url=url,
        params=None if config.uses_webhook else {"token": str(config.token)},
        # default=str keeps arbitrary metadata values serializable.
        body=json.dumps(payload.to_body(), default=str),
        headers={"Content-Type": "application/json", "Accept": "application/json"},
        auth=_normalize_auth(operation.auth),
    )


@dataclass
class SlackHttpClient:
    """
    Minimal blocking client; one POST per call, no retries.
    """

    config: SlackConfig

    def __post_init__(self) -> None:
        self._session = requests.Session()

    def close(self) -> None:
        self._session.close()

    def send(self, operation: Operation, *, stream: bool = False) -> requests.Response:
        """
        Send one Operation and return the raw response.

        Outputs:
        - requests.Response (status not checked here).

        Raises:
        - requests.RequestException for transport-level failures.
        """

        spec = build_request(operation, self.config)
        if self.config.debug_logging:
            logger.info("HTTP %s %s (%s)", spec.method, spec.url, operation.method)
        return self._session.request(
            method=spec.method,
            url=spec.url,
            params=spec.params,
            data=spec.body.encode("utf-8"),
            headers=spec.headers,
            auth=spec.auth,
            timeout=self.config.timeout_seconds,
            stream=stream,
        )
