"""
Runtime assembly helpers.

Purpose:
- Keep wiring logic (config -> clients -> transport) in one place.

Logic flow:
1) load_transport() reads slack.yaml (optional) and the environment.
2) build_transport() creates the HTTP client and the SlackTransport.
3) The caller invokes log/query/stream, or wraps it in a SlackHandler.
"""

from __future__ import annotations

from .config import SlackConfig, load_slack_config
from .http import SlackHttpClient
from .transport import SlackTransport


def build_transport(config: SlackConfig, *, silent: bool = False) -> SlackTransport:
    """
    Create a SlackTransport for a resolved configuration.
    """

    return SlackTransport(config, http_client=SlackHttpClient(config), silent=silent)


def load_transport(path: str | None = None, *, silent: bool = False) -> SlackTransport:
    """
    Load configuration (YAML + env) and return a ready transport.
    """

    return build_transport(load_slack_config(path), silent=silent)
