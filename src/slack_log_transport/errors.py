"""
Error types raised by the Slack transport.

Kinds:
- ConfigError: missing/invalid configuration, raised at construction.
- StatusError: HTTP call completed but the service answered non-200.

Transport failures (network, DNS, TLS) are surfaced as the underlying
requests/aiohttp exceptions. JSON parse failures surface as
json.JSONDecodeError.
"""

from __future__ import annotations


class SlackTransportError(Exception):
    """
    Base class for errors produced by this package.
    """


class ConfigError(SlackTransportError, ValueError):
    """
    Raised when the transport configuration cannot resolve an endpoint.
    """


class StatusError(SlackTransportError):
    """
    HTTP request succeeded at the transport level but returned non-200.
    """

    def __init__(self, status_code: int, prefix: str = "") -> None:
        self.status_code = status_code
        super().__init__(f"{prefix}HTTP Status Code: {status_code}")
