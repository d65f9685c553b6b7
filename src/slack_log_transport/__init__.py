"""
Slack log transport package.

Forwards structured log records to a Slack incoming webhook as colored
message attachments. Import paths are exported here to keep the public
surface area obvious while the implementation stays in small modules.
"""

from .config import SlackConfig, load_slack_config
from .errors import ConfigError, SlackTransportError, StatusError
from .payload import (
    Attachment,
    Field,
    MessagePayload,
    build_attachments,
    build_payload,
    level_color,
)
from .template import render_template
from .http import Operation, RequestSpec, SlackHttpClient, build_request
from .async_http import SlackAsyncHttpClient
from .events import EventEmitter
from .query import normalize_query
from .streaming import StreamSession
from .transport import SlackTransport
from .handler import SlackHandler
from .app import build_transport, load_transport
from .logging_config import setup_logging

__all__ = [
    "SlackConfig",
    "load_slack_config",
    "ConfigError",
    "SlackTransportError",
    "StatusError",
    "Attachment",
    "Field",
    "MessagePayload",
    "build_attachments",
    "build_payload",
    "level_color",
    "render_template",
    "Operation",
    "RequestSpec",
    "SlackHttpClient",
    "build_request",
    "SlackAsyncHttpClient",
    "EventEmitter",
    "normalize_query",
    "StreamSession",
    "SlackTransport",
    "SlackHandler",
    "build_transport",
    "load_transport",
    "setup_logging",
]
