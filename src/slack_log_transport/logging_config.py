"""
Structured logging helpers.

Purpose:
- Provide a consistent console format for the package and its callers.
- Support JSONL output and optionally forward records to Slack.
"""

from __future__ import annotations

import json
import logging
import time

from .config import SlackConfig
from .handler import SlackHandler
from .transport import SlackTransport


class JsonFormatter(logging.Formatter):
    """
    JSONL formatter; includes the "meta" extra when present.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(record.created)),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        meta = getattr(record, "meta", None)
        if meta is not None:
            payload["meta"] = meta
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def setup_logging(
    level: str = "INFO",
    *,
    json_output: bool = False,
    slack: SlackConfig | None = None,
    slack_level: str = "ERROR",
) -> SlackHandler | None:
    """
    Configure root logging; attach a SlackHandler when a config is given.

    Outputs:
    - The SlackHandler that was installed, or None.
    """

    console = logging.StreamHandler()
    console.setFormatter(
        JsonFormatter() if json_output else logging.Formatter("%(levelname)s %(name)s: %(message)s")
    )
    handlers: list[logging.Handler] = [console]

    slack_handler = None
    if slack is not None:
        slack_handler = SlackHandler(SlackTransport(slack), level=slack_level.upper())
        handlers.append(slack_handler)

    logging.basicConfig(level=level.upper(), handlers=handlers, force=True)
    return slack_handler
