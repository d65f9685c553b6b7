"""
Payload builder: log record -> incoming-webhook message payload.

Logic flow:
1) level_color() maps the level tag to an attachment color.
2) The message text is the raw message, or the configured template rendered
   with (message, meta, level).
3) Metadata is shaped by variant, checked in this order:
   error-like -> mapping -> list -> nothing.
4) MessagePayload.to_body() produces the JSON body for the dispatcher.

Notes:
- Attachments built for list metadata are only transmitted when
  SlackConfig.send_all_attachments is set; by default the body carries the
  primary attachment alone.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any
import time
import traceback

from .config import SlackConfig
from .template import render_template

COLOR_DANGER = "danger"
COLOR_WARNING = "warning"
COLOR_GOOD = "good"


@dataclass
class Field:
    """
    One title/value entry inside an attachment.

    None members are left out of the wire form.
    """

    value: Any
    title: str | None = None
    short: Any = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.title is not None:
            data["title"] = self.title
        data["value"] = self.value
        if self.short is not None:
            data["short"] = self.short
        return data


@dataclass
class Attachment:
    text: str
    fallback: str | None = None
    color: str | None = None
    ts: int | None = None
    fields: list[Field] = field(default_factory=list)
    mrkdwn_in: list[str] | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.fallback is not None:
            data["fallback"] = self.fallback
        data["text"] = self.text
        data["fields"] = [item.to_dict() for item in self.fields]
        if self.ts is not None:
            data["ts"] = self.ts
        if self.color is not None:
            data["color"] = self.color
        if self.mrkdwn_in is not None:
            data["mrkdwn_in"] = list(self.mrkdwn_in)
        return data


@dataclass
class MessagePayload:
    """
    Channel target, display options and attachments for one record.

    attachments[0] is always the primary attachment.
    """

    config: SlackConfig
    attachments: list[Attachment]

    @property
    def primary(self) -> Attachment:
        return self.attachments[0]

    def to_body(self) -> dict[str, Any]:
        config = self.config
        if config.send_all_attachments:
            attachments = self.attachments
        else:
            attachments = [self.primary]
        return {
            "channel": config.channel,
            "username": config.username,
            "parse": config.parse,
            "link_names": config.link_names,
            "attachments": [item.to_dict() for item in attachments],
            "unfurl_links": config.unfurl_links,
            "icon_url": config.icon_url,
            "icon_emoji": config.icon_emoji,
        }


def level_color(level: str | None) -> str:
    if level == "error":
        return COLOR_DANGER
    if level in ("warning", "warn"):
        return COLOR_WARNING
    return COLOR_GOOD


def value_kind(value: Any) -> str:
    """
    Kind name used by the legacy short-flag classification.
    """

    if value is None:
        # JSON null reports as "object".
        return "object"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if callable(value):
        return "function"
    return "object"


def _short_flag(value: Any, config: SlackConfig) -> Any:
    if config.short_fields is None:
        return value_kind(value)
    return config.short_fields


def is_error_like(meta: Any) -> bool:
    if isinstance(meta, BaseException):
        return True
    return hasattr(meta, "message") and hasattr(meta, "stack")


def error_parts(meta: Any) -> tuple[str, str]:
    """
    Return (message, stack) for an error-like value.
    """

    if isinstance(meta, BaseException):
        if meta.__traceback__ is not None:
            stack = "".join(
                traceback.format_exception(type(meta), meta, meta.__traceback__)
            ).rstrip("\n")
        else:
            stack = f"{type(meta).__name__}: {meta}"
        return str(meta), stack
    return str(meta.message), str(meta.stack)


def _render_text(level: str | None, message: Any, meta: Any, config: SlackConfig) -> str:
    if config.message:
        context = {"message": message, "meta": meta, "level": level}
        return render_template(config.message, context)
    return "" if message is None else str(message)


def _index_attachment(index: int, item: Any) -> Attachment:
    attachment = Attachment(text=f"Index {index}")
    if isinstance(item, Mapping):
        for key, value in item.items():
            attachment.fields.append(Field(title=str(key), value=value))
    else:
        attachment.fields.append(Field(value=item))
    return attachment


def build_attachments(
    level: str | None, message: Any, meta: Any, config: SlackConfig
) -> list[Attachment]:
    """
    Build the primary attachment plus one attachment per list element.

    Inputs:
    - level: level tag (error, warn, info, ...).
    - message: raw message, or the value fed into the template.
    - meta: None, an exception/error-like value, a mapping, or a list.
    - config: display options and template.

    Outputs:
    - List of attachments; index 0 is the primary one.
    """

    text = _render_text(level, message, meta, config)
    primary = Attachment(
        fallback=text,
        text=text,
        ts=int(time.time() * 1000),
        color=level_color(level),
    )
    attachments = [primary]

    if is_error_like(meta):
        error_message, stack = error_parts(meta)
        primary.mrkdwn_in = ["fields"]
        primary.fields.append(Field(title="Error message", value=error_message, short=False))
        primary.fields.append(Field(title="Stack Trace", value=f"```{stack}```", short=False))
    elif isinstance(meta, Mapping) and meta:
        for key, value in meta.items():
            primary.fields.append(
                Field(title=str(key), value=value, short=_short_flag(value, config))
            )
    elif isinstance(meta, (list, tuple)):
        for index, item in enumerate(meta):
            attachments.append(_index_attachment(index, item))

    return attachments


def build_payload(
    level: str | None, message: Any, meta: Any, config: SlackConfig
) -> MessagePayload:
    return MessagePayload(
        config=config,
        attachments=build_attachments(level, message, meta, config),
    )
