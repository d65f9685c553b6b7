"""
Configuration record and loaders.

Purpose:
- Hold endpoint selection and display options for one transport instance.
- Keep tracing simple: YAML -> environment overrides -> SlackConfig.

Sources:
- slack.yaml (optional, local): top-level "slack" mapping of option names.
- environment variables (.env is recommended, gitignored): secrets and overrides.

Logic flow (high level):
1) load_slack_config() reads the YAML mapping when a path is given.
2) Environment variables override individual keys.
3) SlackConfig validates endpoint resolution in __post_init__:
   - webhook_url alone is enough
   - otherwise domain + token are both required

Tracing notes:
- Errors are raised where a value is first required so the caller knows
  which source (YAML vs env) is incomplete.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any
import os

import yaml

from .errors import ConfigError

HOOK_URL_TEMPLATE = "https://{domain}.slack.com/services/hooks/incoming-webhook"
DEFAULT_USERNAME = "Python"
DEFAULT_ICON_EMOJI = ":tophat:"
_ENV_LOADED = False

# Environment variable -> SlackConfig field.
_ENV_KEYS = {
    "SLACK_WEBHOOK_URL": "webhook_url",
    "SLACK_DOMAIN": "domain",
    "SLACK_TOKEN": "token",
    "SLACK_CHANNEL": "channel",
    "SLACK_USERNAME": "username",
    "SLACK_ICON_EMOJI": "icon_emoji",
    "SLACK_ICON_URL": "icon_url",
    "SLACK_MESSAGE_TEMPLATE": "message",
}


@dataclass(frozen=True)
class SlackConfig:
    """
    Immutable options for one transport.

    Display fields map 1:1 to the incoming-webhook JSON body.
    """

    webhook_url: str | None = None
    domain: str | None = None
    token: str | None = None
    channel: str | None = None
    username: str = DEFAULT_USERNAME
    parse: str | None = None
    link_names: bool | int | None = None
    unfurl_links: bool | None = None
    icon_url: str | None = None
    icon_emoji: str | None = DEFAULT_ICON_EMOJI
    message: str | None = None
    short_fields: bool | None = None
    send_all_attachments: bool = False
    timeout_seconds: float | None = None
    debug_logging: bool = False

    def __post_init__(self) -> None:
        if not self.webhook_url:
            if not self.domain:
                raise ConfigError("Must have a domain or webhook_url option set.")
            if not self.token:
                raise ConfigError("Must have a token option set.")

    @property
    def uses_webhook(self) -> bool:
        return bool(self.webhook_url)

    @property
    def resolved_url(self) -> str:
        """
        Target URL: the direct webhook, or the one derived from the domain.
        """

        if self.webhook_url:
            return self.webhook_url
        return HOOK_URL_TEMPLATE.format(domain=self.domain)

    @classmethod
    def from_mapping(cls, raw: dict[str, Any]) -> "SlackConfig":
        """
        Build a config from a plain mapping, rejecting unknown keys.
        """

        known = {item.name for item in fields(cls)}
        unknown = sorted(set(raw) - known)
        if unknown:
            raise ConfigError(f"Unknown slack option(s): {', '.join(unknown)}")
        return cls(**raw)


def _read_float(var_name: str) -> float | None:
    value = os.getenv(var_name)
    if value is None or value == "":
        return None
    try:
        return float(value)
    except ValueError as exc:
        raise ConfigError(f"'{var_name}' must be a number, got '{value}'.") from exc


def _read_bool(var_name: str) -> bool | None:
    value = os.getenv(var_name)
    if value is None or value == "":
        return None
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _load_env_file(path: str = ".env") -> None:
    # Minimal .env loader; existing environment always wins.
    global _ENV_LOADED
    if _ENV_LOADED:
        return
    if not os.path.exists(path):
        _ENV_LOADED = True
        return

    with open(path, "r", encoding="utf-8") as handle:
        for raw_line in handle:
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip("'\"")
            if key and value and key not in os.environ:
                os.environ[key] = value

    _ENV_LOADED = True


def _read_yaml(path: str) -> dict[str, Any]:
    with open(path, "r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    if not isinstance(raw, dict) or "slack" not in raw:
        raise ConfigError(f"{path} must contain a top-level 'slack' mapping.")
    section = raw["slack"] or {}
    if not isinstance(section, dict):
        raise ConfigError("'slack' must be a mapping of option names to values.")
    return {str(key): value for key, value in section.items()}


def load_slack_config(path: str | None = None) -> SlackConfig:
    """
    Load a SlackConfig from an optional YAML file plus environment overrides.

    Inputs:
    - path: YAML file with a top-level "slack" mapping, or None for env only.

    Outputs:
    - Validated SlackConfig.

    Next:
    - Feed the config into SlackTransport or app.build_transport().
    """

    _load_env_file()

    raw = _read_yaml(path) if path else {}
    for var_name, key in _ENV_KEYS.items():
        value = os.getenv(var_name)
        if value:
            raw[key] = value

    timeout = _read_float("SLACK_TIMEOUT_SECONDS")
    if timeout is not None:
        raw["timeout_seconds"] = timeout
    debug = _read_bool("SLACK_DEBUG_LOGGING")
    if debug is not None:
        raw["debug_logging"] = debug

    return SlackConfig.from_mapping(raw)
