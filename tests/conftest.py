import os

import pytest

from slack_log_transport import config as config_module
from slack_log_transport.config import SlackConfig

WEBHOOK_URL = "https://hooks.slack.com/services/T000/B000/XXXX"


@pytest.fixture(autouse=True)
def clear_env(monkeypatch: pytest.MonkeyPatch):
    keys = [
        "SLACK_WEBHOOK_URL",
        "SLACK_DOMAIN",
        "SLACK_TOKEN",
        "SLACK_CHANNEL",
        "SLACK_USERNAME",
        "SLACK_ICON_EMOJI",
        "SLACK_ICON_URL",
        "SLACK_MESSAGE_TEMPLATE",
        "SLACK_TIMEOUT_SECONDS",
        "SLACK_DEBUG_LOGGING",
    ]
    original = {key: os.getenv(key) for key in keys}
    for key in keys:
        if key in os.environ:
            del os.environ[key]
    # Never pick up a developer's local .env during tests.
    monkeypatch.setattr(config_module, "_ENV_LOADED", True)
    yield
    for key, value in original.items():
        if value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = value


@pytest.fixture
def webhook_config() -> SlackConfig:
    return SlackConfig(webhook_url=WEBHOOK_URL, channel="#alerts")


@pytest.fixture
def domain_config() -> SlackConfig:
    return SlackConfig(domain="acme", token="secret", channel="#alerts")
