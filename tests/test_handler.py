import logging

import pytest

from slack_log_transport.handler import SlackHandler, level_tag


class DummyTransport:
    def __init__(self, error: Exception | None = None):
        self.calls = []
        self.closed = False
        self._error = error

    def log(self, level, message, meta=None, callback=None):
        if self._error is not None:
            raise self._error
        self.calls.append((level, message, meta))
        return True

    def close(self):
        self.closed = True


@pytest.fixture
def slack_logger():
    transport = DummyTransport()
    handler = SlackHandler(transport, level=logging.INFO)
    logger = logging.getLogger("tests.slack_handler")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    logger.addHandler(handler)
    yield logger, transport
    logger.removeHandler(handler)


@pytest.mark.parametrize(
    "levelno, tag",
    [
        (logging.CRITICAL, "error"),
        (logging.ERROR, "error"),
        (logging.WARNING, "warning"),
        (logging.INFO, "info"),
        (logging.DEBUG, "debug"),
    ],
)
def test_level_tag(levelno, tag) -> None:
    assert level_tag(levelno) == tag


def test_forwards_message_and_meta(slack_logger) -> None:
    logger, transport = slack_logger
    logger.warning("disk at %d%%", 91, extra={"meta": {"host": "db1"}})
    logger.debug("filtered out")
    assert transport.calls == [("warning", "disk at 91%", {"host": "db1"})]


def test_forwards_exception_as_meta(slack_logger) -> None:
    logger, transport = slack_logger
    try:
        raise ValueError("bad input")
    except ValueError:
        logger.exception("request failed")
    level, message, meta = transport.calls[0]
    assert level == "error"
    assert message == "request failed"
    assert isinstance(meta, ValueError)


def test_delivery_failure_uses_handle_error(monkeypatch) -> None:
    handler = SlackHandler(DummyTransport(error=RuntimeError("down")))
    seen = []
    monkeypatch.setattr(handler, "handleError", seen.append)
    record = logging.LogRecord("x", logging.ERROR, __file__, 1, "boom", None, None)
    handler.emit(record)
    assert seen == [record]


def test_close_closes_transport() -> None:
    transport = DummyTransport()
    SlackHandler(transport).close()
    assert transport.closed is True


def test_records_logged_while_sending_are_dropped() -> None:
    inner = logging.getLogger("tests.slack_handler.inner")

    class ChattyTransport(DummyTransport):
        def log(self, level, message, meta=None, callback=None):
            inner.info("HTTP POST %s", "https://hooks.example.com")
            return super().log(level, message, meta, callback)

    transport = ChattyTransport()
    handler = SlackHandler(transport, level=logging.INFO)
    outer = logging.getLogger("tests.slack_handler")
    outer.setLevel(logging.DEBUG)
    inner.setLevel(logging.DEBUG)
    outer.addHandler(handler)
    try:
        outer.info("hello")
        outer.info("again")
    finally:
        outer.removeHandler(handler)
    assert transport.calls == [("info", "hello", None), ("info", "again", None)]
