"""
Bridge from the standard logging module to SlackTransport.

Usage:
    handler = SlackHandler(SlackTransport(config))
    logging.getLogger().addHandler(handler)
    logger.error("payment failed", extra={"meta": {"order": 42}})
"""

from __future__ import annotations

import logging
import threading

from .transport import SlackTransport


def level_tag(levelno: int) -> str:
    if levelno >= logging.ERROR:
        return "error"
    if levelno >= logging.WARNING:
        return "warning"
    if levelno >= logging.INFO:
        return "info"
    return "debug"


class SlackHandler(logging.Handler):
    """
    Logging handler that posts each record through a SlackTransport.

    Metadata is the raised exception when exc_info is set, otherwise the
    record's "meta" extra. Records logged while a record is being sent
    (HTTP debug lines, for example) are dropped on that thread.
    """

    def __init__(self, transport: SlackTransport, level: int | str = logging.ERROR) -> None:
        super().__init__(level)
        self.transport = transport
        self._local = threading.local()

    def emit(self, record: logging.LogRecord) -> None:
        if getattr(self._local, "sending", False):
            return
        self._local.sending = True
        try:
            message = record.getMessage() if self.formatter is None else self.format(record)
            if record.exc_info and record.exc_info[1] is not None:
                meta = record.exc_info[1]
            else:
                meta = getattr(record, "meta", None)
            self.transport.log(level_tag(record.levelno), message, meta)
        except RecursionError:
            raise
        except Exception:
            self.handleError(record)
        finally:
            self._local.sending = False

    def close(self) -> None:
        try:
            self.transport.close()
        finally:
            super().close()
