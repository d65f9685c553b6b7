"""
Synchronous event emitter used for "logged", "log" and "error" signals.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable
import logging

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]


class EventEmitter:
    """
    Listeners run in registration order on the emitting thread.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = defaultdict(list)

    def on(self, event: str, listener: Listener) -> Listener:
        self._listeners[event].append(listener)
        return listener

    def once(self, event: str, listener: Listener) -> Listener:
        def _wrapper(*args: Any) -> Any:
            self.off(event, _wrapper)
            return listener(*args)

        return self.on(event, _wrapper)

    def off(self, event: str, listener: Listener) -> None:
        listeners = self._listeners.get(event)
        if listeners and listener in listeners:
            listeners.remove(listener)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ()))

    def emit(self, event: str, *args: Any) -> bool:
        """
        Call every listener for event; return True if any were registered.
        """

        listeners = list(self._listeners.get(event, ()))
        if not listeners:
            if event == "error":
                logger.warning("Unhandled error event: %s", args[0] if args else None)
            return False
        for listener in listeners:
            listener(*args)
        return True
