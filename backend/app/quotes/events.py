"""Change notification registry."""

from __future__ import annotations

import logging
from collections.abc import Callable
from threading import Lock

logger = logging.getLogger(__name__)

ChangeHandler = Callable[[], None]


class ChangeNotifier:
    """Callback registry fired after every refresh cycle and watch-list edit.

    Handlers take no arguments; they pull fresh state from the service. A
    handler that raises is logged and skipped, and the rest still run.
    """

    def __init__(self) -> None:
        self._handlers: list[ChangeHandler] = []
        self._lock = Lock()

    def subscribe(self, handler: ChangeHandler) -> None:
        """Register a handler. Subscribing the same handler twice is a no-op."""
        with self._lock:
            if handler not in self._handlers:
                self._handlers.append(handler)

    def unsubscribe(self, handler: ChangeHandler) -> None:
        """Remove a handler. No-op if it was never registered."""
        with self._lock:
            try:
                self._handlers.remove(handler)
            except ValueError:
                pass

    def publish(self) -> None:
        # Copy so handlers may (un)subscribe while being notified
        with self._lock:
            handlers = list(self._handlers)
        for handler in handlers:
            try:
                handler()
            except Exception:
                logger.exception("Change handler %r failed", handler)

    def __len__(self) -> int:
        with self._lock:
            return len(self._handlers)
