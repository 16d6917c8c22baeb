"""Callback registration with explicit cancellation."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)


class Subscription:
    """Handle returned by ``subscribe``; ``cancel()`` stops delivery."""

    def __init__(self, listeners: Listeners, token: int):
        self._listeners = listeners
        self._token = token
        self.active = True

    def cancel(self) -> None:
        if self.active:
            self._listeners._remove(self._token)
            self.active = False

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc: object) -> None:
        self.cancel()


class Listeners:
    """An ordered set of callbacks.

    Callbacks are invoked in registration order. A callback that raises is
    logged and the remaining callbacks still run.
    """

    def __init__(self) -> None:
        self._callbacks: dict[int, Callable[..., Any]] = {}
        self._next_token = 0
        self._lock = threading.Lock()

    def subscribe(self, callback: Callable[..., Any]) -> Subscription:
        with self._lock:
            token = self._next_token
            self._next_token += 1
            self._callbacks[token] = callback
        return Subscription(self, token)

    def _remove(self, token: int) -> None:
        with self._lock:
            self._callbacks.pop(token, None)

    def emit(self, *args: Any) -> None:
        with self._lock:
            callbacks = list(self._callbacks.values())
        for callback in callbacks:
            try:
                callback(*args)
            except Exception:
                logger.exception("Listener %r failed", callback)

    def __len__(self) -> int:
        return len(self._callbacks)
