"""Cooperative cancellation shared by the poller and the session connector."""

import threading
from collections.abc import Callable

from cslaunch.core.errors import CanceledError


class Cancellation:
    """A cancellation token.

    cancel() may be called from any thread (typically a signal handler).
    Long-running operations check the token between steps and register
    callbacks to release resources they hold when it fires.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Cancel the token and run registered callbacks once."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks = list(self._callbacks)
            self._callbacks.clear()
        for callback in callbacks:
            callback()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise CanceledError()

    def on_cancel(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register a callback to run on cancel.

        If the token is already cancelled the callback runs immediately.

        Returns:
            A function that unregisters the callback
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return lambda: self._unregister(callback)
        callback()
        return lambda: None

    def _unregister(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)
