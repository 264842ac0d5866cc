"""Timer-based debouncing for persistence writes."""

import logging
import threading
from typing import Any, Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Debouncer(Generic[T]):
    """Coalesce rapid calls into a single delayed invocation.

    Each ``call`` supersedes the pending value and restarts the timer; only the
    most recent value reaches the callback once the delay elapses without a
    newer call. A delay of zero invokes the callback synchronously.
    """

    def __init__(self, callback: Callable[[T], Any], delay_seconds: float):
        """Initialize the debouncer.

        Args:
            callback: Function receiving the latest value.
            delay_seconds: Quiet period before the callback fires.
        """
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")
        self._callback = callback
        self._delay = delay_seconds
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._pending: tuple[T] | None = None

    @property
    def delay_seconds(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        """Whether a value is waiting to be flushed."""
        with self._lock:
            return self._pending is not None

    def call(self, value: T) -> None:
        """Schedule ``value`` for delivery, cancelling any pending one."""
        if self._delay == 0:
            self.cancel()
            self._callback(value)
            return

        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._pending = (value,)
            self._timer = threading.Timer(self._delay, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def flush(self) -> bool:
        """Deliver the pending value now.

        Returns:
            True if a pending value was delivered.
        """
        pending = self._take_pending()
        if pending is None:
            return False
        self._callback(pending[0])
        return True

    def cancel(self) -> None:
        """Drop the pending value without delivering it."""
        if self._take_pending() is not None:
            logger.debug("Cancelled pending debounced call")

    def _take_pending(self) -> tuple[T] | None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            pending, self._pending = self._pending, None
            return pending

    def _fire(self) -> None:
        with self._lock:
            self._timer = None
            pending, self._pending = self._pending, None
        if pending is not None:
            self._callback(pending[0])
