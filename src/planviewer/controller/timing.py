"""
Input Timing Helpers
====================
The only time-based behaviour of the viewer: throttling wheel input and
deferring expensive recomputation until input settles.

Classes:
    RateLimiter: Lets at most one event through per interval.
    TrailingDebounce: Restartable single-shot QTimer that fires once input stops.
"""
from __future__ import annotations

import time
from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer, Signal


class RateLimiter:
    """Drop events that arrive within `interval_ms` of the last accepted one."""

    def __init__(self, interval_ms: int, clock: Callable[[], float] = time.monotonic) -> None:
        self.interval_ms = interval_ms
        self._clock = clock
        self._last: Optional[float] = None

    def allow(self, now: Optional[float] = None) -> bool:
        """
        Args:
            now: Timestamp in seconds; defaults to the limiter's clock.
        """
        if now is None:
            now = self._clock()
        if self._last is not None and (now - self._last) * 1000.0 < self.interval_ms:
            return False
        self._last = now
        return True

    def reset(self) -> None:
        self._last = None


class TrailingDebounce(QObject):
    """
    Every `schedule()` cancels the pending commit and starts a new one, so
    `triggered` is emitted once, `interval` ms after the last call.
    """
    triggered = Signal()

    def __init__(self, interval_ms: int, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self.triggered.emit)

    @property
    def is_pending(self) -> bool:
        return self._timer.isActive()

    def schedule(self, interval_ms: Optional[int] = None) -> None:
        if interval_ms is not None:
            self._timer.setInterval(interval_ms)
        self._timer.start()

    def cancel(self) -> None:
        self._timer.stop()

    def flush(self) -> None:
        """Fire a pending commit now instead of waiting for the timer."""
        if self._timer.isActive():
            self._timer.stop()
            self.triggered.emit()
