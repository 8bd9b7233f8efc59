"""QTimer-backed scheduler used when the core runs inside the Qt event loop."""

from __future__ import annotations

import time
from typing import Callable

from PySide6.QtCore import QObject, QTimer


class QtTimerHandle:
    def __init__(self, timer: QTimer) -> None:
        self._timer = timer

    @property
    def active(self) -> bool:
        return self._timer is not None and self._timer.isActive()

    def cancel(self) -> None:
        if self._timer is None:
            return
        self._timer.stop()
        self._timer.deleteLater()
        self._timer = None


class QtScheduler:
    """Implements the core ``Scheduler`` protocol on top of QTimer."""

    def __init__(self, parent: QObject | None = None) -> None:
        self._parent = parent

    def now_ms(self) -> float:
        return time.monotonic() * 1000

    def _make_timer(self, interval_ms: int, single_shot: bool) -> QTimer:
        timer = QTimer(self._parent)
        timer.setInterval(max(0, int(interval_ms)))
        timer.setSingleShot(single_shot)
        return timer

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> QtTimerHandle:
        timer = self._make_timer(delay_ms, single_shot=True)
        handle = QtTimerHandle(timer)

        def fire() -> None:
            handle.cancel()
            callback()

        timer.timeout.connect(fire)
        timer.start()
        return handle

    def call_repeating(self, interval_ms: int, callback: Callable[[], None]) -> QtTimerHandle:
        timer = self._make_timer(interval_ms, single_shot=False)
        timer.timeout.connect(callback)
        timer.start()
        return QtTimerHandle(timer)
