"""Whole-quiz countdown that forces submission at zero."""

from __future__ import annotations

import logging
from typing import Callable

from quizplay.constants.quiz_constants import COUNTDOWN_TICK_INTERVAL_MS, LOW_TIME_THRESHOLD_MS
from quizplay.core.scheduler import Scheduler, TimerHandle

logger = logging.getLogger(__name__)


def format_time(remaining_ms: float) -> str:
    """Render milliseconds as ``m:ss``."""
    total_seconds = max(0, int(remaining_ms // 1000))
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes}:{seconds:02d}"


class CountdownTimer:
    """Counts a wall-clock budget down on a fixed tick.

    Remaining time never increases. ``on_expired`` fires exactly once, after
    which the tick timer is released and no further ticks happen.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        on_expired: Callable[[], None],
        tick_interval_ms: int = COUNTDOWN_TICK_INTERVAL_MS,
    ) -> None:
        self._scheduler = scheduler
        self._on_expired = on_expired
        self._tick_interval_ms = tick_interval_ms
        self._remaining_ms: float | None = None
        self._total_ms: float = 0.0
        self._handle: TimerHandle | None = None
        self._last_tick_ms: float = 0.0
        self._expired = False
        self._tick_listeners: list[Callable[[float], None]] = []

    @property
    def remaining_ms(self) -> float | None:
        return self._remaining_ms

    @property
    def expired(self) -> bool:
        return self._expired

    @property
    def running(self) -> bool:
        return self._handle is not None and self._handle.active

    @property
    def is_low_time(self) -> bool:
        return self._remaining_ms is not None and 0 < self._remaining_ms < LOW_TIME_THRESHOLD_MS

    @property
    def fraction_remaining(self) -> float:
        if self._remaining_ms is None or self._total_ms <= 0:
            return 0.0
        return max(0.0, min(1.0, self._remaining_ms / self._total_ms))

    def add_tick_listener(self, listener: Callable[[float], None]) -> None:
        self._tick_listeners.append(listener)

    def start(self, time_limit_seconds: int) -> None:
        if self._remaining_ms is not None:
            return
        self._total_ms = float(time_limit_seconds * 1000)
        self._remaining_ms = self._total_ms
        logger.info("Countdown started with %s remaining", format_time(self._remaining_ms))
        if self._remaining_ms <= 0:
            self._expire()
            return
        self.resume()

    def pause(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def resume(self) -> None:
        if self._expired or self._remaining_ms is None or self.running:
            return
        self._last_tick_ms = self._scheduler.now_ms()
        self._handle = self._scheduler.call_repeating(self._tick_interval_ms, self._tick)

    def stop(self) -> None:
        self.pause()

    def _tick(self) -> None:
        if self._expired or self._remaining_ms is None:
            self.pause()
            return
        now = self._scheduler.now_ms()
        elapsed = max(0.0, now - self._last_tick_ms)
        self._last_tick_ms = now
        self._remaining_ms = max(0.0, self._remaining_ms - elapsed)
        for listener in list(self._tick_listeners):
            listener(self._remaining_ms)
        if self._remaining_ms <= 0:
            self._expire()

    def _expire(self) -> None:
        if self._expired:
            return
        self._expired = True
        self.pause()
        logger.info("Countdown reached zero")
        self._on_expired()
