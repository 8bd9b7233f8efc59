"""Clock, timer and background-task abstractions the core is driven by.

Architecture note:
    The core never calls ``time``, creates timers or starts threads on its
    own. The Qt layer provides QTimer-backed timers and a task runner that
    performs backend calls off the GUI thread; tests provide a virtual clock
    and an inline runner. Every callback the core receives runs on the one
    GUI thread, so callbacks never overlap.
"""

from __future__ import annotations

from typing import Any, Callable, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None:
        """Stop the timer. Cancelling twice is harmless."""

    @property
    def active(self) -> bool:
        ...


class Scheduler(Protocol):
    def now_ms(self) -> float:
        """Monotonic milliseconds."""

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        ...

    def call_repeating(self, interval_ms: int, callback: Callable[[], None]) -> TimerHandle:
        ...


class TaskRunner(Protocol):
    def run(
        self,
        task: Callable[[], Any],
        on_success: Callable[[Any], None],
        on_failure: Callable[[Exception], None],
    ) -> None:
        """Run ``task`` and hand its result or exception to one of the callbacks.

        ``task`` may run on another thread; the callbacks always run on the
        thread that owns the session.
        """


class InlineTaskRunner:
    """Runs tasks synchronously on the calling thread."""

    def run(
        self,
        task: Callable[[], Any],
        on_success: Callable[[Any], None],
        on_failure: Callable[[Exception], None],
    ) -> None:
        try:
            result = task()
        except Exception as exc:
            on_failure(exc)
            return
        on_success(result)
