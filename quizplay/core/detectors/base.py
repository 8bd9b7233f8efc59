"""Detector interface shared by every integrity detector."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from quizplay.core.events import EventHandler, SessionEventHub, SessionEventType
from quizplay.core.models import EnvironmentSnapshot, IntegrityEvent, IntegrityEventKind
from quizplay.core.scheduler import Scheduler, TimerHandle


@dataclass(slots=True)
class DetectorContext:
    """What a running detector may see and do."""

    scheduler: Scheduler
    hub: SessionEventHub
    sink: Callable[[IntegrityEvent], None]
    current_question_index: Callable[[], int]
    is_active: Callable[[], bool]
    environment: EnvironmentSnapshot | None = None

    def report(
        self,
        kind: IntegrityEventKind,
        detail: str = "",
        *,
        duration_ms: int | None = None,
        question_index: int | None = None,
    ) -> None:
        if question_index is None:
            question_index = self.current_question_index()
        self.sink(
            IntegrityEvent(
                kind=kind,
                question_index=question_index,
                at_ms=self.scheduler.now_ms(),
                detail=detail,
                duration_ms=duration_ms,
            )
        )


class Detector:
    """Passive detector with explicit start/stop lifecycle.

    Subclasses register hub subscriptions and timers through ``_subscribe`` and
    ``_every`` so that ``stop`` can release all of them.
    """

    name: str = "detector"

    def __init__(self) -> None:
        self._context: DetectorContext | None = None
        self._unsubscribers: list[Callable[[], None]] = []
        self._timers: list[TimerHandle] = []

    @property
    def running(self) -> bool:
        return self._context is not None

    def start(self, context: DetectorContext) -> None:
        if self._context is not None:
            return
        self._context = context
        self._on_start(context)

    def stop(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        for timer in self._timers:
            timer.cancel()
        self._timers.clear()
        if self._context is not None:
            self._context = None
            self._on_stop()

    def _on_start(self, context: DetectorContext) -> None:
        raise NotImplementedError

    def _on_stop(self) -> None:
        pass

    def _running_context(self) -> DetectorContext:
        if self._context is None:
            raise RuntimeError(f"Detector {self.name} is not running")
        return self._context

    def _subscribe(self, event_type: SessionEventType, handler: EventHandler) -> None:
        self._unsubscribers.append(self._running_context().hub.subscribe(event_type, handler))

    def _every(self, interval_ms: int, callback: Callable[[], None]) -> None:
        self._timers.append(self._running_context().scheduler.call_repeating(interval_ms, callback))

    def _report(self, kind: IntegrityEventKind, detail: str = "", **kwargs: object) -> None:
        context = self._context
        if context is None or not context.is_active():
            return
        context.report(kind, detail, **kwargs)
