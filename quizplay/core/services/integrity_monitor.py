"""Service that aggregates detector output into session integrity counters."""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from quizplay.core.detectors import Detector, DetectorContext, default_detectors
from quizplay.core.events import SessionEventHub
from quizplay.core.models import (
    EnvironmentSnapshot,
    IntegrityCounters,
    IntegrityEvent,
    IntegrityEventKind,
    Notification,
    NotificationLevel,
)
from quizplay.core.scheduler import Scheduler

logger = logging.getLogger(__name__)

_EVENT_TITLES: dict[IntegrityEventKind, str] = {
    IntegrityEventKind.TAB_SWITCH: "Tab switch detected",
    IntegrityEventKind.MOBILE_SCREENSHOT: "Screenshot attempt detected",
    IntegrityEventKind.SCREENSHOT_SHORTCUT: "Screenshot attempt detected",
    IntegrityEventKind.SCREENSHOT_GESTURE: "Screenshot attempt detected",
    IntegrityEventKind.AFK: "Inactivity detected",
    IntegrityEventKind.DEVTOOLS_SHORTCUT: "Developer tools are disabled",
    IntegrityEventKind.SUSPICIOUS_EXTENSION: "Suspicious browser extension",
}


def describe_event(event: IntegrityEvent) -> Notification:
    """Toast shown to the player for a detection."""
    return Notification(
        level=NotificationLevel.WARNING,
        title=_EVENT_TITLES.get(event.kind, "Integrity event"),
        message=f"{event.detail}. This has been recorded." if event.detail else "This has been recorded.",
    )


class IntegrityMonitor:
    """Owns the detector set and the counters they feed.

    Detectors only ever reach the counters through ``record``, which replaces
    the counters with a value derived from the previous one.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        hub: SessionEventHub,
        detectors: Iterable[Detector] | None = None,
        current_question_index: Callable[[], int] = lambda: 0,
        is_active: Callable[[], bool] = lambda: True,
    ) -> None:
        self._scheduler = scheduler
        self._hub = hub
        self._detectors: list[Detector] = list(detectors) if detectors is not None else default_detectors()
        self._current_question_index = current_question_index
        self._is_active = is_active
        self._counters = IntegrityCounters()
        self._events: list[IntegrityEvent] = []
        self._listeners: list[Callable[[IntegrityEvent], None]] = []
        self._running = False

    @property
    def counters(self) -> IntegrityCounters:
        return self._counters

    @property
    def events(self) -> tuple[IntegrityEvent, ...]:
        return tuple(self._events)

    @property
    def detectors(self) -> tuple[Detector, ...]:
        return tuple(self._detectors)

    def is_running(self) -> bool:
        return self._running

    def add_listener(self, listener: Callable[[IntegrityEvent], None]) -> None:
        self._listeners.append(listener)

    def record(self, event: IntegrityEvent) -> None:
        self._counters = self._counters.with_event(event)
        self._events.append(event)
        logger.warning(
            "Integrity event %s on question %d: %s",
            event.kind.value,
            event.question_index + 1,
            event.detail,
        )
        for listener in list(self._listeners):
            listener(event)

    def start(self, environment: EnvironmentSnapshot | None = None) -> None:
        if self._running:
            return
        context = DetectorContext(
            scheduler=self._scheduler,
            hub=self._hub,
            sink=self.record,
            current_question_index=self._current_question_index,
            is_active=self._is_active,
            environment=environment,
        )
        self._running = True
        for detector in self._detectors:
            detector.start(context)
        logger.debug("Started %d integrity detectors", len(self._detectors))

    def stop(self) -> None:
        for detector in self._detectors:
            detector.stop()
        if self._running:
            logger.debug("Stopped integrity detectors")
        self._running = False
