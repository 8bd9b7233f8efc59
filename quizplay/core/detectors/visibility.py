"""Tab-switch and mobile-screenshot detection from visibility round trips."""

from __future__ import annotations

from quizplay.constants.integrity_constants import (
    SCREENSHOT_MIN_HIDDEN_MS,
    TAB_SWITCH_MIN_HIDDEN_MS,
)
from quizplay.core.detectors.base import Detector, DetectorContext
from quizplay.core.events import SessionEventType
from quizplay.core.models import IntegrityEventKind


def classify_hidden_duration(duration_ms: float) -> IntegrityEventKind | None:
    """Map how long the page was hidden to the event it most likely was.

    A short blip is what mobile OSes produce while taking a screenshot; a
    longer absence is treated as switching to another tab or app.
    """
    if duration_ms > TAB_SWITCH_MIN_HIDDEN_MS:
        return IntegrityEventKind.TAB_SWITCH
    if duration_ms >= SCREENSHOT_MIN_HIDDEN_MS:
        return IntegrityEventKind.MOBILE_SCREENSHOT
    return None


class VisibilityDetector(Detector):
    name = "visibility"

    def __init__(self) -> None:
        super().__init__()
        self._hidden_since_ms: float | None = None

    def _on_start(self, context: DetectorContext) -> None:
        self._hidden_since_ms = None
        self._subscribe(SessionEventType.VISIBILITY, self._handle_visibility)

    def _on_stop(self) -> None:
        self._hidden_since_ms = None

    def _handle_visibility(self, hidden: bool) -> None:
        if self._context is None:
            return
        now = self._context.scheduler.now_ms()
        if hidden:
            if self._hidden_since_ms is None:
                self._hidden_since_ms = now
            return

        if self._hidden_since_ms is None:
            return
        duration_ms = int(now - self._hidden_since_ms)
        self._hidden_since_ms = None
        kind = classify_hidden_duration(duration_ms)
        if kind is None:
            return
        self._report(kind, f"Page hidden for {duration_ms} ms", duration_ms=duration_ms)
