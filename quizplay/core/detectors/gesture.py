"""Touch screenshot gesture detection (multi-finger touch followed by blur)."""

from __future__ import annotations

from quizplay.constants.integrity_constants import (
    GESTURE_BLUR_WINDOW_MS,
    GESTURE_MIN_TOUCH_POINTS,
)
from quizplay.core.detectors.base import Detector, DetectorContext
from quizplay.core.events import SessionEventType
from quizplay.core.models import IntegrityEventKind


class GestureDetector(Detector):
    name = "gesture"

    def __init__(
        self,
        min_touch_points: int = GESTURE_MIN_TOUCH_POINTS,
        blur_window_ms: int = GESTURE_BLUR_WINDOW_MS,
    ) -> None:
        super().__init__()
        self.min_touch_points = min_touch_points
        self.blur_window_ms = blur_window_ms
        self._gesture_started_ms: float | None = None

    def _on_start(self, context: DetectorContext) -> None:
        self._gesture_started_ms = None
        self._subscribe(SessionEventType.TOUCH, self._handle_touch)
        self._subscribe(SessionEventType.BLUR, self._handle_blur)

    def _handle_touch(self, point_count: int) -> None:
        if self._context is None or point_count < self.min_touch_points:
            return
        self._gesture_started_ms = self._context.scheduler.now_ms()

    def _handle_blur(self) -> None:
        if self._context is None or self._gesture_started_ms is None:
            return
        elapsed = self._context.scheduler.now_ms() - self._gesture_started_ms
        self._gesture_started_ms = None
        if elapsed <= self.blur_window_ms:
            self._report(
                IntegrityEventKind.SCREENSHOT_GESTURE,
                f"Window lost focus {int(elapsed)} ms after a multi-touch gesture",
            )
