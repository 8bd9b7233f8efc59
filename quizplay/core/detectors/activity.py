"""Away-from-keyboard detection."""

from __future__ import annotations

from quizplay.constants.integrity_constants import AFK_CHECK_INTERVAL_MS, AFK_THRESHOLD_MS
from quizplay.core.detectors.base import Detector, DetectorContext
from quizplay.core.events import SessionEventType
from quizplay.core.models import IntegrityEventKind


class ActivityDetector(Detector):
    """Reports each idle stretch longer than the threshold once.

    Idle time is checked on a recurring timer and again whenever activity
    resumes, so a stretch that ends between two timer checks is still caught.
    """

    name = "activity"

    def __init__(
        self,
        threshold_ms: int = AFK_THRESHOLD_MS,
        check_interval_ms: int = AFK_CHECK_INTERVAL_MS,
    ) -> None:
        super().__init__()
        self.threshold_ms = threshold_ms
        self.check_interval_ms = check_interval_ms
        self._last_activity_ms: float = 0.0
        self._reported: tuple[float, int] | None = None

    @property
    def last_activity_ms(self) -> float:
        return self._last_activity_ms

    def _on_start(self, context: DetectorContext) -> None:
        self._last_activity_ms = context.scheduler.now_ms()
        self._reported = None
        self._subscribe(SessionEventType.ACTIVITY, self._handle_activity)
        self._every(self.check_interval_ms, self._check_idle)

    def _handle_activity(self, kind: str) -> None:
        if self._context is None:
            return
        self._check_idle()
        self._last_activity_ms = self._context.scheduler.now_ms()

    def _check_idle(self) -> None:
        context = self._context
        if context is None or not context.is_active():
            return
        idle_ms = int(context.scheduler.now_ms() - self._last_activity_ms)
        if idle_ms < self.threshold_ms:
            return
        question_index = context.current_question_index()
        stretch = (self._last_activity_ms, question_index)
        if stretch == self._reported:
            return
        self._reported = stretch
        self._report(
            IntegrityEventKind.AFK,
            f"Inactive for {idle_ms // 1000} s on question {question_index + 1}",
            duration_ms=idle_ms,
            question_index=question_index,
        )
