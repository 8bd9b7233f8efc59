"""Service that packages answers and integrity telemetry into one submission."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable, Protocol

from quizplay.constants.network_constants import (
    SUBMIT_BACKOFF_MULTIPLIER,
    SUBMIT_INITIAL_BACKOFF_MS,
    SUBMIT_MAX_ATTEMPTS,
)
from quizplay.core.errors import ApiError
from quizplay.core.models import (
    AnswerRecord,
    IntegrityCounters,
    SubmissionPayload,
    SubmissionResult,
)
from quizplay.core.schemas import SubmitRequestSchema
from quizplay.core.scheduler import InlineTaskRunner, Scheduler, TaskRunner, TimerHandle
from quizplay.core.services.pending_queue import PendingSubmissionQueue

logger = logging.getLogger(__name__)


class SubmitsAnswers(Protocol):
    def submit_answers(self, payload: SubmissionPayload) -> SubmissionResult:
        ...


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Bounded exponential backoff for automatic submissions."""

    max_attempts: int = SUBMIT_MAX_ATTEMPTS
    initial_delay_ms: int = SUBMIT_INITIAL_BACKOFF_MS
    multiplier: float = SUBMIT_BACKOFF_MULTIPLIER

    def delay_after(self, failed_attempts: int) -> int:
        return int(self.initial_delay_ms * self.multiplier ** (failed_attempts - 1))


def assemble_payload(
    quiz_id: str,
    confirmed: list[AnswerRecord],
    pending: AnswerRecord | None,
    counters: IntegrityCounters,
    auto_submit: bool,
) -> SubmissionPayload:
    """Merge answers with telemetry.

    A pending (unconfirmed) answer is only included for manual submissions;
    a question in progress when time runs out counts as unanswered.
    """
    answers = list(confirmed)
    if not auto_submit and pending is not None:
        answers.append(pending)
    return SubmissionPayload(
        quiz_id=quiz_id,
        answers=tuple(answers),
        counters=counters,
        auto_submit=auto_submit,
    )


SuccessCallback = Callable[[SubmissionResult], None]
# Receives the error and whether the session can no longer submit
FailureCallback = Callable[[ApiError, bool], None]


class SubmissionAssembler:
    """Sends at most one successful submission per session.

    Manual submissions are tried once; on failure the guard is released so the
    player can try again. Automatic submissions retry transient failures on the
    scheduler and, when retries run out, land in the pending queue. The backend
    call itself goes through the task runner, so it never blocks the GUI thread.
    """

    def __init__(
        self,
        client: SubmitsAnswers,
        scheduler: Scheduler,
        retry_policy: RetryPolicy | None = None,
        pending_queue: PendingSubmissionQueue | None = None,
        runner: TaskRunner | None = None,
    ) -> None:
        self._client = client
        self._scheduler = scheduler
        self._retry_policy = retry_policy or RetryPolicy()
        self._pending_queue = pending_queue
        self._runner = runner or InlineTaskRunner()
        self._submitting = False
        self._completed = False
        self._closed = False
        self._retry_handle: TimerHandle | None = None
        self._in_flight: SubmissionPayload | None = None
        self._attempts = 0

    @property
    def submitting(self) -> bool:
        return self._submitting

    @property
    def completed(self) -> bool:
        return self._completed

    @property
    def attempts(self) -> int:
        return self._attempts

    def submit(
        self,
        payload: SubmissionPayload,
        on_success: SuccessCallback,
        on_failure: FailureCallback,
    ) -> bool:
        """Start a submission. Returns False when one is already running or done."""
        if self._submitting or self._completed or self._closed:
            logger.debug("Ignoring duplicate submission for quiz %s", payload.quiz_id)
            return False
        self._submitting = True
        self._in_flight = payload
        self._attempts = 0
        logger.info(
            "Submitting %d answers for quiz %s (auto=%s)",
            len(payload.answers),
            payload.quiz_id,
            payload.auto_submit,
        )
        self._attempt(payload, on_success, on_failure)
        return True

    def _attempt(
        self,
        payload: SubmissionPayload,
        on_success: SuccessCallback,
        on_failure: FailureCallback,
    ) -> None:
        self._retry_handle = None
        self._attempts += 1

        def succeeded(result: SubmissionResult) -> None:
            self._handle_success(payload, result, on_success)

        def failed(error: Exception) -> None:
            if not isinstance(error, ApiError):
                raise error
            self._handle_failure(payload, error, on_success, on_failure)

        self._runner.run(lambda: self._client.submit_answers(payload), succeeded, failed)

    def _handle_success(
        self,
        payload: SubmissionPayload,
        result: SubmissionResult,
        on_success: SuccessCallback,
    ) -> None:
        self._completed = True
        self._submitting = False
        self._in_flight = None
        logger.info("Quiz %s submitted: score=%d rank=%d", payload.quiz_id, result.total_score, result.rank)
        if self._closed:
            return
        on_success(result)

    def _handle_failure(
        self,
        payload: SubmissionPayload,
        error: ApiError,
        on_success: SuccessCallback,
        on_failure: FailureCallback,
    ) -> None:
        logger.error(
            "Submission attempt %d for quiz %s failed: %s",
            self._attempts,
            payload.quiz_id,
            error,
        )
        if self._closed:
            # The session is gone; keep the attempt if it can still be delivered
            if error.is_transient:
                self._persist(payload)
            self._submitting = False
            self._in_flight = None
            return

        if not payload.auto_submit:
            self._submitting = False
            self._in_flight = None
            on_failure(error, False)
            return

        if error.is_transient and self._attempts < self._retry_policy.max_attempts:
            delay_ms = self._retry_policy.delay_after(self._attempts)
            logger.info("Retrying submission for quiz %s in %d ms", payload.quiz_id, delay_ms)
            self._retry_handle = self._scheduler.call_later(
                delay_ms, lambda: self._attempt(payload, on_success, on_failure)
            )
            return

        if error.is_transient:
            self._persist(payload)
        self._completed = True
        self._submitting = False
        self._in_flight = None
        on_failure(error, True)

    def _persist(self, payload: SubmissionPayload) -> None:
        if self._pending_queue is None:
            return
        body = SubmitRequestSchema.from_payload(payload).to_body()
        self._pending_queue.enqueue(payload.quiz_id, body)

    def close(self) -> None:
        """Stop delivering outcomes; a scheduled retry is cancelled and its payload queued.

        A request already running keeps going and is queued if it fails transiently.
        """
        self._closed = True
        if self._retry_handle is None:
            return
        self._retry_handle.cancel()
        self._retry_handle = None
        if self._in_flight is not None:
            self._persist(self._in_flight)
            self._in_flight = None
        self._submitting = False
        self._completed = True
