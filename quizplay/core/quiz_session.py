"""Facade for one timed quiz play-through.

Owns the sequencer, countdown, integrity monitor and submission assembler,
and guarantees that every timer and detector subscription is released on
every exit path (submission, abandonment, ``close``).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Protocol

from quizplay.constants.ui_constants import LEADERBOARD_ROUTE_TEMPLATE, QUIZZES_ROUTE
from quizplay.core.detectors import Detector
from quizplay.core.errors import (
    AlreadyAttemptedError,
    ApiError,
    NotActiveError,
    QuizPlayError,
    QuizUnavailableError,
)
from quizplay.core.events import SessionEventHub
from quizplay.core.models import (
    AnswerRecord,
    AttemptStatus,
    EnvironmentSnapshot,
    Feedback,
    IntegrityCounters,
    IntegrityEvent,
    Notification,
    NotificationLevel,
    Quiz,
    QuizQuestion,
    QuizStatus,
    SubmissionPayload,
    SubmissionResult,
)
from quizplay.core.scheduler import InlineTaskRunner, Scheduler, TaskRunner
from quizplay.core.services.countdown import CountdownTimer, format_time
from quizplay.core.services.integrity_monitor import IntegrityMonitor, describe_event
from quizplay.core.services.pending_queue import PendingSubmissionQueue
from quizplay.core.services.sequencer import (
    AnswerOutcome,
    QuestionSequencer,
    SessionState,
    TERMINAL_STATES,
)
from quizplay.core.services.submission import RetryPolicy, SubmissionAssembler, assemble_payload

logger = logging.getLogger(__name__)


class QuizBackend(Protocol):
    def get_quiz(self, quiz_id: str) -> Quiz:
        ...

    def check_attempt(self, quiz_id: str) -> AttemptStatus:
        ...

    def submit_answers(self, payload: SubmissionPayload) -> SubmissionResult:
        ...

    def submit_body(self, quiz_id: str, body: dict) -> SubmissionResult:
        ...


@dataclass(frozen=True, slots=True)
class _FetchedQuiz:
    quiz: Quiz
    attempt: AttemptStatus | None
    delivered: list[SubmissionResult]


class QuizSession:
    """Timed quiz session with integrity monitoring."""

    def __init__(
        self,
        client: QuizBackend,
        scheduler: Scheduler,
        *,
        hub: SessionEventHub | None = None,
        detectors: Iterable[Detector] | None = None,
        pending_queue: PendingSubmissionQueue | None = None,
        retry_policy: RetryPolicy | None = None,
        reveal_feedback: bool = True,
        shuffle_seed: int | None = None,
        runner: TaskRunner | None = None,
    ) -> None:
        self.hub = hub or SessionEventHub()
        self._client = client
        self._scheduler = scheduler
        self._pending_queue = pending_queue
        self._runner = runner or InlineTaskRunner()

        self._sequencer = QuestionSequencer(scheduler, reveal_feedback=reveal_feedback, seed=shuffle_seed)
        self._countdown = CountdownTimer(scheduler, on_expired=self._handle_time_expired)
        self._monitor = IntegrityMonitor(
            scheduler,
            self.hub,
            detectors,
            current_question_index=lambda: self._sequencer.current_index,
            is_active=self.is_active,
        )
        self._assembler = SubmissionAssembler(
            client, scheduler, retry_policy, pending_queue, runner=self._runner
        )

        self._quiz_id: str | None = None
        self._environment: EnvironmentSnapshot | None = None
        self._result: SubmissionResult | None = None
        self._load_error: QuizPlayError | None = None
        self._closed = False

        self._notification_listeners: list[Callable[[Notification], None]] = []
        self._navigation_listeners: list[Callable[[str], None]] = []
        self._change_listeners: list[Callable[[QuizSession], None]] = []

        self._sequencer.add_state_listener(self._handle_state_changed)
        self._monitor.add_listener(self._handle_integrity_event)

    # --- Observers ---

    def add_notification_listener(self, listener: Callable[[Notification], None]) -> None:
        self._notification_listeners.append(listener)

    def add_navigation_listener(self, listener: Callable[[str], None]) -> None:
        self._navigation_listeners.append(listener)

    def add_change_listener(self, listener: Callable[[QuizSession], None]) -> None:
        self._change_listeners.append(listener)

    def add_tick_listener(self, listener: Callable[[float], None]) -> None:
        self._countdown.add_tick_listener(listener)

    def _notify(self, level: NotificationLevel, title: str, message: str) -> None:
        notification = Notification(level=level, title=title, message=message)
        for listener in list(self._notification_listeners):
            listener(notification)

    def _navigate(self, route: str) -> None:
        logger.info("Navigating to %s", route)
        for listener in list(self._navigation_listeners):
            listener(route)

    def _changed(self) -> None:
        for listener in list(self._change_listeners):
            listener(self)

    # --- Read-only state ---

    @property
    def state(self) -> SessionState:
        return self._sequencer.state

    @property
    def quiz(self) -> Quiz | None:
        return self._sequencer.quiz

    @property
    def questions(self) -> list[QuizQuestion]:
        return self._sequencer.questions

    @property
    def current_question(self) -> QuizQuestion | None:
        return self._sequencer.current_question

    @property
    def current_index(self) -> int:
        return self._sequencer.current_index

    @property
    def question_number(self) -> int:
        return self._sequencer.question_number

    @property
    def question_count(self) -> int:
        return self._sequencer.question_count

    @property
    def progress_fraction(self) -> float:
        return self._sequencer.progress_fraction

    @property
    def selected_option_id(self) -> str | None:
        return self._sequencer.selected_option_id

    @property
    def feedback(self) -> Feedback | None:
        return self._sequencer.feedback

    @property
    def answers(self) -> list[AnswerRecord]:
        return self._sequencer.answers

    @property
    def all_answered(self) -> bool:
        return self._sequencer.all_answered

    @property
    def counters(self) -> IntegrityCounters:
        return self._monitor.counters

    @property
    def integrity_events(self) -> tuple[IntegrityEvent, ...]:
        return self._monitor.events

    @property
    def monitor(self) -> IntegrityMonitor:
        return self._monitor

    @property
    def remaining_ms(self) -> float | None:
        return self._countdown.remaining_ms

    @property
    def time_fraction_remaining(self) -> float:
        return self._countdown.fraction_remaining

    @property
    def formatted_time(self) -> str:
        remaining = self._countdown.remaining_ms
        return format_time(remaining) if remaining is not None else "0:00"

    @property
    def is_low_time(self) -> bool:
        return self._countdown.is_low_time

    @property
    def countdown_running(self) -> bool:
        return self._countdown.running

    @property
    def submitting(self) -> bool:
        return self._assembler.submitting

    @property
    def result(self) -> SubmissionResult | None:
        return self._result

    @property
    def load_error(self) -> QuizPlayError | None:
        """Why the last ``initialize`` could not make the quiz playable, if it failed."""
        return self._load_error

    @property
    def closed(self) -> bool:
        return self._closed

    def is_active(self) -> bool:
        return not self._closed and self.state in (SessionState.ANSWERING, SessionState.SHOWING_FEEDBACK)

    # --- Lifecycle ---

    def initialize(self, quiz_id: str) -> None:
        """Fetch and validate the quiz, then prepare the shuffled question order.

        The backend calls go through the task runner. Success moves the session
        to ``READY``; a failure is stored in ``load_error`` and reported through
        the notification and navigation listeners.
        """
        if self._closed or self.state is not SessionState.LOADING:
            return
        self._quiz_id = quiz_id
        self._load_error = None
        self._runner.run(
            lambda: self._fetch_quiz(quiz_id),
            self._handle_quiz_fetched,
            self._handle_fetch_failed,
        )

    def _fetch_quiz(self, quiz_id: str) -> _FetchedQuiz:
        # Runs on the task runner's thread: backend and disk only, no session state
        delivered = self._pending_queue.flush(self._client) if self._pending_queue is not None else []
        quiz = self._client.get_quiz(quiz_id)
        attempt = self._client.check_attempt(quiz_id) if quiz.status is QuizStatus.ACTIVE else None
        return _FetchedQuiz(quiz=quiz, attempt=attempt, delivered=[result for _, result in delivered])

    def _handle_quiz_fetched(self, fetched: _FetchedQuiz) -> None:
        if self._closed:
            return
        for result in fetched.delivered:
            self._notify(
                NotificationLevel.SUCCESS,
                "Saved quiz submitted",
                f"Your earlier attempt was delivered: {result.total_score} points, rank #{result.rank}.",
            )

        quiz_id = self._quiz_id
        quiz = fetched.quiz
        if quiz.status is not QuizStatus.ACTIVE:
            self._fail_load(
                NotActiveError(quiz_id, quiz.status.value),
                "Quiz Not Available",
                "This quiz is not currently active.",
                QUIZZES_ROUTE,
            )
            return
        if fetched.attempt is not None and fetched.attempt.has_attempted:
            self._fail_load(
                AlreadyAttemptedError(quiz_id),
                "Already Attempted",
                "You have already completed this quiz.",
                LEADERBOARD_ROUTE_TEMPLATE.format(quiz_id=quiz_id),
            )
            return
        try:
            self._sequencer.load(quiz)
        except QuizUnavailableError as exc:
            self._fail_load(exc, "Error", "Quiz not found or has no questions.", QUIZZES_ROUTE)
            return
        logger.info("Loaded quiz %s with %d questions", quiz_id, len(quiz.questions))

    def _handle_fetch_failed(self, error: Exception) -> None:
        if not isinstance(error, ApiError):
            raise error
        if self._closed:
            return
        self._fail_load(error, "Error", error.message or "Failed to load quiz", QUIZZES_ROUTE)

    def _fail_load(self, error: QuizPlayError, title: str, message: str, route: str) -> None:
        logger.info("Quiz %s cannot be played: %s", self._quiz_id, error)
        self._load_error = error
        self._notify(NotificationLevel.ERROR, title, message)
        self._navigate(route)
        self._changed()

    def start(self, environment: EnvironmentSnapshot | None = None) -> None:
        """Begin answering: the countdown and all detectors start here."""
        if self._closed or self.state is not SessionState.READY:
            return
        quiz = self._sequencer.quiz
        if quiz is None:
            return
        self._environment = environment
        self._sequencer.begin()
        self._monitor.start(environment)
        self._countdown.start(quiz.time_limit_seconds)

    def close(self) -> None:
        """Release every timer and listener. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._release_resources()
        self._assembler.close()
        logger.debug("Session for quiz %s closed", self._quiz_id)

    def _release_resources(self) -> None:
        self._countdown.stop()
        self._monitor.stop()
        self._sequencer.dispose()

    def __enter__(self) -> QuizSession:
        return self

    def __exit__(self, exc_type, exc, traceback) -> None:
        self.close()

    # --- Player actions ---

    def select_option(self, option_id: str) -> None:
        if self._closed:
            return
        self._sequencer.select_option(option_id)
        self._changed()

    def confirm_answer(self) -> AnswerOutcome | None:
        if self._closed:
            return None
        outcome = self._sequencer.confirm_answer()
        if outcome is None:
            return None
        if outcome.is_final:
            self.submit(auto_submit=False)
        else:
            self._changed()
        return outcome

    def submit(self, auto_submit: bool = False) -> bool:
        """Send the attempt. Returns False when nothing was sent (already submitted, wrong state)."""
        if self._closed or self._quiz_id is None:
            return False
        if self._assembler.submitting or self._assembler.completed:
            return False
        if self.state not in (SessionState.ANSWERING, SessionState.SHOWING_FEEDBACK):
            return False

        payload = assemble_payload(
            quiz_id=self._quiz_id,
            confirmed=self._sequencer.answers,
            pending=self._sequencer.pending_answer(),
            counters=self._monitor.counters,
            auto_submit=auto_submit,
        )
        self._sequencer.mark_submitting()
        self._countdown.pause()
        self._monitor.stop()
        return self._assembler.submit(payload, self._handle_submit_success, self._handle_submit_failure)

    # --- Internal handlers ---

    def _handle_time_expired(self) -> None:
        logger.warning("Time is up for quiz %s, submitting automatically", self._quiz_id)
        self.submit(auto_submit=True)

    def _handle_submit_success(self, result: SubmissionResult) -> None:
        self._result = result
        self._sequencer.mark_done()
        self._notify(
            NotificationLevel.SUCCESS,
            "Quiz Completed!",
            f"You scored {result.total_score} points and ranked #{result.rank}!",
        )
        self._navigate(LEADERBOARD_ROUTE_TEMPLATE.format(quiz_id=self._quiz_id))

    def _handle_submit_failure(self, error: ApiError, terminal: bool) -> None:
        # Move to the new state first so listeners see where the session ended up
        if terminal:
            logger.error("Giving up on submission for quiz %s", self._quiz_id)
            self._sequencer.mark_abandoned()
        else:
            self._sequencer.resume_answering()
            self._monitor.start(self._environment)
            self._countdown.resume()
        self._notify(NotificationLevel.ERROR, "Error", error.message or "Failed to submit quiz")

    def _handle_state_changed(self, state: SessionState) -> None:
        if state in TERMINAL_STATES:
            self._release_resources()
        self._changed()

    def _handle_integrity_event(self, event: IntegrityEvent) -> None:
        notification = describe_event(event)
        self._notify(notification.level, notification.title, notification.message)
        self._changed()
