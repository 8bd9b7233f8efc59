"""
Pytest configuration and fixtures
"""
from __future__ import annotations

import pytest

from quizplay.core.errors import ApiError
from quizplay.core.events import SessionEventHub
from quizplay.core.models import (
    AttemptStatus,
    Quiz,
    QuizOption,
    QuizQuestion,
    QuizStatus,
    SubmissionPayload,
    SubmissionResult,
)


class FakeTimer:
    """Timer handle driven by FakeScheduler."""

    def __init__(self, due_ms, interval_ms, callback):
        self.due_ms = due_ms
        self.interval_ms = interval_ms
        self.callback = callback
        self._active = True

    @property
    def active(self):
        return self._active

    def cancel(self):
        self._active = False


class FakeScheduler:
    """Virtual clock: nothing fires until ``advance`` is called."""

    def __init__(self, start_ms=0.0):
        self.now = float(start_ms)
        self.timers = []

    def now_ms(self):
        return self.now

    def call_later(self, delay_ms, callback):
        timer = FakeTimer(self.now + delay_ms, None, callback)
        self.timers.append(timer)
        return timer

    def call_repeating(self, interval_ms, callback):
        timer = FakeTimer(self.now + interval_ms, interval_ms, callback)
        self.timers.append(timer)
        return timer

    @property
    def active_timers(self):
        return [timer for timer in self.timers if timer.active]

    def advance(self, ms):
        """Move the clock forward, firing due timers in time order."""
        target = self.now + ms
        while True:
            due = [timer for timer in self.active_timers if timer.due_ms <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.due_ms)
            self.now = timer.due_ms
            if timer.interval_ms is None:
                timer.cancel()
            else:
                timer.due_ms += timer.interval_ms
            timer.callback()
        self.now = target


class DeferredTaskRunner:
    """Holds background tasks until ``finish`` runs them, like a worker that has not replied yet."""

    def __init__(self):
        self.pending = []

    def run(self, task, on_success, on_failure):
        self.pending.append((task, on_success, on_failure))

    def finish(self):
        """Run every held task and deliver its outcome, oldest first."""
        while self.pending:
            task, on_success, on_failure = self.pending.pop(0)
            try:
                result = task()
            except Exception as exc:
                on_failure(exc)
                continue
            on_success(result)


class FakeQuizClient:
    """In-memory stand-in for QuizApiClient."""

    def __init__(self, quiz, has_attempted=False):
        self.quiz = quiz
        self.has_attempted = has_attempted
        self.submitted = []
        self.submitted_bodies = []
        self.failures = []
        self.result = SubmissionResult(total_score=20, rank=3)

    def fail_next(self, *errors):
        self.failures.extend(errors)

    def get_quiz(self, quiz_id):
        if self.quiz is None:
            raise ApiError("Quiz not found", status_code=404)
        return self.quiz

    def check_attempt(self, quiz_id):
        return AttemptStatus(has_attempted=self.has_attempted)

    def submit_answers(self, payload: SubmissionPayload):
        self.submitted.append(payload)
        if self.failures:
            raise self.failures.pop(0)
        return self.result

    def submit_body(self, quiz_id, body):
        self.submitted_bodies.append((quiz_id, body))
        if self.failures:
            raise self.failures.pop(0)
        return self.result


def make_quiz(question_count=3, time_limit_seconds=120, status=QuizStatus.ACTIVE, with_key=True):
    questions = []
    for number in range(1, question_count + 1):
        options = tuple(
            QuizOption(
                id=f"q{number}-o{letter}",
                text=f"Option {letter.upper()} of question {number}",
                is_correct=(letter == "a") if with_key else None,
            )
            for letter in "abcd"
        )
        questions.append(
            QuizQuestion(
                id=f"q{number}",
                text=f"Question **{number}**?",
                options=options,
                points=10,
                order=number,
            )
        )
    return Quiz(
        id="quiz-1",
        title="Sample quiz",
        time_limit_seconds=time_limit_seconds,
        status=status,
        questions=tuple(questions),
    )


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def hub():
    return SessionEventHub()


@pytest.fixture
def quiz():
    return make_quiz()


@pytest.fixture
def quiz_client(quiz):
    return FakeQuizClient(quiz)


@pytest.fixture
def quiz_factory():
    return make_quiz


@pytest.fixture
def client_factory():
    return FakeQuizClient


@pytest.fixture
def deferred_runner():
    return DeferredTaskRunner()
