"""Service that walks the player through the shuffled questions of one quiz."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum, auto
import logging
import random
from typing import Callable

from quizplay.constants.quiz_constants import FEEDBACK_DISPLAY_MS
from quizplay.core.errors import QuizUnavailableError
from quizplay.core.models import AnswerRecord, Feedback, Quiz, QuizQuestion
from quizplay.core.scheduler import Scheduler, TimerHandle

logger = logging.getLogger(__name__)


class SessionState(Enum):
    LOADING = auto()
    READY = auto()
    ANSWERING = auto()
    SHOWING_FEEDBACK = auto()
    SUBMITTING = auto()
    DONE = auto()
    ABANDONED = auto()


TERMINAL_STATES = frozenset({SessionState.DONE, SessionState.ABANDONED})


@dataclass(frozen=True, slots=True)
class AnswerOutcome:
    """Result of confirming an answer."""

    record: AnswerRecord
    is_final: bool
    feedback: Feedback | None = None


class QuestionSequencer:
    """Question/answer state machine.

    The question order and each question's option order are shuffled once in
    ``load``. The index only ever moves forward by one.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        feedback_delay_ms: int = FEEDBACK_DISPLAY_MS,
        reveal_feedback: bool = True,
        seed: int | None = None,
    ) -> None:
        self._scheduler = scheduler
        self._feedback_delay_ms = feedback_delay_ms
        self._reveal_feedback = reveal_feedback
        self._shuffle_rng = random.Random(seed)

        self._state = SessionState.LOADING
        self._quiz: Quiz | None = None
        self._questions: list[QuizQuestion] = []
        self._index: int = 0
        self._selected_option_id: str | None = None
        self._answers: list[AnswerRecord] = []
        self._question_started_ms: float = 0.0
        self._feedback: Feedback | None = None
        self._advance_handle: TimerHandle | None = None
        self._state_listeners: list[Callable[[SessionState], None]] = []

    # --- State ---

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def quiz(self) -> Quiz | None:
        return self._quiz

    @property
    def questions(self) -> list[QuizQuestion]:
        return list(self._questions)

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def current_question(self) -> QuizQuestion | None:
        if not self._questions:
            return None
        return self._questions[self._index]

    @property
    def selected_option_id(self) -> str | None:
        return self._selected_option_id

    @property
    def feedback(self) -> Feedback | None:
        return self._feedback

    @property
    def answers(self) -> list[AnswerRecord]:
        return list(self._answers)

    @property
    def question_count(self) -> int:
        return len(self._questions)

    @property
    def question_number(self) -> int:
        return self._index + 1

    @property
    def progress_fraction(self) -> float:
        if not self._questions:
            return 0.0
        return (self._index + 1) / len(self._questions)

    @property
    def all_answered(self) -> bool:
        return bool(self._questions) and len(self._answers) >= len(self._questions)

    def is_last_question(self) -> bool:
        return self._index == len(self._questions) - 1

    def add_state_listener(self, listener: Callable[[SessionState], None]) -> None:
        self._state_listeners.append(listener)

    def _set_state(self, state: SessionState) -> None:
        if state is self._state:
            return
        logger.debug("Sequencer %s -> %s", self._state.name, state.name)
        self._state = state
        for listener in list(self._state_listeners):
            listener(state)

    # --- Lifecycle ---

    def load(self, quiz: Quiz) -> None:
        if self._state is not SessionState.LOADING:
            return
        if not quiz.questions:
            raise QuizUnavailableError(f"Quiz {quiz.id} has no questions.")
        self._quiz = quiz
        ordered = sorted(quiz.questions, key=lambda question: question.order)
        self._questions = self._shuffle_questions(ordered)
        self._index = 0
        self._set_state(SessionState.READY)

    def begin(self) -> None:
        if self._state is not SessionState.READY:
            return
        self._question_started_ms = self._scheduler.now_ms()
        self._set_state(SessionState.ANSWERING)

    def _shuffle_questions(self, questions: list[QuizQuestion]) -> list[QuizQuestion]:
        shuffled = list(questions)
        self._shuffle_rng.shuffle(shuffled)
        result: list[QuizQuestion] = []
        for question in shuffled:
            options = list(question.options)
            self._shuffle_rng.shuffle(options)
            result.append(replace(question, options=tuple(options)))
        return result

    # --- Answering ---

    def select_option(self, option_id: str) -> None:
        if self._state is not SessionState.ANSWERING or self.all_answered:
            return
        question = self._questions[self._index]
        if question.find_option(option_id) is None:
            raise ValueError(f"Option {option_id} does not belong to question {question.id}.")
        self._selected_option_id = option_id

    def _build_record(self, option_id: str) -> AnswerRecord:
        question = self._questions[self._index]
        return AnswerRecord(
            question_id=question.id,
            selected_option_id=option_id,
            time_spent_ms=max(0, int(self._scheduler.now_ms() - self._question_started_ms)),
        )

    def pending_answer(self) -> AnswerRecord | None:
        """Selection on the current question that has not been confirmed yet."""
        option_id = self._selected_option_id
        if self._state is not SessionState.ANSWERING or option_id is None or self.all_answered:
            return None
        return self._build_record(option_id)

    def confirm_answer(self) -> AnswerOutcome | None:
        option_id = self._selected_option_id
        if self._state is not SessionState.ANSWERING or option_id is None or self.all_answered:
            return None

        record = self._build_record(option_id)
        self._answers.append(record)
        logger.info(
            "Answered question %d/%d in %d ms",
            self.question_number,
            self.question_count,
            record.time_spent_ms,
        )

        if self.is_last_question():
            self._selected_option_id = None
            return AnswerOutcome(record=record, is_final=True)

        feedback = self._evaluate(self._questions[self._index], record.selected_option_id)
        if feedback is None:
            self._advance()
            return AnswerOutcome(record=record, is_final=False)

        self._feedback = feedback
        self._set_state(SessionState.SHOWING_FEEDBACK)
        self._advance_handle = self._scheduler.call_later(self._feedback_delay_ms, self._finish_feedback)
        return AnswerOutcome(record=record, is_final=False, feedback=feedback)

    def _evaluate(self, question: QuizQuestion, selected_option_id: str) -> Feedback | None:
        if not self._reveal_feedback:
            return None
        correct = question.correct_option()
        if correct is None:
            # Answer key withheld by the backend
            return Feedback(is_correct=None)
        is_correct = correct.id == selected_option_id
        return Feedback(
            is_correct=is_correct,
            correct_option_text=None if is_correct else correct.text,
        )

    def _finish_feedback(self) -> None:
        self._advance_handle = None
        if self._state is not SessionState.SHOWING_FEEDBACK:
            return
        self._advance()

    def _advance(self) -> None:
        self._selected_option_id = None
        self._feedback = None
        self._index += 1
        self._question_started_ms = self._scheduler.now_ms()
        if self._state is SessionState.ANSWERING:
            # Same state, but listeners still need to render the next question
            for listener in list(self._state_listeners):
                listener(self._state)
        else:
            self._set_state(SessionState.ANSWERING)

    def dispose(self) -> None:
        """Release the pending feedback timer, if any."""
        self._cancel_advance()

    def _cancel_advance(self) -> None:
        if self._advance_handle is not None:
            self._advance_handle.cancel()
            self._advance_handle = None

    # --- Submission states ---

    def mark_submitting(self) -> None:
        if self._state in TERMINAL_STATES:
            return
        self._cancel_advance()
        self._set_state(SessionState.SUBMITTING)

    def mark_done(self) -> None:
        self._cancel_advance()
        self._set_state(SessionState.DONE)

    def mark_abandoned(self) -> None:
        self._cancel_advance()
        self._set_state(SessionState.ABANDONED)

    def resume_answering(self) -> None:
        """Return to answering after a failed manual submission."""
        if self._state is not SessionState.SUBMITTING:
            return
        # Skip past a question whose feedback was cut short by the submission
        next_index = min(len(self._answers), len(self._questions) - 1)
        if next_index != self._index:
            self._index = next_index
            self._selected_option_id = None
            self._question_started_ms = self._scheduler.now_ms()
        self._feedback = None
        self._set_state(SessionState.ANSWERING)
