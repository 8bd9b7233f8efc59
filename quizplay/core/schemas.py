"""Wire schemas for the quiz REST backend."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from quizplay.core.models import (
    AttemptStatus,
    LeaderboardEntry,
    Quiz,
    QuizAttempt,
    QuizOption,
    QuizQuestion,
    QuizStatus,
    SubmissionPayload,
    SubmissionResult,
)


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class OptionSchema(_WireModel):
    id: str
    text: str
    is_correct: bool | None = Field(default=None, alias="isCorrect")

    def to_domain(self) -> QuizOption:
        return QuizOption(id=self.id, text=self.text, is_correct=self.is_correct)


class QuestionSchema(_WireModel):
    id: str
    question: str
    options: list[OptionSchema] = Field(min_length=2)
    points: int = Field(default=0, ge=0)
    order: int = 0

    def to_domain(self) -> QuizQuestion:
        return QuizQuestion(
            id=self.id,
            text=self.question,
            options=tuple(option.to_domain() for option in self.options),
            points=self.points,
            order=self.order,
        )


class QuizSchema(_WireModel):
    """Payload schema for ``GET /quizzes/:id``."""

    id: str
    title: str
    description: str = ""
    time_limit: int = Field(alias="timeLimit", ge=0)
    start_at: datetime | None = Field(default=None, alias="startAt")
    end_at: datetime | None = Field(default=None, alias="endAt")
    status: QuizStatus
    questions: list[QuestionSchema] = Field(default_factory=list)

    def to_domain(self) -> Quiz:
        return Quiz(
            id=self.id,
            title=self.title,
            description=self.description,
            time_limit_seconds=self.time_limit,
            start_at=self.start_at,
            end_at=self.end_at,
            status=self.status,
            questions=tuple(question.to_domain() for question in self.questions),
        )


class QuizAttemptSchema(_WireModel):
    id: str
    quiz_id: str = Field(alias="quizId")
    user_id: str = Field(alias="userId")
    total_score: int = Field(default=0, alias="totalScore")
    completed_at: datetime | None = Field(default=None, alias="completedAt")

    def to_domain(self) -> QuizAttempt:
        return QuizAttempt(
            id=self.id,
            quiz_id=self.quiz_id,
            user_id=self.user_id,
            total_score=self.total_score,
            completed_at=self.completed_at,
        )


class AttemptStatusSchema(_WireModel):
    """Payload schema for ``GET /quizzes/:id/attempt``."""

    has_attempted: bool = Field(alias="hasAttempted")
    attempt: QuizAttemptSchema | None = None

    def to_domain(self) -> AttemptStatus:
        return AttemptStatus(
            has_attempted=self.has_attempted,
            attempt=self.attempt.to_domain() if self.attempt else None,
        )


class AnswerSchema(_WireModel):
    question_id: str = Field(alias="questionId")
    selected_option: str = Field(alias="selectedOption")
    time_spent: int = Field(alias="timeSpent", ge=0)


class InactivityPeriodSchema(_WireModel):
    question_index: int = Field(alias="questionIndex")
    duration_ms: int = Field(alias="durationMs")


class SubmitRequestSchema(_WireModel):
    """Body of ``POST /quizzes/:id/submit``."""

    answers: list[AnswerSchema]
    tab_switch_count: int = Field(default=0, alias="tabSwitchCount")
    afk_incidents: int = Field(default=0, alias="afkIncidents")
    inactivity_periods: list[InactivityPeriodSchema] = Field(
        default_factory=list, alias="inactivityPeriods"
    )
    screenshot_attempts: int = Field(default=0, alias="screenshotAttempts")
    suspicious_extensions: list[str] = Field(default_factory=list, alias="suspiciousExtensions")
    auto_submit: bool = Field(default=False, alias="autoSubmit")

    @classmethod
    def from_payload(cls, payload: SubmissionPayload) -> SubmitRequestSchema:
        counters = payload.counters
        return cls(
            answers=[
                AnswerSchema(
                    question_id=answer.question_id,
                    selected_option=answer.selected_option_id,
                    time_spent=answer.time_spent_ms,
                )
                for answer in payload.answers
            ],
            tab_switch_count=counters.tab_switch_count,
            afk_incidents=counters.afk_incidents,
            inactivity_periods=[
                InactivityPeriodSchema(
                    question_index=period.question_index,
                    duration_ms=period.duration_ms,
                )
                for period in counters.inactivity_periods
            ],
            screenshot_attempts=counters.screenshot_attempts,
            suspicious_extensions=list(counters.suspicious_extensions),
            auto_submit=payload.auto_submit,
        )

    def to_body(self) -> dict[str, object]:
        return self.model_dump(by_alias=True, mode="json")


class SubmitResultSchema(_WireModel):
    total_score: int = Field(alias="totalScore")
    rank: int

    def to_domain(self) -> SubmissionResult:
        return SubmissionResult(total_score=self.total_score, rank=self.rank)


class LeaderboardEntrySchema(_WireModel):
    user_id: str = Field(alias="userId")
    display_name: str = Field(default="", alias="displayName")
    total_score: int = Field(default=0, alias="totalScore")
    correct_answers: int = Field(default=0, alias="correctAnswers")
    incorrect_answers: int = Field(default=0, alias="incorrectAnswers")
    total_questions: int = Field(default=0, alias="totalQuestions")
    rank: int

    def to_domain(self) -> LeaderboardEntry:
        return LeaderboardEntry(
            user_id=self.user_id,
            display_name=self.display_name,
            total_score=self.total_score,
            rank=self.rank,
            correct_answers=self.correct_answers,
            incorrect_answers=self.incorrect_answers,
            total_questions=self.total_questions,
        )
