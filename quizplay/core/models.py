"""Domain models for the quiz-play client."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum


class QuizStatus(str, Enum):
    UPCOMING = "UPCOMING"
    ACTIVE = "ACTIVE"
    CLOSED = "CLOSED"


@dataclass(frozen=True, slots=True)
class QuizOption:
    """Answer option. ``is_correct`` is None when the backend withholds the key."""

    id: str
    text: str
    is_correct: bool | None = None


@dataclass(frozen=True, slots=True)
class QuizQuestion:
    """Multiple-choice question with at least two options."""

    id: str
    text: str
    options: tuple[QuizOption, ...]
    points: int = 0
    order: int = 0

    def find_option(self, option_id: str) -> QuizOption | None:
        return next((option for option in self.options if option.id == option_id), None)

    def correct_option(self) -> QuizOption | None:
        return next((option for option in self.options if option.is_correct), None)


@dataclass(frozen=True, slots=True)
class Quiz:
    """Quiz as fetched for one play session."""

    id: str
    title: str
    time_limit_seconds: int
    status: QuizStatus
    questions: tuple[QuizQuestion, ...]
    description: str = ""
    start_at: datetime | None = None
    end_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class AnswerRecord:
    """One confirmed response to one question."""

    question_id: str
    selected_option_id: str
    time_spent_ms: int


@dataclass(frozen=True, slots=True)
class InactivityPeriod:
    question_index: int
    duration_ms: int


class IntegrityEventKind(str, Enum):
    TAB_SWITCH = "tab_switch"
    MOBILE_SCREENSHOT = "mobile_screenshot"
    SCREENSHOT_SHORTCUT = "screenshot_shortcut"
    SCREENSHOT_GESTURE = "screenshot_gesture"
    AFK = "afk"
    DEVTOOLS_SHORTCUT = "devtools_shortcut"
    SUSPICIOUS_EXTENSION = "suspicious_extension"


SCREENSHOT_EVENT_KINDS = frozenset(
    {
        IntegrityEventKind.MOBILE_SCREENSHOT,
        IntegrityEventKind.SCREENSHOT_SHORTCUT,
        IntegrityEventKind.SCREENSHOT_GESTURE,
    }
)


@dataclass(frozen=True, slots=True)
class IntegrityEvent:
    """A single detection reported by a detector."""

    kind: IntegrityEventKind
    question_index: int
    at_ms: float
    detail: str = ""
    duration_ms: int | None = None


@dataclass(frozen=True, slots=True)
class IntegrityCounters:
    """Session-scoped anti-cheat telemetry. Only ever grows."""

    tab_switch_count: int = 0
    afk_incidents: int = 0
    inactivity_periods: tuple[InactivityPeriod, ...] = ()
    screenshot_attempts: int = 0
    suspicious_extensions: tuple[str, ...] = ()

    def with_event(self, event: IntegrityEvent) -> IntegrityCounters:
        """Return the counters that result from applying ``event``."""
        kind = event.kind
        if kind is IntegrityEventKind.TAB_SWITCH:
            return replace(self, tab_switch_count=self.tab_switch_count + 1)
        if kind in SCREENSHOT_EVENT_KINDS:
            return replace(self, screenshot_attempts=self.screenshot_attempts + 1)
        if kind is IntegrityEventKind.AFK:
            period = InactivityPeriod(
                question_index=event.question_index,
                duration_ms=event.duration_ms or 0,
            )
            return replace(
                self,
                afk_incidents=self.afk_incidents + 1,
                inactivity_periods=self.inactivity_periods + (period,),
            )
        if kind is IntegrityEventKind.SUSPICIOUS_EXTENSION:
            if event.detail in self.suspicious_extensions:
                return self
            return replace(
                self,
                suspicious_extensions=self.suspicious_extensions + (event.detail,),
            )
        return self


@dataclass(frozen=True, slots=True)
class SubmissionPayload:
    """Everything sent to the backend in the single submit call."""

    quiz_id: str
    answers: tuple[AnswerRecord, ...]
    counters: IntegrityCounters
    auto_submit: bool = False


@dataclass(frozen=True, slots=True)
class SubmissionResult:
    total_score: int
    rank: int


@dataclass(frozen=True, slots=True)
class QuizAttempt:
    id: str
    quiz_id: str
    user_id: str
    total_score: int
    completed_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class AttemptStatus:
    has_attempted: bool
    attempt: QuizAttempt | None = None


@dataclass(frozen=True, slots=True)
class LeaderboardEntry:
    user_id: str
    display_name: str
    total_score: int
    rank: int
    correct_answers: int = 0
    incorrect_answers: int = 0
    total_questions: int = 0


@dataclass(frozen=True, slots=True)
class Feedback:
    """What the player sees between two questions."""

    is_correct: bool | None
    correct_option_text: str | None = None


class NotificationLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class Notification:
    """Toast event handed to the UI layer."""

    level: NotificationLevel
    title: str
    message: str


@dataclass(frozen=True, slots=True)
class UserIdentity:
    """Current user as provided by the auth collaborator."""

    user_id: str
    token: str = ""


@dataclass(slots=True)
class EnvironmentSnapshot:
    """Client environment facts inspected once by the extension scanner."""

    resource_urls: list[str] = field(default_factory=list)
    script_urls: list[str] = field(default_factory=list)
    dom_attributes: list[str] = field(default_factory=list)
    has_extension_runtime: bool = False
    outer_width: int = 0
    inner_width: int = 0
    outer_height: int = 0
    inner_height: int = 0
