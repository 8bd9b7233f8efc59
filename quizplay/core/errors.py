"""Exceptions raised by the quiz-play core."""

from __future__ import annotations


class QuizPlayError(Exception):
    """Base class for quiz-play failures."""


class NotActiveError(QuizPlayError):
    """Raised when a quiz is fetched for play but its status is not ACTIVE."""

    def __init__(self, quiz_id: str, status: str) -> None:
        super().__init__(f"Quiz {quiz_id} is not currently active (status: {status}).")
        self.quiz_id = quiz_id
        self.status = status


class AlreadyAttemptedError(QuizPlayError):
    """Raised when the current user already completed the quiz."""

    def __init__(self, quiz_id: str) -> None:
        super().__init__(f"Quiz {quiz_id} has already been attempted.")
        self.quiz_id = quiz_id


class QuizUnavailableError(QuizPlayError):
    """Raised when a quiz has no playable questions."""


class ApiError(QuizPlayError):
    """Raised when the backend cannot be reached or answers with an error."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def is_transient(self) -> bool:
        # No status code means the request never got a response
        return self.status_code is None or self.status_code >= 500