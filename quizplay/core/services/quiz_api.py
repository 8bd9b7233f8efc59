"""REST client for the quiz backend."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError
import requests

from quizplay.constants.network_constants import DEFAULT_API_URL, REQUEST_TIMEOUT_SECONDS
from quizplay.core.errors import ApiError
from quizplay.core.models import (
    AttemptStatus,
    LeaderboardEntry,
    Quiz,
    SubmissionPayload,
    SubmissionResult,
    UserIdentity,
)
from quizplay.core.schemas import (
    AttemptStatusSchema,
    LeaderboardEntrySchema,
    QuizSchema,
    SubmitRequestSchema,
    SubmitResultSchema,
)

logger = logging.getLogger(__name__)


def _unwrap(body: Any) -> Any:
    """Accept both ``{"data": ...}`` envelopes and bare payloads."""
    if isinstance(body, dict) and body.get("data") is not None:
        return body["data"]
    return body


class QuizApiClient:
    """Thin wrapper over the quiz endpoints used during play."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        identity: UserIdentity | None = None,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.identity = identity
        self.timeout = timeout
        self._session = session or requests.Session()
        if identity is not None and identity.token:
            self._session.headers["Authorization"] = f"Bearer {identity.token}"

    def _request(self, method: str, path: str, default_error: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self._session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.Timeout as exc:
            raise ApiError(f"{default_error}: request timed out") from exc
        except requests.RequestException as exc:
            raise ApiError(f"{default_error}: {exc}") from exc

        if not response.ok:
            message = default_error
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and body.get("message"):
                message = str(body["message"])
            logger.debug("%s %s -> %s: %s", method, url, response.status_code, message)
            raise ApiError(message, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(f"{default_error}: invalid JSON response", response.status_code) from exc

    def list_quizzes(self) -> list[Quiz]:
        body = _unwrap(self._request("GET", "/quizzes", "Failed to load quizzes"))
        try:
            return [QuizSchema.model_validate(item).to_domain() for item in body or []]
        except ValidationError as exc:
            raise ApiError(f"Unexpected quiz list format: {exc}") from exc

    def get_quiz(self, quiz_id: str) -> Quiz:
        body = _unwrap(self._request("GET", f"/quizzes/{quiz_id}", "Failed to load quiz"))
        try:
            return QuizSchema.model_validate(body).to_domain()
        except ValidationError as exc:
            raise ApiError(f"Unexpected quiz format: {exc}") from exc

    def check_attempt(self, quiz_id: str) -> AttemptStatus:
        body = self._request("GET", f"/quizzes/{quiz_id}/attempt", "Failed to check quiz attempt")
        try:
            return AttemptStatusSchema.model_validate(_unwrap(body)).to_domain()
        except ValidationError as exc:
            raise ApiError(f"Unexpected attempt format: {exc}") from exc

    def submit_answers(self, payload: SubmissionPayload) -> SubmissionResult:
        body = SubmitRequestSchema.from_payload(payload).to_body()
        return self.submit_body(payload.quiz_id, body)

    def submit_body(self, quiz_id: str, body: dict[str, Any]) -> SubmissionResult:
        """Send an already serialized submission (used when replaying queued ones)."""
        response = self._request(
            "POST", f"/quizzes/{quiz_id}/submit", "Failed to submit quiz", json=body
        )
        try:
            return SubmitResultSchema.model_validate(_unwrap(response)).to_domain()
        except ValidationError as exc:
            raise ApiError(f"Unexpected submission result: {exc}") from exc

    def get_leaderboard(self, quiz_id: str) -> list[LeaderboardEntry]:
        body = _unwrap(
            self._request("GET", f"/quizzes/{quiz_id}/leaderboard", "Failed to load leaderboard")
        )
        try:
            return [LeaderboardEntrySchema.model_validate(item).to_domain() for item in body or []]
        except ValidationError as exc:
            raise ApiError(f"Unexpected leaderboard format: {exc}") from exc
