"""Durable queue for submissions that could not be delivered.

Entries are stored as a JSON list on disk:

    [{"quizId": "...", "body": {...submit body...}, "queuedAt": "..."}]

The queue is flushed the next time a session is initialized, so a flaky
network at the moment the countdown runs out does not lose the attempt.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import json
import logging
from pathlib import Path
from threading import Lock
from typing import Any, Protocol

from quizplay.core.errors import ApiError
from quizplay.core.models import SubmissionResult

logger = logging.getLogger(__name__)


class SubmitsBodies(Protocol):
    def submit_body(self, quiz_id: str, body: dict[str, Any]) -> SubmissionResult:
        ...


@dataclass(slots=True)
class PendingSubmission:
    quiz_id: str
    body: dict[str, Any]
    queued_at: str

    def to_json(self) -> dict[str, Any]:
        return {"quizId": self.quiz_id, "body": self.body, "queuedAt": self.queued_at}

    @classmethod
    def from_json(cls, raw: dict[str, Any]) -> PendingSubmission:
        return cls(quiz_id=str(raw["quizId"]), body=dict(raw["body"]), queued_at=str(raw.get("queuedAt", "")))


class PendingSubmissionQueue:
    def __init__(self, file_path: Path) -> None:
        self.file_path = file_path
        # flush runs on a worker thread while enqueue runs on the GUI thread
        self._lock = Lock()

    def items(self) -> list[PendingSubmission]:
        if not self.file_path.exists():
            return []
        try:
            raw = json.loads(self.file_path.read_text(encoding="utf-8"))
            return [PendingSubmission.from_json(entry) for entry in raw]
        except (ValueError, KeyError, TypeError) as exc:
            # Keep the unreadable file around for manual recovery
            backup = self.file_path.with_suffix(".corrupt")
            self.file_path.replace(backup)
            logger.error("Pending submission file was unreadable, moved to %s: %s", backup, exc)
            return []

    def __len__(self) -> int:
        return len(self.items())

    def _write(self, entries: list[PendingSubmission]) -> None:
        if not entries:
            if self.file_path.exists():
                self.file_path.unlink()
            return
        self.file_path.parent.mkdir(parents=True, exist_ok=True)
        document = json.dumps([entry.to_json() for entry in entries], indent=2)
        self.file_path.write_text(document, encoding="utf-8")

    def enqueue(self, quiz_id: str, body: dict[str, Any]) -> PendingSubmission:
        entry = PendingSubmission(
            quiz_id=quiz_id,
            body=body,
            queued_at=datetime.now(timezone.utc).isoformat(),
        )
        with self._lock:
            entries = self.items()
            entries.append(entry)
            self._write(entries)
        logger.warning("Queued submission for quiz %s for later delivery", quiz_id)
        return entry

    def flush(self, client: SubmitsBodies) -> list[tuple[PendingSubmission, SubmissionResult]]:
        """Re-send every queued submission.

        Entries the backend accepts or permanently rejects are removed;
        entries that fail transiently stay queued.
        """
        delivered: list[tuple[PendingSubmission, SubmissionResult]] = []
        remaining: list[PendingSubmission] = []
        with self._lock:
            entries = self.items()
            if not entries:
                return delivered

            for entry in entries:
                try:
                    result = client.submit_body(entry.quiz_id, entry.body)
                except ApiError as exc:
                    if exc.is_transient:
                        remaining.append(entry)
                        logger.info("Queued submission for quiz %s still undeliverable: %s", entry.quiz_id, exc)
                    else:
                        logger.error("Backend rejected queued submission for quiz %s: %s", entry.quiz_id, exc)
                    continue
                delivered.append((entry, result))
                logger.info("Delivered queued submission for quiz %s", entry.quiz_id)

            self._write(remaining)
        return delivered
