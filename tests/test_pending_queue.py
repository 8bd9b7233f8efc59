"""
Test the durable pending submission queue
"""
import json

import pytest

from quizplay.core.errors import ApiError
from quizplay.core.services.pending_queue import PendingSubmissionQueue


@pytest.fixture
def queue_path(tmp_path):
    return tmp_path / "nested" / "pending.json"


@pytest.fixture
def queue(queue_path):
    return PendingSubmissionQueue(queue_path)


class TestPendingSubmissionQueue:
    """Test enqueueing and flushing"""

    def test_empty_without_file(self, queue):
        assert queue.items() == []
        assert len(queue) == 0

    def test_enqueue_persists_to_disk(self, queue, queue_path):
        queue.enqueue("quiz-1", {"answers": [], "autoSubmit": True})

        stored = json.loads(queue_path.read_text(encoding="utf-8"))
        assert stored[0]["quizId"] == "quiz-1"
        assert stored[0]["body"] == {"answers": [], "autoSubmit": True}
        assert stored[0]["queuedAt"]

    def test_survives_new_instance(self, queue, queue_path):
        queue.enqueue("quiz-1", {"answers": []})

        assert len(PendingSubmissionQueue(queue_path)) == 1

    def test_flush_delivers_and_clears(self, queue, queue_path, quiz_client):
        queue.enqueue("quiz-1", {"answers": []})
        queue.enqueue("quiz-2", {"answers": []})

        delivered = queue.flush(quiz_client)
        assert [entry.quiz_id for entry, _ in delivered] == ["quiz-1", "quiz-2"]
        assert [quiz_id for quiz_id, _ in quiz_client.submitted_bodies] == ["quiz-1", "quiz-2"]
        assert not queue_path.exists()

    def test_flush_keeps_transient_failures(self, queue, quiz_client):
        queue.enqueue("quiz-1", {"answers": []})
        queue.enqueue("quiz-2", {"answers": []})
        quiz_client.fail_next(ApiError("unreachable"), ApiError("Already submitted", status_code=409))

        delivered = queue.flush(quiz_client)
        assert delivered == []
        assert [entry.quiz_id for entry in queue.items()] == ["quiz-1"]

    def test_corrupt_file_is_set_aside(self, queue, queue_path):
        queue_path.parent.mkdir(parents=True)
        queue_path.write_text("{not json", encoding="utf-8")

        assert queue.items() == []
        assert queue_path.with_suffix(".corrupt").exists()
        assert not queue_path.exists()
