"""
Test submission assembly, the single-submit guard and auto-submit retries
"""
import pytest

from quizplay.core.errors import ApiError
from quizplay.core.models import AnswerRecord, IntegrityCounters, SubmissionPayload
from quizplay.core.schemas import SubmitRequestSchema
from quizplay.core.services.pending_queue import PendingSubmissionQueue
from quizplay.core.services.submission import RetryPolicy, SubmissionAssembler, assemble_payload


def _payload(auto_submit=False):
    return SubmissionPayload(
        quiz_id="quiz-1",
        answers=(AnswerRecord("q1", "q1-oa", 1200),),
        counters=IntegrityCounters(tab_switch_count=2),
        auto_submit=auto_submit,
    )


class Outcomes:
    def __init__(self):
        self.successes = []
        self.failures = []

    def on_success(self, result):
        self.successes.append(result)

    def on_failure(self, error, terminal):
        self.failures.append((error, terminal))


@pytest.fixture
def outcomes():
    return Outcomes()


@pytest.fixture
def pending_queue(tmp_path):
    return PendingSubmissionQueue(tmp_path / "pending.json")


@pytest.fixture
def assembler(quiz_client, scheduler, pending_queue):
    return SubmissionAssembler(quiz_client, scheduler, RetryPolicy(), pending_queue)


class TestAssemblePayload:
    """Test merging answers with telemetry"""

    def test_manual_includes_pending_answer(self):
        confirmed = [AnswerRecord("q1", "q1-oa", 1000)]
        pending = AnswerRecord("q2", "q2-ob", 500)

        payload = assemble_payload("quiz-1", confirmed, pending, IntegrityCounters(), auto_submit=False)
        assert [answer.question_id for answer in payload.answers] == ["q1", "q2"]

    def test_auto_excludes_pending_answer(self):
        confirmed = [AnswerRecord("q1", "q1-oa", 1000)]
        pending = AnswerRecord("q2", "q2-ob", 500)

        payload = assemble_payload("quiz-1", confirmed, pending, IntegrityCounters(), auto_submit=True)
        assert [answer.question_id for answer in payload.answers] == ["q1"]
        assert payload.auto_submit is True

    def test_wire_body(self):
        body = SubmitRequestSchema.from_payload(_payload(auto_submit=True)).to_body()

        assert body["answers"] == [{"questionId": "q1", "selectedOption": "q1-oa", "timeSpent": 1200}]
        assert body["tabSwitchCount"] == 2
        assert body["afkIncidents"] == 0
        assert body["inactivityPeriods"] == []
        assert body["screenshotAttempts"] == 0
        assert body["suspiciousExtensions"] == []
        assert body["autoSubmit"] is True


class TestRetryPolicy:
    def test_exponential_delays(self):
        policy = RetryPolicy(max_attempts=4, initial_delay_ms=1000, multiplier=2.0)

        assert [policy.delay_after(n) for n in (1, 2, 3)] == [1000, 2000, 4000]


class TestSubmissionAssembler:
    """Test the submit guard and failure handling"""

    def test_successful_submit(self, assembler, quiz_client, outcomes):
        assert assembler.submit(_payload(), outcomes.on_success, outcomes.on_failure) is True

        assert outcomes.successes == [quiz_client.result]
        assert assembler.completed
        assert not assembler.submitting

    def test_second_submit_is_ignored(self, assembler, quiz_client, outcomes):
        assembler.submit(_payload(), outcomes.on_success, outcomes.on_failure)

        assert assembler.submit(_payload(auto_submit=True), outcomes.on_success, outcomes.on_failure) is False
        assert len(quiz_client.submitted) == 1

    def test_manual_failure_releases_guard(self, assembler, quiz_client, outcomes):
        quiz_client.fail_next(ApiError("Server error", status_code=500))

        assembler.submit(_payload(), outcomes.on_success, outcomes.on_failure)
        assert outcomes.failures[0][1] is False
        assert not assembler.submitting
        assert not assembler.completed

        assembler.submit(_payload(), outcomes.on_success, outcomes.on_failure)
        assert len(quiz_client.submitted) == 2
        assert len(outcomes.successes) == 1

    def test_auto_submit_retries_with_backoff(self, assembler, quiz_client, scheduler, outcomes):
        quiz_client.fail_next(ApiError("timed out"), ApiError("timed out"))

        assembler.submit(_payload(auto_submit=True), outcomes.on_success, outcomes.on_failure)
        assert len(quiz_client.submitted) == 1

        scheduler.advance(999)
        assert len(quiz_client.submitted) == 1
        scheduler.advance(1)
        assert len(quiz_client.submitted) == 2

        scheduler.advance(2000)
        assert len(quiz_client.submitted) == 3
        assert outcomes.successes == [quiz_client.result]
        assert outcomes.failures == []

    def test_auto_submit_exhaustion_queues_payload(self, assembler, quiz_client, scheduler, pending_queue, outcomes):
        quiz_client.fail_next(*[ApiError("unreachable") for _ in range(3)])

        assembler.submit(_payload(auto_submit=True), outcomes.on_success, outcomes.on_failure)
        scheduler.advance(10_000)

        assert len(quiz_client.submitted) == 3
        assert len(outcomes.failures) == 1
        assert outcomes.failures[0][1] is True
        assert assembler.completed

        entries = pending_queue.items()
        assert len(entries) == 1
        assert entries[0].quiz_id == "quiz-1"
        assert entries[0].body["autoSubmit"] is True

    def test_permanent_auto_failure_is_not_retried(self, assembler, quiz_client, scheduler, pending_queue, outcomes):
        quiz_client.fail_next(ApiError("Quiz already submitted", status_code=409))

        assembler.submit(_payload(auto_submit=True), outcomes.on_success, outcomes.on_failure)
        scheduler.advance(10_000)

        assert len(quiz_client.submitted) == 1
        assert outcomes.failures[0][1] is True
        assert len(pending_queue) == 0

    def test_close_persists_scheduled_retry(self, assembler, quiz_client, scheduler, pending_queue, outcomes):
        quiz_client.fail_next(ApiError("unreachable"))
        assembler.submit(_payload(auto_submit=True), outcomes.on_success, outcomes.on_failure)

        assembler.close()
        scheduler.advance(10_000)

        assert len(quiz_client.submitted) == 1
        assert len(pending_queue) == 1
        assert scheduler.active_timers == []


class TestBackgroundSubmission:
    """Test the assembler when requests reply later"""

    @pytest.fixture
    def deferred_assembler(self, quiz_client, scheduler, pending_queue, deferred_runner):
        return SubmissionAssembler(quiz_client, scheduler, RetryPolicy(), pending_queue, runner=deferred_runner)

    def test_guard_holds_until_reply(self, deferred_assembler, deferred_runner, quiz_client, outcomes):
        assert deferred_assembler.submit(_payload(), outcomes.on_success, outcomes.on_failure) is True
        assert deferred_assembler.submit(_payload(), outcomes.on_success, outcomes.on_failure) is False
        assert deferred_assembler.submitting
        assert outcomes.successes == []

        deferred_runner.finish()

        assert outcomes.successes == [quiz_client.result]
        assert not deferred_assembler.submitting
        assert deferred_assembler.completed

    def test_retry_waits_for_each_reply(self, deferred_assembler, deferred_runner, quiz_client, scheduler, outcomes):
        quiz_client.fail_next(ApiError("unreachable"))
        deferred_assembler.submit(_payload(auto_submit=True), outcomes.on_success, outcomes.on_failure)

        deferred_runner.finish()
        assert scheduler.active_timers
        scheduler.advance(1_000)
        assert len(deferred_runner.pending) == 1

        deferred_runner.finish()
        assert len(quiz_client.submitted) == 2
        assert outcomes.successes == [quiz_client.result]

    def test_close_while_request_runs(self, deferred_assembler, deferred_runner, quiz_client, pending_queue, outcomes):
        quiz_client.fail_next(ApiError("unreachable"))
        deferred_assembler.submit(_payload(auto_submit=True), outcomes.on_success, outcomes.on_failure)

        deferred_assembler.close()
        deferred_runner.finish()

        assert outcomes.failures == []
        assert len(pending_queue) == 1
        assert not deferred_assembler.submitting
