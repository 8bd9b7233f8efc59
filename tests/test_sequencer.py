"""
Test the question sequencer state machine
"""
import pytest

from quizplay.core.errors import QuizUnavailableError
from quizplay.core.services.sequencer import QuestionSequencer, SessionState


def _correct(question):
    return next(option.id for option in question.options if option.is_correct)


def _wrong(question):
    return next(option.id for option in question.options if not option.is_correct)


@pytest.fixture
def sequencer(scheduler, quiz):
    sequencer = QuestionSequencer(scheduler, seed=7)
    sequencer.load(quiz)
    sequencer.begin()
    return sequencer


class TestLoading:
    """Test shuffling and initial state"""

    def test_shuffle_is_a_permutation(self, scheduler, quiz_factory):
        quiz = quiz_factory(question_count=8)
        sequencer = QuestionSequencer(scheduler, seed=3)
        sequencer.load(quiz)

        assert sorted(q.id for q in sequencer.questions) == sorted(q.id for q in quiz.questions)
        originals = {q.id: q for q in quiz.questions}
        for question in sequencer.questions:
            original = originals[question.id]
            assert sorted(o.id for o in question.options) == sorted(o.id for o in original.options)
            assert question.correct_option() == original.correct_option()

    def test_same_seed_gives_same_order(self, scheduler, quiz_factory):
        quiz = quiz_factory(question_count=6)
        first = QuestionSequencer(scheduler, seed=11)
        second = QuestionSequencer(scheduler, seed=11)
        first.load(quiz)
        second.load(quiz)

        assert first.questions == second.questions

    def test_order_fixed_after_load(self, sequencer):
        before = sequencer.questions
        sequencer.load(sequencer.quiz)

        assert sequencer.questions == before

    def test_quiz_without_questions_is_rejected(self, scheduler, quiz_factory):
        sequencer = QuestionSequencer(scheduler)

        with pytest.raises(QuizUnavailableError):
            sequencer.load(quiz_factory(question_count=0))
        assert sequencer.state is SessionState.LOADING

    def test_begin_enters_answering(self, scheduler, quiz):
        sequencer = QuestionSequencer(scheduler)
        sequencer.load(quiz)
        assert sequencer.state is SessionState.READY

        sequencer.begin()
        assert sequencer.state is SessionState.ANSWERING
        assert sequencer.current_index == 0
        assert sequencer.question_number == 1


class TestAnswering:
    """Test selecting and confirming answers"""

    def test_confirm_without_selection_is_noop(self, sequencer):
        assert sequencer.confirm_answer() is None
        assert sequencer.answers == []

    def test_next_question_needs_its_own_selection(self, sequencer, scheduler):
        sequencer.select_option(_correct(sequencer.current_question))
        sequencer.confirm_answer()
        scheduler.advance(1500)

        assert sequencer.pending_answer() is None
        assert sequencer.confirm_answer() is None
        assert len(sequencer.answers) == 1

    def test_selection_can_change_before_confirm(self, sequencer):
        question = sequencer.current_question
        sequencer.select_option(question.options[0].id)
        sequencer.select_option(question.options[1].id)

        outcome = sequencer.confirm_answer()
        assert outcome.record.selected_option_id == question.options[1].id

    def test_unknown_option_is_rejected(self, sequencer):
        with pytest.raises(ValueError):
            sequencer.select_option("not-an-option")

    def test_correct_answer_feedback(self, sequencer, scheduler):
        question = sequencer.current_question
        sequencer.select_option(_correct(question))
        scheduler.advance(2500)

        outcome = sequencer.confirm_answer()
        assert outcome.feedback.is_correct is True
        assert outcome.feedback.correct_option_text is None
        assert outcome.record.time_spent_ms == 2500
        assert sequencer.state is SessionState.SHOWING_FEEDBACK

    def test_wrong_answer_reveals_correct_text(self, sequencer):
        question = sequencer.current_question
        sequencer.select_option(_wrong(question))

        outcome = sequencer.confirm_answer()
        assert outcome.feedback.is_correct is False
        assert outcome.feedback.correct_option_text == question.correct_option().text

    def test_feedback_advances_after_delay(self, sequencer, scheduler):
        first = sequencer.current_question
        sequencer.select_option(_correct(first))
        sequencer.confirm_answer()

        scheduler.advance(1499)
        assert sequencer.current_index == 0
        scheduler.advance(1)
        assert sequencer.current_index == 1
        assert sequencer.state is SessionState.ANSWERING
        assert sequencer.selected_option_id is None
        assert sequencer.feedback is None

    def test_selection_ignored_during_feedback(self, sequencer):
        question = sequencer.current_question
        sequencer.select_option(_correct(question))
        sequencer.confirm_answer()

        sequencer.select_option(_wrong(question))
        assert sequencer.confirm_answer() is None
        assert len(sequencer.answers) == 1

    def test_index_never_goes_back(self, sequencer, scheduler):
        seen = []
        for _ in range(sequencer.question_count):
            seen.append(sequencer.current_index)
            sequencer.select_option(_correct(sequencer.current_question))
            sequencer.confirm_answer()
            scheduler.advance(1500)

        assert seen == sorted(seen)
        assert seen == list(range(sequencer.question_count))

    def test_final_question_has_no_feedback(self, sequencer, scheduler):
        for _ in range(sequencer.question_count - 1):
            sequencer.select_option(_correct(sequencer.current_question))
            sequencer.confirm_answer()
            scheduler.advance(1500)

        sequencer.select_option(_wrong(sequencer.current_question))
        outcome = sequencer.confirm_answer()

        assert outcome.is_final is True
        assert outcome.feedback is None
        assert sequencer.all_answered
        assert len({answer.question_id for answer in sequencer.answers}) == sequencer.question_count

    def test_hidden_feedback_advances_immediately(self, scheduler, quiz):
        sequencer = QuestionSequencer(scheduler, reveal_feedback=False)
        sequencer.load(quiz)
        sequencer.begin()
        sequencer.select_option(sequencer.current_question.options[0].id)

        outcome = sequencer.confirm_answer()
        assert outcome.feedback is None
        assert sequencer.current_index == 1
        assert sequencer.state is SessionState.ANSWERING

    def test_withheld_answer_key(self, scheduler, quiz_factory):
        sequencer = QuestionSequencer(scheduler)
        sequencer.load(quiz_factory(with_key=False))
        sequencer.begin()
        sequencer.select_option(sequencer.current_question.options[0].id)

        outcome = sequencer.confirm_answer()
        assert outcome.feedback.is_correct is None


class TestSubmissionStates:
    """Test transitions around submission"""

    def test_submitting_cancels_feedback_timer(self, sequencer, scheduler):
        sequencer.select_option(_correct(sequencer.current_question))
        sequencer.confirm_answer()
        sequencer.mark_submitting()

        scheduler.advance(5000)
        assert sequencer.state is SessionState.SUBMITTING
        assert sequencer.current_index == 0

    def test_resume_skips_answered_question(self, sequencer):
        sequencer.select_option(_correct(sequencer.current_question))
        sequencer.confirm_answer()
        sequencer.mark_submitting()

        sequencer.resume_answering()
        assert sequencer.state is SessionState.ANSWERING
        assert sequencer.current_index == 1
        assert sequencer.feedback is None

    def test_pending_answer_only_while_answering(self, sequencer):
        assert sequencer.pending_answer() is None
        question = sequencer.current_question
        sequencer.select_option(question.options[2].id)

        pending = sequencer.pending_answer()
        assert pending.question_id == question.id
        assert sequencer.answers == []

    def test_terminal_state_is_final(self, sequencer):
        sequencer.mark_submitting()
        sequencer.mark_done()
        sequencer.mark_submitting()

        assert sequencer.state is SessionState.DONE
