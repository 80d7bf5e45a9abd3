from __future__ import annotations

from datetime import timedelta

from study_quiz.core.models import Mode, NextAction
from study_quiz.core.services.quiz_session import QuizSession


def test_fresh_test_session(three_questions, clock):
    session = QuizSession(three_questions, Mode.TEST_SEQUENTIAL, assignment_id="1", clock=clock)

    assert session.current_index == 0
    assert session.feedback_visible is False
    assert session.is_complete is False
    assert session.started_at == clock.now
    assert session.completed_at is None
    assert session.current_question() is three_questions[0]
    assert not session.can_advance()
    assert not session.can_retreat()


def test_learn_session_starts_with_feedback_visible(three_questions):
    session = QuizSession(three_questions, Mode.LEARN)
    assert session.feedback_visible
    assert session.can_advance()


def test_two_step_advance_in_test_mode(three_questions, clock):
    session = QuizSession(three_questions, Mode.TEST_SEQUENTIAL, clock=clock)

    assert session.record_answer(0, {"A"})
    assert session.feedback_visible is False
    assert session.can_advance()
    assert session.next_action() is NextAction.REVEAL

    assert session.advance() is NextAction.REVEAL
    assert session.current_index == 0
    assert session.feedback_visible is True

    assert session.advance() is NextAction.NEXT
    assert session.current_index == 1
    assert session.feedback_visible is False


def test_advance_without_answer_moves_on_in_test_mode(three_questions):
    session = QuizSession(three_questions, Mode.TEST_RANDOMIZED)

    assert not session.can_advance()
    session.advance()

    assert session.current_index == 1
    assert session.feedback_visible is False


def test_learn_mode_skips_without_reveal_step(three_questions):
    session = QuizSession(three_questions, Mode.LEARN)

    session.advance()
    assert session.current_index == 1
    assert session.feedback_visible is True

    session.record_answer(1, {"A", "B"})
    session.advance()
    assert session.current_index == 2
    assert session.feedback_visible is True


def test_skip_moves_on_in_learn_mode(three_questions):
    session = QuizSession(three_questions, Mode.LEARN)
    session.record_answer(0, {"B"})

    assert session.skip() is NextAction.NEXT
    assert session.current_index == 1
    assert session.feedback_visible
    assert session.answers == {0: frozenset({"B"})}


def test_skip_is_unavailable_in_test_modes(three_questions):
    for mode in (Mode.TEST_SEQUENTIAL, Mode.TEST_RANDOMIZED):
        session = QuizSession(three_questions, mode)
        session.record_answer(0, {"B"})

        assert session.skip() is None
        assert session.current_index == 0
        assert session.feedback_visible is False
        assert session.next_action() is NextAction.REVEAL


def test_answer_is_locked_once_feedback_is_revealed(three_questions):
    session = QuizSession(three_questions, Mode.TEST_SEQUENTIAL)
    session.record_answer(0, {"B"})
    session.advance()

    assert session.record_answer(0, {"A"}) is False
    assert session.current_answer() == frozenset({"B"})
    assert session.score().correct_count == 0


def test_learn_mode_answers_stay_editable(three_questions):
    session = QuizSession(three_questions, Mode.LEARN)
    session.record_answer(0, {"B"})

    assert session.record_answer(0, {"A"}) is True
    assert session.current_answer() == frozenset({"A"})


def test_completion_stamps_time_and_freezes_answers(three_questions, clock):
    session = QuizSession(three_questions, Mode.LEARN, clock=clock)
    session.record_answer(0, {"A"})
    session.advance()
    session.advance()
    clock.tick(42)
    assert session.next_action() is NextAction.FINISH

    assert session.advance() is NextAction.FINISH

    assert session.is_complete
    assert session.current_index == 3
    assert session.completed_at == clock.now
    assert session.current_question() is None
    assert session.next_action() is None
    assert session.record_answer(1, {"A", "B"}) is False
    assert session.answers == {0: frozenset({"A"})}
    assert session.advance() is None
    assert session.retreat() is False
    assert session.current_index == 3


def test_elapsed_time_runs_until_completion(three_questions, clock):
    session = QuizSession(three_questions, Mode.LEARN, clock=clock)
    clock.tick(30)
    assert session.elapsed_time() == timedelta(seconds=30)

    for _ in range(3):
        session.advance()
    clock.tick(600)

    assert session.elapsed_time() == timedelta(seconds=30)


def test_retreat_floors_at_zero_and_resets_feedback(three_questions):
    session = QuizSession(three_questions, Mode.TEST_SEQUENTIAL)
    assert session.retreat() is False
    assert session.current_index == 0

    session.record_answer(0, {"A"})
    session.advance()
    session.advance()
    session.record_answer(1, {"A"})
    session.advance()
    assert session.feedback_visible

    assert session.retreat() is True
    assert session.current_index == 0
    assert session.feedback_visible is False


def test_record_answer_replaces_previous_selection(three_questions):
    session = QuizSession(three_questions, Mode.LEARN)
    session.record_answer(0, ["A", "B", "A"])
    session.record_answer(0, ["C"])
    assert session.current_answer() == frozenset({"C"})


def test_record_answer_rejects_out_of_range_index(three_questions):
    session = QuizSession(three_questions, Mode.LEARN)
    assert session.record_answer(3, {"A"}) is False
    assert session.record_answer(-1, {"A"}) is False
    assert session.answers == {}


def test_empty_answer_does_not_trigger_reveal(three_questions):
    session = QuizSession(three_questions, Mode.TEST_SEQUENTIAL)
    session.record_answer(0, set())

    assert not session.can_advance()
    session.advance()
    assert session.current_index == 1


def test_score_and_snapshot(three_questions, clock):
    session = QuizSession(three_questions, Mode.TEST_SEQUENTIAL, assignment_id="4", clock=clock)
    session.record_answer(0, {"A"})
    session.advance()

    snapshot = session.snapshot()

    assert snapshot.assignment_id == "4"
    assert snapshot.current_index == 0
    assert snapshot.total == 3
    assert snapshot.feedback_visible
    assert snapshot.current_answer == frozenset({"A"})
    assert snapshot.next_action is NextAction.NEXT
    assert snapshot.progress_percentage == 33
    assert snapshot.can_advance and not snapshot.can_retreat
    assert session.score().correct_count == 1
