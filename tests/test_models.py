"""
Unit tests for the session answer/reveal/advance state machine.
"""
import pytest

from hemaquiz.models import (
    MultipleChoiceItem,
    QuestionType,
    QuizQuestion,
    QuizResult,
    SessionData,
    SessionStatus,
    TrueFalseItem,
)


def make_session(count=3):
    questions = [
        QuizQuestion(
            id=f"q{i}",
            chapter="c",
            question=f"Question {i}",
            type=QuestionType.MULTIPLE_CHOICE,
            answer_text="b",
            options=["a", "b"],
            correct_option_index=1,
        )
        for i in range(count)
    ]
    return SessionData(session_id="s1", subject_id="hematology", questions=questions)


class TestCaptureAnswer:
    def test_captures_current_question(self):
        session = make_session()

        assert session.capture_answer("q0", "1") is True
        assert session.answers == {"q0": "1"}

    def test_overwrites_previous_answer(self):
        session = make_session()
        session.capture_answer("q0", "0")
        session.capture_answer("q0", "1")

        assert session.answers["q0"] == "1"

    def test_ignores_other_question(self):
        session = make_session()

        assert session.capture_answer("q1", "1") is False
        assert session.answers == {}

    def test_ignored_after_reveal(self):
        session = make_session()
        session.capture_answer("q0", "0")
        session.reveal()

        assert session.capture_answer("q0", "1") is False
        assert session.answers["q0"] == "0"

    def test_ignored_when_complete(self):
        session = make_session(1)
        session.capture_answer("q0", "1")
        session.advance()
        session.complete([])

        assert session.capture_answer("q0", "0") is False


class TestReveal:
    def test_reveal_is_idempotent(self):
        session = make_session()

        assert session.reveal() is True
        assert session.reveal() is True
        assert session.revealed is True
        assert session.current_index == 0

    def test_reveal_ignored_when_empty(self):
        session = SessionData(
            session_id="s1",
            subject_id="x",
            questions=[],
            status=SessionStatus.EMPTY,
        )

        assert session.reveal() is False
        assert session.current_question is None


class TestAdvance:
    def test_requires_answer_or_reveal(self):
        session = make_session()

        assert session.can_advance() is False
        assert session.advance() is False
        assert session.current_index == 0

    def test_empty_answer_does_not_count(self):
        session = make_session()
        session.capture_answer("q0", "")

        assert session.advance() is False

    def test_advance_after_answer_resets_reveal(self):
        session = make_session()
        session.capture_answer("q0", "1")
        session.reveal()

        assert session.advance() is True
        assert session.current_index == 1
        assert session.revealed is False

    def test_advance_after_reveal_without_answer(self):
        session = make_session()
        session.reveal()

        assert session.advance() is True
        assert session.current_index == 1

    def test_last_question_moves_to_evaluating(self):
        session = make_session(2)
        for question_id in ("q0", "q1"):
            session.capture_answer(question_id, "1")
            session.advance()

        assert session.status == SessionStatus.EVALUATING
        assert session.current_index == 1
        assert session.advance() is False

    def test_index_stays_in_bounds(self):
        session = make_session(3)
        for _ in range(10):
            session.reveal()
            session.advance()
            if session.status == SessionStatus.IN_PROGRESS:
                assert 0 <= session.current_index < session.total_questions

        assert session.current_index == 2

    def test_complete_is_terminal(self):
        session = make_session(1)
        session.reveal()
        session.advance()
        session.complete(
            [QuizResult(question_id="q0", user_answer="", correct=False, score=0, feedback="x")]
        )

        assert session.status == SessionStatus.COMPLETE
        assert session.reveal() is False
        assert session.advance() is False


class TestModels:
    def test_results_are_immutable(self):
        result = QuizResult(
            question_id="q0", user_answer="a", correct=True, score=100, feedback="ok"
        )
        with pytest.raises(Exception):
            result.score = 0

    def test_options_split_from_csv_cell(self):
        item = MultipleChoiceItem(
            id="m", chapter="c", question="q", options="a | b|c", correct_answer="2"
        )

        assert item.options == ["a", "b", "c"]
        assert item.correct_answer == 2

    def test_true_false_parses_strings(self):
        item = TrueFalseItem(id="f", chapter="c", question="q", correct_answer="True")
        assert item.correct_answer is True

    def test_session_json_round_trip_keeps_state(self):
        session = make_session()
        session.capture_answer("q0", "1")
        session.reveal()

        restored = SessionData.model_validate_json(session.model_dump_json())

        assert restored.answers == {"q0": "1"}
        assert restored.revealed is True
        assert restored.status == SessionStatus.IN_PROGRESS
