"""Shared fixtures for the quiz engine tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import json
from pathlib import Path

import pytest

from study_quiz.core.models import Option, Question


class FakeClock:
    """Deterministic wall clock for session timestamps."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def tick(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def build_question(
    question_id: str,
    correct: tuple[str, ...] = ("A",),
    option_ids: tuple[str, ...] = ("A", "B", "C", "D"),
    assignment_id: str = "1",
) -> Question:
    return Question(
        assignment_id=assignment_id,
        question_id=question_id,
        text=f"Question {question_id}",
        options=tuple(
            Option(option_id=option_id, text=f"Option {option_id}", is_correct=option_id in correct)
            for option_id in option_ids
        ),
    )


def raw_record(
    assignment: str,
    number: str,
    correct: tuple[str, ...] = ("A",),
    option_ids: tuple[str, ...] = ("A", "B", "C"),
) -> dict:
    return {
        "assignmentnumber": assignment,
        "questionnumber": number,
        "question": f"Assignment {assignment} question {number}",
        "options": [
            {"optionnumber": option_id, "optiontext": f"Choice {option_id}", "iscorrect": option_id in correct}
            for option_id in option_ids
        ],
    }


@pytest.fixture
def make_question():
    return build_question


@pytest.fixture
def make_record():
    return raw_record


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def three_questions() -> list[Question]:
    return [
        build_question("1", correct=("A",)),
        build_question("2", correct=("A", "B")),
        build_question("3", correct=("C",)),
    ]


@pytest.fixture
def bank_path(tmp_path: Path) -> Path:
    records = [
        raw_record("2", "2"),
        raw_record("1", "10", correct=("B",)),
        raw_record("1", "2", correct=("A", "C")),
        raw_record("1", "1"),
        raw_record("2", "1", correct=("C",)),
    ]
    path = tmp_path / "data.json"
    path.write_text(json.dumps(records), encoding="utf-8")
    return path
