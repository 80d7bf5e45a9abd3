"""Utilities for exporting question banks to the text or JSON format used for imports."""

from __future__ import annotations

import json
from pathlib import Path

from study_quiz.constants.quiz_constants import OPTION_LETTERS
from study_quiz.core.models import Question
from study_quiz.core.question_schemas import RawQuestion
from study_quiz.core.quiz_importer import is_marker_line


def save_quiz_to_file(file_path: Path, questions: list[Question]) -> None:
    """Persist the provided questions to disk.

    ``.json`` paths are written as a JSON question bank; anything else uses the
    text import format. Text that the import format cannot carry (blank lines,
    or continuation lines that look like a key such as ``B:`` or ``CORRECT:``)
    raises ``ValueError`` before anything is written; use a ``.json`` path for
    such banks.
    """

    if not questions:
        raise ValueError("Cannot export an empty quiz.")

    file_path = file_path.resolve()
    if file_path.suffix.lower() == ".json":
        document = _serialize_questions_json(questions)
    else:
        document = _serialize_questions(questions)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(document, encoding="utf-8")


def _serialize_questions_json(questions: list[Question]) -> str:
    records = [RawQuestion.from_question(question).model_dump() for question in questions]
    return json.dumps(records, indent=2, ensure_ascii=False) + "\n"


def _serialize_questions(questions: list[Question]) -> str:
    blocks = [_serialize_question(question) for question in questions]
    return "\n\n---\n\n".join(blocks) + "\n"


def _serialize_question(question: Question) -> str:
    label = f"Question {question.assignment_id}.{question.question_id}"
    lines: list[str] = [
        f"ASSIGNMENT: {question.assignment_id}",
        f"ID: {question.question_id}",
    ]

    question_lines = _text_lines(question.text, label)
    lines.append(f"Q: {question_lines[0]}")
    lines.extend(question_lines[1:])

    if question.image_ref:
        lines.append(f"IMAGE: {question.image_ref}")

    # Options are re-lettered so the file always satisfies the A, B, C... rule.
    correct_letters: list[str] = []
    for option, letter in zip(question.options, OPTION_LETTERS):
        option_lines = _text_lines(option.text, f"{label} option {option.option_id}")
        lines.append(f"{letter}: {option_lines[0]}")
        lines.extend(option_lines[1:])
        if option.is_correct:
            correct_letters.append(letter)

    lines.append(f"CORRECT: {', '.join(correct_letters)}")
    return "\n".join(lines)


def _text_lines(text: str, label: str) -> list[str]:
    lines = [line.strip() for line in text.splitlines()]
    if not lines or not all(lines):
        raise ValueError(f"{label}: blank lines cannot be exported to the text format.")
    for line in lines[1:]:
        if is_marker_line(line):
            raise ValueError(f"{label}: line '{line}' would be read back as a new key.")
    return lines
