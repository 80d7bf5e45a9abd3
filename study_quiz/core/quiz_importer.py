"""Utilities for importing question banks from a human-friendly text file.

File format (repeat blocks separated by blank lines or '---'):

    ASSIGNMENT: assignment number the question belongs to
    ID: question number   (optional, numbered per assignment when omitted)
    Q: Question text (may embed inline math). Additional lines until the
       next marker are treated as part of the question.
    IMAGE: reference to an illustration   (optional)
    A: First option text
    B: Second option text
    ...   (one to ten options, lettered A-J in order)
    CORRECT: A, C   (one or more letters)

Example:

    ASSIGNMENT: 1
    Q: Which of these are supervised learning tasks?
    A: Classification
    B: Clustering
    C: Regression
    CORRECT: A, C

Each parsed block is validated with the same schema the JSON question bank
uses, so both sources reject exactly the same malformed questions.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from study_quiz.constants.quiz_constants import OPTION_LETTERS
from study_quiz.core.models import Question
from study_quiz.core.question_schemas import RawQuestion

_KEY_PREFIXES = ("ASSIGNMENT:", "ID:", "IMAGE:", "Q:", "CORRECT:")


class QuizImportError(Exception):
    """Raised when a question bank definition cannot be parsed."""


@dataclass(slots=True)
class ImportedQuiz:
    """Container for imported quiz metadata and questions."""

    source_path: Path
    questions: list[Question]


def load_quiz_from_file(file_path: Path) -> ImportedQuiz:
    text = file_path.read_text(encoding="utf-8")
    questions = parse_quiz_text(text)
    if not questions:
        raise QuizImportError("Quiz file did not contain any questions.")
    return ImportedQuiz(source_path=file_path, questions=questions)


def parse_quiz_text(text: str) -> list[Question]:
    blocks: list[str] = []
    current_block: list[str] = []
    for raw_line in text.splitlines():
        stripped = raw_line.strip()
        if stripped == "---":
            if current_block:
                blocks.append("\n".join(current_block).strip())
                current_block = []
            continue
        if stripped:
            current_block.append(raw_line)
        elif current_block:
            # Blank line encountered after content - finalize current block
            blocks.append("\n".join(current_block).strip())
            current_block = []
    if current_block:
        blocks.append("\n".join(current_block).strip())

    questions: list[Question] = []
    numbering: dict[str, int] = {}
    for block in blocks:
        if not block:
            continue
        question = _parse_block(block, numbering)
        questions.append(question)
    return questions


def _parse_block(block: str, numbering: dict[str, int]) -> Question:
    question_lines: list[str] = []
    options: dict[str, str] = {}
    correct_letters: list[str] = []
    assignment_id: str | None = None
    question_id: str | None = None
    image_ref: str | None = None
    current_section: str | None = None

    for raw_line in block.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        upper = line.upper()
        if upper.startswith("ASSIGNMENT:"):
            assignment_id = _value_after_colon(line)
            current_section = None
            continue

        if upper.startswith("ID:"):
            question_id = _value_after_colon(line)
            current_section = None
            continue

        if upper.startswith("IMAGE:"):
            image_ref = _value_after_colon(line) or None
            current_section = None
            continue

        if upper.startswith("Q:"):
            question_lines = [line[2:].strip()]
            current_section = "Q"
            continue

        if upper.startswith("CORRECT:"):
            raw_value = _value_after_colon(line).upper()
            correct_letters = [part.strip() for part in raw_value.replace(";", ",").split(",") if part.strip()]
            current_section = None
            continue

        if _is_option_line(line):
            letter = line[0].upper()
            if letter in options:
                raise QuizImportError(f"Option {letter} is defined twice.")
            options[letter] = line[2:].strip()
            current_section = letter
            continue

        if current_section == "Q":
            question_lines.append(line)
        elif current_section in options:
            options[current_section] = options[current_section] + f"\n{line}"
        else:
            raise QuizImportError(
                f"Encountered text outside of a known section: '{line}'."
            )

    if not assignment_id:
        raise QuizImportError("Assignment missing (ASSIGNMENT: ...)")
    if not question_lines:
        raise QuizImportError("Question text missing (Q: ...)")
    if not options:
        raise QuizImportError("Each question must define at least one option (A: ...).")

    expected_letters = list(OPTION_LETTERS[: len(options)])
    if sorted(options) != expected_letters:
        raise QuizImportError(
            f"Options must be lettered consecutively from A; found {', '.join(sorted(options))}."
        )
    if not correct_letters:
        raise QuizImportError("CORRECT must name at least one option letter.")
    unknown = [letter for letter in correct_letters if letter not in options]
    if unknown:
        raise QuizImportError(f"CORRECT refers to undefined option(s): {', '.join(unknown)}.")

    if question_id is None:
        numbering[assignment_id] = numbering.get(assignment_id, 0) + 1
        question_id = str(numbering[assignment_id])

    raw = {
        "assignmentnumber": assignment_id,
        "questionnumber": question_id,
        "question": "\n".join(question_lines).strip(),
        "image": image_ref,
        "options": [
            {
                "optionnumber": letter,
                "optiontext": options[letter].strip(),
                "iscorrect": letter in correct_letters,
            }
            for letter in expected_letters
        ],
    }
    try:
        return RawQuestion.model_validate(raw).to_question()
    except ValidationError as exc:
        raise QuizImportError(_describe_validation_error(exc)) from exc


def is_marker_line(line: str) -> bool:
    """Return True when ``line`` would start a new key or block instead of continuing text."""
    stripped = line.strip()
    upper = stripped.upper()
    if stripped == "---" or upper.startswith(_KEY_PREFIXES):
        return True
    return _is_option_line(stripped)


def _is_option_line(line: str) -> bool:
    return len(line) > 2 and line[0].upper() in OPTION_LETTERS and line[1] == ":"


def _value_after_colon(line: str) -> str:
    return line.split(":", 1)[1].strip()


def _describe_validation_error(exc: ValidationError) -> str:
    messages = [error["msg"].removeprefix("Value error, ") for error in exc.errors()]
    return "; ".join(messages)
