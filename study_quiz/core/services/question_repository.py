"""Service for loading, validating and caching the question bank."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
import json
import logging
from pathlib import Path
import time

from pydantic import ValidationError

from study_quiz.constants.quiz_constants import DEFAULT_CACHE_TTL_SECONDS
from study_quiz.core.models import Question
from study_quiz.core.question_schemas import RawQuestion
from study_quiz.core.quiz_importer import QuizImportError, load_quiz_from_file

logger = logging.getLogger(__name__)


class QuestionDataError(Exception):
    """Base class for question bank failures."""


class DataLoadError(QuestionDataError):
    """Raised when the question bank cannot be read or parsed."""


class DataValidationError(QuestionDataError):
    """Raised when the question bank holds no usable questions."""

    def __init__(self, message: str, invalid_records: list[InvalidRecord] | None = None) -> None:
        super().__init__(message)
        self.invalid_records = invalid_records or []


@dataclass(slots=True)
class InvalidRecord:
    """A raw record rejected during validation."""

    index: int
    errors: list[str]


class QuestionRepository:
    """Read-only source of validated questions, grouped by assignment.

    The bank is read from ``data_path`` (a JSON list of question records, or a
    text file in the import format) and cached for ``cache_ttl_seconds``.
    """

    def __init__(
        self,
        data_path: Path,
        cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if cache_ttl_seconds < 0:
            raise ValueError("Cache TTL must not be negative.")
        self._data_path = Path(data_path)
        self._cache_ttl_seconds = cache_ttl_seconds
        self._clock = clock
        self._cache: list[Question] | None = None
        self._cached_at: float | None = None

    @property
    def data_path(self) -> Path:
        return self._data_path

    def load_questions(self, force_refresh: bool = False) -> list[Question]:
        """Return every valid question, reading the bank when the cache is stale."""
        now = self._clock()
        if (
            not force_refresh
            and self._cache is not None
            and self._cached_at is not None
            and now - self._cached_at < self._cache_ttl_seconds
        ):
            return list(self._cache)

        if self._data_path.suffix.lower() == ".json":
            questions = self._load_json_bank()
        else:
            questions = self._load_text_bank()

        self._cache = questions
        self._cached_at = now
        logger.info("Loaded %d questions from %s", len(questions), self._data_path)
        return list(questions)

    def clear_cache(self) -> None:
        self._cache = None
        self._cached_at = None

    def get_assignment_ids(self) -> list[str]:
        ids = {question.assignment_id for question in self.load_questions()}
        return sorted(ids, key=_numeric)

    def get_questions(self, assignment_id: str | int) -> list[Question]:
        """Questions of one assignment, ordered by question number."""
        target = str(assignment_id)
        matching = [q for q in self.load_questions() if q.assignment_id == target]
        return sorted(matching, key=lambda q: _numeric(q.question_id))

    def get_questions_for_assignments(self, assignment_ids: Iterable[str | int]) -> list[Question]:
        targets = {str(assignment_id) for assignment_id in assignment_ids}
        matching = [q for q in self.load_questions() if q.assignment_id in targets]
        return sorted(matching, key=lambda q: (_numeric(q.assignment_id), _numeric(q.question_id)))

    def get_question_counts(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for question in self.load_questions():
            counts[question.assignment_id] = counts.get(question.assignment_id, 0) + 1
        return counts

    def is_valid_assignment(self, assignment_id: str | int | None) -> bool:
        if assignment_id is None or str(assignment_id) == "":
            return False
        target = str(assignment_id)
        return any(question.assignment_id == target for question in self.load_questions())

    def _load_json_bank(self) -> list[Question]:
        raw_records = self._read_json()
        if not isinstance(raw_records, list):
            raise DataValidationError(
                f"Invalid data format: expected a list of questions, got {type(raw_records).__name__}"
            )
        if not raw_records:
            raise DataValidationError("Question data file is empty")

        valid: list[Question] = []
        invalid: list[InvalidRecord] = []
        for index, record in enumerate(raw_records):
            try:
                valid.append(RawQuestion.model_validate(record).to_question())
            except ValidationError as exc:
                invalid.append(InvalidRecord(index=index, errors=_error_messages(exc)))

        if not valid:
            raise DataValidationError("No valid questions found in data file", invalid)
        if invalid:
            logger.warning(
                "Filtered out %d invalid question(s) from %s (%d valid): %s",
                len(invalid),
                self._data_path,
                len(valid),
                "; ".join(
                    f"Question {record.index + 1}: {', '.join(record.errors)}" for record in invalid
                ),
            )
        return valid

    def _read_json(self) -> object:
        try:
            text = self._data_path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise DataLoadError(f"Question data file not found: {self._data_path}") from exc
        except OSError as exc:
            raise DataLoadError(f"Unable to read question data file {self._data_path}: {exc}") from exc
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise DataLoadError(
                f"Invalid JSON format in question data file {self._data_path}: {exc.msg}"
            ) from exc

    def _load_text_bank(self) -> list[Question]:
        try:
            imported = load_quiz_from_file(self._data_path)
        except FileNotFoundError as exc:
            raise DataLoadError(f"Question data file not found: {self._data_path}") from exc
        except OSError as exc:
            raise DataLoadError(f"Unable to read question data file {self._data_path}: {exc}") from exc
        except QuizImportError as exc:
            raise DataValidationError(f"Invalid question file {self._data_path}: {exc}") from exc
        return imported.questions


def _numeric(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        return 0


def _error_messages(exc: ValidationError) -> list[str]:
    messages: list[str] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        message = error["msg"].removeprefix("Value error, ")
        messages.append(f"{location}: {message}" if location else message)
    return messages
