"""Domain models for the quiz engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum


class Mode(Enum):
    """Learning mode, fixed for the lifetime of a session."""

    LEARN = "learn"
    TEST_SEQUENTIAL = "test-easy"
    TEST_RANDOMIZED = "test-difficult"

    @property
    def slug(self) -> str:
        return self.value

    @property
    def display_name(self) -> str:
        return _MODE_DISPLAY_NAMES[self]

    @property
    def is_test(self) -> bool:
        return self is not Mode.LEARN

    @classmethod
    def from_slug(cls, slug: str) -> "Mode":
        """Parse a route slug such as ``test-easy`` into a mode."""
        normalized = (slug or "").strip().lower()
        for mode in cls:
            if mode.value == normalized:
                return mode
        valid = ", ".join(mode.value for mode in cls)
        raise ValueError(f"Unknown quiz mode '{slug}'. Expected one of: {valid}.")


_MODE_DISPLAY_NAMES = {
    Mode.LEARN: "Learn Mode",
    Mode.TEST_SEQUENTIAL: "Test Easy",
    Mode.TEST_RANDOMIZED: "Test Difficult",
}


class NextAction(Enum):
    """What the single "Next" control does in the current session state."""

    REVEAL = "Show Answer"
    NEXT = "Next"
    FINISH = "Finish Quiz"

    @property
    def label(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Option:
    """One selectable answer choice within a question."""

    option_id: str
    text: str
    is_correct: bool = False


@dataclass(frozen=True, slots=True)
class Question:
    """Multiple-choice question with one or more correct options."""

    assignment_id: str
    question_id: str
    text: str
    options: tuple[Option, ...]
    image_ref: str | None = None

    @property
    def correct_option_ids(self) -> frozenset[str]:
        return frozenset(option.option_id for option in self.options if option.is_correct)

    @property
    def is_multiple_choice(self) -> bool:
        # Derived on every read so it can never disagree with the options.
        return len(self.correct_option_ids) > 1

    @property
    def option_ids(self) -> tuple[str, ...]:
        return tuple(option.option_id for option in self.options)


@dataclass(frozen=True, slots=True)
class QuestionResult:
    """Per-question line of a score summary."""

    index: int
    selected: frozenset[str]
    correct_option_ids: frozenset[str]
    is_correct: bool


@dataclass(frozen=True, slots=True)
class ScoreSummary:
    """Aggregate result of a quiz attempt."""

    correct_count: int
    total: int
    percentage: int
    passed: bool
    per_question: tuple[QuestionResult, ...] = ()


@dataclass(frozen=True, slots=True)
class ReviewedOption:
    option_id: str
    text: str
    is_correct: bool
    was_selected: bool


@dataclass(frozen=True, slots=True)
class DetailedResult:
    """Review row for a single question shown after completion."""

    question_number: int
    question_text: str
    selected: frozenset[str]
    correct_option_ids: frozenset[str]
    is_correct: bool
    is_multiple_choice: bool
    options: tuple[ReviewedOption, ...]


@dataclass(slots=True)
class SubmissionCheck:
    """Outcome of checking whether a quiz can be submitted."""

    can_submit: bool
    unanswered_count: int
    issues: list[str] = field(default_factory=list)

    @property
    def has_validation_errors(self) -> bool:
        return any("unanswered" not in issue for issue in self.issues)


@dataclass(frozen=True, slots=True)
class SessionSnapshot:
    """Immutable view of a quiz session handed to UI consumers."""

    assignment_id: str
    mode: Mode
    current_index: int
    total: int
    current_question: Question | None
    current_answer: frozenset[str]
    feedback_visible: bool
    is_complete: bool
    can_advance: bool
    can_retreat: bool
    progress_percentage: int
    next_action: NextAction | None
    elapsed: timedelta
