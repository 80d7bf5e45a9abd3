"""State machine for a single quiz attempt."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from datetime import datetime, timedelta, timezone
import logging

from study_quiz.core import scoring
from study_quiz.core.models import (
    Mode,
    NextAction,
    Question,
    ScoreSummary,
    SessionSnapshot,
)

Clock = Callable[[], datetime]

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class QuizSession:
    """Tracks progression, answers and feedback visibility for one quiz attempt.

    A session is either in progress (``0 <= current_index < total``) or
    complete (``current_index == total``). The questions must already be
    prepared for ``mode`` and must not be empty; callers guarantee this.

    Not thread-safe: mutate a session from one thread of control at a time.
    """

    def __init__(
        self,
        questions: Sequence[Question],
        mode: Mode,
        assignment_id: str = "",
        clock: Clock | None = None,
    ) -> None:
        self._questions: tuple[Question, ...] = tuple(questions)
        self._mode = mode
        self._assignment_id = assignment_id
        self._clock: Clock = clock or utc_now
        self._current_index: int = 0
        self._answers: dict[int, frozenset[str]] = {}
        # Learn mode shows feedback from the start and never hides it.
        self._feedback_visible: bool = mode is Mode.LEARN
        self._started_at: datetime = self._clock()
        self._completed_at: datetime | None = None

    # --- State ---

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def assignment_id(self) -> str:
        return self._assignment_id

    @property
    def questions(self) -> tuple[Question, ...]:
        return self._questions

    @property
    def total(self) -> int:
        return len(self._questions)

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def answers(self) -> dict[int, frozenset[str]]:
        return dict(self._answers)

    @property
    def feedback_visible(self) -> bool:
        return self._feedback_visible

    @property
    def started_at(self) -> datetime:
        return self._started_at

    @property
    def completed_at(self) -> datetime | None:
        return self._completed_at

    @property
    def is_complete(self) -> bool:
        return self._current_index >= len(self._questions)

    # --- Transitions ---

    def record_answer(self, index: int, selected: Iterable[str]) -> bool:
        """Store ``selected`` for the question at ``index``.

        Returns False without changing anything when the session is complete,
        the index is out of range, or a test-mode answer is already locked
        because its feedback is showing.
        """
        if self.is_complete:
            logger.debug("Ignoring answer for question %s: session is complete", index)
            return False
        if not 0 <= index < len(self._questions):
            logger.warning("Ignoring answer for out-of-range question index %s", index)
            return False
        if self._mode.is_test and self._feedback_visible and index == self._current_index:
            logger.debug("Ignoring answer for question %s: feedback already revealed", index)
            return False
        self._answers[index] = frozenset(selected)
        return True

    def reveal_feedback(self) -> None:
        if self.is_complete:
            return
        self._feedback_visible = True

    def advance(self) -> NextAction | None:
        """Press the "Next" control.

        In test modes the first press after answering only reveals feedback;
        the second press moves on. Learn mode always moves on. Returns the
        action performed, or None when the session is already complete.
        """
        if self.is_complete:
            logger.debug("Ignoring advance: session is complete")
            return None
        if self._mode.is_test and not self._feedback_visible and self._has_current_answer():
            self.reveal_feedback()
            return NextAction.REVEAL
        return self._move_forward()

    def skip(self) -> NextAction | None:
        """Move past the current question in Learn mode.

        Test modes have no skip control, so this returns None there and the
        learner has to go through ``advance``.
        """
        if self.is_complete:
            logger.debug("Ignoring skip: session is complete")
            return None
        if self._mode is not Mode.LEARN:
            logger.debug("Ignoring skip: not available in %s", self._mode.display_name)
            return None
        return self._move_forward()

    def retreat(self) -> bool:
        """Go back one question; a no-op at the first question or after completion."""
        if self.is_complete:
            logger.debug("Ignoring retreat: session is complete")
            return False
        if self._current_index == 0:
            return False
        self._current_index -= 1
        self._feedback_visible = self._mode is Mode.LEARN
        return True

    # --- Queries ---

    def can_advance(self) -> bool:
        """Advisory gate for the "Next" control; ``advance`` does not enforce it."""
        return self._mode is Mode.LEARN or self._has_current_answer()

    def can_retreat(self) -> bool:
        return not self.is_complete and self._current_index > 0

    def current_question(self) -> Question | None:
        if self.is_complete:
            return None
        return self._questions[self._current_index]

    def current_answer(self) -> frozenset[str]:
        return self._answers.get(self._current_index, frozenset())

    def next_action(self) -> NextAction | None:
        if self.is_complete:
            return None
        if self._mode.is_test and not self._feedback_visible and self._has_current_answer():
            return NextAction.REVEAL
        if self._current_index == len(self._questions) - 1:
            return NextAction.FINISH
        return NextAction.NEXT

    def elapsed_time(self) -> timedelta:
        end = self._completed_at if self._completed_at is not None else self._clock()
        return end - self._started_at

    def progress_percentage(self) -> int:
        total = len(self._questions)
        if total == 0:
            return 0
        shown = min(self._current_index + 1, total)
        return scoring.percentage_of(shown, total)

    def score(self) -> ScoreSummary:
        return scoring.score(self._answers, self._questions)

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            assignment_id=self._assignment_id,
            mode=self._mode,
            current_index=self._current_index,
            total=len(self._questions),
            current_question=self.current_question(),
            current_answer=self.current_answer(),
            feedback_visible=self._feedback_visible,
            is_complete=self.is_complete,
            can_advance=self.can_advance(),
            can_retreat=self.can_retreat(),
            progress_percentage=self.progress_percentage(),
            next_action=self.next_action(),
            elapsed=self.elapsed_time(),
        )

    def _has_current_answer(self) -> bool:
        return bool(self._answers.get(self._current_index))

    def _move_forward(self) -> NextAction:
        finishing = self._current_index == len(self._questions) - 1
        self._current_index += 1
        self._feedback_visible = self._mode is Mode.LEARN
        if self._current_index >= len(self._questions):
            self._current_index = len(self._questions)
            self._completed_at = self._clock()
            logger.info(
                "Quiz session for assignment %s completed after %s",
                self._assignment_id or "<unknown>",
                self.elapsed_time(),
            )
        return NextAction.FINISH if finishing else NextAction.NEXT
