"""Business logic connecting the question repository with quiz sessions."""

from __future__ import annotations

import logging
import random
from threading import Lock

from study_quiz.constants.quiz_constants import MEGA_TEST_ASSIGNMENT_ID
from study_quiz.core import scoring
from study_quiz.core.answer_validation import sanitize_option_selection, validate_quiz_submission
from study_quiz.core.models import (
    DetailedResult,
    Mode,
    Question,
    ScoreSummary,
    SessionSnapshot,
    SubmissionCheck,
)
from study_quiz.core.services.question_repository import QuestionRepository
from study_quiz.core.services.quiz_session import Clock, QuizSession
from study_quiz.core.shuffle import prepare_for_mode, shuffle

logger = logging.getLogger(__name__)


class QuizManager:
    """Facade for UI consumers: turns user intents into session transitions.

    Every call is serialised with a lock, which is the external
    synchronisation a :class:`QuizSession` expects.
    """

    def __init__(
        self,
        repository: QuestionRepository,
        rng: random.Random | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._lock = Lock()
        self._repository = repository
        self._rng = rng or random.Random()
        self._clock = clock
        self._session: QuizSession | None = None
        self._source_questions: list[Question] = []

    # --- Session lifecycle ---

    def start_quiz(self, assignment_id: str | int, mode: Mode | str) -> SessionSnapshot:
        """Begin a new attempt for ``assignment_id`` in ``mode``."""
        if not isinstance(mode, Mode):
            mode = Mode.from_slug(mode)
        target = str(assignment_id)
        with self._lock:
            if not self._repository.is_valid_assignment(target):
                raise ValueError(f"Unknown assignment '{target}'.")
            questions = self._repository.get_questions(target)
            if not questions:
                raise ValueError(f"Assignment '{target}' has no questions.")
            self._source_questions = questions
            self._session = self._create_session(target, mode)
            logger.info(
                "Started %s for assignment %s with %d questions",
                mode.display_name,
                target,
                len(questions),
            )
            return self._session.snapshot()

    def start_mega_test(self) -> SessionSnapshot:
        """Begin a practice attempt over every assignment's questions."""
        with self._lock:
            assignment_ids = self._repository.get_assignment_ids()
            questions = self._repository.get_questions_for_assignments(assignment_ids)
            if not questions:
                raise ValueError("No questions available for the mega test.")
            self._source_questions = questions
            self._session = self._create_session(MEGA_TEST_ASSIGNMENT_ID, Mode.TEST_SEQUENTIAL)
            logger.info("Started mega test with %d questions", len(questions))
            return self._session.snapshot()

    def retake(self) -> SessionSnapshot:
        """Discard the current attempt and start over with fresh randomization."""
        with self._lock:
            session = self._require_session()
            self._session = self._create_session(session.assignment_id, session.mode)
            return self._session.snapshot()

    def has_active_session(self) -> bool:
        with self._lock:
            return self._session is not None

    def is_mega_test(self) -> bool:
        with self._lock:
            return self._session is not None and self._session.assignment_id == MEGA_TEST_ASSIGNMENT_ID

    def set_shuffle_seed(self, seed: int | None) -> None:
        with self._lock:
            self._rng.seed(seed)

    # --- Intents ---

    def select_options(self, option_ids: object) -> SessionSnapshot:
        """Record the learner's selection for the current question."""
        with self._lock:
            session = self._require_session()
            question = session.current_question()
            if question is not None:
                selected = sanitize_option_selection(option_ids, question)
                session.record_answer(session.current_index, selected)
            return session.snapshot()

    def next(self) -> SessionSnapshot:
        with self._lock:
            session = self._require_session()
            session.advance()
            return session.snapshot()

    def previous(self) -> SessionSnapshot:
        with self._lock:
            session = self._require_session()
            session.retreat()
            return session.snapshot()

    def skip(self) -> SessionSnapshot:
        with self._lock:
            session = self._require_session()
            session.skip()
            return session.snapshot()

    # --- Results ---

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            return self._require_session().snapshot()

    def get_score(self) -> ScoreSummary:
        with self._lock:
            return self._require_session().score()

    def get_detailed_results(self) -> list[DetailedResult]:
        with self._lock:
            session = self._require_session()
            return scoring.detailed_results(session.answers, session.questions)

    def get_submission_check(self) -> SubmissionCheck:
        with self._lock:
            session = self._require_session()
            answers = {index: sorted(selected) for index, selected in session.answers.items()}
            return validate_quiz_submission(answers, session.questions, session.mode)

    def get_completion_message(self) -> str:
        with self._lock:
            return scoring.completion_message(self._require_session().score().percentage)

    def has_earned_mega_reward(self) -> bool:
        with self._lock:
            session = self._require_session()
            if session.assignment_id != MEGA_TEST_ASSIGNMENT_ID or not session.is_complete:
                return False
            return scoring.mega_reward_earned(session.score())

    # --- Helpers (lock must be held) ---

    def _create_session(self, assignment_id: str, mode: Mode) -> QuizSession:
        if assignment_id == MEGA_TEST_ASSIGNMENT_ID:
            questions = shuffle(self._source_questions, self._rng)
        else:
            questions = prepare_for_mode(self._source_questions, mode, self._rng)
        return QuizSession(questions, mode, assignment_id=assignment_id, clock=self._clock)

    def _require_session(self) -> QuizSession:
        if self._session is None:
            raise RuntimeError("No quiz session has been started.")
        return self._session
