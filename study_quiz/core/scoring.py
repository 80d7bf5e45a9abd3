"""Score calculation for single- and multiple-answer quizzes."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from study_quiz.constants.quiz_constants import MEGA_REWARD_MIN_CORRECT, PASSING_PERCENTAGE
from study_quiz.core.answer_validation import is_correct
from study_quiz.core.models import (
    DetailedResult,
    Question,
    QuestionResult,
    ReviewedOption,
    ScoreSummary,
)

Answers = Mapping[int, Iterable[str]]


def percentage_of(correct_count: int, total: int) -> int:
    """Whole-number percentage rounded half up; 0 when there is nothing to score."""
    if total <= 0:
        return 0
    return (200 * correct_count + total) // (2 * total)


def score(answers: Answers, questions: Sequence[Question]) -> ScoreSummary:
    """Score ``answers`` (question index -> selected option ids) against ``questions``.

    Pure: missing answers count as empty selections and nothing is mutated.
    """
    results: list[QuestionResult] = []
    correct_count = 0
    for index, question in enumerate(questions):
        selected = frozenset(answers.get(index, ()))
        question_correct = is_correct(selected, question)
        if question_correct:
            correct_count += 1
        results.append(
            QuestionResult(
                index=index,
                selected=selected,
                correct_option_ids=question.correct_option_ids,
                is_correct=question_correct,
            )
        )

    total = len(questions)
    percentage = percentage_of(correct_count, total)
    return ScoreSummary(
        correct_count=correct_count,
        total=total,
        percentage=percentage,
        passed=percentage >= PASSING_PERCENTAGE,
        per_question=tuple(results),
    )


def detailed_results(answers: Answers, questions: Sequence[Question]) -> list[DetailedResult]:
    """Build the per-question review shown after a quiz is finished."""
    rows: list[DetailedResult] = []
    for index, question in enumerate(questions):
        selected = frozenset(answers.get(index, ()))
        rows.append(
            DetailedResult(
                question_number=index + 1,
                question_text=question.text,
                selected=selected,
                correct_option_ids=question.correct_option_ids,
                is_correct=is_correct(selected, question),
                is_multiple_choice=question.is_multiple_choice,
                options=tuple(
                    ReviewedOption(
                        option_id=option.option_id,
                        text=option.text,
                        is_correct=option.is_correct,
                        was_selected=option.option_id in selected,
                    )
                    for option in question.options
                ),
            )
        )
    return rows


def mega_reward_earned(summary: ScoreSummary) -> bool:
    return summary.correct_count >= MEGA_REWARD_MIN_CORRECT


def completion_message(percentage: int) -> str:
    """Encouragement line matching the achieved percentage."""
    if percentage >= 90:
        return "Excellent work, you're mastering these concepts!"
    if percentage >= 80:
        return "Great job, you're doing really well!"
    if percentage >= PASSING_PERCENTAGE:
        return "Good effort, keep practicing to improve!"
    if percentage >= 60:
        return "Nice try, review the material and try again!"
    return "Keep studying, you'll get there with more practice!"
