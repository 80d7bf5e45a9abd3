"""Answer checking and sanitising of user option selections."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence, Set as AbstractSet

from study_quiz.core.models import Mode, Question, SubmissionCheck


def correct_option_ids(question: Question) -> frozenset[str]:
    return question.correct_option_ids


def is_multiple_choice(question: Question) -> bool:
    return question.is_multiple_choice


def is_correct(selected: Iterable[str], question: Question) -> bool:
    """Return True when ``selected`` matches the correct options exactly.

    Order and duplicates are irrelevant. An empty selection is never correct,
    so a question without any correct option can never be satisfied.
    """
    chosen = frozenset(selected)
    if not chosen:
        return False
    return chosen == question.correct_option_ids


def sanitize_option_selection(raw: object, question: Question) -> tuple[str, ...]:
    """Normalize raw UI input into a clean tuple of known option ids.

    Unordered input (a set) is read in the question's option order, so a
    single-choice question always keeps the same option from it.
    """
    valid_ids = set(question.option_ids)
    if raw is None:
        items: Iterable[object] = ()
    elif isinstance(raw, str) or not isinstance(raw, Iterable):
        items = (raw,)
    elif isinstance(raw, AbstractSet):
        chosen = {str(item).strip() for item in raw if item is not None}
        items = [option_id for option_id in question.option_ids if option_id in chosen]
    else:
        items = raw

    cleaned: list[str] = []
    for item in items:
        if item is None:
            continue
        option_id = str(item).strip()
        if not option_id or option_id not in valid_ids or option_id in cleaned:
            continue
        cleaned.append(option_id)

    if not question.is_multiple_choice and len(cleaned) > 1:
        cleaned = cleaned[:1]
    return tuple(cleaned)


def validate_selected_options(selected: Sequence[str], question: Question) -> list[str]:
    """Return a list of problems with ``selected``; empty means valid."""
    if not selected:
        return ["At least one option must be selected"]

    errors: list[str] = []
    valid_ids = set(question.option_ids)
    unknown = [option_id for option_id in selected if option_id not in valid_ids]
    if unknown:
        errors.append(f"Invalid option(s): {', '.join(unknown)}")
    if not question.is_multiple_choice and len(selected) > 1:
        errors.append("Only one option can be selected for single-choice questions")
    if len(set(selected)) != len(selected):
        errors.append("Duplicate options selected")
    return errors


def is_answer_complete(selected: Sequence[str] | frozenset[str] | None, mode: Mode) -> bool:
    # Learn mode never blocks progress on an answer.
    if mode is Mode.LEARN:
        return True
    return bool(selected)


def validate_quiz_submission(
    answers: Mapping[int, Sequence[str]],
    questions: Sequence[Question],
    mode: Mode,
) -> SubmissionCheck:
    """Check a finished set of answers before it is submitted for scoring."""
    issues: list[str] = []
    unanswered_count = 0

    for index, question in enumerate(questions):
        selected = list(answers.get(index, ()))
        if not selected:
            unanswered_count += 1
            continue
        errors = validate_selected_options(selected, question)
        if errors:
            issues.append(f"Question {index + 1}: {', '.join(errors)}")

    if mode.is_test and unanswered_count > 0:
        issues.append(f"{unanswered_count} question(s) left unanswered")

    return SubmissionCheck(
        can_submit=not issues or mode is Mode.LEARN,
        unanswered_count=unanswered_count,
        issues=issues,
    )
