"""Shuffling of questions and options for the randomized test mode."""

from __future__ import annotations

from dataclasses import replace
import random
from typing import Sequence, TypeVar

from study_quiz.core.models import Mode, Question

T = TypeVar("T")

_default_rng = random.Random()


def shuffle(sequence: Sequence[T], rng: random.Random | None = None) -> list[T]:
    """Return a new list with the elements of ``sequence`` in uniformly random order.

    Reverse Fisher-Yates: every one of the n! orderings is equally likely and
    the input is never mutated.
    """
    rng = rng or _default_rng
    shuffled = list(sequence)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def shuffle_question_options(question: Question, rng: random.Random | None = None) -> Question:
    """Return a copy of ``question`` with its options in random order."""
    return replace(question, options=tuple(shuffle(question.options, rng)))


def prepare_for_mode(
    questions: Sequence[Question],
    mode: Mode,
    rng: random.Random | None = None,
) -> list[Question]:
    """Order questions (and their options) the way ``mode`` presents them."""
    prepared = list(questions)
    if mode is Mode.TEST_RANDOMIZED:
        prepared = shuffle(prepared, rng)
        prepared = [shuffle_question_options(question, rng) for question in prepared]
    return prepared
