"""
Quiz composer: multiple-choice definition questions drawn from one book.

Pure logic, no store access. Randomness comes from an injected
``random.Random`` so callers can make quizzes reproducible.
"""

import random
from collections.abc import Sequence

from medace.domain.constants import QUIZ_DISTRACTORS, QUIZ_SIZE
from medace.domain.models import QuizQuestion, Word

from .utils.numbers import round_half_up


def _distractor_pool(target: Word, words: Sequence[Word]) -> list[str]:
    """Definitions of other words, excluding any that read like the answer."""
    pool: list[str] = []
    for other in words:
        if other.id == target.id or not other.definition:
            continue
        if other.definition == target.definition or other.definition in pool:
            continue
        pool.append(other.definition)
    return pool


def build_question(
    target: Word,
    words: Sequence[Word],
    rng: random.Random,
    distractors: int = QUIZ_DISTRACTORS,
) -> QuizQuestion:
    """
    One question for ``target``: its definition plus up to ``distractors``
    definitions of other words, shuffled.
    """
    pool = _distractor_pool(target, words)
    options = rng.sample(pool, min(distractors, len(pool)))
    options.append(target.definition)
    rng.shuffle(options)
    return QuizQuestion(word=target, options=tuple(options), answer=target.definition)


def compose_quiz(
    words: Sequence[Word],
    size: int = QUIZ_SIZE,
    rng: random.Random | None = None,
) -> list[QuizQuestion]:
    """
    Build a quiz of up to ``size`` questions from a book's words.

    Target words are drawn at random without repetition. Books with fewer
    than four words yield questions with fewer options; an empty book or a
    non-positive size yields no questions.
    """
    if size <= 0 or not words:
        return []

    rng = rng or random.Random()
    unique = list({w.id: w for w in words}.values())
    targets = rng.sample(unique, min(size, len(unique)))
    return [build_question(target, unique, rng) for target in targets]


def quiz_score(correct: int, total: int) -> int:
    """Final score as a whole percentage."""
    if total <= 0:
        return 0
    return round_half_up(correct / total * 100)
