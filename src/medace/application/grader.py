"""
Review grader: SM-2 derived interval and ease updates.

This is a pure computation module with no I/O. Both grading paths (numeric
flashcard ratings and correct/incorrect quiz answers) share the same counter
rule and always return a complete new ReviewState.
"""

import math
from dataclasses import replace

from medace.domain.constants import (
    DEFAULT_EASE_FACTOR,
    EASE_BONUS,
    EASE_PENALTY,
    EASY_INTERVAL_MULTIPLIER,
    FIRST_EASY_INTERVAL,
    GRADUATION_INTERVAL,
    MAX_INTERVAL_DAYS,
    MIN_EASE_FACTOR,
    MS_PER_DAY,
    QUIZ_CORRECT_RATING,
    QUIZ_INCORRECT_RATING,
)
from medace.domain.errors import InvalidRating
from medace.domain.models import Rating, ReviewState, ReviewStatus, Word


def parse_rating(value: object) -> Rating:
    """
    Validate a raw rating at the API boundary.

    Raises:
        InvalidRating: If value is not one of 0, 1, 2, 3. Never clamps.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidRating(value)
    try:
        return Rating(value)
    except ValueError:
        raise InvalidRating(value) from None


def status_for_interval(interval: int) -> ReviewStatus:
    """Graduation is derived from the interval, never set independently."""
    return ReviewStatus.GRADUATED if interval > GRADUATION_INTERVAL else ReviewStatus.LEARNING


def _initial_state(word: Word, now: int) -> ReviewState:
    return ReviewState(
        word_id=word.id,
        book_id=word.book_id,
        status=ReviewStatus.LEARNING,
        interval=0,
        ease_factor=DEFAULT_EASE_FACTOR,
        next_review_date=now,
        last_studied_at=now,
        correct_count=0,
        attempt_count=0,
    )


def _counted(state: ReviewState, rating: int) -> tuple[int, int]:
    """Counter rule shared by both grading paths: (attempts, correct)."""
    correct = state.correct_count + (1 if rating >= Rating.GOOD else 0)
    return state.attempt_count + 1, correct


def _next_interval(interval: int, ease: float, rating: Rating) -> tuple[int, float]:
    if rating == Rating.FORGOT:
        return 0, max(MIN_EASE_FACTOR, ease - EASE_PENALTY)

    if rating == Rating.HARD:
        new_interval = 1
    elif rating == Rating.GOOD:
        new_interval = 1 if interval == 0 else math.ceil(interval * ease)
    else:
        if interval == 0:
            new_interval = FIRST_EASY_INTERVAL
        else:
            new_interval = math.ceil(interval * ease * EASY_INTERVAL_MULTIPLIER)
        ease = ease + EASE_BONUS

    return min(new_interval, MAX_INTERVAL_DAYS), ease


def grade(word: Word, previous: ReviewState | None, rating: Rating | int, now: int) -> ReviewState:
    """
    Compute the review state after grading one flashcard.

    Args:
        word: The graded word; supplies ids when no previous state exists.
        previous: Stored state, or None for a brand-new word
            (treated as interval 0, ease 2.5, zero counters).
        rating: 0 forgot, 1 hard, 2 good, 3 easy. Must already be validated
            with ``parse_rating``.
        now: Grading time in epoch ms.

    Returns:
        A complete new ReviewState.
    """
    rating = Rating(rating)
    base = previous if previous is not None else _initial_state(word, now)

    attempts, correct = _counted(base, rating)
    interval, ease = _next_interval(base.interval, base.ease_factor, rating)

    return replace(
        base,
        status=status_for_interval(interval),
        interval=interval,
        ease_factor=ease,
        next_review_date=now + interval * MS_PER_DAY,
        last_studied_at=now,
        correct_count=correct,
        attempt_count=attempts,
    )


def record_quiz_result(
    word: Word, previous: ReviewState | None, correct: bool, now: int
) -> ReviewState:
    """
    Record a correct/incorrect quiz answer.

    Only the counters and ``last_studied_at`` change. Scheduling fields
    (interval, ease, next review date, status) are kept as stored, or
    initialised to their defaults when the word has never been graded, so
    quiz answers never disturb the flashcard schedule.
    """
    derived = QUIZ_CORRECT_RATING if correct else QUIZ_INCORRECT_RATING
    base = previous if previous is not None else _initial_state(word, now)

    attempts, correct_count = _counted(base, derived)
    return replace(
        base,
        last_studied_at=now,
        correct_count=correct_count,
        attempt_count=attempts,
    )
