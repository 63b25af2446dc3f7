"""
Progress aggregator for dashboards.

Derives book progress, mastery buckets, activity heatmaps and instructor
summaries from review-state snapshots. This is a pure computation module
with no I/O.
"""

from collections import Counter
from collections.abc import Mapping, Sequence

from medace.domain.constants import (
    ACTIVITY_INTENSITY_THRESHOLDS,
    DANGER_IDLE_DAYS,
    MS_PER_DAY,
    REVIEW_BUCKET_MIN_INTERVAL,
    WARNING_IDLE_DAYS,
)
from medace.domain.models import (
    ActivityLog,
    BookProgress,
    MasteryBucket,
    MasteryDistribution,
    ReviewState,
    ReviewStatus,
    RiskLevel,
    StudentSummary,
    Word,
)

from .utils.clock import utc_date
from .utils.numbers import clamp, round_half_up


def calculate_percentage(learned: int, total: int) -> int:
    """
    Completion percentage that only reports 0 or 100 at the exact boundaries.

    Anything strictly between is rounded and kept within [1, 99].
    """
    if total == 0 or learned == 0:
        return 0
    if learned >= total:
        return 100
    return clamp(round_half_up(learned / total * 100), 1, 99)


def mastery_bucket(state: ReviewState) -> MasteryBucket:
    """
    Dashboard bucket of a single state.

    Graduated status wins; a learning state past the short-term interval is
    shown as "review"; records still marked new count as new.
    """
    if state.status == ReviewStatus.GRADUATED:
        return MasteryBucket.GRADUATED
    if state.status == ReviewStatus.LEARNING and state.interval > REVIEW_BUCKET_MIN_INTERVAL:
        return MasteryBucket.REVIEW
    if state.status == ReviewStatus.NEW:
        return MasteryBucket.NEW
    return MasteryBucket.LEARNING


def activity_intensity(count: int) -> int:
    """Map a daily review count onto the 0..4 heatmap scale."""
    return sum(1 for threshold in ACTIVITY_INTENSITY_THRESHOLDS if count >= threshold)


class ProgressAggregator:
    """
    Computes read-side summaries from review states.

    Stateless and side-effect free.
    """

    def book_progress(
        self,
        book_id: str,
        words_in_book: Sequence[Word],
        review_states: Mapping[str, ReviewState],
    ) -> BookProgress:
        """
        Participation progress for one book.

        A word counts as learned once it has been attempted at least once.
        States for words outside ``words_in_book`` are ignored.
        """
        word_ids = {w.id for w in words_in_book}
        learned = sum(
            1
            for word_id in word_ids
            if (state := review_states.get(word_id)) is not None and state.attempt_count > 0
        )
        total = len(word_ids)
        return BookProgress(
            book_id=book_id,
            learned_count=learned,
            total_count=total,
            percentage=calculate_percentage(learned, total),
        )

    def mastery_distribution(self, review_states: Sequence[ReviewState]) -> MasteryDistribution:
        counts = Counter(mastery_bucket(s) for s in review_states)
        return MasteryDistribution(
            new=counts[MasteryBucket.NEW],
            learning=counts[MasteryBucket.LEARNING],
            review=counts[MasteryBucket.REVIEW],
            graduated=counts[MasteryBucket.GRADUATED],
            total=len(review_states),
        )

    def activity_log(
        self,
        review_states: Sequence[ReviewState],
        window_days: int,
        now: int,
    ) -> list[ActivityLog]:
        """
        Daily study counts for the heatmap.

        Each state contributes its most recent study date. Only states
        studied within ``window_days`` before ``now`` are counted.

        Returns:
            One entry per active UTC date, oldest first.
        """
        if window_days <= 0:
            return []

        window_start = now - window_days * MS_PER_DAY
        counts = Counter(
            utc_date(s.last_studied_at).isoformat()
            for s in review_states
            if s.last_studied_at > 0 and window_start <= s.last_studied_at <= now
        )
        return [
            ActivityLog(date=day, count=count, intensity=activity_intensity(count))
            for day, count in sorted(counts.items())
        ]

    def student_summary(
        self,
        user_id: str,
        review_states: Sequence[ReviewState],
        now: int,
    ) -> StudentSummary:
        """
        Instructor view of one student.

        Risk rises with idle time: WARNING after 1.5 days, DANGER after 3 days
        or if the student has never studied.
        """
        total_attempts = sum(s.attempt_count for s in review_states)
        total_correct = sum(s.correct_count for s in review_states)
        last_active = max((s.last_studied_at for s in review_states), default=0)

        if last_active == 0:
            risk = RiskLevel.DANGER
        else:
            idle_days = (now - last_active) / MS_PER_DAY
            if idle_days > DANGER_IDLE_DAYS:
                risk = RiskLevel.DANGER
            elif idle_days > WARNING_IDLE_DAYS:
                risk = RiskLevel.WARNING
            else:
                risk = RiskLevel.SAFE

        return StudentSummary(
            user_id=user_id,
            total_learned=sum(1 for s in review_states if s.interval > REVIEW_BUCKET_MIN_INTERVAL),
            total_attempts=total_attempts,
            last_active=last_active,
            risk_level=risk,
            accuracy=total_correct / total_attempts if total_attempts else 0.0,
        )
