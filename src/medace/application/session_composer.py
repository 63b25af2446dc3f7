"""
Session composer for bounded study sessions.

Builds ordered study queues by:
1. Partitioning candidate words into due / new / ahead buckets
2. Skipping graduated words
3. Filling the session in bucket priority order up to the limit
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from medace.domain.models import ReviewState, ReviewStatus, Word

logger = logging.getLogger(__name__)


@dataclass
class CandidateBuckets:
    """Candidate words split by scheduling priority, each in catalog order."""

    due: list[Word] = field(default_factory=list)  # next_review_date <= now
    new: list[Word] = field(default_factory=list)  # never graded
    ahead: list[Word] = field(default_factory=list)  # next_review_date > now
    skipped_graduated: int = 0

    @property
    def eligible(self) -> int:
        return len(self.due) + len(self.new) + len(self.ahead)


def partition_candidates(
    candidate_words: Sequence[Word],
    review_states: Mapping[str, ReviewState],
    now: int,
) -> CandidateBuckets:
    """
    Split candidates into due, new and ahead buckets.

    States for words absent from ``candidate_words`` are ignored. A word
    listed twice is only considered once.
    """
    buckets = CandidateBuckets()
    seen: set[str] = set()

    for word in candidate_words:
        if word.id in seen:
            continue
        seen.add(word.id)

        state = review_states.get(word.id)
        if state is None:
            buckets.new.append(word)
        elif state.status == ReviewStatus.GRADUATED:
            buckets.skipped_graduated += 1
        elif state.next_review_date <= now:
            buckets.due.append(word)
        else:
            buckets.ahead.append(word)

    return buckets


def compose_session(
    candidate_words: Sequence[Word],
    review_states: Mapping[str, ReviewState],
    limit: int,
    now: int,
) -> list[Word]:
    """
    Build the ordered queue for one study session.

    Due words come first, then new words, both in catalog order; remaining
    room is filled with ahead-of-schedule words, soonest next review first.

    Args:
        candidate_words: Pool in catalog order (book sequence number).
        review_states: word_id -> ReviewState snapshot for this user.
        limit: Maximum session length; <= 0 yields an empty session.
        now: Epoch ms used to decide what is due.

    Returns:
        ``min(limit, eligible)`` words, never padded or repeated.
    """
    if limit <= 0 or not candidate_words:
        return []

    buckets = partition_candidates(candidate_words, review_states, now)

    session = buckets.due[:limit]
    if len(session) < limit:
        session += buckets.new[: limit - len(session)]
    if len(session) < limit:
        # sorted() is stable, so equal review dates keep catalog order
        ahead = sorted(buckets.ahead, key=lambda w: review_states[w.id].next_review_date)
        session += ahead[: limit - len(session)]

    logger.debug(
        f"Composed session of {len(session)}/{limit} "
        f"(due={len(buckets.due)} new={len(buckets.new)} ahead={len(buckets.ahead)} "
        f"graduated={buckets.skipped_graduated})"
    )
    return session


def compose_daily_session(
    all_words: Sequence[Word],
    review_states: Mapping[str, ReviewState],
    limit: int,
    now: int,
) -> list[Word]:
    """
    Build a session drawn from the entire catalog rather than one book.

    Same priority rules as ``compose_session``; catalog order is the order
    of ``all_words`` (books in turn, each by sequence number).
    """
    return compose_session(all_words, review_states, limit, now)


def count_due(review_states: Sequence[ReviewState], now: int) -> int:
    """Number of non-graduated states whose next review is at or before now."""
    return sum(
        1
        for s in review_states
        if s.status != ReviewStatus.GRADUATED and s.next_review_date <= now
    )
