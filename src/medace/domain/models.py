"""
Domain models for vocabulary review scheduling.

These are pure data structures with no I/O or external dependencies.
Timestamps are integer milliseconds since the Unix epoch.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum, IntEnum

from .constants import DEFAULT_EASE_FACTOR


class Rating(IntEnum):
    """Recall quality reported by the learner for one flashcard."""

    FORGOT = 0
    HARD = 1
    GOOD = 2
    EASY = 3


class ReviewStatus(str, Enum):
    """Status literal stored on a ReviewState.

    ``NEW`` is implicit (no record exists); the grader only writes
    ``LEARNING`` and ``GRADUATED``. ``REVIEW`` is accepted when reading
    records written by older clients.
    """

    NEW = "new"
    LEARNING = "learning"
    REVIEW = "review"
    GRADUATED = "graduated"


class MasteryBucket(str, Enum):
    """Dashboard bucket derived from a ReviewState.

    Not interchangeable with ReviewStatus: the ``REVIEW`` bucket is derived
    from the interval, not from the status literal.
    """

    NEW = "new"
    LEARNING = "learning"
    REVIEW = "review"
    GRADUATED = "graduated"


class RiskLevel(str, Enum):
    SAFE = "SAFE"
    WARNING = "WARNING"
    DANGER = "DANGER"


@dataclass(frozen=True)
class Word:
    """
    A vocabulary item in a book.

    Attributes:
        id: Catalog-wide unique word id.
        book_id: Owning book.
        number: Stable sequence number inside the book (catalog order).
        word: Headword shown on the card front.
        definition: Meaning shown on the card back.
        example_sentence: Cached example sentence, if any.
        example_meaning: Translation of the cached example sentence.
    """

    id: str
    book_id: str
    number: int
    word: str
    definition: str
    example_sentence: str | None = None
    example_meaning: str | None = None


@dataclass(frozen=True)
class ReviewState:
    """
    Per-user review state of one word.

    Instances are immutable; every grading produces a complete new value.

    Attributes:
        word_id: The word this state belongs to.
        book_id: The word's book.
        status: Stored status literal (see ReviewStatus).
        interval: Days until the next review, within [0, 365].
        ease_factor: Interval growth multiplier, never below 1.3.
        next_review_date: Epoch ms when the item is next due.
        last_studied_at: Epoch ms of the most recent grading.
        correct_count: Gradings at rating >= 2 (or correct quiz answers).
        attempt_count: Total gradings.
    """

    word_id: str
    book_id: str
    status: ReviewStatus = ReviewStatus.LEARNING
    interval: int = 0
    ease_factor: float = DEFAULT_EASE_FACTOR
    next_review_date: int = 0
    last_studied_at: int = 0
    correct_count: int = 0
    attempt_count: int = 0


@dataclass(frozen=True)
class ReviewFilter:
    """Optional narrowing for listing review states."""

    book_id: str | None = None
    due_before: int | None = None  # Epoch ms, inclusive


@dataclass(frozen=True)
class BookProgress:
    book_id: str
    learned_count: int
    total_count: int
    percentage: int


@dataclass
class MasteryDistribution:
    """Read-only snapshot of review states counted per MasteryBucket."""

    new: int = 0
    learning: int = 0
    review: int = 0
    graduated: int = 0
    total: int = 0


@dataclass(frozen=True)
class ActivityLog:
    date: str  # YYYY-MM-DD (UTC)
    count: int
    intensity: int  # 0..4


@dataclass(frozen=True)
class GamificationState:
    """
    Per-user experience and streak counters.

    Only the gamification accumulator produces new values of this type.
    """

    xp: int = 0
    level: int = 1
    current_streak: int = 0
    last_login_date: date | None = None


@dataclass(frozen=True)
class LeaderboardEntry:
    user_id: str
    xp: int
    level: int
    rank: int
    is_current_user: bool


@dataclass(frozen=True)
class StudentSummary:
    user_id: str
    total_learned: int
    total_attempts: int
    last_active: int  # Epoch ms, 0 if never
    risk_level: RiskLevel
    accuracy: float


@dataclass(frozen=True)
class GradeOutcome:
    """
    Result of grading one card through the service.

    Grading itself awards no XP, so ``leveled_up`` stays False; it is part of
    the result so clients can treat grade and session rewards alike.
    """

    new_state: ReviewState
    leveled_up: bool = False


@dataclass(frozen=True)
class SessionReward:
    """XP breakdown awarded when a study session completes."""

    base_xp: int
    streak_bonus: int
    xp_awarded: int
    leveled_up: bool
    state: GamificationState = field(default_factory=GamificationState)


@dataclass(frozen=True)
class QuizQuestion:
    """Multiple-choice question: pick the definition of ``word``."""

    word: Word
    options: tuple[str, ...]
    answer: str

    def is_correct(self, option: str) -> bool:
        return option == self.answer
