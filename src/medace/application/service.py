"""
Study Service: Application layer orchestrator.

Coordinates reading snapshots from the card record store, running the pure
grader / composer / aggregator / accumulator, and writing results back.
"""

import logging
import random
from collections.abc import Callable

from medace.domain.constants import (
    DAILY_SESSION,
    DEFAULT_ACTIVITY_WINDOW_DAYS,
    LEADERBOARD_SIZE,
    QUIZ_SIZE,
)
from medace.domain.errors import NotFound
from medace.domain.models import (
    ActivityLog,
    BookProgress,
    GamificationState,
    GradeOutcome,
    LeaderboardEntry,
    MasteryDistribution,
    QuizQuestion,
    ReviewFilter,
    ReviewState,
    SessionReward,
    StudentSummary,
    Word,
)
from medace.domain.ports import CardRecordStore

from .gamification import add_xp, rank_leaderboard, session_xp, update_streak
from .grader import grade, parse_rating, record_quiz_result
from .progress import ProgressAggregator
from .quiz import compose_quiz
from .session_composer import compose_daily_session, compose_session, count_due
from .study_session import StudySession
from .utils.clock import now_ms, utc_date

logger = logging.getLogger(__name__)


class StudyService:
    """
    Application service exposing the scheduling engine to the UI layer.

    Follows Dependency Inversion: depends on the CardRecordStore abstraction,
    not concrete adapter implementations.
    """

    def __init__(
        self,
        store: CardRecordStore,
        aggregator: ProgressAggregator | None = None,
        clock: Callable[[], int] = now_ms,
        rng: random.Random | None = None,
    ):
        """
        Args:
            store: The card record store (port).
            aggregator: Optional custom aggregator; uses default if not provided.
            clock: Returns "now" in epoch ms; injectable for tests.
            rng: Randomness for quiz composition; seed it for reproducible quizzes.
        """
        self._store = store
        self._progress = aggregator or ProgressAggregator()
        self._clock = clock
        self._rng = rng or random.Random()

    # --- Grading ---

    async def grade(self, user_id: str, word: Word, rating: int) -> GradeOutcome:
        """
        Grade one flashcard and persist the new state.

        The rating is validated before the store is touched. Grading never
        awards XP, so ``leveled_up`` is always False here; XP is granted by
        ``complete_session``.

        Raises:
            InvalidRating: rating not in {0, 1, 2, 3}.
            StoreUnavailable: the store failed.
        """
        valid = parse_rating(rating)
        previous = await self._store.get_review_state(user_id, word.id)
        new_state = grade(word, previous, valid, self._clock())
        await self._store.put_review_state(user_id, word.id, new_state)

        logger.info(
            f"Graded {word.id} for {user_id}: rating={int(valid)} "
            f"interval={new_state.interval} status={new_state.status.value}"
        )
        return GradeOutcome(new_state=new_state)

    async def get_word(self, word_id: str) -> Word:
        """
        Raises:
            NotFound: the catalog has no word with this id.
        """
        word = await self._store.get_word(word_id)
        if word is None:
            raise NotFound("word", word_id)
        return word

    async def grade_word_id(self, user_id: str, word_id: str, rating: int) -> GradeOutcome:
        """Grade by word id, resolving the word from the catalog first."""
        parse_rating(rating)
        word = await self.get_word(word_id)
        return await self.grade(user_id, word, rating)

    async def record_quiz_answer(self, user_id: str, word: Word, correct: bool) -> ReviewState:
        """Record a quiz answer without touching the flashcard schedule."""
        previous = await self._store.get_review_state(user_id, word.id)
        new_state = record_quiz_result(word, previous, correct, self._clock())
        await self._store.put_review_state(user_id, word.id, new_state)
        return new_state

    async def start_quiz(self, book_id: str, size: int = QUIZ_SIZE) -> list[QuizQuestion]:
        """Multiple-choice quiz over one book; empty if the book has no words."""
        words = await self._store.list_words(book_id)
        questions = compose_quiz(words, size, self._rng)
        logger.debug(f"Composed quiz of {len(questions)} questions for {book_id}")
        return questions

    # --- Sessions ---

    async def start_session(self, user_id: str, scope: str, limit: int) -> list[Word]:
        """
        Compose a session for one book, or for the whole catalog when
        ``scope == "daily"``.

        An empty list means there is nothing to study.
        """
        if limit <= 0:
            return []

        now = self._clock()
        if scope == DAILY_SESSION:
            words = await self._store.list_catalog()
            states = await self._store.list_review_states(user_id)
            queue = compose_daily_session(words, _by_word_id(states), limit, now)
        else:
            words = await self._store.list_words(scope)
            states = await self._store.list_review_states(user_id, ReviewFilter(book_id=scope))
            queue = compose_session(words, _by_word_id(states), limit, now)

        if not queue:
            logger.info(f"Nothing to study for {user_id} in {scope}")
        return queue

    async def open_session(self, user_id: str, scope: str, limit: int) -> StudySession:
        queue = await self.start_session(user_id, scope, limit)
        return StudySession(user_id, scope, queue)

    async def get_due_count(self, user_id: str) -> int:
        now = self._clock()
        states = await self._store.list_review_states(user_id, ReviewFilter(due_before=now))
        return count_due(states, now)

    # --- Progress ---

    async def get_book_progress(self, user_id: str, book_id: str) -> BookProgress:
        words = await self._store.list_words(book_id)
        states = await self._store.list_review_states(user_id, ReviewFilter(book_id=book_id))
        return self._progress.book_progress(book_id, words, _by_word_id(states))

    async def get_mastery_distribution(self, user_id: str) -> MasteryDistribution:
        states = await self._store.list_review_states(user_id)
        return self._progress.mastery_distribution(states)

    async def get_activity_logs(
        self, user_id: str, window_days: int = DEFAULT_ACTIVITY_WINDOW_DAYS
    ) -> list[ActivityLog]:
        states = await self._store.list_review_states(user_id)
        return self._progress.activity_log(states, window_days, self._clock())

    async def get_student_summaries(self, user_ids: list[str]) -> list[StudentSummary]:
        now = self._clock()
        summaries = []
        for user_id in user_ids:
            states = await self._store.list_review_states(user_id)
            summaries.append(self._progress.student_summary(user_id, states, now))
        return summaries

    # --- Gamification ---

    async def _load_gamification(self, user_id: str) -> GamificationState:
        state = await self._store.get_gamification_state(user_id)
        return state if state is not None else GamificationState()

    async def check_in(self, user_id: str) -> GamificationState:
        """Apply the daily streak rule for today's login."""
        state = await self._load_gamification(user_id)
        updated = update_streak(state, utc_date(self._clock()))
        if updated != state:
            await self._store.put_gamification_state(user_id, updated)
            logger.info(f"Streak for {user_id}: {updated.current_streak}")
        return updated

    async def complete_session(self, user_id: str, session_length: int) -> SessionReward:
        """Award XP for a finished session, including the streak bonus."""
        state = await self._load_gamification(user_id)
        breakdown = session_xp(session_length, state.current_streak)
        new_state, leveled_up = add_xp(state, breakdown.total)
        await self._store.put_gamification_state(user_id, new_state)

        if leveled_up:
            logger.info(f"{user_id} reached level {new_state.level}")
        return SessionReward(
            base_xp=breakdown.base_xp,
            streak_bonus=breakdown.streak_bonus,
            xp_awarded=breakdown.total,
            leveled_up=leveled_up,
            state=new_state,
        )

    async def get_leaderboard(
        self, user_id: str, top_n: int = LEADERBOARD_SIZE
    ) -> list[LeaderboardEntry]:
        states = await self._store.list_gamification_states()
        return rank_leaderboard(states, user_id, top_n)


def _by_word_id(states: list[ReviewState]) -> dict[str, ReviewState]:
    return {s.word_id: s for s in states}
