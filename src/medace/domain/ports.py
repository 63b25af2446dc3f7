"""
Ports (interfaces) for review-state persistence.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod

from .models import GamificationState, ReviewFilter, ReviewState, Word


class CardRecordStore(ABC):
    """
    Port for durable per-user review state and the word catalog.

    Implementations:
        - LocalCardStore: In-process dictionaries, optionally backed by a JSON file.
        - RemoteCardStore: REST API reached over HTTP.

    Writes are whole-record replacements keyed by ``(user_id, word_id)``.
    Two concurrent gradings of the same card race with last-write-wins
    semantics; no transactional merge is performed.

    Any transport or storage failure must surface as ``StoreUnavailable``.
    """

    @abstractmethod
    async def get_review_state(self, user_id: str, word_id: str) -> ReviewState | None:
        """Return the stored state for one card, or None if never graded."""
        pass

    @abstractmethod
    async def put_review_state(self, user_id: str, word_id: str, state: ReviewState) -> None:
        """Create or replace the state for one card."""
        pass

    @abstractmethod
    async def list_review_states(
        self, user_id: str, review_filter: ReviewFilter | None = None
    ) -> list[ReviewState]:
        """
        List a user's review states.

        Args:
            user_id: Owner of the states.
            review_filter: Optional book scope and/or ``next_review_date <= due_before``.
        """
        pass

    @abstractmethod
    async def list_words(self, book_id: str) -> list[Word]:
        """Return the words of one book ordered by sequence number."""
        pass

    @abstractmethod
    async def list_catalog(self) -> list[Word]:
        """Return every word, grouped by book and ordered by sequence number."""
        pass

    @abstractmethod
    async def get_word(self, word_id: str) -> Word | None:
        pass

    @abstractmethod
    async def get_gamification_state(self, user_id: str) -> GamificationState | None:
        pass

    @abstractmethod
    async def put_gamification_state(self, user_id: str, state: GamificationState) -> None:
        pass

    @abstractmethod
    async def list_gamification_states(self) -> dict[str, GamificationState]:
        """Return every user's gamification state keyed by user id."""
        pass
