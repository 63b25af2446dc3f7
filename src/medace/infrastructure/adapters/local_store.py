"""
Local Card Store: Infrastructure adapter keeping records in process.

Implements CardRecordStore with plain dictionaries. When a data file is
configured, the whole store is loaded from and flushed to a JSON document so
the CLI keeps progress between runs.
"""

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from medace.domain.errors import StoreUnavailable
from medace.domain.models import GamificationState, ReviewFilter, ReviewState, Word
from medace.domain.ports import CardRecordStore
from medace.infrastructure.codec import (
    gamification_from_json,
    gamification_to_json,
    review_state_from_json,
    review_state_to_json,
    word_from_json,
    word_to_json,
)

logger = logging.getLogger(__name__)


class LocalCardStore(CardRecordStore):
    """
    In-process store, optionally persisted to a JSON file.

    With ``data_file=None`` nothing touches the filesystem.
    """

    def __init__(self, data_file: Path | None = None, words: Iterable[Word] = ()):
        self.data_file = data_file
        self._words: dict[str, Word] = {}
        self._states: dict[str, dict[str, ReviewState]] = {}
        self._gamification: dict[str, GamificationState] = {}
        self._loaded = data_file is None

        for word in words:
            self._words[word.id] = word

    # --- persistence ---

    def _ensure_loaded(self) -> None:
        """Load the data file once. A failed load leaves the store unloaded."""
        if self._loaded:
            return

        if self.data_file is None or not self.data_file.exists():
            self._loaded = True
            return

        try:
            raw = json.loads(self.data_file.read_text(encoding="utf-8"))
            words = [word_from_json(item) for item in raw.get("words", [])]
            states = {
                user_id: {
                    word_id: review_state_from_json(record) for word_id, record in records.items()
                }
                for user_id, records in raw.get("reviewStates", {}).items()
            }
            gamification = {
                user_id: gamification_from_json(record)
                for user_id, record in raw.get("gamification", {}).items()
            }
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            raise StoreUnavailable(f"Could not read {self.data_file}: {e}") from e

        for word in words:
            self._words[word.id] = word
        self._states.update(states)
        self._gamification.update(gamification)
        self._loaded = True

        logger.debug(f"Loaded {len(self._words)} words from {self.data_file}")

    def _flush(self) -> None:
        if self.data_file is None:
            return

        document: dict[str, Any] = {
            "words": [word_to_json(w) for w in self._ordered(self._words.values())],
            "reviewStates": {
                user_id: {word_id: review_state_to_json(s) for word_id, s in records.items()}
                for user_id, records in self._states.items()
            },
            "gamification": {
                user_id: gamification_to_json(s) for user_id, s in self._gamification.items()
            },
        }
        try:
            self.data_file.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.data_file.with_suffix(self.data_file.suffix + ".tmp")
            tmp.write_text(json.dumps(document, ensure_ascii=False, indent=2), encoding="utf-8")
            tmp.replace(self.data_file)
        except OSError as e:
            raise StoreUnavailable(f"Could not write {self.data_file}: {e}") from e

    @staticmethod
    def _ordered(words: Iterable[Word]) -> list[Word]:
        return sorted(words, key=lambda w: (w.book_id, w.number))

    # --- catalog management (not part of the port) ---

    def add_words(self, words: Iterable[Word]) -> int:
        """Insert or replace words in the catalog. Returns the number written."""
        self._ensure_loaded()
        count = 0
        for word in words:
            self._words[word.id] = word
            count += 1
        self._flush()
        logger.info(f"Stored {count} words")
        return count

    # --- CardRecordStore ---

    async def get_review_state(self, user_id: str, word_id: str) -> ReviewState | None:
        self._ensure_loaded()
        return self._states.get(user_id, {}).get(word_id)

    async def put_review_state(self, user_id: str, word_id: str, state: ReviewState) -> None:
        self._ensure_loaded()
        self._states.setdefault(user_id, {})[word_id] = state
        self._flush()

    async def list_review_states(
        self, user_id: str, review_filter: ReviewFilter | None = None
    ) -> list[ReviewState]:
        self._ensure_loaded()
        states = list(self._states.get(user_id, {}).values())
        if review_filter is None:
            return states
        if review_filter.book_id is not None:
            states = [s for s in states if s.book_id == review_filter.book_id]
        if review_filter.due_before is not None:
            states = [s for s in states if s.next_review_date <= review_filter.due_before]
        return states

    async def list_words(self, book_id: str) -> list[Word]:
        self._ensure_loaded()
        return self._ordered(w for w in self._words.values() if w.book_id == book_id)

    async def list_catalog(self) -> list[Word]:
        self._ensure_loaded()
        return self._ordered(self._words.values())

    async def get_word(self, word_id: str) -> Word | None:
        self._ensure_loaded()
        return self._words.get(word_id)

    async def get_gamification_state(self, user_id: str) -> GamificationState | None:
        self._ensure_loaded()
        return self._gamification.get(user_id)

    async def put_gamification_state(self, user_id: str, state: GamificationState) -> None:
        self._ensure_loaded()
        self._gamification[user_id] = state
        self._flush()

    async def list_gamification_states(self) -> dict[str, GamificationState]:
        self._ensure_loaded()
        return dict(self._gamification)
