"""
Study session playback.

A StudySession owns a fully materialised queue and a context cache scoped to
that session. Ratings given during playback never reorder the queue; dropping
the session object abandons it with no effect on un-graded words.
"""

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from medace.domain.models import Word

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExampleContext:
    """Example sentence shown on the back of a card."""

    sentence: str
    translation: str


class SessionContextCache:
    """
    Example-sentence cache keyed by word id, living only as long as one session.

    Seeded from examples already cached on the words themselves; the
    presentation layer may ``put`` freshly generated examples while it
    prefetches ahead of the learner.
    """

    def __init__(self, words: Sequence[Word] = ()):
        self._entries: dict[str, ExampleContext] = {}
        for word in words:
            if word.example_sentence and word.example_meaning:
                self._entries[word.id] = ExampleContext(word.example_sentence, word.example_meaning)

    def __contains__(self, word_id: str) -> bool:
        return word_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, word_id: str) -> ExampleContext | None:
        return self._entries.get(word_id)

    def put(self, word_id: str, context: ExampleContext) -> None:
        self._entries[word_id] = context

    def missing(self, words: Sequence[Word]) -> list[Word]:
        """Words that still need an example, in queue order."""
        return [w for w in words if w.id not in self._entries]


class StudySession:
    """Cursor over one session's queue. Not restartable."""

    def __init__(self, user_id: str, scope: str, queue: Sequence[Word]):
        self.user_id = user_id
        self.scope = scope
        self._queue: tuple[Word, ...] = tuple(queue)
        self._position = 0
        self.context_cache = SessionContextCache(self._queue)

    def __len__(self) -> int:
        return len(self._queue)

    @property
    def queue(self) -> tuple[Word, ...]:
        return self._queue

    @property
    def position(self) -> int:
        return self._position

    @property
    def is_finished(self) -> bool:
        return self._position >= len(self._queue)

    @property
    def current(self) -> Word | None:
        return None if self.is_finished else self._queue[self._position]

    def upcoming(self, count: int = 1) -> list[Word]:
        """Words after the current one, for prefetching."""
        start = self._position + 1
        return list(self._queue[start : start + count])

    def advance(self) -> Word | None:
        """Move past the current word and return the next one (None when done)."""
        if self.is_finished:
            raise IndexError("Study session already finished")
        self._position += 1
        return self.current

    def __iter__(self) -> Iterator[Word]:
        """Consume the remaining words in order."""
        while not self.is_finished:
            word = self._queue[self._position]
            yield word
            self._position += 1
        logger.debug(f"Session {self.scope} for {self.user_id} finished ({len(self)} words)")
