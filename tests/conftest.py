import pytest

from medace.domain.constants import MS_PER_DAY
from medace.domain.models import ReviewState, ReviewStatus, Word
from medace.infrastructure.adapters.local_store import LocalCardStore

# 2024-03-10T12:00:00Z
NOW = 1_710_072_000_000


def _make_word(index: int, book_id: str = "duo", **kwargs) -> Word:
    fields = {"word": f"word{index}", "definition": f"meaning {index}"}
    fields.update(kwargs)
    return Word(id=f"{book_id}_{index}", book_id=book_id, number=index, **fields)


def _make_state(word: Word, **kwargs) -> ReviewState:
    defaults = {
        "status": ReviewStatus.LEARNING,
        "interval": 1,
        "next_review_date": NOW,
        "last_studied_at": NOW - MS_PER_DAY,
        "correct_count": 1,
        "attempt_count": 1,
    }
    defaults.update(kwargs)
    return ReviewState(word_id=word.id, book_id=word.book_id, **defaults)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def words():
    """Ten words of one book in catalog order."""
    return [_make_word(i) for i in range(1, 11)]


@pytest.fixture
def store(words):
    """In-memory store seeded with the book 'duo' and a second book 'toeic'."""
    return LocalCardStore(words=[*words, *(_make_word(i, "toeic") for i in range(1, 4))])


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config files
    monkeypatch.setenv("HOME", str(home))
    for var in ("MEDACE_BACKEND", "MEDACE_DATA_FILE", "MEDACE_REMOTE_URL"):
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture
def make_word():
    """Factory: make_word(index, book_id="duo", **fields) -> Word."""
    return _make_word


@pytest.fixture
def make_state():
    """Factory: make_state(word, **fields) -> ReviewState due at NOW."""
    return _make_state
