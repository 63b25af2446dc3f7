"""
JSON mapping for domain models.

Field names are camelCase, timestamps are epoch milliseconds and dates are
``YYYY-MM-DD`` strings. Used by the local JSON file, the remote store and the
HTTP server so every surface speaks the same format.
"""

from dataclasses import asdict
from datetime import date
from typing import Any

from medace.domain.constants import DEFAULT_EASE_FACTOR
from medace.domain.models import (
    ActivityLog,
    BookProgress,
    GamificationState,
    LeaderboardEntry,
    MasteryDistribution,
    QuizQuestion,
    ReviewState,
    ReviewStatus,
    StudentSummary,
    Word,
)


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _camel_keys(data: dict[str, Any]) -> dict[str, Any]:
    return {_camel(k): v for k, v in data.items()}


def word_to_json(word: Word) -> dict[str, Any]:
    return _camel_keys(asdict(word))


def word_from_json(data: dict[str, Any]) -> Word:
    return Word(
        id=str(data["id"]),
        book_id=str(data["bookId"]),
        number=int(data.get("number", 0)),
        word=data.get("word", ""),
        definition=data.get("definition", ""),
        example_sentence=data.get("exampleSentence"),
        example_meaning=data.get("exampleMeaning"),
    )


def review_state_to_json(state: ReviewState) -> dict[str, Any]:
    data = _camel_keys(asdict(state))
    data["status"] = state.status.value
    return data


def review_state_from_json(data: dict[str, Any]) -> ReviewState:
    """Decode a stored record; missing counters and schedule fields take defaults."""
    return ReviewState(
        word_id=str(data["wordId"]),
        book_id=str(data["bookId"]),
        status=ReviewStatus(data.get("status") or ReviewStatus.LEARNING.value),
        interval=int(data.get("interval") or 0),
        ease_factor=float(data.get("easeFactor") or DEFAULT_EASE_FACTOR),
        next_review_date=int(data.get("nextReviewDate") or 0),
        last_studied_at=int(data.get("lastStudiedAt") or 0),
        correct_count=int(data.get("correctCount") or 0),
        attempt_count=int(data.get("attemptCount") or 0),
    )


def gamification_to_json(state: GamificationState) -> dict[str, Any]:
    return {
        "xp": state.xp,
        "level": state.level,
        "currentStreak": state.current_streak,
        "lastLoginDate": state.last_login_date.isoformat() if state.last_login_date else None,
    }


def gamification_from_json(data: dict[str, Any]) -> GamificationState:
    last_login = data.get("lastLoginDate")
    return GamificationState(
        xp=int(data.get("xp") or 0),
        level=int(data.get("level") or 1),
        current_streak=int(data.get("currentStreak") or 0),
        last_login_date=date.fromisoformat(last_login) if last_login else None,
    )


def book_progress_to_json(progress: BookProgress) -> dict[str, Any]:
    return _camel_keys(asdict(progress))


def mastery_to_json(dist: MasteryDistribution) -> dict[str, Any]:
    return asdict(dist)


def activity_to_json(log: ActivityLog) -> dict[str, Any]:
    return asdict(log)


def leaderboard_entry_to_json(entry: LeaderboardEntry) -> dict[str, Any]:
    return _camel_keys(asdict(entry))


def student_summary_to_json(summary: StudentSummary) -> dict[str, Any]:
    data = _camel_keys(asdict(summary))
    data["riskLevel"] = summary.risk_level.value
    return data


def quiz_question_to_json(question: QuizQuestion) -> dict[str, Any]:
    return {
        "word": word_to_json(question.word),
        "options": list(question.options),
        "answer": question.answer,
    }
