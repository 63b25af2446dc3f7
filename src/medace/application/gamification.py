"""
Gamification accumulator: experience points, levels and daily streaks.

A small deterministic state machine layered on top of completed sessions.
"""

from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import date, timedelta

from medace.domain.constants import (
    LEADERBOARD_SIZE,
    MAX_STREAK_BONUS_DAYS,
    STREAK_BONUS_PER_DAY,
    XP_PER_LEVEL,
    XP_PER_SESSION_ITEM,
)
from medace.domain.models import GamificationState, LeaderboardEntry

from .utils.numbers import round_half_up


@dataclass(frozen=True)
class XPBreakdown:
    base_xp: int
    streak_bonus: int

    @property
    def total(self) -> int:
        return self.base_xp + self.streak_bonus


def xp_to_next_level(level: int) -> int:
    return level * XP_PER_LEVEL


def add_xp(state: GamificationState, amount: int) -> tuple[GamificationState, bool]:
    """
    Award experience points, levelling up as many times as the award allows.

    Returns:
        (new state, leveled_up). Afterwards ``xp < level * 100``.

    Raises:
        ValueError: If amount is negative.
    """
    if amount < 0:
        raise ValueError(f"XP award must be non-negative (got {amount})")

    xp = state.xp + amount
    level = state.level
    leveled_up = False

    while xp >= xp_to_next_level(level):
        xp -= xp_to_next_level(level)
        level += 1
        leveled_up = True

    return replace(state, xp=xp, level=level), leveled_up


def update_streak(state: GamificationState, today: date) -> GamificationState:
    """
    Evaluate the daily streak at a login or session boundary.

    Same day: unchanged. Consecutive day: streak + 1. Any gap, or the first
    login ever: streak restarts at 1.
    """
    if state.last_login_date == today:
        return state

    if state.last_login_date == today - timedelta(days=1):
        streak = state.current_streak + 1
    else:
        streak = 1

    return replace(state, current_streak=streak, last_login_date=today)


def session_xp(session_length: int, current_streak: int) -> XPBreakdown:
    """
    XP for finishing a session: 10 per item plus 10% per streak day.

    The streak bonus is capped at 100% of the base (10+ day streak).
    """
    base = max(0, session_length) * XP_PER_SESSION_ITEM
    bonus_days = min(max(0, current_streak), MAX_STREAK_BONUS_DAYS)
    return XPBreakdown(
        base_xp=base,
        streak_bonus=round_half_up(base * bonus_days * STREAK_BONUS_PER_DAY),
    )


def rank_leaderboard(
    states: Mapping[str, GamificationState],
    current_user_id: str,
    top_n: int = LEADERBOARD_SIZE,
) -> list[LeaderboardEntry]:
    """
    Rank users by XP, highest first, with 1-based ranks.

    Ties keep their input order. If the current user is outside the top
    ``top_n`` they are appended with their true rank.
    """
    ordered = sorted(states.items(), key=lambda item: item[1].xp, reverse=True)
    entries = [
        LeaderboardEntry(
            user_id=user_id,
            xp=state.xp,
            level=state.level,
            rank=position,
            is_current_user=user_id == current_user_id,
        )
        for position, (user_id, state) in enumerate(ordered, start=1)
    ]

    board = entries[:top_n]
    if not any(e.is_current_user for e in board):
        board.extend(e for e in entries[top_n:] if e.is_current_user)
    return board
