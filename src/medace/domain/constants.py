"""Centralized constants for the medace scheduling engine.

All magic numbers and configuration defaults live here so every layer
imports from a single source of truth.
"""

# ---------- Time ----------
MS_PER_DAY = 86_400_000

# ---------- Review Grader ----------
DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
EASE_PENALTY = 0.2  # rating 0
EASE_BONUS = 0.15  # rating 3
EASY_INTERVAL_MULTIPLIER = 1.3
FIRST_EASY_INTERVAL = 3
MAX_INTERVAL_DAYS = 365
GRADUATION_INTERVAL = 20  # strictly greater graduates
QUIZ_CORRECT_RATING = 2
QUIZ_INCORRECT_RATING = 0

# ---------- Quizzes ----------
QUIZ_SIZE = 10
QUIZ_DISTRACTORS = 3

# ---------- Progress ----------
REVIEW_BUCKET_MIN_INTERVAL = 3  # strictly greater lands in the review bucket
ACTIVITY_INTENSITY_THRESHOLDS = (1, 6, 16, 31)  # counts for intensity 1..4
DEFAULT_ACTIVITY_WINDOW_DAYS = 365

# ---------- Instructor summaries ----------
WARNING_IDLE_DAYS = 1.5
DANGER_IDLE_DAYS = 3.0

# ---------- Gamification ----------
XP_PER_LEVEL = 100
XP_PER_SESSION_ITEM = 10
MAX_STREAK_BONUS_DAYS = 10
STREAK_BONUS_PER_DAY = 0.1
LEADERBOARD_SIZE = 10

# ---------- Sessions ----------
DAILY_SESSION = "daily"
DEFAULT_SESSION_LIMIT = 20

# ---------- Remote store / HTTP ----------
REQUEST_TIMEOUT = 10.0
