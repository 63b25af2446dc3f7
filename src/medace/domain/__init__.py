# Domain Package
from .errors import InvalidRating, MedaceError, NotFound, StoreUnavailable
from .models import (
    ActivityLog,
    BookProgress,
    GamificationState,
    MasteryBucket,
    MasteryDistribution,
    QuizQuestion,
    Rating,
    ReviewFilter,
    ReviewState,
    ReviewStatus,
    Word,
)
from .ports import CardRecordStore

__all__ = [
    "ActivityLog",
    "BookProgress",
    "CardRecordStore",
    "GamificationState",
    "InvalidRating",
    "MasteryBucket",
    "MasteryDistribution",
    "QuizQuestion",
    "MedaceError",
    "NotFound",
    "Rating",
    "ReviewFilter",
    "ReviewState",
    "ReviewStatus",
    "StoreUnavailable",
    "Word",
]
