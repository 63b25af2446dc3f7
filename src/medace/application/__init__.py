# Application Package
from .progress import ProgressAggregator
from .service import StudyService
from .study_session import SessionContextCache, StudySession

__all__ = ["ProgressAggregator", "SessionContextCache", "StudyService", "StudySession"]
