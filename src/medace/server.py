import logging
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from medace.application.config import resolve_config
from medace.application.factory import get_card_store
from medace.application.service import StudyService
from medace.consts import VERSION
from medace.domain.constants import (
    DAILY_SESSION,
    DEFAULT_ACTIVITY_WINDOW_DAYS,
    DEFAULT_SESSION_LIMIT,
    LEADERBOARD_SIZE,
    QUIZ_SIZE,
)
from medace.domain.errors import InvalidRating, NotFound, StoreUnavailable
from medace.infrastructure.codec import (
    activity_to_json,
    book_progress_to_json,
    gamification_to_json,
    leaderboard_entry_to_json,
    mastery_to_json,
    quiz_question_to_json,
    review_state_to_json,
    student_summary_to_json,
    word_to_json,
)

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("medace.server")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    config = resolve_config()
    store = get_card_store(config)
    app.state.service = StudyService(store)
    logger.info(f"medace server v{VERSION} starting up (backend={config.backend})...")
    yield
    # Shutdown
    logger.info("medace server shutting down...")
    aclose = getattr(store, "aclose", None)
    if aclose is not None:
        await aclose()


app = FastAPI(
    title="medace",
    description="Spaced-repetition scheduling API for vocabulary study.",
    version=VERSION,
    lifespan=lifespan,
)

start_time = time.time()


def get_service(request: Request) -> StudyService:
    return request.app.state.service


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------


@app.exception_handler(InvalidRating)
async def invalid_rating_handler(request: Request, exc: InvalidRating):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(StoreUnavailable)
async def store_unavailable_handler(request: Request, exc: StoreUnavailable):
    logger.error(f"Store unavailable during {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"detail": str(exc)})


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float


class GradeRequest(CamelModel):
    word_id: str = Field(alias="wordId")
    rating: int


class QuizAnswerRequest(CamelModel):
    word_id: str = Field(alias="wordId")
    correct: bool


class CompleteSessionRequest(CamelModel):
    session_length: int = Field(alias="sessionLength", ge=0)


class StudentSummaryRequest(CamelModel):
    user_ids: list[str] = Field(alias="userIds")


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Simple health check to verify server is reachable.
    """
    return HealthResponse(status="ok", version=VERSION, uptime_seconds=time.time() - start_time)


@app.get("/version")
async def get_version():
    return {"version": VERSION}


@app.post("/users/{user_id}/grade")
async def grade_card(
    user_id: str, req: GradeRequest, service: StudyService = Depends(get_service)
):
    outcome = await service.grade_word_id(user_id, req.word_id, req.rating)
    return {"newState": review_state_to_json(outcome.new_state), "leveledUp": outcome.leveled_up}


@app.post("/users/{user_id}/quiz")
async def record_quiz_answer(
    user_id: str, req: QuizAnswerRequest, service: StudyService = Depends(get_service)
):
    word = await service.get_word(req.word_id)
    state = await service.record_quiz_answer(user_id, word, req.correct)
    return {"newState": review_state_to_json(state)}


@app.get("/books/{book_id}/quiz")
async def build_quiz(
    book_id: str,
    size: int = Query(QUIZ_SIZE, ge=1),
    service: StudyService = Depends(get_service),
):
    """
    Multiple-choice quiz over one book. Submit each answer to /users/{user_id}/quiz.
    """
    questions = await service.start_quiz(book_id, size)
    return [quiz_question_to_json(q) for q in questions]


@app.get("/users/{user_id}/session")
async def start_session(
    user_id: str,
    scope: str = DAILY_SESSION,
    limit: int = DEFAULT_SESSION_LIMIT,
    service: StudyService = Depends(get_service),
):
    """
    Compose a study session for a book id, or the whole catalog with scope=daily.
    """
    words = await service.start_session(user_id, scope, limit)
    return [word_to_json(w) for w in words]


@app.get("/users/{user_id}/due-count")
async def due_count(user_id: str, service: StudyService = Depends(get_service)):
    return {"dueCount": await service.get_due_count(user_id)}


@app.get("/users/{user_id}/books/{book_id}/progress")
async def book_progress(user_id: str, book_id: str, service: StudyService = Depends(get_service)):
    return book_progress_to_json(await service.get_book_progress(user_id, book_id))


@app.get("/users/{user_id}/mastery")
async def mastery(user_id: str, service: StudyService = Depends(get_service)):
    return mastery_to_json(await service.get_mastery_distribution(user_id))


@app.get("/users/{user_id}/activity")
async def activity(
    user_id: str,
    window_days: int = Query(DEFAULT_ACTIVITY_WINDOW_DAYS, alias="windowDays", ge=1),
    service: StudyService = Depends(get_service),
):
    logs = await service.get_activity_logs(user_id, window_days)
    return [activity_to_json(log) for log in logs]


@app.post("/users/{user_id}/checkin")
async def check_in(user_id: str, service: StudyService = Depends(get_service)):
    return gamification_to_json(await service.check_in(user_id))


@app.post("/users/{user_id}/complete-session")
async def complete_session(
    user_id: str, req: CompleteSessionRequest, service: StudyService = Depends(get_service)
):
    reward = await service.complete_session(user_id, req.session_length)
    return {
        "xpAwarded": reward.xp_awarded,
        "baseXp": reward.base_xp,
        "streakBonus": reward.streak_bonus,
        "leveledUp": reward.leveled_up,
        "stats": gamification_to_json(reward.state),
    }


@app.get("/users/{user_id}/leaderboard")
async def leaderboard(
    user_id: str, top: int = LEADERBOARD_SIZE, service: StudyService = Depends(get_service)
):
    entries = await service.get_leaderboard(user_id, top)
    return [leaderboard_entry_to_json(e) for e in entries]


@app.post("/students/summary")
async def student_summaries(
    req: StudentSummaryRequest, service: StudyService = Depends(get_service)
):
    summaries = await service.get_student_summaries(req.user_ids)
    return [student_summary_to_json(s) for s in summaries]
