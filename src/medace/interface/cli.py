"""medace CLI: study sessions, grading and progress reports."""

import json
import logging
import random
import sys
from pathlib import Path
from typing import Annotated

import typer

from medace.application.config import resolve_config
from medace.application.factory import get_card_store
from medace.application.grader import parse_rating
from medace.application.quiz import quiz_score
from medace.application.service import StudyService
from medace.domain.constants import DAILY_SESSION, LEADERBOARD_SIZE, QUIZ_SIZE
from medace.domain.errors import InvalidRating, StoreUnavailable
from medace.infrastructure.adapters.local_store import LocalCardStore
from medace.infrastructure.codec import (
    activity_to_json,
    book_progress_to_json,
    gamification_to_json,
    leaderboard_entry_to_json,
    mastery_to_json,
    quiz_question_to_json,
    review_state_to_json,
    student_summary_to_json,
    word_from_json,
    word_to_json,
)
from medace.interface._common import (
    _resolve_with_overrides,
    echo_json,
    humanize_error,
    run_with_service,
)

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="medace: spaced-repetition vocabulary study from the terminal.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage medace configuration.")
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
    backend: Annotated[
        str | None, typer.Option(help="Card store backend: local or remote.")
    ] = None,
    data_file: Annotated[
        Path | None, typer.Option(help="JSON file used by the local backend.")
    ] = None,
    remote_url: Annotated[
        str | None, typer.Option(help="Base URL of the remote card store.")
    ] = None,
):
    """Global settings for medace."""
    ctx.ensure_object(dict)
    ctx.obj.update(
        {
            "backend": backend,
            "data_file": data_file,
            "remote_url": remote_url,
            "verbose_bonus": verbose,
        }
    )
    if verbose >= 2:
        logging.getLogger("medace").setLevel(logging.DEBUG)
    elif verbose == 1:
        logging.getLogger("medace").setLevel(logging.INFO)


# ---------------------------------------------------------------------------
# Grading
# ---------------------------------------------------------------------------


@app.command()
def grade(
    ctx: typer.Context,
    user: Annotated[str, typer.Argument(help="User id.")],
    word_id: Annotated[str, typer.Argument(help="Word id to grade.")],
    rating: Annotated[int, typer.Argument(help="0=forgot, 1=hard, 2=good, 3=easy.")],
):
    """[bold green]Grade[/bold green] one flashcard and print its new schedule."""
    config = _resolve_with_overrides(ctx)
    outcome = run_with_service(config, lambda s: s.grade_word_id(user, word_id, rating))
    echo_json(
        {"newState": review_state_to_json(outcome.new_state), "leveledUp": outcome.leveled_up}
    )


@app.command()
def quiz(
    ctx: typer.Context,
    user: Annotated[str, typer.Argument(help="User id.")],
    word_id: Annotated[str, typer.Argument(help="Word id answered.")],
    correct: Annotated[
        bool, typer.Option("--correct/--incorrect", help="Whether the answer was right.")
    ] = True,
):
    """Record a quiz answer without changing the review schedule."""
    config = _resolve_with_overrides(ctx)

    async def run(service: StudyService):
        word = await service.get_word(word_id)
        return await service.record_quiz_answer(user, word, correct)

    echo_json({"newState": review_state_to_json(run_with_service(config, run))})


@app.command("quiz-build")
def quiz_build(
    ctx: typer.Context,
    book_id: Annotated[str, typer.Argument(help="Book id.")],
    size: Annotated[int, typer.Option(help="Number of questions.", min=1)] = QUIZ_SIZE,
    seed: Annotated[int | None, typer.Option(help="Seed for a reproducible quiz.")] = None,
):
    """Print multiple-choice quiz questions for a book as JSON."""
    config = _resolve_with_overrides(ctx)
    rng = random.Random(seed) if seed is not None else None
    questions = run_with_service(config, lambda s: s.start_quiz(book_id, size), rng=rng)
    if not questions:
        typer.secho("This book has no words yet.", fg="yellow", err=True)
    echo_json([quiz_question_to_json(q) for q in questions])


@app.command("take-quiz")
def take_quiz(
    ctx: typer.Context,
    user: Annotated[str, typer.Argument(help="User id.")],
    book_id: Annotated[str, typer.Argument(help="Book id.")],
    size: Annotated[int, typer.Option(help="Number of questions.", min=1)] = QUIZ_SIZE,
    seed: Annotated[int | None, typer.Option(help="Seed for a reproducible quiz.")] = None,
):
    """[bold green]Quiz[/bold green] yourself: pick the right definition for each word.

    Every answer is recorded as correct or incorrect; the review schedule is
    left alone. Enter 'q' to stop early.
    """
    config = _resolve_with_overrides(ctx)
    rng = random.Random(seed) if seed is not None else None

    async def run(service: StudyService):
        questions = await service.start_quiz(book_id, size)
        if not questions:
            typer.secho("This book has no words yet.", fg="yellow")
            return

        score = 0
        for number, question in enumerate(questions, start=1):
            typer.secho(f"\n[{number}/{len(questions)}] {question.word.word}", bold=True)
            for index, option in enumerate(question.options, start=1):
                typer.echo(f"  {index}. {option}")

            while True:
                raw = typer.prompt(f"Answer (1-{len(question.options)}, q=quit)")
                if raw.strip().lower() == "q":
                    typer.secho(f"Quiz stopped: {score}/{number - 1} correct.", fg="yellow")
                    return
                if raw.strip().isdigit() and 1 <= int(raw) <= len(question.options):
                    choice = question.options[int(raw) - 1]
                    break
                typer.secho("Pick one of the listed numbers.", fg="red")

            correct = question.is_correct(choice)
            await service.record_quiz_answer(user, question.word, correct)
            if correct:
                score += 1
                typer.secho("  Correct!", fg="green")
            else:
                typer.secho(f"  Wrong. Answer: {question.answer}", fg="red")

        typer.secho(
            f"\nQuiz complete: {score}/{len(questions)} correct "
            f"({quiz_score(score, len(questions))}%)",
            fg="green",
        )

    run_with_service(config, run, rng=rng)


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


@app.command()
def session(
    ctx: typer.Context,
    user: Annotated[str, typer.Argument(help="User id.")],
    scope: Annotated[
        str, typer.Argument(help="Book id, or 'daily' for the whole catalog.")
    ] = DAILY_SESSION,
    limit: Annotated[int | None, typer.Option(help="Maximum number of words.")] = None,
):
    """Show the queue a study session would present, without grading."""
    config = _resolve_with_overrides(ctx)
    size = limit if limit is not None else config.session_limit
    words = run_with_service(config, lambda s: s.start_session(user, scope, size))
    if not words:
        typer.secho("Nothing to study right now.", fg="yellow", err=True)
    echo_json([word_to_json(w) for w in words])


@app.command()
def study(
    ctx: typer.Context,
    user: Annotated[str, typer.Argument(help="User id.")],
    scope: Annotated[
        str, typer.Argument(help="Book id, or 'daily' for the whole catalog.")
    ] = DAILY_SESSION,
    limit: Annotated[int | None, typer.Option(help="Maximum number of words.")] = None,
):
    """[bold green]Study[/bold green] interactively: reveal each card and rate your recall.

    Enter 'q' at the rating prompt to abandon the session. Words not yet
    rated keep their schedule and no XP is awarded.
    """
    config = _resolve_with_overrides(ctx)
    size = limit if limit is not None else config.session_limit

    async def run(service: StudyService):
        await service.check_in(user)
        study_session = await service.open_session(user, scope, size)
        if not len(study_session):
            typer.secho("Nothing to study right now.", fg="yellow")
            return

        total = len(study_session)
        for word in study_session:
            typer.secho(f"\n[{study_session.position + 1}/{total}] {word.word}", bold=True)
            typer.prompt("Press Enter to reveal", default="", show_default=False)
            typer.echo(f"  {word.definition}")
            example = study_session.context_cache.get(word.id)
            if example is not None:
                typer.echo(f"  e.g. {example.sentence} ({example.translation})")

            while True:
                raw = typer.prompt("Rating (0=forgot 1=hard 2=good 3=easy, q=quit)")
                if raw.strip().lower() == "q":
                    typer.secho("Session abandoned.", fg="yellow")
                    return
                try:
                    rating = parse_rating(int(raw))
                    break
                except ValueError as e:
                    message = humanize_error(e) if isinstance(e, InvalidRating) else str(e)
                    typer.secho(message, fg="red")

            outcome = await service.grade(user, word, rating)
            typer.echo(f"  next review in {outcome.new_state.interval} day(s)")

        reward = await service.complete_session(user, total)
        typer.secho(
            f"\nSession complete! +{reward.xp_awarded} XP "
            f"({reward.base_xp} base + {reward.streak_bonus} streak bonus)",
            fg="green",
        )
        if reward.leveled_up:
            typer.secho(f"LEVEL UP! You are now level {reward.state.level}.", fg="yellow")

    run_with_service(config, run)


@app.command()
def due(ctx: typer.Context, user: Annotated[str, typer.Argument(help="User id.")]):
    """Count words currently due for review."""
    config = _resolve_with_overrides(ctx)
    typer.echo(run_with_service(config, lambda s: s.get_due_count(user)))


# ---------------------------------------------------------------------------
# Progress
# ---------------------------------------------------------------------------


@app.command()
def progress(
    ctx: typer.Context,
    user: Annotated[str, typer.Argument(help="User id.")],
    book_id: Annotated[str, typer.Argument(help="Book id.")],
):
    """Show how much of a book has been studied."""
    config = _resolve_with_overrides(ctx)
    result = run_with_service(config, lambda s: s.get_book_progress(user, book_id))
    echo_json(book_progress_to_json(result))


@app.command()
def mastery(ctx: typer.Context, user: Annotated[str, typer.Argument(help="User id.")]):
    """Show the mastery distribution across all studied words."""
    config = _resolve_with_overrides(ctx)
    echo_json(mastery_to_json(run_with_service(config, lambda s: s.get_mastery_distribution(user))))


@app.command()
def activity(
    ctx: typer.Context,
    user: Annotated[str, typer.Argument(help="User id.")],
    window_days: Annotated[int | None, typer.Option(help="Days of history to include.")] = None,
):
    """Show daily study counts for the activity heatmap."""
    config = _resolve_with_overrides(ctx)
    window = window_days if window_days is not None else config.activity_window_days
    logs = run_with_service(config, lambda s: s.get_activity_logs(user, window))
    echo_json([activity_to_json(log) for log in logs])


@app.command()
def students(
    ctx: typer.Context,
    users: Annotated[list[str], typer.Argument(help="User ids to summarize.")],
):
    """Instructor summary: attempts, accuracy and inactivity risk per student."""
    config = _resolve_with_overrides(ctx)
    summaries = run_with_service(config, lambda s: s.get_student_summaries(users))
    echo_json([student_summary_to_json(x) for x in summaries])


# ---------------------------------------------------------------------------
# Gamification
# ---------------------------------------------------------------------------


@app.command()
def checkin(ctx: typer.Context, user: Annotated[str, typer.Argument(help="User id.")]):
    """Register today's login and update the streak."""
    config = _resolve_with_overrides(ctx)
    echo_json(gamification_to_json(run_with_service(config, lambda s: s.check_in(user))))


@app.command()
def complete(
    ctx: typer.Context,
    user: Annotated[str, typer.Argument(help="User id.")],
    session_length: Annotated[int, typer.Argument(help="Number of words studied.", min=0)],
):
    """Award XP for a finished session."""
    config = _resolve_with_overrides(ctx)
    reward = run_with_service(config, lambda s: s.complete_session(user, session_length))
    echo_json(
        {
            "xpAwarded": reward.xp_awarded,
            "baseXp": reward.base_xp,
            "streakBonus": reward.streak_bonus,
            "leveledUp": reward.leveled_up,
            "stats": gamification_to_json(reward.state),
        }
    )


@app.command()
def leaderboard(
    ctx: typer.Context,
    user: Annotated[str, typer.Argument(help="Current user id.")],
    top: Annotated[int, typer.Option(help="Number of leaders to show.")] = LEADERBOARD_SIZE,
):
    """Rank users by XP."""
    config = _resolve_with_overrides(ctx)
    entries = run_with_service(config, lambda s: s.get_leaderboard(user, top))
    echo_json([leaderboard_entry_to_json(e) for e in entries])


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@app.command("import-words")
def import_words(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="JSON file with a list of words.", exists=True)],
):
    """Load words into the local store from a JSON list.

    Each item needs id, bookId, number, word and definition (camelCase).
    """
    config = _resolve_with_overrides(ctx)
    store = get_card_store(config)
    if not isinstance(store, LocalCardStore):
        typer.secho("import-words only works with the local backend.", fg="red", err=True)
        raise typer.Exit(2)

    try:
        items = json.loads(path.read_text(encoding="utf-8"))
        words = [word_from_json(item) for item in items]
    except (ValueError, KeyError, TypeError) as e:
        typer.secho(f"Invalid word list {path}: {e}", fg="red", err=True)
        raise typer.Exit(2) from None

    try:
        count = store.add_words(words)
    except StoreUnavailable as e:
        typer.secho(humanize_error(e), fg="red", err=True)
        raise typer.Exit(1) from None
    typer.secho(f"Imported {count} words.", fg="green")


# ---------------------------------------------------------------------------
# Config / server
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show():
    """Display final resolved configuration."""
    config = resolve_config()
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))


@app.command()
def serve(
    port: Annotated[int, typer.Option(help="Port to bind the server to.")] = 8777,
    host: Annotated[str, typer.Option(help="Host to bind the server to.")] = "127.0.0.1",
    reload: Annotated[bool, typer.Option(help="Enable auto-reload.")] = False,
):
    """Run the HTTP API server."""
    import uvicorn

    uvicorn.run("medace.server:app", host=host, port=port, reload=reload)
