"""Shared helpers for CLI commands."""

import asyncio
import json
import logging
import random
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import typer

from medace.application.config import AppConfig, resolve_config
from medace.application.factory import get_card_store
from medace.application.service import StudyService
from medace.domain.errors import InvalidRating, MedaceError, NotFound, StoreUnavailable

T = TypeVar("T")

logger = logging.getLogger(__name__)


def _resolve_with_overrides(ctx: typer.Context, **kwargs: Any) -> AppConfig:
    """Resolve config from global CLI options plus per-command overrides."""
    overrides = dict(ctx.obj or {})
    overrides.update(kwargs)
    verbose = overrides.pop("verbose_bonus", None)
    if verbose:
        overrides.setdefault("verbose", verbose)
    return resolve_config(overrides)


def humanize_error(error: MedaceError) -> str:
    """Turn engine errors into a one-line hint for the terminal."""
    if isinstance(error, InvalidRating):
        return f"{error}. Use 0=forgot, 1=hard, 2=good, 3=easy."
    if isinstance(error, NotFound):
        return f"{error}. Check the id or import the word list first."
    if isinstance(error, StoreUnavailable):
        return f"Card store unavailable: {error}"
    return str(error)


def run_with_service(
    config: AppConfig,
    action: Callable[[StudyService], Awaitable[T]],
    rng: random.Random | None = None,
) -> T:
    """Build the configured service, run one async action, map errors to exit codes."""
    store = get_card_store(config)
    service = StudyService(store, rng=rng)

    async def runner() -> T:
        try:
            return await action(service)
        finally:
            aclose = getattr(store, "aclose", None)
            if aclose is not None:
                await aclose()

    try:
        return asyncio.run(runner())
    except (InvalidRating, NotFound) as e:
        typer.secho(humanize_error(e), fg="red", err=True)
        raise typer.Exit(2) from None
    except StoreUnavailable as e:
        logger.debug("Store failure", exc_info=True)
        typer.secho(humanize_error(e), fg="red", err=True)
        raise typer.Exit(1) from None


def echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False))
