"""mnemo CLI: root commands and the session subgroup."""

import asyncio
import json
import logging
import sys
from collections.abc import Coroutine
from dataclasses import asdict
from pathlib import Path
from typing import Annotated, Any, TypeVar

import typer

from mnemo.application.config import resolve_config
from mnemo.application.deck_importer import load_deck
from mnemo.application.factory import get_session_manager
from mnemo.application.scheduler import days_overdue, preview_outcomes
from mnemo.application.session_manager import ReviewSessionManager
from mnemo.domain.errors import MnemoError
from mnemo.domain.models import Card, Quality, ReviewSession, TimeRange, utc_now

T = TypeVar("T")

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="mnemo: SM-2 spaced repetition reviews from the terminal.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

session_app = typer.Typer(help="Run a review session.", no_args_is_help=True)
app.add_typer(session_app, name="session")

config_app = typer.Typer(help="Manage mnemo configuration.", no_args_is_help=True)
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

LOG_LEVELS = {0: logging.WARNING, 1: logging.INFO}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _manager(ctx: typer.Context) -> ReviewSessionManager:
    return get_session_manager(ctx.obj["config"])


def _run(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine, turning domain errors into a clean exit."""
    try:
        return asyncio.run(coro)
    except MnemoError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


def _card_line(card: Card) -> str:
    category = f"[{card.category}] " if card.category else ""
    return f"{card.id}  {category}{card.question}"


def _echo_session(session: ReviewSession) -> None:
    stats = session.session_stats
    typer.echo(f"Session {session.id}")
    typer.echo(
        f"  {stats.reviewed_cards}/{stats.total_cards} reviewed, "
        f"{stats.correct_cards} correct, ~{stats.estimated_time_remaining}s remaining"
    )


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
    data_dir: Annotated[
        Path | None, typer.Option(help="Directory holding cards and session history.")
    ] = None,
    backend: Annotated[str | None, typer.Option(help="Store backend: json, memory.")] = None,
):
    """Global settings for mnemo."""
    config = resolve_config({"data_dir": data_dir, "backend": backend})
    level = max(verbose, config.verbose)
    logging.getLogger().setLevel(LOG_LEVELS.get(level, logging.DEBUG))

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


# ---------------------------------------------------------------------------
# Root commands
# ---------------------------------------------------------------------------


@app.command("import")
def import_deck(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="YAML deck file.", exists=True, dir_okay=False)],
):
    """[bold green]Import[/bold green] cards from a YAML deck."""
    manager = _manager(ctx)

    async def _import() -> int:
        return await manager.add_cards(load_deck(path))

    count = _run(_import())
    typer.echo(f"Imported {count} cards.")


@app.command()
def due(
    ctx: typer.Context,
    category: Annotated[str | None, typer.Option(help="Only this category.")] = None,
    limit: Annotated[int | None, typer.Option(help="Maximum cards to list.")] = None,
):
    """List cards due for review, highest priority first."""
    manager = _manager(ctx)
    cards = _run(manager.get_due_cards(category, limit))
    if not cards:
        typer.echo("No cards due.")
        return

    now = utc_now()
    for card in cards:
        typer.echo(f"{_card_line(card)}  ({days_overdue(card, now)}d overdue)")


@app.command()
def preview(
    ctx: typer.Context,
    card_id: Annotated[str, typer.Argument(help="Card to preview.")],
):
    """Show the next interval for every possible rating."""
    manager = _manager(ctx)
    card = _run(manager.get_card(card_id))
    if card is None:
        typer.echo(f"Error: unknown card {card_id}", err=True)
        raise typer.Exit(code=1)

    typer.echo(_card_line(card))
    for quality, update in preview_outcomes(card).items():
        typer.echo(
            f"  {int(quality)} {quality.name.lower():<18} "
            f"interval={update.interval}d ease={update.ease_factor:.2f}"
        )


@app.command()
def stats(
    ctx: typer.Context,
    time_range: Annotated[
        TimeRange, typer.Option("--range", help="Time window to aggregate.")
    ] = TimeRange.ALL,
):
    """Aggregate statistics over completed sessions (JSON)."""
    manager = _manager(ctx)
    result = _run(manager.get_learning_stats(time_range))
    typer.echo(json.dumps(asdict(result), indent=2))


# ---------------------------------------------------------------------------
# Session commands
# ---------------------------------------------------------------------------


@session_app.command("start")
def session_start(
    ctx: typer.Context,
    category: Annotated[
        list[str] | None, typer.Option("--category", "-c", help="Repeat for several.")
    ] = None,
    limit: Annotated[int | None, typer.Option(help="Maximum cards in the session.")] = None,
):
    """Start a session over the most urgent due cards."""
    manager = _manager(ctx)
    session = _run(manager.start_session(category, limit))
    _echo_session(session)
    if session.cards:
        typer.echo(f"Next: {_card_line(session.cards[0])}")


@session_app.command("current")
def session_current(ctx: typer.Context):
    """Show the card under review."""
    manager = _manager(ctx)

    async def _current() -> tuple[ReviewSession | None, Card | None]:
        return await manager.resume_session(), await manager.get_current_card()

    session, card = _run(_current())
    if session is None:
        typer.echo("No active session.")
        return

    _echo_session(session)
    if card is None:
        typer.echo("All cards reviewed. Run 'mnemo session end'.")
    else:
        typer.echo(f"Next: {_card_line(card)}")


@session_app.command("review")
def session_review(
    ctx: typer.Context,
    card_id: Annotated[str, typer.Argument(help="Card being graded.")],
    quality: Annotated[int, typer.Argument(help="Recall quality, 0 (blackout) to 5 (perfect).")],
    response_time: Annotated[
        float, typer.Option("--time", "-t", help="Seconds taken to answer.")
    ] = 0.0,
):
    """Grade a card and move to the next one."""
    manager = _manager(ctx)
    card = _run(manager.review_card(card_id, quality, response_time))
    label = Quality(quality).name.lower()
    typer.echo(
        f"{card.id}: {label}, next review in {card.interval}d "
        f"({card.next_review_at.date().isoformat()})"
    )


@session_app.command("skip")
def session_skip(
    ctx: typer.Context,
    card_id: Annotated[str, typer.Argument(help="Card to postpone until tomorrow.")],
):
    """Postpone a card to tomorrow without grading it."""
    manager = _manager(ctx)
    card = _run(manager.skip_card(card_id))
    typer.echo(f"{card.id}: postponed to {card.next_review_at.date().isoformat()}")


@session_app.command("end")
def session_end(ctx: typer.Context):
    """Finish the session and print its statistics (JSON)."""
    manager = _manager(ctx)
    result = _run(manager.end_session())
    typer.echo(json.dumps(asdict(result), indent=2))


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Display the resolved configuration (JSON)."""
    config = ctx.obj["config"]
    typer.echo(json.dumps(config.model_dump(mode="json"), indent=2))
