"""srs-engine CLI: inspect queues and scheduling decisions on deck snapshots."""

import json
import logging
import sys
import time
from dataclasses import asdict, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Annotated, Any

import typer

from srs_engine.application.burying import unbury_cards
from srs_engine.application.config import resolve_settings
from srs_engine.application.factory import create_scheduler
from srs_engine.application.queue_builder import CardQueueBuilder
from srs_engine.domain.errors import SchedulingError
from srs_engine.domain.models import Card, Deck
from srs_engine.infrastructure.snapshot import SnapshotError, load_snapshot, save_snapshot

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="srs-engine: spaced-repetition queue and scheduling inspector.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage srs-engine settings.")
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

_VERBOSITY_LEVELS = {0: logging.WARNING, 1: logging.INFO}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.name.lower()
    if is_dataclass(value) and not isinstance(value, type):
        return {k: _jsonable(v) for k, v in asdict(value).items()}
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, list | tuple):
        return [_jsonable(v) for v in value]
    return value


def _load(snapshot: Path) -> Deck:
    try:
        return load_snapshot(snapshot)
    except (OSError, SnapshotError) as e:
        typer.secho(f"Could not read snapshot {snapshot}: {e}", fg="red", err=True)
        raise typer.Exit(2) from e
    except SchedulingError as e:
        typer.secho(f"Invalid deck config in {snapshot}: {e}", fg="red", err=True)
        raise typer.Exit(1) from e


def _find_card(deck: Deck, card_id: int) -> Card:
    card = deck.get_card(card_id)
    if card is None:
        typer.secho(f"Card {card_id} not found in deck '{deck.name}'.", fg="red", err=True)
        raise typer.Exit(1)
    return card


def _now(now: int | None) -> int:
    return int(time.time()) if now is None else now


NowOption = Annotated[
    int | None, typer.Option("--now", help="Unix timestamp to evaluate at. Defaults to now.")
]

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
):
    """Global settings for srs-engine."""
    ctx.ensure_object(dict)
    settings = resolve_settings()
    level = _VERBOSITY_LEVELS.get(verbose, logging.DEBUG) if verbose else settings.log_level
    logging.getLogger().setLevel(level)
    ctx.obj["settings"] = settings


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command("queue")
def queue(
    ctx: typer.Context,
    snapshot: Annotated[Path, typer.Argument(help="Path to a YAML deck snapshot.")],
    now: NowOption = None,
    learn_ahead: Annotated[
        int | None, typer.Option(help="Learn-ahead window in seconds.")
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """[bold green]Build[/bold green] the study queue for a deck snapshot."""
    settings = ctx.obj["settings"]
    deck = _load(snapshot)
    at = _now(now)

    builder = CardQueueBuilder(
        deck,
        now=at,
        learn_ahead_secs=learn_ahead if learn_ahead is not None else settings.learn_ahead_secs,
    )
    result = builder.build()

    if json_output:
        payload = {
            "counts": _jsonable(result.counts),
            "main_queue": [
                {"card_id": e.card.id, "kind": e.kind.value} for e in result.main_queue
            ],
            "intraday_now": [
                {"card_id": e.card.id, "due": e.due} for e in builder.intraday_now()
            ],
            "intraday_ahead": [
                {"card_id": e.card.id, "due": e.due} for e in builder.intraday_ahead()
            ],
        }
        typer.echo(json.dumps(payload, indent=2))
        return

    counts = result.counts
    typer.echo(f"Deck: {deck.name}")
    typer.echo(f"New: {counts.new}  Learning: {counts.learning}  Review: {counts.review}")
    for idx, entry in enumerate(result.main_queue, start=1):
        typer.echo(f"  {idx:>3}. card {entry.card.id} ({entry.kind.value})")
    ahead = builder.intraday_ahead()
    if ahead:
        typer.secho(f"Learning due within the look-ahead window: {len(ahead)}", fg="yellow")


@app.command("preview")
def preview(
    ctx: typer.Context,
    snapshot: Annotated[Path, typer.Argument(help="Path to a YAML deck snapshot.")],
    card_id: Annotated[int, typer.Argument(help="Card to preview.")],
    now: NowOption = None,
):
    """Show the delay each answer button would give a card."""
    deck = _load(snapshot)
    card = _find_card(deck, card_id)
    try:
        scheduler = create_scheduler(deck.config, ctx.obj["settings"])
        labels = scheduler.get_button_intervals(card, _now(now))
    except SchedulingError as e:
        typer.secho(str(e), fg="red", err=True)
        raise typer.Exit(1) from e

    typer.echo(json.dumps(labels, indent=2))


@app.command("answer")
def answer(
    ctx: typer.Context,
    snapshot: Annotated[Path, typer.Argument(help="Path to a YAML deck snapshot.")],
    card_id: Annotated[int, typer.Argument(help="Card being answered.")],
    rating: Annotated[int, typer.Argument(help="1=Again, 2=Hard, 3=Good, 4=Easy.")],
    now: NowOption = None,
    write: Annotated[
        bool, typer.Option("--write", help="Store the result back into the snapshot.")
    ] = False,
):
    """Answer a card and print the card patch and review log."""
    deck = _load(snapshot)
    card = _find_card(deck, card_id)
    try:
        scheduler = create_scheduler(deck.config, ctx.obj["settings"])
        result = scheduler.schedule_card(card, rating, _now(now))
    except SchedulingError as e:
        typer.secho(str(e), fg="red", err=True)
        raise typer.Exit(1) from e

    payload = {
        "card_patch": _jsonable(result.card_patch),
        "review_log": _jsonable(result.review_log),
        "leech": result.leech,
    }
    typer.echo(json.dumps(payload, indent=2))

    if write:
        updated = scheduler.bury_siblings(
            [result.card if c.id == card.id else c for c in deck.cards], card
        )
        deck.replace_cards(updated)
        save_snapshot(deck, snapshot)
        typer.secho(f"Updated {snapshot}", fg="green", err=True)


@app.command("unbury")
def unbury(
    snapshot: Annotated[Path, typer.Argument(help="Path to a YAML deck snapshot.")],
    write: Annotated[
        bool, typer.Option("--write", help="Store the result back into the snapshot.")
    ] = False,
):
    """Restore cards buried by sibling burying (day rollover)."""
    deck = _load(snapshot)
    restored = unbury_cards(deck.cards)
    changed = sum(1 for before, after in zip(deck.cards, restored) if before != after)
    typer.echo(f"Unburied {changed} card(s).")

    if write and changed:
        deck.replace_cards(restored)
        save_snapshot(deck, snapshot)


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Display the resolved engine settings as JSON."""
    settings = ctx.obj["settings"] if ctx.obj else resolve_settings()
    typer.echo(json.dumps(settings.model_dump(), indent=2))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
