"""srs CLI: root commands and subgroup registration."""

import json
import logging
import sys
from pathlib import Path
from typing import Annotated

import typer

from srs.application.config import config_file, resolve_config, save_base_deck
from srs.application.stats.deck_stats import DeckNode, describe_due
from srs.consts import VERSION
from srs.domain.errors import SrsError
from srs.domain.models import utc_now
from srs.interface._common import _get_service, fail

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="srs: Unix-style spaced repetition over markdown flashcards.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

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
# Register subgroups
# ---------------------------------------------------------------------------

from srs.interface.serve_commands import serve_app  # noqa: E402

app.add_typer(serve_app, name="serve")

config_app = typer.Typer(help="Manage srs configuration.", no_args_is_help=True)
app.add_typer(config_app, name="config")

DeckArg = Annotated[
    str,
    typer.Argument(help="Deck: a subdirectory of the base deck, '.' for all of it, or an absolute path."),
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
    base_deck: Annotated[
        Path | None,
        typer.Option("--base-deck", help="Override the configured base deck directory."),
    ] = None,
):
    """Global settings for srs."""
    ctx.ensure_object(dict)
    ctx.obj["base_deck_path"] = base_deck
    if verbose >= 2:
        logging.getLogger("srs").setLevel(logging.DEBUG)
    elif verbose == 1:
        logging.getLogger("srs").setLevel(logging.INFO)


# ---------------------------------------------------------------------------
# Root commands
# ---------------------------------------------------------------------------


@app.command()
def review(ctx: typer.Context, deck: DeckArg = "."):
    """[bold green]Review[/bold green] the cards that are due."""
    from srs.interface.review_ui import run_review

    service = _get_service(ctx)
    try:
        session = service.start_session(deck)
    except SrsError as e:
        fail(e)

    if not session.has_next():
        typer.echo(f"No cards are due for review in {service.resolve_deck(deck)}")
        return

    run_review(session, service, editor=service.config.editor)


@app.command()
def rate(
    ctx: typer.Context,
    card: Annotated[str, typer.Argument(help="Card file, relative to the base deck or absolute.")],
    rating: Annotated[str, typer.Argument(help="1=Again, 2=Hard, 3=Good, 4=Easy.")],
):
    """Rate a single card without starting a session."""
    service = _get_service(ctx)
    try:
        result = service.rate_card(card, rating)
    except SrsError as e:
        fail(e)

    due_local = result.new_due_date.astimezone().strftime("%Y-%m-%d %H:%M")
    typer.echo(f"Card rated as {result.rating}. Next due: {due_local}")


@app.command("list")
def list_cmd(ctx: typer.Context, deck: DeckArg = "."):
    """Show the deck tree with when each card is due."""
    service = _get_service(ctx)
    try:
        tree = service.deck_tree(deck)
        stats = service.get_deck_stats(deck)
    except SrsError as e:
        fail(e)

    typer.echo(f"Deck: {tree.path}")
    typer.echo(
        f"Cards: {stats.total} total, {stats.due} due | {stats.new} new, "
        f"{stats.learning} learning, {stats.review} review, {stats.relearning} relearning\n"
    )
    if stats.total == 0:
        typer.echo("No cards found in this deck.")
        return
    _print_tree(tree, prefix="", now=utc_now(), is_root=True, is_last=True)


def _print_tree(node: DeckNode, prefix: str, now, is_root: bool, is_last: bool) -> None:
    if not is_root:
        total, due_count = node.count(now)
        typer.echo(
            f"{prefix}{'└── ' if is_last else '├── '}{node.name}/ ({total} cards, {due_count} due)"
        )
        prefix += "    " if is_last else "│   "

    for i, card in enumerate(node.cards):
        last = i == len(node.cards) - 1 and not node.children
        label = describe_due(card, now)
        color = "red" if label == "due now" else None
        typer.echo(
            f"{prefix}{'└── ' if last else '├── '}{card.path.stem} "
            + typer.style(label, fg=color)
        )

    for i, child in enumerate(node.children):
        _print_tree(child, prefix, now, is_root=False, is_last=i == len(node.children) - 1)


@app.command()
def stats(
    ctx: typer.Context,
    deck: DeckArg = ".",
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show deck statistics."""
    service = _get_service(ctx)
    try:
        result = service.get_deck_stats(deck)
    except SrsError as e:
        fail(e)

    if json_output:
        typer.echo(result.model_dump_json(indent=2))
        return
    if result.total == 0:
        typer.echo(f"No cards found in {service.resolve_deck(deck)}")
        return

    typer.echo(f"Deck statistics for {service.resolve_deck(deck)}:\n")
    typer.echo(f"Total cards:    {result.total}")
    typer.echo(f"Due cards:      {result.due}")
    typer.echo(f"New cards:      {result.new}")
    typer.echo(f"Learning cards: {result.learning}")
    typer.echo(f"Review cards:   {result.review}")
    typer.echo(f"Relearning:     {result.relearning}")


@app.command()
def due(
    ctx: typer.Context,
    deck: DeckArg = ".",
    json_output: Annotated[
        bool, typer.Option("--json", help="Print the due cards as JSON instead of a count.")
    ] = False,
):
    """Print how many cards are due."""
    service = _get_service(ctx)
    try:
        result = service.get_due_cards(deck)
    except SrsError as e:
        fail(e)

    if json_output:
        typer.echo(result.model_dump_json(indent=2))
    else:
        typer.echo(str(result.due_count))


@app.command()
def decks(
    ctx: typer.Context,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """List every deck under the base deck with its counts."""
    service = _get_service(ctx)
    try:
        result = service.list_decks()
    except SrsError as e:
        fail(e)

    if json_output:
        typer.echo(result.model_dump_json(indent=2))
        return
    for name, s in sorted(result.decks.items()):
        typer.echo(f"{name:<30} {s.due:>4} due / {s.total:>4} total")


@app.command()
def version():
    """Show version information."""
    typer.echo(f"srs {VERSION}")


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show():
    """Display final resolved configuration."""
    config = resolve_config()
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))


@config_app.command("init")
def config_init(
    path: Annotated[
        Path | None,
        typer.Argument(help="Base deck directory. Prompted for when omitted."),
    ] = None,
):
    """Set up the base deck directory."""
    if path is None:
        typer.echo("This will be the root directory for all your flashcards.")
        answer = typer.prompt("Base deck directory", default=str(Path.home() / "flashcards"))
        path = Path(answer)

    path = path.expanduser().resolve()
    if not path.exists():
        if not typer.confirm(f"Directory {path} does not exist. Create it?", default=True):
            raise typer.Exit(1)
        path.mkdir(parents=True)
        typer.echo(f"Created directory: {path}")

    written = save_base_deck(path)
    typer.secho(f"Base deck configured at: {path}", fg="green")
    typer.echo(f"Configuration saved to: {written}")


@config_app.command("path")
def config_path():
    """Print where the config file lives."""
    typer.echo(str(config_file()))
