"""Interactive terminal loop driving a ReviewSession."""

import logging
from enum import Enum

import click
import typer

from srs.application.deck_service import DeckService
from srs.application.review_session import ReviewSession
from srs.domain.errors import FileIOError, ValidationError

logger = logging.getLogger(__name__)

RATING_PROMPT = "Rate: 1=Again 2=Hard 3=Good 4=Easy (e=edit, q=quit)"


class _Outcome(Enum):
    RATED = "rated"
    EDITED = "edited"
    QUIT = "quit"


def edit_current(session: ReviewSession, service: DeckService, editor: str | None) -> None:
    """Open the current card in an editor, then reload it into the session."""
    card = session.current()
    click.edit(filename=str(card.path), editor=editor)
    session.update_current(service.repository.load(card.path))


def _review_one(session: ReviewSession, service: DeckService, editor: str | None) -> _Outcome:
    card = session.current()
    pos, total = session.progress()

    typer.secho(f"\n[{pos}/{total}] {card.path.name}", bold=True)
    typer.echo(card.question)

    action = typer.prompt(
        "Press Enter to show the answer (e=edit, q=quit)", default="", show_default=False
    )
    action = action.strip().lower()
    if action == "q":
        return _Outcome.QUIT
    if action == "e":
        edit_current(session, service, editor)
        return _Outcome.EDITED

    typer.secho("---", dim=True)
    typer.echo(card.answer)

    while True:
        choice = typer.prompt(RATING_PROMPT).strip().lower()
        if choice == "q":
            return _Outcome.QUIT
        if choice == "e":
            edit_current(session, service, editor)
            return _Outcome.EDITED
        try:
            session.rate(choice)
        except ValidationError as e:
            typer.secho(str(e), fg="yellow")
            continue
        except FileIOError as e:
            typer.secho(f"Could not save card, try again: {e}", fg="red")
            continue
        return _Outcome.RATED


def run_review(session: ReviewSession, service: DeckService, editor: str | None = None) -> int:
    """
    Show due cards one by one until the session runs dry or the user quits.

    Returns:
        Number of ratings given.
    """
    while session.has_next():
        if _review_one(session, service, editor) is _Outcome.QUIT:
            break

    rated = session.reviewed

    if session.has_next():
        typer.echo(f"\nStopped after {rated} reviews; {len(session) - session.cursor} left.")
    else:
        typer.secho(f"\nSession complete: {rated} reviews.", fg="green")
    logger.debug(f"[review] session ended after {rated} ratings")
    return rated
