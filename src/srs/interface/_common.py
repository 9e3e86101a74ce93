"""Helpers shared by the CLI command modules."""

from typing import Any, NoReturn

import typer

from srs.application.config import AppConfig, resolve_config
from srs.application.deck_service import DeckService
from srs.domain.errors import DeckPathError, SrsError, ValidationError


def _resolve_with_overrides(**overrides: Any) -> AppConfig:
    """Resolve config with CLI overrides; `None` values fall through to lower layers."""
    return resolve_config(overrides)


def _get_service(ctx: typer.Context | None = None, **overrides: Any) -> DeckService:
    from srs.application.factory import get_deck_service

    if ctx is not None and ctx.obj:
        overrides.setdefault("base_deck_path", ctx.obj.get("base_deck_path"))
    return get_deck_service(_resolve_with_overrides(**overrides))


def humanize_error(e: SrsError) -> str:
    if isinstance(e, DeckPathError):
        return f"{e}"
    if isinstance(e, ValidationError):
        return f"Invalid input: {e}"
    return f"Error: {e}"


def fail(e: SrsError) -> NoReturn:
    """Print a readable error and exit (2 for bad input, 1 otherwise)."""
    typer.secho(humanize_error(e), fg="red", err=True)
    raise typer.Exit(2 if isinstance(e, ValidationError) else 1)
