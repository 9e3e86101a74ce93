"""
Deck Service: the outward-facing operations of srs.

Every transport (CLI, HTTP daemon, MCP server) is a thin caller of this
class. It owns no global state: configuration, repository and scheduler are
handed in by the caller.
"""

import logging
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from srs.application.card_repository import CardRepository, ScanResult
from srs.application.config import AppConfig, resolve_deck_path
from srs.application.review_session import RequeuePolicy, ReviewSession, apply_rating
from srs.application.schemas import (
    DeckStatsModel,
    DeckStatsResponse,
    DueCard,
    DueCardsResponse,
    ListDecksResponse,
    RateCardResponse,
)
from srs.application.stats.deck_stats import (
    DeckNode,
    build_deck_tree,
    collect_deck_stats,
    compute_deck_stats,
)
from srs.domain.errors import DeckPathError, ValidationError
from srs.domain.models import Rating, utc_now
from srs.domain.ports import Scheduler

logger = logging.getLogger(__name__)


class DeckService:
    def __init__(
        self,
        config: AppConfig,
        repository: CardRepository | None = None,
        scheduler: Scheduler | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Args:
            config: Resolved configuration (base deck, requeue policy, scheduler knobs).
            repository: Card store; a fresh CardRepository if omitted.
            scheduler: Scheduling algorithm; built from config if omitted.
            clock: Source of "now".
        """
        if scheduler is None:
            from srs.application.factory import get_scheduler

            scheduler = get_scheduler(config)

        self.config = config
        self.repository = repository or CardRepository()
        self.scheduler = scheduler
        self.clock = clock

    # ------------------------------------------------------------------
    # Path resolution
    # ------------------------------------------------------------------

    def resolve_deck(self, deck_path: str | Path | None = ".") -> Path:
        return resolve_deck_path(deck_path, self.config)

    def resolve_card(self, file_path: str | Path) -> Path:
        """Relative card paths are taken relative to the base deck, or the CWD without one."""
        p = Path(file_path).expanduser()
        if p.is_absolute():
            return p
        if self.config.base_deck_path is not None:
            return self.config.base_deck_path / p
        return p.resolve()

    def scan(self, deck_path: str | Path | None = ".") -> ScanResult:
        return self.repository.scan(self.resolve_deck(deck_path))

    # ------------------------------------------------------------------
    # Tool-call surface
    # ------------------------------------------------------------------

    def get_due_cards(self, deck_path: str | None = ".") -> DueCardsResponse:
        deck_path = deck_path or "."
        result = self.scan(deck_path)
        now = self.clock()
        due = [card for card in result.cards if card.is_due(now)]
        return DueCardsResponse(
            deck_path=deck_path,
            total_cards=len(result.cards),
            due_count=len(due),
            due_cards=[DueCard.from_card(card) for card in due],
            warnings=result.warnings,
        )

    def rate_card(self, file_path: str | None, rating: int | str | None) -> RateCardResponse:
        """
        Rate one card outside of a session.

        Arguments are validated before the file is touched, so a rejected call
        leaves the card byte-for-byte unchanged.
        """
        if not file_path:
            raise ValidationError("file_path is required")
        if rating is None:
            raise ValidationError("rating is required (1-4)")
        parsed_rating = Rating.coerce(rating)

        path = self.resolve_card(file_path)
        card = self.repository.load(path)
        apply_rating(card, parsed_rating, self.scheduler, self.repository.save, self.clock())

        return RateCardResponse(
            success=True,
            card_path=str(path),
            rating=parsed_rating.name,
            new_due_date=card.state.due,
            new_state=card.state.state.name,
            reps=card.state.reps,
            difficulty=card.state.difficulty,
            stability=card.state.stability,
        )

    def get_deck_stats(self, deck_path: str | None = ".") -> DeckStatsResponse:
        deck_path = deck_path or "."
        result = self.scan(deck_path)
        stats = compute_deck_stats(result.cards, self.clock())
        return DeckStatsResponse(deck_path=deck_path, warnings=result.warnings, **stats.to_dict())

    def list_decks(self) -> ListDecksResponse:
        base = self.config.base_deck_path
        if base is None:
            raise DeckPathError("no base deck configured - run 'srs config init' to set one up")

        decks, warnings = collect_deck_stats(base, self.repository, self.clock())
        return ListDecksResponse(
            base_path=str(base),
            decks={name: DeckStatsModel.from_stats(stats) for name, stats in decks.items()},
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # Session / tree helpers for interactive callers
    # ------------------------------------------------------------------

    def start_session(self, deck_path: str | None = ".") -> ReviewSession:
        result = self.scan(deck_path)
        return ReviewSession(
            result.cards,
            scheduler=self.scheduler,
            save=self.repository.save,
            clock=self.clock,
            requeue_policy=RequeuePolicy(self.config.requeue_policy),
        )

    def deck_tree(self, deck_path: str | None = ".") -> DeckNode:
        root = self.resolve_deck(deck_path)
        return build_deck_tree(root, self.repository.scan(root))
