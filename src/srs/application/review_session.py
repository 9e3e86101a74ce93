"""
Review session for a pass over due cards.

The session is an index-addressed list plus a cursor. Cards are only ever
appended, so positions stay stable for progress display and in-place
replacement after an edit. Rating a card can make earlier cards due again
(short "Again"/"Hard" intervals); those are appended to the tail so they
come back later in the same pass.
"""

import logging
from collections.abc import Callable, Iterable
from datetime import datetime
from enum import Enum

from srs.domain.errors import EndOfSessionError
from srs.domain.models import Card, Rating, ReviewLogEntry, utc_now
from srs.domain.ports import Scheduler

logger = logging.getLogger(__name__)


class RequeuePolicy(str, Enum):
    """
    How the requeue scan decides a card is already pending.

    PENDING: compare against the live tail, including cards appended during
        the same scan. A card is never pending twice.
    SNAPSHOT: compare against the tail as it was before the scan started and
        as it stands on this call only. Matches earlier releases; the same card
        can end up queued twice.
    """

    PENDING = "pending"
    SNAPSHOT = "snapshot"


def apply_rating(
    card: Card,
    rating: Rating | int,
    scheduler: Scheduler,
    save: Callable[[Card], None],
    now: datetime,
) -> ReviewLogEntry:
    """
    Perform one review action: schedule, persist, then commit.

    The rating is validated before the scheduler is consulted. If `save`
    raises, the card's in-memory state is restored and the error propagates,
    so the action can be retried.
    """
    rating = Rating.coerce(rating)
    new_state, entry = scheduler.review(card.state, rating, now)

    previous = card.state
    card.state = new_state
    try:
        save(card)
    except Exception:
        card.state = previous
        raise

    card.review_log.append(entry)
    logger.info(
        f"[rate] {card.path.name}: {rating.name} -> {new_state.state.name}, "
        f"due {new_state.due.isoformat()}"
    )
    return entry


class ReviewSession:
    def __init__(
        self,
        cards: Iterable[Card],
        scheduler: Scheduler,
        save: Callable[[Card], None],
        clock: Callable[[], datetime] = utc_now,
        requeue_policy: RequeuePolicy = RequeuePolicy.PENDING,
    ):
        """
        Args:
            cards: A loaded collection; only the cards due now are kept.
            scheduler: Computes the next state for a rating.
            save: Persists a rated card (normally CardRepository.save).
            clock: Source of "now"; injectable for tests.
            requeue_policy: Duplicate check used when re-appending cards.
        """
        self._scheduler = scheduler
        self._save = save
        self._clock = clock
        self._policy = RequeuePolicy(requeue_policy)

        now = clock()
        due = [c for c in cards if c.is_due(now)]
        due.sort(key=lambda c: c.state.due)
        self._cards: list[Card] = due
        self._cursor = 0

    @property
    def cards(self) -> tuple[Card, ...]:
        return tuple(self._cards)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def reviewed(self) -> int:
        return self._cursor

    def __len__(self) -> int:
        return len(self._cards)

    def has_next(self) -> bool:
        return self._cursor < len(self._cards)

    def current(self) -> Card:
        if not self.has_next():
            raise EndOfSessionError("no more cards in session")
        return self._cards[self._cursor]

    def progress(self) -> tuple[int, int]:
        """1-based position and total, for display."""
        return self._cursor + 1, len(self._cards)

    def rate(self, rating: Rating | int) -> ReviewLogEntry:
        """
        Rate the current card, persist it, requeue anything that became due,
        and move on. The cursor only advances once the write succeeded.
        """
        card = self.current()
        now = self._clock()
        entry = apply_rating(card, rating, self._scheduler, self._save, now)
        self._requeue_due(now)
        self._cursor += 1
        return entry

    def update_current(self, card: Card) -> None:
        """Swap in a reloaded copy of the current card (e.g. after an edit)."""
        if not self.has_next():
            raise EndOfSessionError("no current card to update")
        self._cards[self._cursor] = card

    def _requeue_due(self, now: datetime) -> None:
        # Every card shown so far, including the one just rated.
        shown = self._cards[: self._cursor + 1]
        pending = {c.path for c in self._cards[self._cursor + 1 :]}

        for card in shown:
            if not card.is_due(now) or card.path in pending:
                continue
            self._cards.append(card)
            if self._policy is RequeuePolicy.PENDING:
                pending.add(card.path)
            logger.debug(f"[requeue] {card.path.name} is due again")
