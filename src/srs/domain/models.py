"""
Domain models for cards, scheduling state and deck statistics.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum
from pathlib import Path

from .constants import NEW_CARD_DUE
from .errors import ValidationError


class State(IntEnum):
    """Learning state of a card."""

    New = 0
    Learning = 1
    Review = 2
    Relearning = 3

    @classmethod
    def from_name(cls, name: str) -> "State":
        """Exact, case-sensitive lookup. Unknown names decode to New."""
        try:
            return cls[name]
        except KeyError:
            return cls.New


class Rating(IntEnum):
    """Rating given when reviewing a card (1=Again, 2=Hard, 3=Good, 4=Easy)."""

    Again = 1
    Hard = 2
    Good = 3
    Easy = 4

    @classmethod
    def coerce(cls, value) -> "Rating":
        """
        Turn a boundary value into a Rating.

        Accepts a Rating, an int, an integral float, or a decimal string.
        Anything else, including booleans, raises ValidationError.
        """
        if isinstance(value, Rating):
            return value
        if isinstance(value, bool):
            raise ValidationError(f"invalid rating {value!r}: must be 1-4")
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        elif isinstance(value, str):
            try:
                value = int(value.strip())
            except ValueError:
                raise ValidationError(f"invalid rating {value!r}: must be 1-4") from None
        if not isinstance(value, int) or not 1 <= value <= 4:
            raise ValidationError(f"invalid rating {value!r}: must be 1-4")
        return cls(value)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SchedulingState:
    """
    Per-card scheduling state, persisted in the card's metadata line.

    Attributes:
        due: When the card should be shown next (timezone-aware).
        stability: Memory strength maintained by the scheduler.
        difficulty: Intrinsic hardness maintained by the scheduler.
        elapsed_days: Days between the last two reviews.
        scheduled_days: Interval assigned by the last review.
        reps: Total number of reviews.
        lapses: Times the card was forgotten after graduating.
        state: Learning state.
    """

    due: datetime = NEW_CARD_DUE
    stability: float = 0.0
    difficulty: float = 0.0
    elapsed_days: int = 0
    scheduled_days: int = 0
    reps: int = 0
    lapses: int = 0
    state: State = State.New

    def is_due(self, now: datetime) -> bool:
        return self.due <= now


@dataclass(frozen=True)
class ReviewLogEntry:
    """
    A single rating event.

    Attributes:
        rating: Button pressed.
        reviewed_at: When the review happened.
        state: Learning state before the review.
        elapsed_days: Days since the previous review.
        scheduled_days: Interval assigned by this review.
    """

    rating: Rating
    reviewed_at: datetime
    state: State
    elapsed_days: int
    scheduled_days: int


@dataclass
class Card:
    """A flashcard. Its identity is the file it lives in."""

    path: Path
    question: str
    answer: str
    state: SchedulingState = field(default_factory=SchedulingState)
    review_log: list[ReviewLogEntry] = field(default_factory=list)
    last_modified: datetime | None = None

    def is_due(self, now: datetime) -> bool:
        return self.state.is_due(now)


@dataclass(frozen=True)
class DeckStats:
    """Counts over a snapshot of cards. Relearning is its own bucket."""

    total: int = 0
    due: int = 0
    new: int = 0
    learning: int = 0
    review: int = 0
    relearning: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "due": self.due,
            "new": self.new,
            "learning": self.learning,
            "review": self.review,
            "relearning": self.relearning,
        }
