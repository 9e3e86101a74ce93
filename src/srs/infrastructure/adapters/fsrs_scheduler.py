"""
FSRS Scheduler: infrastructure adapter for the py-fsrs library.

Implements the Scheduler port by translating the persisted scheduling state
to an fsrs.Card, reviewing it, and translating the result back.
"""

import logging
from datetime import datetime, timedelta, timezone

import fsrs

from srs.domain.constants import DEFAULT_DESIRED_RETENTION, DEFAULT_MAXIMUM_INTERVAL
from srs.domain.models import Rating, ReviewLogEntry, SchedulingState, State
from srs.domain.ports import Scheduler

logger = logging.getLogger(__name__)


class FsrsScheduler(Scheduler):
    """
    Schedules reviews with FSRS.

    The card format does not record the position inside the learning steps,
    so learning and relearning cards resume at the last step: the next Good
    graduates them.
    """

    def __init__(
        self,
        desired_retention: float = DEFAULT_DESIRED_RETENTION,
        maximum_interval: int = DEFAULT_MAXIMUM_INTERVAL,
        enable_fuzzing: bool = False,
    ):
        self._fsrs = fsrs.Scheduler(
            desired_retention=desired_retention,
            maximum_interval=maximum_interval,
            enable_fuzzing=enable_fuzzing,
        )

    def review(
        self, state: SchedulingState, rating: Rating, now: datetime
    ) -> tuple[SchedulingState, ReviewLogEntry]:
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        now = now.astimezone(timezone.utc)

        last_review = self._last_review(state)
        elapsed_days = max(0, (now - last_review).days) if last_review else 0

        card, _ = self._fsrs.review_card(
            self._to_fsrs_card(state, now, last_review),
            fsrs.Rating(int(rating)),
            review_datetime=now,
        )

        lapsed = state.state == State.Review and rating == Rating.Again
        new_state = SchedulingState(
            due=card.due,
            stability=float(card.stability or 0.0),
            difficulty=float(card.difficulty or 0.0),
            elapsed_days=elapsed_days,
            scheduled_days=max(0, (card.due - now).days),
            reps=state.reps + 1,
            lapses=state.lapses + (1 if lapsed else 0),
            state=State[card.state.name],
        )
        entry = ReviewLogEntry(
            rating=rating,
            reviewed_at=now,
            state=state.state,
            elapsed_days=elapsed_days,
            scheduled_days=new_state.scheduled_days,
        )
        return new_state, entry

    @staticmethod
    def _is_fresh(state: SchedulingState) -> bool:
        return state.state == State.New or state.stability <= 0 or state.difficulty <= 0

    def _last_review(self, state: SchedulingState) -> datetime | None:
        """Best estimate of the previous review: due minus the scheduled interval."""
        if self._is_fresh(state):
            return None
        return state.due - timedelta(days=state.scheduled_days)

    def _to_fsrs_card(
        self, state: SchedulingState, now: datetime, last_review: datetime | None
    ) -> fsrs.Card:
        if self._is_fresh(state):
            return fsrs.Card(state=fsrs.State.Learning, step=0, due=now)

        if state.state == State.Review:
            step = None
        elif state.state == State.Learning:
            step = max(0, len(self._fsrs.learning_steps) - 1)
        else:
            step = max(0, len(self._fsrs.relearning_steps) - 1)

        return fsrs.Card(
            state=fsrs.State[state.state.name],
            step=step,
            stability=state.stability,
            difficulty=state.difficulty,
            due=state.due.astimezone(timezone.utc),
            last_review=last_review.astimezone(timezone.utc) if last_review else None,
        )
