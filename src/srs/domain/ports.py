"""
Ports (interfaces) for scheduling.

These define the contract that infrastructure adapters must implement.
The review session depends on this abstraction, not on a concrete algorithm.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from .models import Rating, ReviewLogEntry, SchedulingState


class Scheduler(ABC):
    """
    Port for the spaced-repetition algorithm.

    Implementations:
        - FsrsScheduler: the FSRS algorithm via the py-fsrs library.
    """

    @abstractmethod
    def review(
        self, state: SchedulingState, rating: Rating, now: datetime
    ) -> tuple[SchedulingState, ReviewLogEntry]:
        """
        Compute the state that follows rating a card at `now`.

        Must be pure: the input state is not modified and nothing is written.

        Returns:
            The new scheduling state and the log entry for this review.
        """
        pass
