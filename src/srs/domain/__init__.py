# Domain Package
from .errors import DeckPathError, EndOfSessionError, FileIOError, SrsError, ValidationError
from .models import Card, DeckStats, Rating, ReviewLogEntry, SchedulingState, State
from .ports import Scheduler

__all__ = [
    "Card",
    "DeckStats",
    "Rating",
    "ReviewLogEntry",
    "SchedulingState",
    "State",
    "Scheduler",
    "SrsError",
    "FileIOError",
    "ValidationError",
    "EndOfSessionError",
    "DeckPathError",
]
