from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from srs.application.config import AppConfig
from srs.domain.models import Rating, ReviewLogEntry, SchedulingState, State
from srs.domain.ports import Scheduler

NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


class StubScheduler(Scheduler):
    """
    Deterministic stand-in for FSRS.

    Again keeps the card due immediately, everything else pushes it out by a
    fixed number of days.
    """

    INTERVALS = {Rating.Again: 0, Rating.Hard: 1, Rating.Good: 2, Rating.Easy: 4}

    def __init__(self):
        self.calls: list[tuple[SchedulingState, Rating, datetime]] = []

    def review(self, state, rating, now):
        self.calls.append((state, rating, now))
        days = self.INTERVALS[rating]
        new_state = SchedulingState(
            due=now + timedelta(days=days),
            stability=state.stability + days + 0.5,
            difficulty=5.0,
            elapsed_days=0,
            scheduled_days=days,
            reps=state.reps + 1,
            lapses=state.lapses + (1 if rating == Rating.Again and state.state == State.Review else 0),
            state=State.Relearning if rating == Rating.Again else State.Review,
        )
        entry = ReviewLogEntry(
            rating=rating,
            reviewed_at=now,
            state=state.state,
            elapsed_days=0,
            scheduled_days=days,
        )
        return new_state, entry


class FakeClock:
    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def _write_card(directory: Path, name: str, content: str) -> Path:
    path = directory / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def _metadata(due: str = "2024-01-15T10:30:00Z", state: str = "Review", reps: int = 3) -> str:
    return (
        f"<!-- FSRS: due:{due}, stability:4.00, difficulty:5.00, elapsed_days:2, "
        f"scheduled_days:4, reps:{reps}, lapses:0, state:{state} -->"
    )


@pytest.fixture
def deck(tmp_path):
    """Creates a temporary base deck directory."""
    d = tmp_path / "flashcards"
    d.mkdir()
    return d


@pytest.fixture
def stub_scheduler():
    return StubScheduler()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def config(deck, mock_home):
    return AppConfig(base_deck_path=deck)


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Points HOME and XDG_CONFIG_HOME at a temp dir and clears SRS_* variables."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config files
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    for var in ("SRS_BASE_DECK_PATH", "SRS_EDITOR", "SRS_REQUEUE_POLICY"):
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture
def make_card(deck):
    """Write a card file under the deck (or another directory) and return its path."""

    def _make(name: str, content: str, directory: Path | None = None) -> Path:
        return _write_card(directory or deck, name, content)

    return _make


@pytest.fixture
def meta():
    """Build a metadata line; defaults describe a Review card due in the past."""
    return _metadata
