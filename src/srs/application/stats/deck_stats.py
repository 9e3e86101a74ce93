"""
Deck statistics and the deck tree.

Pure computation over card snapshots, plus a directory walk that scans each
deck directory on its own (cards in subdirectories count for the subdirectory
only). Nothing here is cached: every call recomputes from what it is given.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path

from srs.application.card_repository import CardRepository, ScanResult
from srs.application.utils.fs import iter_deck_dirs
from srs.domain.constants import ROOT_DECK_KEY
from srs.domain.models import Card, DeckStats, State, utc_now

logger = logging.getLogger(__name__)


def compute_deck_stats(cards: list[Card], now: datetime | None = None) -> DeckStats:
    """Single pass over `cards`. A card is due when `due <= now`."""
    now = now or utc_now()
    counts = {State.New: 0, State.Learning: 0, State.Review: 0, State.Relearning: 0}
    due = 0
    for card in cards:
        counts[card.state.state] += 1
        if card.is_due(now):
            due += 1

    return DeckStats(
        total=len(cards),
        due=due,
        new=counts[State.New],
        learning=counts[State.Learning],
        review=counts[State.Review],
        relearning=counts[State.Relearning],
    )


def collect_deck_stats(
    base: Path, repository: CardRepository, now: datetime | None = None
) -> tuple[dict[str, DeckStats], list[str]]:
    """
    Stats for every directory under `base` that directly holds at least one card.

    Keys are paths relative to `base` using `/`; `base` itself is ".".

    Returns:
        (stats by deck, scan warnings)
    """
    now = now or utc_now()
    decks: dict[str, DeckStats] = {}
    warnings: list[str] = []

    for directory in iter_deck_dirs(base):
        result = repository.scan_shallow(directory)
        warnings.extend(result.warnings)
        if not result.cards:
            continue
        rel = directory.relative_to(base).as_posix()
        decks[rel if rel != "." else ROOT_DECK_KEY] = compute_deck_stats(result.cards, now)

    return decks, warnings


# ---------- Deck tree ----------


@dataclass
class DeckNode:
    name: str
    path: Path
    cards: list[Card] = field(default_factory=list)
    children: list["DeckNode"] = field(default_factory=list)

    def walk_cards(self):
        yield from self.cards
        for child in self.children:
            yield from child.walk_cards()

    def count(self, now: datetime) -> tuple[int, int]:
        """(total, due) for this node and everything below it."""
        total = due = 0
        for card in self.walk_cards():
            total += 1
            if card.is_due(now):
                due += 1
        return total, due


def build_deck_tree(root: Path, scan: ScanResult) -> DeckNode:
    """
    Group scanned cards by directory into a tree rooted at `root`.

    Children and cards are sorted by name; only directories that contain
    cards somewhere below them appear.
    """
    tree = DeckNode(name=root.name, path=root)
    nodes: dict[tuple[str, ...], DeckNode] = {(): tree}

    for card in scan.cards:
        try:
            rel_dir = card.path.parent.relative_to(root)
        except ValueError:
            continue
        parts = rel_dir.parts
        for i in range(1, len(parts) + 1):
            key = parts[:i]
            if key not in nodes:
                node = DeckNode(name=parts[i - 1], path=root.joinpath(*key))
                nodes[key[:-1]].children.append(node)
                nodes[key] = node
        nodes[parts].cards.append(card)

    _sort_node(tree)
    return tree


def _sort_node(node: DeckNode) -> None:
    node.children.sort(key=lambda n: n.name)
    node.cards.sort(key=lambda c: c.path.name)
    for child in node.children:
        _sort_node(child)


def describe_due(card: Card, now: datetime) -> str:
    """Short human label: "due now", "due in 5h", "due in 3d", "due in 2w", "due in 4mo"."""
    if card.is_due(now):
        return "due now"

    until = card.state.due - now
    if until < timedelta(days=1):
        return f"due in {int(until.total_seconds() // 3600)}h"
    if until < timedelta(days=7):
        return f"due in {until.days}d"
    if until < timedelta(days=30):
        return f"due in {until.days // 7}w"
    return f"due in {until.days // 30}mo"
