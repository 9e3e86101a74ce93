# Application Stats Package
from .deck_stats import (
    DeckNode,
    build_deck_tree,
    collect_deck_stats,
    compute_deck_stats,
    describe_due,
)

__all__ = [
    "DeckNode",
    "build_deck_tree",
    "collect_deck_stats",
    "compute_deck_stats",
    "describe_due",
]
