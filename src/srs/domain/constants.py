"""Centralized constants for the srs card format and scheduling surface.

Everything that touches the on-disk format lives here so the codec, the
repository and the transports import from a single source of truth.
"""

from datetime import datetime, timezone

# ---------- Card file format ----------
METADATA_PREFIX = "<!-- FSRS:"
METADATA_SUFFIX = "-->"
ANSWER_SEPARATOR = "---"
CARD_SUFFIX = ".md"

# New cards are due at the epoch, i.e. always due and stable across re-parses.
NEW_CARD_DUE = datetime(1970, 1, 1, tzinfo=timezone.utc)

# ---------- Scheduling ----------
DEFAULT_DESIRED_RETENTION = 0.9
DEFAULT_MAXIMUM_INTERVAL = 36500

# ---------- Deck tree ----------
ROOT_DECK_KEY = "."

# ---------- Server ----------
DEFAULT_SERVER_HOST = "127.0.0.1"
DEFAULT_SERVER_PORT = 8787
