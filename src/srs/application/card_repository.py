import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from srs.application.utils.fs import iter_markdown_files, write_text_atomic
from srs.application.utils.text import (
    parse_card_text,
    render_card_text,
    stray_metadata_lines,
)
from srs.domain.errors import FileIOError
from srs.domain.models import Card


@dataclass
class ScanResult:
    """Cards found by a directory scan, plus one warning per file that was skipped."""

    cards: list[Card] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


class CardRepository:
    """
    Loads and stores cards. The filesystem is the store: one card, one file.

    Single-card operations raise FileIOError. Directory scans never fail
    because of one bad file; the failure is logged and collected instead.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def load(self, path: Path) -> Card:
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8", errors="strict")
            mtime = path.stat().st_mtime
        except UnicodeDecodeError as e:
            raise FileIOError(path, f"not valid UTF-8 ({e.reason})") from e
        except OSError as e:
            raise FileIOError(
                path, e.strerror or str(e), missing=isinstance(e, FileNotFoundError)
            ) from e

        state, question, answer = parse_card_text(text)
        return Card(
            path=path,
            question=question,
            answer=answer,
            state=state,
            last_modified=datetime.fromtimestamp(mtime, tz=timezone.utc),
        )

    def save(self, card: Card) -> None:
        """
        Rewrite the card file with the card's current scheduling state.

        The file is re-read first so edits made since it was loaded survive;
        only the metadata line is replaced.
        """
        try:
            original = card.path.read_text(encoding="utf-8", errors="strict")
            stray = stray_metadata_lines(original)
            if stray:
                self.logger.warning(
                    f"{card.path}: dropping metadata on line(s) {stray}; "
                    f"only a metadata line at the top of the file is read"
                )
            write_text_atomic(card.path, render_card_text(card.state, original))
        except UnicodeDecodeError as e:
            raise FileIOError(card.path, f"not valid UTF-8 ({e.reason})") from e
        except OSError as e:
            raise FileIOError(
                card.path, e.strerror or str(e), missing=isinstance(e, FileNotFoundError)
            ) from e
        self.logger.debug(f"[write] {card.path}: persisted scheduling state")

    def scan(self, root: Path) -> ScanResult:
        """Load every card under `root`, descending into subdirectories."""
        return self._scan(Path(root), recursive=True)

    def scan_shallow(self, directory: Path) -> ScanResult:
        """Load the cards directly inside `directory` only."""
        return self._scan(Path(directory), recursive=False)

    def _scan(self, root: Path, recursive: bool) -> ScanResult:
        if not root.exists():
            raise FileIOError(root, "no such file or directory", missing=True)

        result = ScanResult()

        def _on_walk_error(e: OSError) -> None:
            msg = f"cannot read {e.filename}: {e.strerror or e}"
            self.logger.warning(msg)
            result.warnings.append(msg)

        for p in iter_markdown_files(root, recursive=recursive, onerror=_on_walk_error):
            try:
                result.cards.append(self.load(p))
            except FileIOError as e:
                msg = f"failed to parse card {e}"
                self.logger.warning(msg)
                result.warnings.append(msg)

        self.logger.debug(
            f"[scan] {root}: {len(result.cards)} cards, {len(result.warnings)} skipped"
        )
        return result
