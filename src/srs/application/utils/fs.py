import os
import tempfile
from collections.abc import Callable, Iterator
from pathlib import Path

from srs.domain.constants import CARD_SUFFIX


def is_card_file(path: Path) -> bool:
    return path.name.lower().endswith(CARD_SUFFIX) and path.is_file()


def iter_markdown_files(
    root: Path,
    recursive: bool = True,
    onerror: Callable[[OSError], None] | None = None,
) -> Iterator[Path]:
    """
    Yield every `.md` file (case-insensitive) under `root`, in lexical order
    per directory. A single file path yields itself if it is a card file.

    Directories that cannot be listed are reported through `onerror` and
    skipped; the walk itself keeps going.
    """
    if root.is_file():
        if is_card_file(root):
            yield root
        return

    if not recursive:
        try:
            entries = sorted(os.scandir(root), key=lambda e: e.name)
        except OSError as e:
            if onerror is None:
                raise
            onerror(e)
            return
        for entry in entries:
            p = Path(entry.path)
            if is_card_file(p):
                yield p
        return

    for dirpath, dirnames, filenames in os.walk(root, onerror=onerror):
        dirnames.sort()
        for name in sorted(filenames):
            p = Path(dirpath) / name
            if is_card_file(p):
                yield p


def iter_deck_dirs(root: Path) -> Iterator[Path]:
    """Yield `root` and every directory below it, parents before children."""
    yield root
    for dirpath, dirnames, _ in os.walk(root):
        dirnames.sort()
        for name in dirnames:
            yield Path(dirpath) / name


def write_text_atomic(path: Path, text: str) -> None:
    """
    Replace `path` with `text` via a temp file in the same directory and a
    rename, so readers never see a half-written card. File mode is preserved.
    """
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        try:
            os.chmod(tmp, path.stat().st_mode & 0o7777)
        except FileNotFoundError:
            pass
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
