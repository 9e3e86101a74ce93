import math
from datetime import datetime, timezone

from srs.domain.constants import (
    ANSWER_SEPARATOR,
    METADATA_PREFIX,
    METADATA_SUFFIX,
)
from srs.domain.models import SchedulingState, State

# ---------- Timestamps ----------


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 timestamp. Naive values are taken to be UTC."""
    value = value.strip()
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_timestamp(dt: datetime) -> str:
    """RFC 3339 in UTC, second precision, `Z` suffix."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


# ---------- Metadata line ----------


def _parse_float(value: str) -> float:
    f = float(value)
    if not math.isfinite(f):
        raise ValueError(f"non-finite float: {value}")
    return f


def _parse_count(value: str) -> int:
    i = int(value)
    if i < 0:
        raise ValueError(f"negative count: {value}")
    return i


_FIELD_PARSERS = {
    "due": parse_timestamp,
    "stability": _parse_float,
    "difficulty": _parse_float,
    "elapsed_days": _parse_count,
    "scheduled_days": _parse_count,
    "reps": _parse_count,
    "lapses": _parse_count,
    "state": State.from_name,
}


def is_metadata_line(line: str) -> bool:
    line = line.rstrip("\r")
    return line.startswith(METADATA_PREFIX) and line.endswith(METADATA_SUFFIX)


def parse_metadata(body: str) -> SchedulingState:
    """
    Decode the body of a metadata comment (the part between the markers).

    Each `key:value` pair is handled on its own: a value that fails to parse
    leaves that field at its default and the rest of the line still counts.
    Unknown keys are ignored.
    """
    state = SchedulingState()
    for pair in body.split(","):
        key, sep, value = pair.partition(":")
        if not sep:
            continue
        parser = _FIELD_PARSERS.get(key.strip())
        if parser is None:
            continue
        try:
            setattr(state, key.strip(), parser(value.strip()))
        except ValueError:
            continue
    return state


def format_metadata(state: SchedulingState) -> str:
    """Render the single metadata line. Field order is fixed."""
    return (
        f"{METADATA_PREFIX} due:{format_timestamp(state.due)}, "
        f"stability:{state.stability:.2f}, "
        f"difficulty:{state.difficulty:.2f}, "
        f"elapsed_days:{state.elapsed_days}, "
        f"scheduled_days:{state.scheduled_days}, "
        f"reps:{state.reps}, "
        f"lapses:{state.lapses}, "
        f"state:{state.state.name} {METADATA_SUFFIX}"
    )


# ---------- Whole card ----------


def split_question_answer(text: str) -> tuple[str, str]:
    """
    Split card content at the first line that is exactly `---`.

    Later `---` lines belong to the answer. Without a separator the whole
    text is the question and the answer is empty.
    """
    lines = text.split("\n")
    for i, line in enumerate(lines):
        if line.rstrip("\r") == ANSWER_SEPARATOR:
            question = "\n".join(lines[:i])
            answer = "\n".join(lines[i + 1 :])
            return question.strip(), answer.strip()
    return text.strip(), ""


def parse_card_text(text: str) -> tuple[SchedulingState, str, str]:
    """Decode a card file into (state, question, answer).

    Only a leading metadata line is recognised; a file without one gets the
    new-card default state.
    """
    # Handle potential BOM (Byte Order Mark)
    text = text.lstrip("\ufeff")

    first, _, rest = text.partition("\n")
    if is_metadata_line(first):
        body = first.rstrip("\r")[len(METADATA_PREFIX) : -len(METADATA_SUFFIX)]
        state = parse_metadata(body)
        content = rest
    else:
        state = SchedulingState()
        content = text

    question, answer = split_question_answer(content)
    return state, question, answer


def stray_metadata_lines(text: str) -> list[int]:
    """1-based numbers of metadata-prefixed lines that are not the leading line."""
    lines = text.lstrip("\ufeff").split("\n")
    return [i for i, line in enumerate(lines[1:], start=2) if line.startswith(METADATA_PREFIX)]


def strip_metadata_lines(text: str) -> str:
    """Drop every line that starts with the metadata prefix."""
    text = text.lstrip("\ufeff")
    return "\n".join(line for line in text.split("\n") if not line.startswith(METADATA_PREFIX))


def render_card_text(state: SchedulingState, original_text: str) -> str:
    """
    Produce new file content: a fresh metadata line followed by the original
    content with any previous metadata lines removed. Question and answer text
    are carried over verbatim.
    """
    return format_metadata(state) + "\n" + strip_metadata_lines(original_text)
