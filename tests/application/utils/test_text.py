from datetime import datetime, timezone

import pytest

from srs.application.utils.fs import iter_markdown_files, write_text_atomic
from srs.application.utils.text import (
    format_metadata,
    format_timestamp,
    parse_card_text,
    parse_metadata,
    parse_timestamp,
    render_card_text,
    split_question_answer,
    stray_metadata_lines,
)
from srs.domain.constants import NEW_CARD_DUE
from srs.domain.models import SchedulingState, State


class TestTimestamps:
    def test_parses_z_suffix(self):
        assert parse_timestamp("2024-01-15T10:30:00Z") == datetime(
            2024, 1, 15, 10, 30, tzinfo=timezone.utc
        )

    def test_parses_offset(self):
        dt = parse_timestamp("2024-01-15T12:30:00+02:00")
        assert dt == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)

    def test_naive_is_utc(self):
        assert parse_timestamp("2024-01-15T10:30:00").tzinfo is not None

    def test_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_timestamp("yesterday")

    def test_format_is_utc_with_z(self):
        dt = parse_timestamp("2024-01-15T12:30:00+02:00")
        assert format_timestamp(dt) == "2024-01-15T10:30:00Z"


class TestParseMetadata:
    def test_invalid_field_is_skipped(self):
        state = parse_metadata(
            " due:2024-01-15T10:30:00Z, stability:invalid, difficulty:6.25, reps:5 "
        )
        assert state.stability == 0.0
        assert state.difficulty == 6.25
        assert state.reps == 5
        assert state.due == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)

    def test_whitespace_around_keys_and_values(self):
        state = parse_metadata("  reps :  7 ,lapses:2,  state:Learning")
        assert state.reps == 7
        assert state.lapses == 2
        assert state.state is State.Learning

    def test_unknown_state_is_new(self):
        assert parse_metadata("state:Mastered").state is State.New

    def test_unknown_keys_and_junk_ignored(self):
        state = parse_metadata("colour:blue, nonsense, reps:2")
        assert state.reps == 2

    def test_negative_counts_and_nan_rejected(self):
        state = parse_metadata("reps:-1, stability:nan, difficulty:inf")
        assert state.reps == 0
        assert state.stability == 0.0
        assert state.difficulty == 0.0

    def test_bad_due_keeps_default(self):
        assert parse_metadata("due:soon").due == NEW_CARD_DUE


class TestSplit:
    def test_splits_at_first_separator(self):
        q, a = split_question_answer("Q\n---\nA1\n---\nA2")
        assert q == "Q"
        assert a == "A1\n---\nA2"

    def test_no_separator(self):
        assert split_question_answer("  Just a question  \n") == ("Just a question", "")

    def test_separator_must_be_exact(self):
        q, a = split_question_answer("Q\n----\nstill Q\n --- \nmore")
        assert a == ""
        assert "still Q" in q

    def test_crlf(self):
        assert split_question_answer("Q\r\n---\r\nA\r\n") == ("Q", "A")


class TestParseCardText:
    def test_card_without_metadata(self):
        state, q, a = parse_card_text("Q\n---\nA")
        assert (q, a) == ("Q", "A")
        assert state.state is State.New
        assert state.due == NEW_CARD_DUE

    def test_card_with_metadata(self, meta):
        state, q, a = parse_card_text(meta() + "\nWhat is 2+2?\n---\n4\n")
        assert state.state is State.Review
        assert state.reps == 3
        assert state.stability == 4.0
        assert (q, a) == ("What is 2+2?", "4")

    def test_bom_is_ignored(self, meta):
        state, q, _ = parse_card_text("\ufeff" + meta() + "\nQ\n---\nA")
        assert state.reps == 3
        assert q == "Q"

    def test_metadata_only_recognised_on_first_line(self, meta):
        state, q, _ = parse_card_text("Q\n" + meta() + "\n---\nA")
        assert state.state is State.New
        assert meta() in q

    def test_empty_file(self):
        state, q, a = parse_card_text("")
        assert (q, a) == ("", "")
        assert state.state is State.New


class TestRender:
    def test_field_order(self):
        state = SchedulingState(
            due=datetime(2024, 2, 1, 8, 0, tzinfo=timezone.utc),
            stability=3.14159,
            difficulty=5.5,
            elapsed_days=1,
            scheduled_days=3,
            reps=2,
            lapses=1,
            state=State.Review,
        )
        assert format_metadata(state) == (
            "<!-- FSRS: due:2024-02-01T08:00:00Z, stability:3.14, difficulty:5.50, "
            "elapsed_days:1, scheduled_days:3, reps:2, lapses:1, state:Review -->"
        )

    def test_replaces_every_old_metadata_line(self, meta):
        original = meta() + "\nQ\n" + meta(reps=9) + "\n---\nA\n"
        rendered = render_card_text(SchedulingState(reps=4), original)

        lines = rendered.split("\n")
        assert lines[0].startswith("<!-- FSRS:")
        assert "reps:4" in lines[0]
        assert sum(line.startswith("<!-- FSRS:") for line in lines) == 1
        assert rendered.endswith("Q\n---\nA\n")

    def test_parse_after_render_keeps_text_and_state(self):
        state = SchedulingState(
            due=datetime(2024, 3, 1, tzinfo=timezone.utc),
            stability=2.5,
            difficulty=4.25,
            reps=1,
            state=State.Learning,
        )
        parsed, q, a = parse_card_text(render_card_text(state, "Front\n---\nBack"))
        assert parsed == state
        assert (q, a) == ("Front", "Back")

    def test_render_keeps_two_decimals_and_whole_seconds(self):
        state = SchedulingState(
            due=datetime(2024, 3, 1, 8, 15, 30, 123456, tzinfo=timezone.utc),
            stability=3.14159,
            difficulty=6.789,
            reps=2,
            state=State.Review,
        )
        parsed, _, _ = parse_card_text(render_card_text(state, "Q\n---\nA"))

        assert parsed.stability == 3.14
        assert parsed.difficulty == 6.79
        assert parsed.due == datetime(2024, 3, 1, 8, 15, 30, tzinfo=timezone.utc)
        assert parsed.reps == 2
        assert parsed.state is State.Review

    def test_parsing_twice_gives_equal_values(self, meta):
        for text in ("Q\n---\nA", meta() + "\nQ\n---\nA", "\ufeffJust a question"):
            assert parse_card_text(text) == parse_card_text(text)

    def test_stray_metadata_lines(self, meta):
        assert stray_metadata_lines(meta() + "\nQ\n---\nA") == []
        assert stray_metadata_lines("# Title\n" + meta() + "\nQ\n" + meta()) == [2, 4]


class TestFs:
    def test_iter_markdown_files_sorted_and_case_insensitive(self, tmp_path):
        (tmp_path / "b.md").write_text("x")
        (tmp_path / "A.MD").write_text("x")
        (tmp_path / "notes.txt").write_text("x")
        (tmp_path / "sub").mkdir()
        (tmp_path / "sub" / "c.md").write_text("x")

        names = [p.name for p in iter_markdown_files(tmp_path)]
        assert names == ["A.MD", "b.md", "c.md"]
        assert [p.name for p in iter_markdown_files(tmp_path, recursive=False)] == [
            "A.MD",
            "b.md",
        ]

    def test_single_file_root(self, tmp_path):
        card = tmp_path / "one.md"
        card.write_text("x")
        assert list(iter_markdown_files(card)) == [card]

    def test_write_text_atomic_preserves_mode(self, tmp_path):
        target = tmp_path / "card.md"
        target.write_text("old")
        target.chmod(0o600)

        write_text_atomic(target, "new")

        assert target.read_text() == "new"
        assert target.stat().st_mode & 0o777 == 0o600
        assert [p.name for p in tmp_path.iterdir()] == ["card.md"]
