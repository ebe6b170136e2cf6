"""Tests for the line reassembler."""

from __future__ import annotations

import random
import re

from cansatlog.telemetry.lines import LineReassembler

from conftest import SAMPLE_TEXT

EXPECTED = re.split(r"\r?\n", SAMPLE_TEXT)[:-1]


def _collect(chunks: list[str]) -> list[str]:
    lines = LineReassembler()
    out: list[str] = []
    for chunk in chunks:
        out.extend(lines.feed(chunk))
    assert lines.pending == ""
    return out


class TestFragmentation:
    def test_whole_text_in_one_chunk(self) -> None:
        assert _collect([SAMPLE_TEXT]) == EXPECTED

    def test_every_single_split_point(self) -> None:
        for i in range(len(SAMPLE_TEXT) + 1):
            assert _collect([SAMPLE_TEXT[:i], SAMPLE_TEXT[i:]]) == EXPECTED, i

    def test_one_character_at_a_time(self) -> None:
        assert _collect(list(SAMPLE_TEXT)) == EXPECTED

    def test_random_fragmentation(self) -> None:
        rng = random.Random(1234)
        for _ in range(200):
            cuts = sorted(rng.sample(range(1, len(SAMPLE_TEXT)), rng.randint(1, 25)))
            bounds = [0, *cuts, len(SAMPLE_TEXT)]
            chunks = [SAMPLE_TEXT[a:b] for a, b in zip(bounds, bounds[1:])]
            assert _collect(chunks) == EXPECTED


class TestReassembler:
    def test_partial_line_is_held(self) -> None:
        lines = LineReassembler()
        assert list(lines.feed("Altitude: 9")) == []
        assert lines.pending == "Altitude: 9"
        assert list(lines.feed("7.9 m\nSpe")) == ["Altitude: 97.9 m"]
        assert lines.pending == "Spe"

    def test_crlf_split_across_chunks(self) -> None:
        lines = LineReassembler()
        assert list(lines.feed("Sats: 5\r")) == []
        assert list(lines.feed("\nSats: 6\r\n")) == ["Sats: 5", "Sats: 6"]

    def test_feed_updates_buffer_without_iteration(self) -> None:
        lines = LineReassembler()
        lines.feed("abc\ndef")
        assert lines.pending == "def"

    def test_empty_lines_are_kept(self) -> None:
        lines = LineReassembler()
        assert list(lines.feed("a\n\nb\n")) == ["a", "", "b"]

    def test_flush_returns_trailing_fragment(self) -> None:
        lines = LineReassembler()
        list(lines.feed("Sats: 5\nSats: 6"))
        assert lines.flush() == "Sats: 6"
        assert lines.flush() is None
        assert lines.pending == ""

    def test_flush_after_terminator_is_none(self) -> None:
        lines = LineReassembler()
        list(lines.feed("Sats: 5\n"))
        assert lines.flush() is None

    def test_arbitrary_content_is_legal(self) -> None:
        lines = LineReassembler()
        assert list(lines.feed("\x00� garbage \x7f\n")) == ["\x00� garbage \x7f"]

    def test_reset_drops_pending(self) -> None:
        lines = LineReassembler()
        list(lines.feed("half"))
        lines.reset()
        assert list(lines.feed("line\n")) == ["line"]
