"""Offset <-> line/character conversion."""

import pytest

from shapebook.lsp.types import Position, PositionEncoding, Range, utf16_units_for_prefix
from shapebook.overlay.position_index import (
    PositionIndex,
    line_spans,
    offset_to_position,
    position_to_offset,
    range_to_offsets,
)

EMOJI = "\U0001F600"


def test_line_spans_exclude_terminators():
    assert line_spans("ab\ncd") == [(0, 2), (3, 5)]
    assert line_spans("a\r\nb\rc") == [(0, 1), (3, 4), (5, 6)]


def test_line_spans_trailing_terminator_adds_empty_line():
    assert line_spans("ab\ncd\n") == [(0, 2), (3, 5), (6, 6)]
    assert line_spans("") == [(0, 0)]


def test_position_to_offset_inside_and_at_line_end():
    assert position_to_offset("ab\ncd", Position(1, 1)) == 4
    assert position_to_offset("ab\ncd", Position(0, 2)) == 2
    assert position_to_offset("ab\ncd", Position(1, 2)) == 5


def test_position_past_line_end_or_last_line_is_rejected():
    assert position_to_offset("ab\ncd", Position(0, 3)) is None
    assert position_to_offset("ab\ncd", Position(3, 0)) is None
    assert position_to_offset("ab\ncd", Position(0, -1)) is None


def test_eof_sentinel_maps_to_text_length():
    assert position_to_offset("ab\ncd", Position(2, 0)) == 5
    assert position_to_offset("ab\ncd", Position(2, 1)) is None
    assert position_to_offset("ab\ncd\n", Position(3, 0)) == 6
    # The sentinel only round-trips from the offset side.
    assert offset_to_position("ab\ncd", 5) == Position(1, 2)


def test_utf16_counts_astral_chars_as_two_units():
    text = f"a{EMOJI}b"
    assert position_to_offset(text, Position(0, 1)) == 1
    assert position_to_offset(text, Position(0, 2)) is None
    assert position_to_offset(text, Position(0, 3)) == 2
    assert position_to_offset(text, Position(0, 4)) == 3
    assert offset_to_position(text, 2) == Position(0, 3)


def test_utf32_counts_code_points():
    text = f"a{EMOJI}b"
    assert position_to_offset(text, Position(0, 2), PositionEncoding.UTF32) == 2
    assert offset_to_position(text, 2, "utf-32") == Position(0, 2)
    assert position_to_offset(text, Position(0, 4), PositionEncoding.UTF32) is None


def test_offset_between_cr_and_lf_has_no_position():
    assert offset_to_position("ab\r\ncd", 3) is None
    assert offset_to_position("ab\r\ncd", 2) == Position(0, 2)
    assert offset_to_position("ab\r\ncd", 4) == Position(1, 0)


@pytest.mark.parametrize("offset", [-1, 6])
def test_offset_outside_text_has_no_position(offset):
    assert offset_to_position("ab\ncd", offset) is None


@pytest.mark.parametrize("encoding", list(PositionEncoding))
def test_round_trip_for_every_in_bounds_offset(encoding):
    text = f"héllo\nw{EMOJI}rld\r\n\n\tend"
    index = PositionIndex(text, encoding)
    seen = 0
    for offset in range(len(text) + 1):
        position = index.offset_to_position(offset)
        if position is None:
            continue
        seen += 1
        assert index.position_to_offset(position) == offset
        assert index.offset_to_position(index.position_to_offset(position)) == position
    assert seen == len(text)


def test_range_to_offsets_normalizes_inverted_ranges():
    rng = Range(start=Position(1, 1), end=Position(0, 1))
    assert range_to_offsets("ab\ncd", rng) == (1, 4)


def test_range_fails_when_either_end_fails():
    rng = Range(start=Position(0, 0), end=Position(9, 0))
    assert range_to_offsets("ab\ncd", rng) is None


def test_utf16_cursor_column_for_str_index():
    text = f"a{EMOJI}b"
    assert utf16_units_for_prefix(text, 0) == 0
    assert utf16_units_for_prefix(text, 2) == 3
    assert utf16_units_for_prefix(text, 99) == 4
    assert utf16_units_for_prefix("", 3) == 0
