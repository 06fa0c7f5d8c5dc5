"""Pointer to position lookup and popup anchoring."""

import math

import pytest

from shapebook.lsp.types import Position
from shapebook.overlay.hover_locator import (
    CharMetrics,
    HoverHit,
    cell_to_position,
    find_hover,
    locate_hover,
    pointer_to_position,
)
from shapebook.overlay.popup_placer import POPUP_GAP, PopupAnchor, place_popup
from shapebook.overlay.position_index import PositionIndex
from shapebook.overlay.range_mapper import MappedRange

METRICS = CharMetrics(char_width=8, line_height=16)


def test_pointer_maps_to_cell():
    assert pointer_to_position(20, 5, METRICS) == Position(line=0, character=2)
    assert pointer_to_position(7.9, 31.9, METRICS) == Position(line=1, character=0)


@pytest.mark.parametrize(
    "x, y, metrics",
    [
        (-1, 5, METRICS),
        (20, -0.5, METRICS),
        (20, 5, CharMetrics(0, 16)),
        (20, 5, CharMetrics(8, 0)),
        (20, 5, CharMetrics(-8, 16)),
        (math.nan, 5, METRICS),
        (5, math.nan, METRICS),
        (math.inf, 5, METRICS),
        (5, math.inf, METRICS),
        (20, 5, CharMetrics(math.inf, 16)),
        (20, 5, CharMetrics(8, math.nan)),
        (20, 5, CharMetrics(1e-320, 16)),
    ],
)
def test_pointer_without_usable_inputs_has_no_position(x, y, metrics):
    assert pointer_to_position(x, y, metrics) is None


def test_no_hover_range_at_pointer():
    assert locate_hover("abcdef", 20, 5, METRICS, []) is None
    ranges = [MappedRange(0, 2, "left")]
    assert locate_hover("abcdef", 20, 5, METRICS, ranges) is None


def test_hover_range_containing_pointer_offset():
    ranges = [MappedRange(2, 4, "Float[B S]")]
    hit = locate_hover("abcdef", 20, 5, METRICS, ranges)
    assert hit == HoverHit(position=Position(0, 2), offset=2, payload="Float[B S]")


def test_hover_on_second_line_uses_offsets():
    ranges = [MappedRange(4, 6, "second")]
    hit = locate_hover("abc\ndefg", 9, 20, METRICS, ranges)
    assert hit is not None
    assert hit.offset == 5
    assert hit.payload == "second"


def test_pointer_past_line_end_finds_nothing():
    ranges = [MappedRange(0, 6, "all")]
    assert locate_hover("abcdef", 800, 5, METRICS, ranges) is None
    assert locate_hover("abcdef", 0, 40, METRICS, ranges) is None


def test_zero_width_range_never_matches():
    assert find_hover(2, [MappedRange(2, 2, "empty")]) is None


def test_first_containing_entry_wins():
    outer = MappedRange(0, 5, "outer")
    inner = MappedRange(2, 3, "inner")
    assert find_hover(2, [outer, inner]) is outer


def test_popup_anchor_formula():
    anchor = place_popup(3, 100, 16, 10, METRICS, vertical_offset=16, gap=4)
    assert anchor == PopupAnchor(top=48.0, left=98.0)


def test_popup_defaults_below_line():
    anchor = place_popup(0, 0, 0, 0, METRICS)
    assert anchor == PopupAnchor(top=16.0, left=4.0 + POPUP_GAP)


def test_popup_is_not_clamped():
    anchor = place_popup(0, 0, 200, 50, METRICS)
    assert anchor.top < 0
    assert anchor.left < 0


def test_popup_without_metrics():
    assert place_popup(1, 10, 0, 0, CharMetrics(0, 0)) is None


def test_cell_after_tab_resolves_to_character():
    index = PositionIndex("\tab\tc")
    assert cell_to_position(index, Position(0, 0), 4) == Position(0, 0)
    assert cell_to_position(index, Position(0, 3), 4) == Position(0, 0)
    assert cell_to_position(index, Position(0, 4), 4) == Position(0, 1)
    assert cell_to_position(index, Position(0, 5), 4) == Position(0, 2)
    assert cell_to_position(index, Position(0, 7), 4) == Position(0, 3)
    assert cell_to_position(index, Position(0, 8), 4) == Position(0, 4)
    assert cell_to_position(index, Position(0, 9), 4) == Position(0, 5)
    assert cell_to_position(index, Position(0, 10), 4) is None


def test_single_cell_tabs_leave_cell_unchanged():
    index = PositionIndex("\tab")
    assert cell_to_position(index, Position(0, 2), 1) == Position(0, 2)
    assert cell_to_position(index, None, 4) is None


def test_hover_after_tab_finds_entry():
    ranges = [MappedRange(1, 2, "x")]
    assert locate_hover("\tx", 33, 5, METRICS, ranges, tab_size=4).payload == "x"
    assert locate_hover("\tx", 33, 5, METRICS, ranges) is None
