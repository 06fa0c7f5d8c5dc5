"""Resolve a pointer pixel coordinate to a position and its hover payload."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Sequence

from shapebook.lsp.types import Position, PositionEncoding, char_units

from .position_index import PositionIndex
from .range_mapper import MappedRange


@dataclass(frozen=True)
class CharMetrics:
    """Monospace cell size in pixels."""

    char_width: float
    line_height: float

    @property
    def is_usable(self) -> bool:
        try:
            width = float(self.char_width)
            height = float(self.line_height)
        except (TypeError, ValueError):
            return False
        return math.isfinite(width) and math.isfinite(height) and width > 0 and height > 0


@dataclass(frozen=True)
class HoverHit:
    position: Position
    offset: int
    payload: Any


def pointer_to_position(x: float, y: float, metrics: CharMetrics) -> Position | None:
    """Map text-origin relative pixels to a cell, or ``None`` when unmeasurable."""
    if not metrics.is_usable or x is None or y is None:
        return None
    x = float(x)
    y = float(y)
    if not (math.isfinite(x) and math.isfinite(y)) or x < 0 or y < 0:
        return None
    row = y / float(metrics.line_height)
    column = x / float(metrics.char_width)
    # Tiny metrics can still overflow the quotient.
    if not (math.isfinite(row) and math.isfinite(column)):
        return None
    return Position(line=int(math.floor(row)), character=int(math.floor(column)))


def cell_to_position(index: PositionIndex, cell: Position | None, tab_size: int = 1) -> Position | None:
    """Turn a grid cell into a position, expanding tabs to ``tab_size`` stops.

    With ``tab_size`` 1 every character is one cell and the cell is returned
    as is. A cell right of the line end yields ``None``.
    """
    if cell is None:
        return None
    tab_size = int(tab_size or 1)
    if tab_size <= 1 or cell.line >= len(index.spans):
        return cell

    start, end = index.spans[cell.line]
    column = 0
    units = 0
    for ch in index.text[start:end]:
        width = tab_size - column % tab_size if ch == "\t" else 1
        if cell.character < column + width:
            return Position(line=cell.line, character=units)
        column += width
        units += char_units(ch, index.encoding)
    if cell.character == column:
        return Position(line=cell.line, character=units)
    return None


def find_hover(offset: int, hover_ranges: Sequence[MappedRange]) -> MappedRange | None:
    for item in hover_ranges:
        if item.contains(offset):
            return item
    return None


def locate_hover(
    text: str,
    x: float,
    y: float,
    metrics: CharMetrics,
    hover_ranges: Sequence[MappedRange],
    encoding: PositionEncoding | str = PositionEncoding.UTF16,
    *,
    index: PositionIndex | None = None,
    tab_size: int = 1,
) -> HoverHit | None:
    index = index if index is not None else PositionIndex(text, encoding)
    position = cell_to_position(index, pointer_to_position(x, y, metrics), tab_size)
    if position is None:
        return None
    offset = index.position_to_offset(position)
    if offset is None:
        return None
    hit = find_hover(offset, hover_ranges)
    if hit is None:
        return None
    return HoverHit(position=position, offset=offset, payload=hit.payload)
