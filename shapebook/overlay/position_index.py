"""Conversion between linear text offsets and line/character positions.

Offsets index the Python ``str`` (code points). ``Position.character`` counts
in the session's :class:`PositionEncoding`: UTF-16 code units by default, as
in LSP, or code points for analyzers that negotiate ``utf-32``.

A position one line past the last line with ``character == 0`` is the
end-of-file sentinel and maps to ``len(text)``.
"""

from __future__ import annotations

import re
from bisect import bisect_right

from shapebook.lsp.types import Position, PositionEncoding, Range, char_units

_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


def line_spans(text: str) -> list[tuple[int, int]]:
    """Return ``(start, end)`` of each physical line, terminators excluded."""
    spans: list[tuple[int, int]] = []
    start = 0
    for match in _LINE_BREAK_RE.finditer(text):
        spans.append((start, match.start()))
        start = match.end()
    spans.append((start, len(text)))
    return spans


def ends_with_line_break(text: str) -> bool:
    return bool(text) and text[-1] in "\r\n"


class PositionIndex:
    """Line table for one text, reused for every entry of an analysis pass."""

    def __init__(self, text: str, encoding: PositionEncoding | str = PositionEncoding.UTF16) -> None:
        self.text = str(text or "")
        self.encoding = PositionEncoding.coerce(encoding)
        self.spans = line_spans(self.text)
        self._starts = [start for start, _end in self.spans]

    def position_to_offset(self, position: Position) -> int | None:
        line = int(position.line)
        character = int(position.character)
        if line < 0 or character < 0:
            return None
        if line == len(self.spans):
            return len(self.text) if character == 0 else None
        if line > len(self.spans):
            return None

        start, end = self.spans[line]
        if self.encoding is PositionEncoding.UTF32:
            if character > end - start:
                return None
            return start + character

        units = 0
        idx = start
        while idx < end and units < character:
            units += char_units(self.text[idx], self.encoding)
            idx += 1
        if units != character:
            # Past the line end, or inside a surrogate pair.
            return None
        return idx

    def offset_to_position(self, offset: int) -> Position | None:
        offset = int(offset)
        if offset < 0 or offset > len(self.text):
            return None
        line = bisect_right(self._starts, offset) - 1
        start, end = self.spans[line]
        if offset > end:
            return None
        if self.encoding is PositionEncoding.UTF32:
            return Position(line=line, character=offset - start)
        units = sum(char_units(ch, self.encoding) for ch in self.text[start:offset])
        return Position(line=line, character=units)

    def range_to_offsets(self, rng: Range) -> tuple[int, int] | None:
        start = self.position_to_offset(rng.start)
        end = self.position_to_offset(rng.end)
        if start is None or end is None:
            return None
        return min(start, end), max(start, end)


def position_to_offset(
    text: str,
    position: Position,
    encoding: PositionEncoding | str = PositionEncoding.UTF16,
) -> int | None:
    return PositionIndex(text, encoding).position_to_offset(position)


def offset_to_position(
    text: str,
    offset: int,
    encoding: PositionEncoding | str = PositionEncoding.UTF16,
) -> Position | None:
    return PositionIndex(text, encoding).offset_to_position(offset)


def range_to_offsets(
    text: str,
    rng: Range,
    encoding: PositionEncoding | str = PositionEncoding.UTF16,
) -> tuple[int, int] | None:
    return PositionIndex(text, encoding).range_to_offsets(rng)
