"""Split each line into tagged segments from diagnostic and hover boundaries.

Concatenating the segments of a line always reproduces the line text: the
boundary set of a line holds both line ends and a segment is emitted between
every adjacent pair of boundaries.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from shapebook.lsp.types import (
    SEVERITY_RANK,
    Diagnostic,
    HoverEntry,
    LineRender,
    PositionEncoding,
    Segment,
)

from .position_index import PositionIndex, ends_with_line_break, line_spans
from .range_mapper import MappedRange, map_diagnostics, map_hover_entries

DIAGNOSTIC_TAG = "diagnostic"
_DIAGNOSTIC_TAGS = frozenset({DIAGNOSTIC_TAG})
_EMPTY_LINE = LineRender(segments=(Segment(""),), virtual_texts=())


class _LineSweep:
    """Ranges that may touch the current line, for lines visited top to bottom.

    Each range enters once when the scan reaches its start and leaves once the
    scan has passed its end.
    """

    def __init__(self, ranges: Sequence[MappedRange]) -> None:
        self._ranges = ranges
        self._next = 0
        self._active: list[MappedRange] = []

    def advance(self, line_start: int, line_end: int) -> list[MappedRange]:
        ranges = self._ranges
        while self._next < len(ranges) and ranges[self._next].start < line_end:
            self._active.append(ranges[self._next])
            self._next += 1
        # Nothing ending at or before this line can overlap a later one.
        self._active = [item for item in self._active if item.end > line_start]
        return self._active


def _diagnostic_message(payload: object) -> str:
    if isinstance(payload, Diagnostic):
        return payload.message
    return str(payload or "")


def _highest_severity(items: Iterable[MappedRange]) -> str | None:
    best: str | None = None
    for item in items:
        payload = item.payload
        severity = payload.severity if isinstance(payload, Diagnostic) else "error"
        if best is None or SEVERITY_RANK.get(severity, 0) > SEVERITY_RANK.get(best, 0):
            best = severity
    return best


def segment_line(
    text: str,
    line_start: int,
    line_end: int,
    diagnostics: Sequence[MappedRange],
    hovers: Sequence[MappedRange] = (),
) -> LineRender:
    """Build the render of ``text[line_start:line_end]``.

    ``diagnostics`` and ``hovers`` are offset ranges sorted by start; ranges
    missing the line are ignored. Hover ranges only contribute boundaries;
    segments are tagged from diagnostics.
    """
    line_diags = [item for item in diagnostics if item.overlaps(line_start, line_end)]
    line_hovers = [item for item in hovers if item.overlaps(line_start, line_end)]

    boundaries = {line_start, line_end}
    for item in (*line_diags, *line_hovers):
        boundaries.add(max(item.start, line_start))
        boundaries.add(min(item.end, line_end))
    ordered = sorted(boundaries)

    segments: list[Segment] = []
    for lo, hi in zip(ordered, ordered[1:]):
        covering = [item for item in line_diags if item.overlaps(lo, hi)]
        if covering:
            segments.append(Segment(text[lo:hi], _DIAGNOSTIC_TAGS, _highest_severity(covering)))
        else:
            segments.append(Segment(text[lo:hi]))
    if not segments:
        segments.append(Segment(""))

    virtual_texts: list[str] = []
    for item in line_diags:
        message = _diagnostic_message(item.payload)
        if message not in virtual_texts:
            virtual_texts.append(message)

    return LineRender(segments=tuple(segments), virtual_texts=tuple(virtual_texts))


def segment_text(
    text: str,
    diagnostics: Sequence[MappedRange],
    hovers: Sequence[MappedRange] = (),
    *,
    spans: list[tuple[int, int]] | None = None,
) -> list[LineRender]:
    """Render every line of ``text`` from already-mapped ranges."""
    spans = spans if spans is not None else line_spans(text)
    diag_sweep = _LineSweep(diagnostics)
    hover_sweep = _LineSweep(hovers)
    phantom_last = ends_with_line_break(text)

    renders: list[LineRender] = []
    for number, (line_start, line_end) in enumerate(spans):
        if phantom_last and number == len(spans) - 1:
            renders.append(_EMPTY_LINE)
            continue
        renders.append(
            segment_line(
                text,
                line_start,
                line_end,
                diag_sweep.advance(line_start, line_end),
                hover_sweep.advance(line_start, line_end),
            )
        )
    return renders


def build_line_renders(
    text: str,
    diagnostics: Iterable[Diagnostic],
    hover_entries: Iterable[HoverEntry] = (),
    encoding: PositionEncoding | str = PositionEncoding.UTF16,
) -> list[LineRender]:
    index = PositionIndex(text, encoding)
    diag_ranges = map_diagnostics(text, diagnostics, index=index)
    hover_ranges = map_hover_entries(text, hover_entries, index=index)
    return segment_text(index.text, diag_ranges, hover_ranges, spans=index.spans)
