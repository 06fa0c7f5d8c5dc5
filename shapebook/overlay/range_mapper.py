"""Normalize position ranges into clipped, ordered offset ranges."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable

from shapebook.lsp.types import Diagnostic, HoverEntry, PositionEncoding, Range

from .position_index import PositionIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MappedRange:
    start: int
    end: int
    payload: Any

    def overlaps(self, start: int, end: int) -> bool:
        # Zero-width ranges overlap nothing.
        return self.start < self.end and self.start < end and self.end > start

    def contains(self, offset: int) -> bool:
        return self.start <= offset < self.end


def map_ranges(
    text: str,
    items: Iterable[tuple[Range, Any]],
    encoding: PositionEncoding | str = PositionEncoding.UTF16,
    *,
    index: PositionIndex | None = None,
) -> list[MappedRange]:
    """Map ``(range, payload)`` pairs to offsets sorted by start.

    Entries whose positions fall outside the text are dropped.
    """
    index = index if index is not None else PositionIndex(text, encoding)
    size = len(index.text)
    out: list[MappedRange] = []
    dropped = 0
    for rng, payload in items:
        offsets = index.range_to_offsets(rng)
        if offsets is None:
            dropped += 1
            continue
        start = max(0, min(size, offsets[0]))
        end = max(start, min(size, offsets[1]))
        out.append(MappedRange(start=start, end=end, payload=payload))
    if dropped:
        logger.debug("Dropped %d range(s) outside a %d-char text", dropped, size)
    out.sort(key=lambda item: item.start)
    return out


def map_diagnostics(
    text: str,
    diagnostics: Iterable[Diagnostic],
    encoding: PositionEncoding | str = PositionEncoding.UTF16,
    *,
    index: PositionIndex | None = None,
) -> list[MappedRange]:
    return map_ranges(text, ((diag.range, diag) for diag in diagnostics), encoding, index=index)


def map_hover_entries(
    text: str,
    entries: Iterable[HoverEntry],
    encoding: PositionEncoding | str = PositionEncoding.UTF16,
    *,
    index: PositionIndex | None = None,
) -> list[MappedRange]:
    return map_ranges(text, ((entry.range, entry.payload) for entry in entries), encoding, index=index)
