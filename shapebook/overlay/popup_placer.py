"""Anchor a hover popup in viewport pixels.

The anchor is not clamped to the viewport; the widget decides that.
"""

from __future__ import annotations

from dataclasses import dataclass

from .hover_locator import CharMetrics

POPUP_GAP = 4.0


@dataclass(frozen=True)
class PopupAnchor:
    top: float
    left: float


@dataclass(frozen=True)
class PopupDescriptor:
    top: float
    left: float
    text: str
    line: int


def place_popup(
    line: int,
    pointer_x: float,
    scroll_top: float,
    scroll_left: float,
    metrics: CharMetrics,
    *,
    vertical_offset: float | None = None,
    gap: float = POPUP_GAP,
) -> PopupAnchor | None:
    if not metrics.is_usable:
        return None
    line_height = float(metrics.line_height)
    offset_y = line_height if vertical_offset is None else float(vertical_offset)
    top = int(line) * line_height - float(scroll_top) + offset_y
    left = float(pointer_x) - float(scroll_left) + float(metrics.char_width) / 2.0 + float(gap)
    return PopupAnchor(top=top, left=left)
