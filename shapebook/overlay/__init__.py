from .hover_locator import CharMetrics, HoverHit, cell_to_position, find_hover, locate_hover, pointer_to_position
from .line_segmenter import DIAGNOSTIC_TAG, build_line_renders, segment_line, segment_text
from .popup_placer import POPUP_GAP, PopupAnchor, PopupDescriptor, place_popup
from .position_index import (
    PositionIndex,
    line_spans,
    offset_to_position,
    position_to_offset,
    range_to_offsets,
)
from .range_mapper import MappedRange, map_diagnostics, map_hover_entries, map_ranges

__all__ = [
    "CharMetrics",
    "DIAGNOSTIC_TAG",
    "HoverHit",
    "MappedRange",
    "POPUP_GAP",
    "PopupAnchor",
    "PopupDescriptor",
    "PositionIndex",
    "build_line_renders",
    "cell_to_position",
    "find_hover",
    "line_spans",
    "locate_hover",
    "map_diagnostics",
    "map_hover_entries",
    "map_ranges",
    "offset_to_position",
    "place_popup",
    "pointer_to_position",
    "position_to_offset",
    "range_to_offsets",
    "segment_line",
    "segment_text",
]
