from .types import (
    Diagnostic,
    HoverEntry,
    LineRender,
    Position,
    PositionEncoding,
    Range,
    Segment,
    hover_text,
)

__all__ = [
    "Diagnostic",
    "HoverEntry",
    "LineRender",
    "Position",
    "PositionEncoding",
    "Range",
    "Segment",
    "hover_text",
]
