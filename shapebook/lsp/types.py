"""Small LSP dataclasses/helpers for positions, diagnostics and hovers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class PositionEncoding(str, Enum):
    """How ``Position.character`` counts along a line."""

    UTF16 = "utf-16"
    UTF32 = "utf-32"

    @classmethod
    def coerce(cls, value: object, default: "PositionEncoding | None" = None) -> "PositionEncoding":
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for member in cls:
            if member.value == text:
                return member
        return default if default is not None else cls.UTF16


SEVERITY_RANK = {"error": 4, "warning": 3, "info": 2, "hint": 1}
_LSP_SEVERITY_NAMES = {1: "error", 2: "warning", 3: "info", 4: "hint"}


@dataclass(frozen=True)
class Position:
    line: int
    character: int


@dataclass(frozen=True)
class Range:
    start: Position
    end: Position


@dataclass(frozen=True)
class Diagnostic:
    range: Range
    message: str
    severity: str = "error"
    source: str = ""
    code: str = ""


@dataclass(frozen=True)
class HoverEntry:
    range: Range
    payload: Any


@dataclass(frozen=True)
class Segment:
    """A maximal run of one line sharing the same annotation tags."""

    text: str
    tags: frozenset[str] = frozenset()
    severity: str | None = None

    @property
    def is_diagnostic(self) -> bool:
        return "diagnostic" in self.tags


@dataclass(frozen=True)
class LineRender:
    segments: tuple[Segment, ...]
    virtual_texts: tuple[str, ...] = ()

    @property
    def text(self) -> str:
        return "".join(seg.text for seg in self.segments)


def utf16_units_for_prefix(text: str, codepoint_index: int) -> int:
    """Qt cursor column (UTF-16 units) of a ``str`` index into ``text``."""
    end = max(0, min(len(text), int(codepoint_index)))
    return sum(char_units(ch, PositionEncoding.UTF16) for ch in text[:end])


def char_units(ch: str, encoding: PositionEncoding) -> int:
    if encoding is PositionEncoding.UTF16 and ord(ch) > 0xFFFF:
        return 2
    return 1


def normalize_severity(value: object) -> str:
    if isinstance(value, int) and not isinstance(value, bool):
        return _LSP_SEVERITY_NAMES.get(value, "error")
    text = str(value or "").strip().lower()
    if text in SEVERITY_RANK:
        return text
    if text == "warn":
        return "warning"
    if text in {"information", "note"}:
        return "info"
    return "error"


def position_from_lsp(obj: object) -> Position | None:
    if not isinstance(obj, dict):
        return None
    try:
        line = int(obj.get("line"))
        character = int(obj.get("character"))
    except Exception:
        return None
    if line < 0 or character < 0:
        return None
    return Position(line=line, character=character)


def range_from_lsp(obj: object) -> Range | None:
    if not isinstance(obj, dict):
        return None
    start = position_from_lsp(obj.get("start"))
    end = position_from_lsp(obj.get("end"))
    if start is None or end is None:
        return None
    return Range(start=start, end=end)


def diagnostic_from_lsp(obj: object) -> Diagnostic | None:
    if not isinstance(obj, dict):
        return None
    rng = range_from_lsp(obj.get("range"))
    if rng is None:
        return None
    code = obj.get("code")
    return Diagnostic(
        range=rng,
        message=str(obj.get("message") or ""),
        severity=normalize_severity(obj.get("severity")),
        source=str(obj.get("source") or ""),
        code="" if code is None else str(code),
    )


def hover_entry_from_lsp(obj: object) -> HoverEntry | None:
    if not isinstance(obj, dict):
        return None
    rng = range_from_lsp(obj.get("range"))
    if rng is None:
        return None
    if "payload" in obj:
        payload = obj.get("payload")
    else:
        payload = obj.get("contents")
    return HoverEntry(range=rng, payload=payload)


def hover_text(payload: object) -> str:
    """Flatten LSP hover contents (string, MarkupContent, MarkedString, lists)."""
    if payload is None:
        return ""
    if isinstance(payload, str):
        return payload.strip()
    if isinstance(payload, dict):
        if "contents" in payload:
            return hover_text(payload.get("contents"))
        value = payload.get("value")
        if value is not None:
            return str(value).strip()
        return ""
    if isinstance(payload, (list, tuple)):
        parts = [hover_text(item) for item in payload]
        return "\n\n".join(part for part in parts if part)
    return str(payload).strip()
