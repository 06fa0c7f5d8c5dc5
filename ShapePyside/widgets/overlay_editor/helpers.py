from __future__ import annotations

from PySide6.QtGui import QColor

_OVERLAY_VISUAL_DEFAULTS = {
    "show_virtual_text": True,
    "error_color": "#E35D6A",
    "warning_color": "#D6A54A",
    "info_color": "#6AA1FF",
    "hint_color": "#8F9AA5",
    "virtual_text_color": "#8F9AA5",
    "squiggle_thickness": 2,
}
_HOVER_DEFAULTS = {
    "enabled": True,
    "delay_ms": 0,
    "background_color": "#2F2F2F",
    "text_color": "#E8E8E8",
}
_ANALYSIS_DEBOUNCE_MS = 150
_TAB_STOP_CHARS = 4
_VIRTUAL_TEXT_GAP_CHARS = 3
_VIRTUAL_TEXT_SEPARATOR = "  ·  "


def _coerce_bool(value: object, *, default: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    text = str(value or "").strip().lower()
    if text in {"1", "true", "yes", "on", "y"}:
        return True
    if text in {"0", "false", "no", "off", "n", ""}:
        return False
    return bool(default)


def _valid_color_hex(value: object, fallback: str) -> str:
    text = str(value or "").strip()
    if text and QColor(text).isValid():
        return text
    return fallback


def _merge_visual_cfg(base: dict, incoming: object, defaults: dict) -> dict:
    merged = dict(base)
    if not isinstance(incoming, dict):
        return merged
    for key, default_value in defaults.items():
        if key not in incoming:
            continue
        value = incoming[key]
        if isinstance(default_value, bool):
            merged[key] = _coerce_bool(value, default=default_value)
        elif isinstance(default_value, int):
            try:
                merged[key] = int(value)
            except (TypeError, ValueError):
                merged[key] = default_value
        elif key.endswith("_color"):
            merged[key] = _valid_color_hex(value, default_value)
        else:
            merged[key] = value
    return merged


__all__ = [name for name in globals() if not name.startswith("__")]
