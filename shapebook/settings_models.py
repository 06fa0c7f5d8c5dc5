from __future__ import annotations

import os
from copy import deepcopy
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypedDict

SETTINGS_ENV_VAR = "SHAPEBOOK_SETTINGS"
SETTINGS_DIR_NAME = ".shapebook"
SETTINGS_FILENAME = "settings.json"


class AnalyzerSettings(TypedDict, total=False):
    program: str
    args: list[str]
    timeout_s: float
    position_encoding: str  # utf-16 | utf-32
    debounce_ms: int


class EditorSettings(TypedDict, total=False):
    font_family: str
    font_size: int
    background_color: str
    foreground_color: str


class OverlayVisualSettings(TypedDict, total=False):
    show_virtual_text: bool
    error_color: str
    warning_color: str
    info_color: str
    hint_color: str
    virtual_text_color: str
    squiggle_thickness: int


class HoverSettings(TypedDict, total=False):
    enabled: bool
    gap_px: float
    delay_ms: int
    background_color: str
    text_color: str


class ShapebookSettings(TypedDict, total=False):
    analyzer: AnalyzerSettings
    editor: EditorSettings
    overlay: OverlayVisualSettings
    hover: HoverSettings


@dataclass(frozen=True)
class SettingsPaths:
    settings_dir: Path
    settings_file: Path

    @classmethod
    def default(cls) -> "SettingsPaths":
        override = str(os.environ.get(SETTINGS_ENV_VAR) or "").strip()
        if override:
            settings_file = Path(override).expanduser()
            return cls(settings_dir=settings_file.parent, settings_file=settings_file)
        settings_dir = Path.home() / SETTINGS_DIR_NAME
        return cls(settings_dir=settings_dir, settings_file=settings_dir / SETTINGS_FILENAME)


def default_settings() -> dict[str, Any]:
    defaults: ShapebookSettings = {
        "analyzer": {
            "program": "shapels",
            "args": ["analyze", "--json"],
            "timeout_s": 10.0,
            "position_encoding": "utf-16",
            "debounce_ms": 150,
        },
        "editor": {
            "font_family": "Monospace",
            "font_size": 11,
            "background_color": "#1E1E1E",
            "foreground_color": "#D4D4D4",
        },
        "overlay": {
            "show_virtual_text": True,
            "error_color": "#E35D6A",
            "warning_color": "#D6A54A",
            "info_color": "#6AA1FF",
            "hint_color": "#8F9AA5",
            "virtual_text_color": "#8F9AA5",
            "squiggle_thickness": 2,
        },
        "hover": {
            "enabled": True,
            "gap_px": 4.0,
            "delay_ms": 0,
            "background_color": "#2F2F2F",
            "text_color": "#E8E8E8",
        },
    }
    return deepcopy(dict(defaults))
