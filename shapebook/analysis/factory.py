"""Build analyzers and sessions from the settings store."""

from __future__ import annotations

from shapebook.lsp.types import PositionEncoding
from shapebook.settings_store import JsonSettingsStore

from .analyzer import Analyzer, CommandAnalyzer, NullAnalyzer
from .session import OverlaySession


def analyzer_from_settings(store: JsonSettingsStore) -> Analyzer:
    program = str(store.get("analyzer.program") or "").strip()
    if not program or program.lower() in {"none", "off"}:
        return NullAnalyzer()
    return CommandAnalyzer(
        program,
        store.get_str_list("analyzer.args", ["analyze", "--json"]),
        timeout_s=store.get_float("analyzer.timeout_s", 10.0, minimum=0.1),
    )


def session_from_settings(store: JsonSettingsStore, analyzer: Analyzer | None = None) -> OverlaySession:
    return OverlaySession(
        analyzer if analyzer is not None else analyzer_from_settings(store),
        encoding=PositionEncoding.coerce(store.get("analyzer.position_encoding")),
        popup_gap=store.get_float("hover.gap_px", 4.0, minimum=0.0),
    )
