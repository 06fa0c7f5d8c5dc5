from .analyzer import (
    EMPTY_RESULT,
    AnalysisResult,
    Analyzer,
    AnalyzerError,
    AnalyzerUnavailableError,
    CommandAnalyzer,
    HoverProvider,
    NullAnalyzer,
    parse_analysis_payload,
)
from .factory import analyzer_from_settings, session_from_settings
from .session import OverlaySession, OverlaySnapshot, build_snapshot

__all__ = [
    "EMPTY_RESULT",
    "AnalysisResult",
    "Analyzer",
    "AnalyzerError",
    "AnalyzerUnavailableError",
    "CommandAnalyzer",
    "HoverProvider",
    "NullAnalyzer",
    "OverlaySession",
    "OverlaySnapshot",
    "analyzer_from_settings",
    "build_snapshot",
    "parse_analysis_payload",
    "session_from_settings",
]
