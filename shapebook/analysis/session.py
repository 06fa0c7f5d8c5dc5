"""Owner of the current analysis result for one editable text.

Text changes rebuild the whole snapshot; pointer moves only read it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from shapebook.lsp.types import LineRender, PositionEncoding, hover_text
from shapebook.overlay.hover_locator import CharMetrics, cell_to_position, locate_hover, pointer_to_position
from shapebook.overlay.line_segmenter import segment_text
from shapebook.overlay.popup_placer import POPUP_GAP, PopupDescriptor, place_popup
from shapebook.overlay.position_index import PositionIndex
from shapebook.overlay.range_mapper import MappedRange, map_diagnostics, map_hover_entries

from .analyzer import EMPTY_RESULT, AnalysisResult, Analyzer, AnalyzerError, HoverProvider, NullAnalyzer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OverlaySnapshot:
    text: str
    result: AnalysisResult
    diagnostics: tuple[MappedRange, ...]
    hovers: tuple[MappedRange, ...]
    lines: tuple[LineRender, ...]
    index: PositionIndex = field(compare=False, repr=False)
    error: str = ""
    revision: int = 0


def build_snapshot(
    text: str,
    result: AnalysisResult,
    encoding: PositionEncoding | str = PositionEncoding.UTF16,
    *,
    error: str = "",
    revision: int = 0,
) -> OverlaySnapshot:
    index = PositionIndex(text, encoding)
    diagnostics = map_diagnostics(index.text, result.diagnostics, index=index)
    hovers = map_hover_entries(index.text, result.hover_entries, index=index)
    lines = segment_text(index.text, diagnostics, hovers, spans=index.spans)
    return OverlaySnapshot(
        text=index.text,
        result=result,
        diagnostics=tuple(diagnostics),
        hovers=tuple(hovers),
        lines=tuple(lines),
        index=index,
        error=str(error or ""),
        revision=int(revision),
    )


class OverlaySession:
    """Single writer of the overlay snapshot shared by edit and hover handlers."""

    def __init__(
        self,
        analyzer: Analyzer | None = None,
        *,
        encoding: PositionEncoding | str = PositionEncoding.UTF16,
        popup_gap: float = POPUP_GAP,
        popup_vertical_offset: float | None = None,
    ) -> None:
        self._analyzer: Analyzer = analyzer if analyzer is not None else NullAnalyzer()
        self.encoding = PositionEncoding.coerce(encoding)
        self.popup_gap = float(popup_gap)
        self.popup_vertical_offset = popup_vertical_offset
        self._snapshot = build_snapshot("", EMPTY_RESULT, self.encoding)

    @property
    def snapshot(self) -> OverlaySnapshot:
        return self._snapshot

    @property
    def analyzer(self) -> Analyzer:
        return self._analyzer

    def update_text(self, text: str) -> OverlaySnapshot:
        source = str(text or "")
        error = ""
        try:
            result = self._analyzer.analyze(source)
        except AnalyzerError as exc:
            logger.warning("Analysis failed: %s", exc)
            result = EMPTY_RESULT
            error = str(exc)

        snapshot = build_snapshot(
            source,
            result,
            self.encoding,
            error=error,
            revision=self._snapshot.revision + 1,
        )
        dropped = (len(result.diagnostics) - len(snapshot.diagnostics)) + (
            len(result.hover_entries) - len(snapshot.hovers)
        )
        if dropped:
            logger.debug("Revision %d: %d annotation(s) could not be placed", snapshot.revision, dropped)
        self._snapshot = snapshot
        return snapshot

    def hover_at(
        self,
        x: float,
        y: float,
        metrics: CharMetrics,
        *,
        scroll_top: float = 0.0,
        scroll_left: float = 0.0,
        tab_size: int = 1,
    ) -> PopupDescriptor | None:
        """Popup for a pointer at text-origin relative ``(x, y)``, if any.

        ``tab_size`` is the tab stop width in cells used by the renderer.
        """
        snapshot = self._snapshot
        hit = locate_hover(
            snapshot.text, x, y, metrics, snapshot.hovers, index=snapshot.index, tab_size=tab_size
        )
        if hit is not None:
            position, payload = hit.position, hit.payload
        else:
            position = cell_to_position(snapshot.index, pointer_to_position(x, y, metrics), tab_size)
            if position is None or snapshot.index.position_to_offset(position) is None:
                return None
            payload = self._query_analyzer_hover(position)

        text = hover_text(payload)
        if not text:
            return None
        anchor = place_popup(
            position.line,
            x,
            scroll_top,
            scroll_left,
            metrics,
            vertical_offset=self.popup_vertical_offset,
            gap=self.popup_gap,
        )
        if anchor is None:
            return None
        return PopupDescriptor(top=anchor.top, left=anchor.left, text=text, line=position.line)

    def _query_analyzer_hover(self, position):
        if not isinstance(self._analyzer, HoverProvider):
            return None
        try:
            return self._analyzer.hover(position)
        except AnalyzerError as exc:
            logger.debug("Hover query failed at %s: %s", position, exc)
            return None
