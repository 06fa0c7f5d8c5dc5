from __future__ import annotations

from PySide6.QtCore import QEvent, QPoint, QPointF, QTimer, Qt, Signal
from PySide6.QtGui import QColor, QFont, QFontMetricsF, QPainter, QPainterPath, QPen, QTextCursor
from PySide6.QtWidgets import QPlainTextEdit

from shapebook.analysis.session import OverlaySession, OverlaySnapshot
from shapebook.lsp.types import utf16_units_for_prefix
from shapebook.overlay.hover_locator import CharMetrics

from .components import HoverPopup
from .helpers import (
    _ANALYSIS_DEBOUNCE_MS,
    _HOVER_DEFAULTS,
    _OVERLAY_VISUAL_DEFAULTS,
    _TAB_STOP_CHARS,
    _VIRTUAL_TEXT_GAP_CHARS,
    _VIRTUAL_TEXT_SEPARATOR,
    _merge_visual_cfg,
)


class OverlayEditor(QPlainTextEdit):
    """Monospace editor painting an :class:`OverlaySession` snapshot.

    Edits re-run the session (debounced); pointer moves only query the
    current snapshot for a hover popup.
    """

    snapshotChanged = Signal(object)  # OverlaySnapshot
    hoverChanged = Signal(object)  # PopupDescriptor | None
    statusMessage = Signal(str)

    def __init__(self, parent=None, session: OverlaySession | None = None):
        super().__init__(parent)
        self._session = session if session is not None else OverlaySession()
        self._snapshot_doc_revision = -1
        self._overlay_cfg = dict(_OVERLAY_VISUAL_DEFAULTS)
        self._hover_cfg = dict(_HOVER_DEFAULTS)
        self._hover_pending_pos = QPoint()

        self.setLineWrapMode(QPlainTextEdit.LineWrapMode.NoWrap)
        self.setMouseTracking(True)
        self.viewport().setMouseTracking(True)
        self.viewport().installEventFilter(self)
        self.set_editor_font_preferences()

        self._hover_popup = HoverPopup(self.viewport())

        self._analysis_timer = QTimer(self)
        self._analysis_timer.setSingleShot(True)
        self._analysis_timer.setInterval(_ANALYSIS_DEBOUNCE_MS)
        self._analysis_timer.timeout.connect(self.refresh_analysis)

        self._hover_timer = QTimer(self)
        self._hover_timer.setSingleShot(True)
        self._hover_timer.timeout.connect(self._on_hover_timer)

        self.textChanged.connect(self._schedule_analysis)

    # ---------- configuration ----------

    @property
    def session(self) -> OverlaySession:
        return self._session

    def set_analysis_debounce_ms(self, value: int) -> None:
        self._analysis_timer.setInterval(max(0, int(value)))

    def set_editor_font_preferences(self, *, family: str | None = None, point_size: int | None = None) -> None:
        font = QFont(self.font())
        if family:
            font.setFamily(str(family))
        if point_size:
            font.setPointSize(max(6, int(point_size)))
        font.setStyleHint(QFont.StyleHint.Monospace)
        font.setFixedPitch(True)
        self.setFont(font)
        self.setTabStopDistance(QFontMetricsF(font).horizontalAdvance(" ") * _TAB_STOP_CHARS)
        self.viewport().update()

    def update_overlay_visual_settings(self, overlay_cfg: dict) -> None:
        self._overlay_cfg = _merge_visual_cfg(self._overlay_cfg, overlay_cfg, _OVERLAY_VISUAL_DEFAULTS)
        self.viewport().update()

    def update_hover_settings(self, hover_cfg: dict) -> None:
        self._hover_cfg = _merge_visual_cfg(self._hover_cfg, hover_cfg, _HOVER_DEFAULTS)
        self._hover_popup.set_colors(
            str(self._hover_cfg["background_color"]),
            str(self._hover_cfg["text_color"]),
        )
        if not self._hover_cfg["enabled"]:
            self._hide_hover_popup()

    # ---------- analysis ----------

    def _schedule_analysis(self) -> None:
        self._hide_hover_popup()
        self._analysis_timer.start()

    def refresh_analysis(self) -> OverlaySnapshot:
        self._analysis_timer.stop()
        snapshot = self._session.update_text(self.toPlainText())
        self._snapshot_doc_revision = int(self.document().revision())
        if snapshot.error:
            self.statusMessage.emit(f"Analysis failed: {snapshot.error}")
        else:
            count = len(snapshot.result.diagnostics)
            self.statusMessage.emit(f"{count} diagnostic{'s' if count != 1 else ''}")
        self.viewport().update()
        self.snapshotChanged.emit(snapshot)
        return snapshot

    def _snapshot_is_current(self) -> bool:
        return self._snapshot_doc_revision == int(self.document().revision())

    # ---------- geometry ----------

    def char_metrics(self) -> CharMetrics:
        fm = QFontMetricsF(self.font())
        line_height = float(self.blockBoundingRect(self.document().firstBlock()).height())
        if line_height <= 0:
            line_height = float(fm.lineSpacing())
        return CharMetrics(char_width=float(fm.horizontalAdvance(" ")), line_height=line_height)

    def _text_view_origin(self) -> QPointF:
        margin = float(self.document().documentMargin())
        return QPointF(margin, margin)

    def _scroll_offsets(self, metrics: CharMetrics) -> tuple[float, float]:
        """Return ``(scroll_top, scroll_left)`` in pixels of the text area."""
        origin = self._text_view_origin()
        scroll_left = -float(self.contentOffset().x())
        block = self.firstVisibleBlock()
        if not block.isValid():
            return 0.0, scroll_left
        block_top = float(self.blockBoundingGeometry(block).translated(self.contentOffset()).top())
        line0_top = block_top - float(block.blockNumber()) * float(metrics.line_height)
        return origin.y() - line0_top, scroll_left

    # ---------- hover ----------

    def _on_hover_timer(self) -> None:
        self._update_hover(self._hover_pending_pos)

    def _update_hover(self, pos: QPoint) -> None:
        if not self._hover_cfg["enabled"] or not self._snapshot_is_current():
            self._hide_hover_popup()
            return
        metrics = self.char_metrics()
        scroll_top, scroll_left = self._scroll_offsets(metrics)
        origin = self._text_view_origin()
        x = float(pos.x()) - origin.x() + scroll_left
        y = float(pos.y()) - origin.y() + scroll_top
        descriptor = self._session.hover_at(
            x, y, metrics, scroll_top=scroll_top, scroll_left=scroll_left, tab_size=_TAB_STOP_CHARS
        )
        if descriptor is None:
            self._hide_hover_popup()
            return
        self._hover_popup.show_text_at(descriptor.text, origin.x() + descriptor.left, origin.y() + descriptor.top)
        self.hoverChanged.emit(descriptor)

    def _hide_hover_popup(self) -> None:
        self._hover_timer.stop()
        if self._hover_popup.isVisible():
            self._hover_popup.hide()
            self.hoverChanged.emit(None)

    def eventFilter(self, watched, event):
        if watched is self.viewport():
            et = event.type()
            if et == QEvent.MouseMove:
                pos = event.position().toPoint() if hasattr(event, "position") else event.pos()
                delay = max(0, int(self._hover_cfg.get("delay_ms", 0)))
                if delay:
                    self._hover_pending_pos = QPoint(pos)
                    self._hover_timer.start(delay)
                else:
                    self._update_hover(pos)
            elif et in (QEvent.Leave, QEvent.Hide):
                self._hide_hover_popup()
        return super().eventFilter(watched, event)

    def focusOutEvent(self, event):
        self._hide_hover_popup()
        super().focusOutEvent(event)

    def scrollContentsBy(self, dx: int, dy: int) -> None:
        super().scrollContentsBy(dx, dy)
        if dx != 0 or dy != 0:
            self._hide_hover_popup()
            self.viewport().update()

    # ---------- painting ----------

    def paintEvent(self, event):
        super().paintEvent(event)
        self._paint_overlay(event)

    def _severity_color(self, severity: str | None) -> QColor:
        key = f"{str(severity or 'error').lower()}_color"
        return QColor(str(self._overlay_cfg.get(key) or self._overlay_cfg["error_color"]))

    def _cursor_rect_at(self, block, column_units: int):
        cursor = QTextCursor(block)
        cursor.setPosition(block.position() + max(0, min(int(column_units), block.length() - 1)))
        return self.cursorRect(cursor)

    def _paint_overlay(self, event) -> None:
        if not self._snapshot_is_current():
            return
        lines = self._session.snapshot.lines
        if not lines:
            return

        painter = QPainter(self.viewport())
        painter.setRenderHint(QPainter.Antialiasing, True)
        painter.setClipRect(event.rect())
        fm = QFontMetricsF(self.font())
        thickness = max(1, min(6, int(self._overlay_cfg.get("squiggle_thickness", 2))))
        amplitude = 1.4 + (float(thickness) * 0.32)
        show_virtual = bool(self._overlay_cfg.get("show_virtual_text", True))
        viewport_bottom = float(self.viewport().rect().bottom())

        block = self.firstVisibleBlock()
        top = float(self.blockBoundingGeometry(block).translated(self.contentOffset()).top())
        while block.isValid() and top <= viewport_bottom:
            height = float(self.blockBoundingRect(block).height())
            number = block.blockNumber()
            if block.isVisible() and number < len(lines):
                render = lines[number]
                block_text = block.text()
                column = 0
                severity_for_line = None
                for segment in render.segments:
                    seg_end = column + len(segment.text)
                    if segment.is_diagnostic and segment.text:
                        start_rect = self._cursor_rect_at(block, utf16_units_for_prefix(block_text, column))
                        end_rect = self._cursor_rect_at(block, utf16_units_for_prefix(block_text, seg_end))
                        pen = QPen(self._severity_color(segment.severity))
                        pen.setWidth(thickness)
                        pen.setCapStyle(Qt.RoundCap)
                        painter.setPen(pen)
                        self._draw_wave_segment(
                            painter,
                            float(start_rect.left()),
                            float(end_rect.left()),
                            float(start_rect.bottom() - 1),
                            amplitude=amplitude,
                            step=3.8,
                        )
                        severity_for_line = severity_for_line or segment.severity
                    column = seg_end

                if show_virtual and render.virtual_texts:
                    end_rect = self._cursor_rect_at(block, utf16_units_for_prefix(block_text, len(block_text)))
                    x = float(end_rect.left()) + fm.horizontalAdvance(" ") * _VIRTUAL_TEXT_GAP_CHARS
                    max_w = float(self.viewport().width()) - x - 8.0
                    if max_w > 8:
                        label = _VIRTUAL_TEXT_SEPARATOR.join(render.virtual_texts)
                        text = fm.elidedText(label, Qt.TextElideMode.ElideRight, max_w)
                        color = QColor(str(self._overlay_cfg["virtual_text_color"]))
                        if severity_for_line:
                            color = self._severity_color(severity_for_line)
                            color.setAlpha(190)
                        painter.setPen(color)
                        baseline = float(end_rect.top()) + max(0.0, (end_rect.height() - fm.height()) / 2.0) + fm.ascent()
                        painter.drawText(QPointF(x, baseline), text)
            block = block.next()
            top += height

        painter.end()

    @staticmethod
    def _draw_wave_segment(painter: QPainter, x1: float, x2: float, y: float, *, amplitude: float, step: float) -> None:
        if x2 <= x1:
            return
        path = QPainterPath(QPointF(x1, y))
        x = float(x1)
        up = True
        while x < x2:
            nx = min(x2, x + step)
            mid = (x + nx) / 2.0
            path.quadTo(QPointF(mid, y - amplitude if up else y + amplitude), QPointF(nx, y))
            up = not up
            x = nx
        painter.drawPath(path)


__all__ = ["OverlayEditor"]
