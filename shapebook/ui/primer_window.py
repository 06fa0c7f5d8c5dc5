"""Main window: a prefilled, live-analyzed code box with its problem list."""

from __future__ import annotations

import logging

from PySide6.QtCore import Qt
from PySide6.QtGui import QColor, QFont, QPalette, QTextCursor
from PySide6.QtWidgets import QLabel, QMainWindow, QSplitter, QVBoxLayout, QWidget

from ShapePyside.widgets import OverlayEditor
from shapebook.analysis.session import OverlaySession, OverlaySnapshot
from shapebook.lsp.types import Position, utf16_units_for_prefix
from shapebook.settings_store import JsonSettingsStore
from shapebook.ui.widgets.problems_panel import ProblemsPanel

logger = logging.getLogger(__name__)

INITIAL_CODE = '''
import jaxtyping
import torch

def proper_multiply_bad_annotation_should_produce_diagnostics(x: jaxtyping.Float[torch.Tensor, "B X R"], y: jaxtyping.Float[torch.Tensor, "R S"]) -> jaxtyping.Float[torch.Tensor, "B S"]:
    z: jaxtyping.Float[torch.Tensor, "B X R"] = x @ y
    return z
'''


class PrimerWindow(QMainWindow):
    APP_NAME = "The shapels book"
    HEADING = "shapels: a primer"

    def __init__(self, session: OverlaySession, settings: JsonSettingsStore, parent=None):
        super().__init__(parent)
        self._settings = settings
        self.setWindowTitle(self.APP_NAME)
        self.resize(1100, 720)

        heading = QLabel(self.HEADING, self)
        heading_font = QFont(heading.font())
        heading_font.setPointSize(heading_font.pointSize() + 8)
        heading_font.setBold(True)
        heading.setFont(heading_font)

        self.editor = OverlayEditor(self, session=session)
        self.problems = ProblemsPanel(self)

        splitter = QSplitter(Qt.Vertical, self)
        splitter.addWidget(self.editor)
        splitter.addWidget(self.problems)
        splitter.setStretchFactor(0, 4)
        splitter.setStretchFactor(1, 1)

        central = QWidget(self)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(8)
        layout.addWidget(heading)
        layout.addWidget(splitter, 1)
        self.setCentralWidget(central)

        self.editor.statusMessage.connect(self.statusBar().showMessage)
        self.editor.snapshotChanged.connect(self._on_snapshot_changed)
        self.problems.problemActivated.connect(self._go_to_position)

        self.apply_settings()
        self.editor.setPlainText(INITIAL_CODE)
        self.editor.refresh_analysis()

    def apply_settings(self) -> None:
        settings = self._settings
        self.editor.set_editor_font_preferences(
            family=str(settings.get("editor.font_family") or "") or None,
            point_size=settings.get_int("editor.font_size", 11, minimum=6, maximum=72),
        )
        self.editor.set_analysis_debounce_ms(settings.get_int("analyzer.debounce_ms", 150, minimum=0))
        overlay_cfg = settings.get("overlay", {})
        self.editor.update_overlay_visual_settings(overlay_cfg if isinstance(overlay_cfg, dict) else {})
        hover_cfg = settings.get("hover", {})
        self.editor.update_hover_settings(hover_cfg if isinstance(hover_cfg, dict) else {})

        palette = self.editor.palette()
        background = QColor(str(settings.get("editor.background_color") or "#1E1E1E"))
        foreground = QColor(str(settings.get("editor.foreground_color") or "#D4D4D4"))
        if background.isValid():
            palette.setColor(QPalette.Base, background)
        if foreground.isValid():
            palette.setColor(QPalette.Text, foreground)
        self.editor.setPalette(palette)

    def _on_snapshot_changed(self, snapshot: OverlaySnapshot) -> None:
        self.problems.set_snapshot(snapshot)

    def _go_to_position(self, line: int, character: int) -> None:
        snapshot = self.editor.session.snapshot
        offset = snapshot.index.position_to_offset(Position(line=line, character=character))
        if offset is None:
            logger.debug("Diagnostic position %d:%d no longer in the text", line, character)
            return
        cursor = self.editor.textCursor()
        cursor.setPosition(utf16_units_for_prefix(snapshot.text, offset), QTextCursor.MoveAnchor)
        self.editor.setTextCursor(cursor)
        self.editor.setFocus()
