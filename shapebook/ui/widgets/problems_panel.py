from __future__ import annotations

from typing import Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QAction
from PySide6.QtWidgets import (
    QAbstractItemView,
    QApplication,
    QHBoxLayout,
    QMenu,
    QTableWidget,
    QTableWidgetItem,
    QWidget,
)

from shapebook.analysis.session import OverlaySnapshot
from shapebook.lsp.types import SEVERITY_RANK, Diagnostic


class ProblemsPanel(QWidget):
    problemActivated = Signal(int, int)  # line, character (0-based)

    COLUMNS = ["Severity", "Line", "Col", "Message", "Source"]

    def __init__(self, parent=None):
        super().__init__(parent)
        self._rows: list[Diagnostic] = []

        self.table = QTableWidget(0, len(self.COLUMNS), self)
        self.table.setHorizontalHeaderLabels(self.COLUMNS)
        self.table.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.table.setSelectionMode(QAbstractItemView.SingleSelection)
        self.table.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.table.setSortingEnabled(False)
        self.table.setContextMenuPolicy(Qt.CustomContextMenu)
        self.table.verticalHeader().setVisible(False)

        self.table.doubleClicked.connect(self._activate_current_row)
        self.table.customContextMenuRequested.connect(self._show_context_menu)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self.table)

    def set_snapshot(self, snapshot: OverlaySnapshot):
        self.set_diagnostics(list(snapshot.result.diagnostics))

    def set_diagnostics(self, diagnostics: list[Diagnostic]):
        rows = [diag for diag in diagnostics if isinstance(diag, Diagnostic)]
        rows.sort(
            key=lambda d: (
                -SEVERITY_RANK.get(d.severity, 0),
                d.range.start.line,
                d.range.start.character,
                d.message,
            )
        )
        self._rows = rows
        self._render_rows()

    def _render_rows(self):
        self.table.setRowCount(len(self._rows))
        for row, diag in enumerate(self._rows):
            start = diag.range.start
            values = [
                diag.severity,
                str(start.line + 1),
                str(start.character + 1),
                diag.message,
                diag.source,
            ]
            for col_idx, value in enumerate(values):
                item = QTableWidgetItem(value)
                item.setData(Qt.UserRole, row)
                if col_idx in (1, 2):
                    item.setTextAlignment(Qt.AlignRight | Qt.AlignVCenter)
                self.table.setItem(row, col_idx, item)

        self.table.resizeColumnsToContents()
        self.table.horizontalHeader().setStretchLastSection(True)

    def _diag_for_row(self, row: int) -> Optional[Diagnostic]:
        if row < 0 or row >= len(self._rows):
            return None
        return self._rows[row]

    def _activate_current_row(self):
        diag = self._diag_for_row(self.table.currentRow())
        if diag is None:
            return
        self.problemActivated.emit(diag.range.start.line, diag.range.start.character)

    def _show_context_menu(self, pos):
        diag = self._diag_for_row(self.table.rowAt(pos.y()))
        menu = QMenu(self)

        act_copy_message = QAction("Copy Message", self)
        act_copy_message.setEnabled(diag is not None)
        act_copy_message.triggered.connect(lambda: self._copy_diag_message(diag))
        menu.addAction(act_copy_message)

        act_copy_location = QAction("Copy Line:Col", self)
        act_copy_location.setEnabled(diag is not None)
        act_copy_location.triggered.connect(lambda: self._copy_diag_location(diag))
        menu.addAction(act_copy_location)

        menu.exec(self.table.viewport().mapToGlobal(pos))

    def _copy_diag_message(self, diag: Optional[Diagnostic]):
        if diag is None or not diag.message:
            return
        QApplication.clipboard().setText(diag.message)

    def _copy_diag_location(self, diag: Optional[Diagnostic]):
        if diag is None:
            return
        start = diag.range.start
        QApplication.clipboard().setText(f"{start.line + 1}:{start.character + 1}")
