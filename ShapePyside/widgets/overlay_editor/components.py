from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QLabel, QWidget


class HoverPopup(QLabel):
    """Floating hover panel drawn inside the editor viewport."""

    MAX_WIDTH = 520

    def __init__(self, parent: QWidget):
        super().__init__(parent)
        self.setObjectName("overlayHoverPopup")
        self.setAttribute(Qt.WA_TransparentForMouseEvents, True)
        self.setTextFormat(Qt.TextFormat.PlainText)
        self.setWordWrap(True)
        self.setMaximumWidth(self.MAX_WIDTH)
        self.set_colors("#2F2F2F", "#E8E8E8")
        self.hide()

    def set_colors(self, background: str, foreground: str):
        self.setStyleSheet(
            f"""
            QLabel#overlayHoverPopup {{
                background-color: {background};
                color: {foreground};
                border: 1px solid #4a4a4a;
                border-radius: 4px;
                padding: 6px;
            }}
            """
        )

    def show_text_at(self, text: str, x: float, y: float):
        self.setText(text)
        self.adjustSize()
        self.move(int(x), int(y))
        self.show()
        self.raise_()


__all__ = ["HoverPopup"]
