"""Reusable PySide widgets for annotated source views."""

from .overlay_editor import HoverPopup, OverlayEditor

__all__ = ["HoverPopup", "OverlayEditor"]
