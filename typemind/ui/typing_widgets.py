"""Typing test UI: highlighted reference text and stat cards."""

from __future__ import annotations

from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QFrame, QLabel, QVBoxLayout, QWidget

from typemind.ui.colors import HomeColors
from typemind.ui.models import reference_html


class ReferenceTextLabel(QLabel):
    """Word-wrapped reference text with per-character match coloring."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._reference = ""
        self.setTextFormat(Qt.RichText)
        self.setWordWrap(True)
        self.setStyleSheet(
            f"""
            QLabel {{
                background: {HomeColors.CARD_BG};
                border: 1px solid {HomeColors.CARD_BORDER};
                border-radius: 12px;
                padding: 16px;
                font-size: 20px;
            }}
            """
        )

    def set_reference(self, reference: str) -> None:
        self._reference = reference
        self.show_input("")

    def show_input(self, typed: str) -> None:
        self.setText(reference_html(self._reference, typed))


class StatCard(QFrame):
    """Small card with a caption above a large value."""

    def __init__(self, caption: str, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setStyleSheet(
            f"""
            QFrame {{
                background: {HomeColors.CARD_BG};
                border-radius: 12px;
            }}
            """
        )
        layout = QVBoxLayout(self)
        layout.setContentsMargins(16, 10, 16, 10)
        self._caption = QLabel(caption)
        self._caption.setStyleSheet(f"color: {HomeColors.TEXT_MUTED}; font-size: 12px;")
        self._value = QLabel("-")
        self._value.setStyleSheet(f"color: {HomeColors.TEXT_PRIMARY}; font-size: 26px; font-weight: 700;")
        layout.addWidget(self._caption, 0, Qt.AlignCenter)
        layout.addWidget(self._value, 0, Qt.AlignCenter)

    def set_value(self, text: str, color: Optional[str] = None) -> None:
        self._value.setText(text)
        tint = color or HomeColors.TEXT_PRIMARY
        self._value.setStyleSheet(f"color: {tint}; font-size: 26px; font-weight: 700;")
