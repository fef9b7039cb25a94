"""Widget that surfaces runtime messages and allows clearing them."""

from __future__ import annotations

from datetime import datetime

from PySide6.QtGui import QTextCursor
from PySide6.QtWidgets import QPlainTextEdit, QPushButton, QVBoxLayout, QWidget


class LogViewWidget(QWidget):
    """Timestamped activity log with a clear control."""

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self._init_ui()

    def _init_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.log_area = QPlainTextEdit()
        self.log_area.setReadOnly(True)
        self.log_area.setMinimumHeight(120)
        layout.addWidget(self.log_area)

        self.clear_button = QPushButton("Clear log")
        self.clear_button.clicked.connect(self.log_area.clear)
        layout.addWidget(self.clear_button)

    def append(self, message: str) -> None:
        """Append a line and keep the view scrolled to the bottom."""
        self.log_area.appendPlainText(f"[{datetime.now():%H:%M:%S}] {message}")
        cursor = self.log_area.textCursor()
        cursor.movePosition(QTextCursor.End)
        self.log_area.setTextCursor(cursor)
