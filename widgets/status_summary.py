"""Summary widget showing the aggregate figures of an analysis."""

from __future__ import annotations

from typing import Optional

from PySide6.QtWidgets import QGridLayout, QLabel, QWidget

from core.results import TotalResult, format_millis


class StatusSummaryWidget(QWidget):
    """Compact overview of processed files, lines, characters, and time."""

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self._init_ui()

    def _init_ui(self) -> None:
        layout = QGridLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setHorizontalSpacing(24)

        self.files_label = QLabel()
        self.lines_label = QLabel()
        self.characters_label = QLabel()
        self.time_label = QLabel()

        layout.addWidget(self.files_label, 0, 0)
        layout.addWidget(self.lines_label, 0, 1)
        layout.addWidget(self.characters_label, 0, 2)
        layout.addWidget(self.time_label, 0, 3)
        self.update_totals(None)

    def update_totals(self, total: Optional[TotalResult]) -> None:
        """Show ``total`` or reset every figure when there is no result."""
        if total is None:
            self.files_label.setText("Files: -")
            self.lines_label.setText("Lines: -")
            self.characters_label.setText("Characters: -")
            self.time_label.setText("Time: -")
            return
        self.files_label.setText(f"Files: {total.total_processed_files}")
        self.lines_label.setText(f"Lines: {total.total_line_count}")
        self.characters_label.setText(f"Characters: {total.total_character_count}")
        self.time_label.setText(f"Time: {format_millis(total.total_processing_time_millis)} ms")
