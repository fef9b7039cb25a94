"""Per-file statistics table and archive details of the latest analysis."""

from __future__ import annotations

from typing import Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QTreeWidget,
    QTreeWidgetItem,
    QVBoxLayout,
    QWidget,
)

from core.results import (
    MISSING_PLACEHOLDER,
    AnalysisResult,
    ArchiveInfo,
    format_byte_size,
    format_millis,
    format_timestamp,
)


FILE_COLUMNS = ["File", "Lines", "Characters", "Time (ms)", "Started", "Finished", "Thread", "Status"]
NUMERIC_COLUMNS = (1, 2, 3)


def _text(value) -> str:
    return MISSING_PLACEHOLDER if value is None else str(value)


class ResultsViewWidget(QWidget):
    """Render an AnalysisResult and offer the archive download when one exists."""

    download_requested = Signal(str)

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self._archive_file_name: Optional[str] = None
        self._download_busy = False
        self._init_ui()

    def _init_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.tree = QTreeWidget()
        self.tree.setRootIsDecorated(False)
        self.tree.setHeaderLabels(FILE_COLUMNS)
        self.tree.setColumnWidth(0, 220)
        layout.addWidget(self.tree, 1)

        self.archive_box = QGroupBox("Archive")
        archive_layout = QVBoxLayout(self.archive_box)
        form = QFormLayout()
        self.archive_name_label = QLabel()
        self.archive_size_label = QLabel()
        self.archive_count_label = QLabel()
        self.archive_method_label = QLabel()
        self.archive_time_label = QLabel()
        self.archive_thread_label = QLabel()
        self.archive_start_label = QLabel()
        self.archive_end_label = QLabel()
        form.addRow("Name", self.archive_name_label)
        form.addRow("Size", self.archive_size_label)
        form.addRow("Files", self.archive_count_label)
        form.addRow("Compression", self.archive_method_label)
        form.addRow("Time (ms)", self.archive_time_label)
        form.addRow("Thread", self.archive_thread_label)
        form.addRow("Started", self.archive_start_label)
        form.addRow("Finished", self.archive_end_label)
        archive_layout.addLayout(form)

        button_row = QHBoxLayout()
        button_row.addStretch()
        self.download_button = QPushButton("Download archive")
        self.download_button.clicked.connect(self._emit_download)
        button_row.addWidget(self.download_button)
        archive_layout.addLayout(button_row)
        layout.addWidget(self.archive_box)

        self.show_result(None)

    def show_result(self, result: Optional[AnalysisResult]) -> None:
        """Replace the table and archive section; None clears both."""
        self.tree.clear()
        if result is None:
            self._show_archive(None)
            return
        for stat in result.total_result.file_stats_list:
            item = QTreeWidgetItem(
                [
                    stat.file_name,
                    str(stat.line_count),
                    str(stat.character_count),
                    format_millis(stat.processing_time_millis),
                    format_timestamp(stat.processing_start_time),
                    format_timestamp(stat.processing_end_time),
                    _text(stat.thread_name),
                    "Completed" if stat.processing_completed else "Incomplete",
                ]
            )
            for column in NUMERIC_COLUMNS:
                item.setTextAlignment(column, Qt.AlignRight | Qt.AlignVCenter)
            self.tree.addTopLevelItem(item)
        self._show_archive(result.archive_info if result.archive_file_name else None)

    def set_download_busy(self, busy: bool) -> None:
        """Block further download requests until the running one reports back."""
        self._download_busy = busy
        self.download_button.setText("Downloading..." if busy else "Download archive")
        self._refresh_download_button()

    def _refresh_download_button(self) -> None:
        self.download_button.setEnabled(not self._download_busy and bool(self._archive_file_name))

    def _show_archive(self, archive: Optional[ArchiveInfo]) -> None:
        self._archive_file_name = archive.archive_file_name if archive else None
        self.archive_box.setVisible(archive is not None)
        self._refresh_download_button()
        if archive is None:
            return
        size = archive.archive_file_size_bytes
        self.archive_name_label.setText(archive.archive_file_name)
        self.archive_size_label.setText(format_byte_size(size) if size is not None else MISSING_PLACEHOLDER)
        self.archive_count_label.setText(_text(archive.archived_file_count))
        self.archive_method_label.setText(_text(archive.compression_method))
        self.archive_time_label.setText(format_millis(archive.archive_processing_time_millis))
        self.archive_thread_label.setText(_text(archive.thread_name))
        self.archive_start_label.setText(format_timestamp(archive.archive_start_time))
        self.archive_end_label.setText(format_timestamp(archive.archive_end_time))

    def _emit_download(self) -> None:
        if self._archive_file_name and not self._download_busy:
            self.download_requested.emit(self._archive_file_name)
