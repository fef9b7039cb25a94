"""Selection panel: upload mode toggle plus the list of chosen files."""

from __future__ import annotations

from typing import Iterable

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QButtonGroup,
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QTreeWidget,
    QTreeWidgetItem,
    QVBoxLayout,
    QWidget,
)

from core.models import ACCEPTED_EXTENSIONS, SelectedFile, UploadMode
from core.results import format_byte_size


FILE_DIALOG_FILTER = "Supported files ({})".format(" ".join(f"*{ext}" for ext in ACCEPTED_EXTENSIONS))


class _FileTreeWidget(QTreeWidget):
    """Tree widget that accepts files dropped from the OS file manager."""

    files_dropped = Signal(list)

    def __init__(self) -> None:
        super().__init__()
        self.setAcceptDrops(True)
        self.setRootIsDecorated(False)
        self.setHeaderLabels(["File", "Size"])
        self.setColumnWidth(0, 280)

    def dragEnterEvent(self, event):
        """Accept drag operations that contain URLs representing files."""
        if event.mimeData().hasUrls():
            event.acceptProposedAction()
        else:
            super().dragEnterEvent(event)

    def dragMoveEvent(self, event):
        if event.mimeData().hasUrls():
            event.acceptProposedAction()
        else:
            super().dragMoveEvent(event)

    def dropEvent(self, event):
        """Emit the local paths of dropped URLs."""
        if event.mimeData().hasUrls():
            paths = [url.toLocalFile() for url in event.mimeData().urls() if url.isLocalFile()]
            self.files_dropped.emit(paths)
            event.acceptProposedAction()
        else:
            super().dropEvent(event)


class FileQueueWidget(QWidget):
    """Display the current selection and collect new file choices.

    Both the file dialog and drag and drop report through ``files_chosen`` so
    the owner handles a single entry point regardless of where files came from.
    """

    files_chosen = Signal(list)
    clear_requested = Signal()
    mode_changed = Signal(str)

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self._mode = UploadMode.SINGLE
        self._init_ui()

    def _init_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        mode_row = QHBoxLayout()
        self.single_button = QPushButton("Single file")
        self.multiple_button = QPushButton("Multiple files")
        self._mode_group = QButtonGroup(self)
        self._mode_group.setExclusive(True)
        for button, mode in ((self.single_button, UploadMode.SINGLE), (self.multiple_button, UploadMode.MULTIPLE)):
            button.setCheckable(True)
            button.setProperty("uploadMode", mode.value)
            self._mode_group.addButton(button)
            mode_row.addWidget(button)
        self.single_button.setChecked(True)
        self._mode_group.buttonClicked.connect(self._on_mode_button_clicked)
        mode_row.addStretch()
        layout.addLayout(mode_row)

        button_row = QHBoxLayout()
        self.add_button = QPushButton("Add files")
        self.add_button.clicked.connect(self._browse_files)
        button_row.addWidget(self.add_button)

        self.clear_button = QPushButton("Clear")
        self.clear_button.clicked.connect(self.clear_requested)
        button_row.addWidget(self.clear_button)
        button_row.addStretch()
        layout.addLayout(button_row)

        self.tree = _FileTreeWidget()
        self.tree.files_dropped.connect(self.files_chosen)
        layout.addWidget(self.tree)

        self.total_label = QLabel()
        layout.addWidget(self.total_label)
        self.set_files([])

    def set_mode(self, mode: UploadMode) -> None:
        """Reflect ``mode`` in the toggle without emitting ``mode_changed``."""
        self._mode = UploadMode(mode)
        target = self.single_button if self._mode == UploadMode.SINGLE else self.multiple_button
        target.setChecked(True)

    def set_files(self, files: Iterable[SelectedFile]) -> None:
        """Replace the displayed rows with ``files`` in selection order."""
        self.tree.clear()
        total = 0
        count = 0
        for selected in files:
            item = QTreeWidgetItem([selected.name, format_byte_size(selected.size_bytes)])
            item.setTextAlignment(1, Qt.AlignRight | Qt.AlignVCenter)
            self.tree.addTopLevelItem(item)
            total += selected.size_bytes
            count += 1
        self.total_label.setText(f"{count} file(s), {format_byte_size(total)}")
        self.clear_button.setEnabled(count > 0)

    def _browse_files(self) -> None:
        """Open a chooser; only the multiple mode allows picking several files."""
        if self._mode == UploadMode.MULTIPLE:
            paths, _ = QFileDialog.getOpenFileNames(self, "Select files", "", FILE_DIALOG_FILTER)
        else:
            path, _ = QFileDialog.getOpenFileName(self, "Select a file", "", FILE_DIALOG_FILTER)
            paths = [path] if path else []
        if paths:
            self.files_chosen.emit(list(paths))

    def _on_mode_button_clicked(self, button) -> None:
        mode = UploadMode(button.property("uploadMode"))
        if mode != self._mode:
            self._mode = mode
            self.mode_changed.emit(mode.value)
