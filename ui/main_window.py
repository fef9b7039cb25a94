"""Main Qt window and UI workflow bindings for the file analyzer client."""

from __future__ import annotations

from pathlib import Path
from typing import List

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QFileDialog,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QSpinBox,
    QSplitter,
    QStatusBar,
    QVBoxLayout,
    QWidget,
)

from core.config import AppConfig, ConfigManager, ConnectionOptions
from core.models import SelectedFile, SelectionState, SessionStatus, UploadMode, ValidationError
from core.selection import FileSelectionManager
from core.session import JobOutcome, SessionState, UploadSession, bind_selection
from services.api_client import FileAnalyzerApiClient
from services.downloader import ArchiveDownloader, DirectorySaver
from services.logger import get_logger
from services.task_manager import TaskManager
from ui.theme import apply_theme
from widgets.file_queue import FileQueueWidget
from widgets.log_view import LogViewWidget
from widgets.results_view import ResultsViewWidget
from widgets.status_summary import StatusSummaryWidget


logger = get_logger("ui")


class MainWindow(QMainWindow):
    """Main application window."""

    def __init__(self, app) -> None:
        """Compose the core services from saved configuration and build the UI."""
        super().__init__()
        apply_theme(app)
        self.setWindowTitle("File Analyzer")
        self.resize(1100, 720)

        self.config_manager = ConfigManager()
        self.config = self.config_manager.load()
        self.task_manager = TaskManager(self)
        self.api_client = FileAnalyzerApiClient(self.config.options, self.config.api_token)
        self.selection = FileSelectionManager(self.config.upload_mode)
        self.session = UploadSession(self.api_client, self.task_manager.dispatch)
        bind_selection(self.selection, self.session)
        self.downloader = ArchiveDownloader(self.api_client, DirectorySaver(self.config.output_dir or "."))

        self._init_ui()
        self._load_config_to_ui()
        self._connect_signals()
        self._on_selection_changed(self.selection.state)
        self._on_session_changed(self.session.state)

    def _init_ui(self) -> None:
        """Construct the split layout: selection on the left, results on the right."""
        central = QWidget()
        central_layout = QVBoxLayout(central)
        central_layout.setContentsMargins(16, 12, 16, 12)

        splitter = QSplitter(Qt.Horizontal)
        splitter.setChildrenCollapsible(False)
        central_layout.addWidget(splitter, 1)

        self.file_queue = FileQueueWidget()
        self.status_summary = StatusSummaryWidget()
        self.results_view = ResultsViewWidget()
        self.log_view = LogViewWidget()
        self.session_label = QLabel()
        self.session_label.setObjectName("sessionLabel")
        self.session_label.setWordWrap(True)

        left = QWidget()
        left_layout = QVBoxLayout(left)
        left_layout.setContentsMargins(0, 0, 0, 0)
        left_layout.addWidget(self._create_section_label("Files"))
        left_layout.addWidget(self.file_queue, 1)
        left_layout.addWidget(self._create_section_label("Settings"))
        left_layout.addWidget(self._create_settings_panel())
        splitter.addWidget(left)

        right_splitter = QSplitter(Qt.Vertical)
        right_splitter.setChildrenCollapsible(False)
        results_container = QWidget()
        results_layout = QVBoxLayout(results_container)
        results_layout.setContentsMargins(0, 0, 0, 0)
        results_layout.addWidget(self._create_section_label("Results"))
        results_layout.addWidget(self.session_label)
        results_layout.addWidget(self.status_summary)
        results_layout.addWidget(self.results_view, 1)
        right_splitter.addWidget(results_container)
        right_splitter.addWidget(self._wrap_section("Log", self.log_view))
        right_splitter.setStretchFactor(0, 3)
        right_splitter.setStretchFactor(1, 1)
        splitter.addWidget(right_splitter)

        splitter.setStretchFactor(0, 2)
        splitter.setStretchFactor(1, 5)

        self.setCentralWidget(central)
        self.setStatusBar(QStatusBar())

    def _create_section_label(self, text: str) -> QLabel:
        label = QLabel(text)
        label.setAlignment(Qt.AlignLeft | Qt.AlignVCenter)
        label.setStyleSheet("font-weight: 600; font-size: 14px; margin-bottom: 4px;")
        return label

    def _wrap_section(self, title: str, widget: QWidget) -> QWidget:
        container = QWidget()
        layout = QVBoxLayout(container)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(6)
        layout.addWidget(self._create_section_label(title))
        layout.addWidget(widget)
        return container

    def _create_settings_panel(self) -> QWidget:
        """Build the connection form and the analyze button."""
        container = QWidget()
        container_layout = QVBoxLayout(container)
        container_layout.setContentsMargins(0, 0, 0, 0)
        container_layout.setSpacing(8)

        form = QFormLayout()
        form.setFieldGrowthPolicy(QFormLayout.ExpandingFieldsGrow)

        self.base_url_input = QLineEdit()
        form.addRow("Service URL", self.base_url_input)

        self.api_token_input = QLineEdit()
        self.api_token_input.setEchoMode(QLineEdit.Password)
        form.addRow("Access token", self.api_token_input)

        self.timeout_spin = QSpinBox()
        self.timeout_spin.setRange(1, 600)
        self.timeout_spin.setSuffix(" s")
        form.addRow("Timeout", self.timeout_spin)

        self.output_dir_input = QLineEdit()
        browse_button = QPushButton("Browse")
        browse_button.clicked.connect(self._select_output_dir)
        output_layout = QHBoxLayout()
        output_layout.setContentsMargins(0, 0, 0, 0)
        output_layout.addWidget(self.output_dir_input)
        output_layout.addWidget(browse_button)
        form.addRow("Download folder", output_layout)

        container_layout.addLayout(form)

        button_row = QHBoxLayout()
        button_row.addStretch()
        self.analyze_button = QPushButton("Analyze")
        self.analyze_button.clicked.connect(self._start_analysis)
        button_row.addWidget(self.analyze_button)
        container_layout.addLayout(button_row)
        return container

    def _connect_signals(self) -> None:
        """Wire widget events to the selection manager and session."""
        self.file_queue.files_chosen.connect(self.on_files_chosen)
        self.file_queue.clear_requested.connect(self.selection.clear)
        self.file_queue.mode_changed.connect(self._on_mode_changed)
        self.results_view.download_requested.connect(self._download_archive)
        self.selection.subscribe(self._on_selection_changed)
        self.session.subscribe(self._on_session_changed)

    def _load_config_to_ui(self) -> None:
        self.base_url_input.setText(self.config.options.base_url)
        self.api_token_input.setText(self.config.api_token)
        self.timeout_spin.setValue(self.config.options.timeout)
        self.output_dir_input.setText(self.config.output_dir)
        self.file_queue.set_mode(self.selection.mode)

    def _collect_config(self) -> AppConfig:
        return AppConfig(
            api_token=self.api_token_input.text().strip(),
            output_dir=self.output_dir_input.text().strip(),
            upload_mode=self.selection.mode,
            options=ConnectionOptions(
                base_url=self.base_url_input.text(),
                timeout=self.timeout_spin.value(),
                download_retries=self.config.options.download_retries,
            ),
        )

    def _persist_config(self) -> None:
        """Save settings and rebuild the API client when connection details changed."""
        config = self._collect_config()
        connection_changed = (
            config.options != self.config.options or config.api_token != self.config.api_token
        )
        self.config = config
        self.config_manager.save(config)
        if connection_changed:
            logger.info("Connection settings changed, using %s", config.options.base_url)
            self.api_client = FileAnalyzerApiClient(config.options, config.api_token)
            self.session.set_api_client(self.api_client)
            self.downloader.set_api_client(self.api_client)

    # Slots
    def on_files_chosen(self, paths: List[str]) -> None:
        """Single entry point for files picked in the dialog or dropped on the list."""
        chosen: List[SelectedFile] = []
        for raw_path in paths:
            try:
                chosen.append(SelectedFile.from_path(raw_path))
            except OSError as exc:
                logger.warning("Skipping unreadable file %s: %s", raw_path, exc)
                self.log_view.append(f"Skipped {Path(raw_path).name}: {exc.strerror or exc}")
        if chosen:
            self.selection.select_files(chosen)

    def _on_mode_changed(self, mode: str) -> None:
        self.selection.set_mode(UploadMode(mode))
        self.log_view.append(f"Upload mode: {mode}")

    def _on_selection_changed(self, state: SelectionState) -> None:
        """Refresh the file list and the analyze button."""
        self.file_queue.set_files(state.files)
        self.analyze_button.setEnabled(not state.is_empty)

    def _start_analysis(self) -> None:
        self._persist_config()
        try:
            self.session.start(self.selection.state)
        except ValidationError as exc:
            QMessageBox.warning(self, "No files", f"Please select at least one file ({exc}).")

    def _on_session_changed(self, state: SessionState) -> None:
        """Render the session snapshot: progress, result, or error."""
        if state.status == SessionStatus.UPLOADING:
            self.session_label.setText("Analyzing...")
            self.statusBar().showMessage(f"Analysis {state.attempt_id} started")
            self.log_view.append(f"Analysis {state.attempt_id} started.")
            self.analyze_button.setText("Analyze again")
        elif state.status == SessionStatus.SUCCEEDED:
            self.session_label.setText("Analysis completed.")
            self.statusBar().showMessage("Analysis completed", 5000)
            self.log_view.append(
                f"Analysis {state.attempt_id} completed: "
                f"{state.result.total_result.total_processed_files} file(s)."
            )
            self.analyze_button.setText("Analyze")
        elif state.status == SessionStatus.FAILED:
            self.session_label.setText(f"Analysis failed: {state.error_message}")
            self.statusBar().showMessage("Analysis failed", 8000)
            self.log_view.append(f"Analysis {state.attempt_id} failed: {state.error_message}")
            self.analyze_button.setText("Analyze")
        else:
            self.session_label.clear()
            self.analyze_button.setText("Analyze")

        self.status_summary.update_totals(state.result.total_result if state.result else None)
        self.results_view.show_result(state.result)

    def _download_archive(self, archive_file_name: str) -> None:
        """Fetch the archive in the background and store it in the download folder."""
        output_dir = self.output_dir_input.text().strip()
        if not output_dir or not Path(output_dir).expanduser().is_dir():
            QMessageBox.warning(self, "Download folder", "Choose an existing download folder first.")
            return
        self._persist_config()
        save = DirectorySaver(output_dir)
        self.results_view.set_download_busy(True)
        self.log_view.append(f"Downloading {archive_file_name}...")
        self.task_manager.dispatch(
            lambda: self.downloader.fetch_and_save(archive_file_name, save),
            self._on_download_finished,
        )

    def _on_download_finished(self, outcome: JobOutcome) -> None:
        self.results_view.set_download_busy(False)
        if outcome.ok:
            self.log_view.append(f"Archive saved to {outcome.value}")
            self.statusBar().showMessage(f"Saved {outcome.value}", 8000)
            return
        self.log_view.append(f"Download failed: {outcome.error}")
        QMessageBox.critical(self, "Download failed", str(outcome.error))

    def _select_output_dir(self) -> None:
        directory = QFileDialog.getExistingDirectory(self, "Choose download folder")
        if directory:
            self.output_dir_input.setText(directory)

    def closeEvent(self, event) -> None:
        """Persist settings and let outstanding requests finish before exiting."""
        if self.task_manager.has_active_jobs():
            reply = QMessageBox.question(
                self,
                "Request in progress",
                "A request is still running. Quit anyway?",
                QMessageBox.Yes | QMessageBox.No,
                QMessageBox.No,
            )
            if reply != QMessageBox.Yes:
                event.ignore()
                return
        self._persist_config()
        self.task_manager.shutdown()
        super().closeEvent(event)
