"""Entry point of the file analyzer desktop client."""

from __future__ import annotations

import sys

from PySide6.QtWidgets import QApplication

from services.logger import get_logger, setup_logging
from ui.main_window import MainWindow


APPLICATION_NAME = "File Analyzer"


def run() -> None:
    """Start logging, open the main window, and run the Qt event loop until exit."""
    app = QApplication(sys.argv)
    app.setApplicationName(APPLICATION_NAME)
    setup_logging()
    get_logger().info("%s starting", APPLICATION_NAME)

    window = MainWindow(app)
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    run()
