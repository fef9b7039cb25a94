"""Logging setup for the file analyzer client.

Every run writes to its own ``*_recent.log`` file. At the next start that file
loses its suffix and joins the archived logs, of which only the newest
``MAX_ARCHIVED_LOGS`` are kept.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional


LOGGER_NAMESPACE = "file-analyzer"
LOG_DIR_NAME = "logs"
LOG_FILE_BASENAME = "file-analyzer-client"
RECENT_SUFFIX = "_recent"
MAX_ARCHIVED_LOGS = 20
LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"


def setup_logging(log_directory: Path | str | None = None, level: int = logging.INFO) -> logging.Logger:
    """Send the ``file-analyzer`` logger tree to this run's log file and the console."""
    log_dir = Path(log_directory).expanduser() if log_directory else Path(".") / LOG_DIR_NAME
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = _prepare_log_file(log_dir)

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    handlers = [logging.FileHandler(log_path, encoding="utf-8"), logging.StreamHandler()]

    app_logger = logging.getLogger(LOGGER_NAMESPACE)
    app_logger.setLevel(level)
    for handler in list(app_logger.handlers):
        handler.close()
    app_logger.handlers.clear()
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(level)
        app_logger.addHandler(handler)
    app_logger.propagate = False

    app_logger.info("Logging to %s", log_path)
    return app_logger


def _prepare_log_file(log_dir: Path) -> Path:
    """Archive the previous run's log, prune old archives, and name this run's file."""
    for recent_file in log_dir.glob(f"*{RECENT_SUFFIX}.log"):
        archived = recent_file.with_name(recent_file.name.replace(RECENT_SUFFIX, ""))
        target = archived
        counter = 1
        while target.exists():
            target = archived.with_name(f"{archived.stem}_{counter}.log")
            counter += 1
        recent_file.rename(target)

    archives = sorted(log_dir.glob(f"{LOG_FILE_BASENAME}_*.log"), key=lambda path: path.stat().st_mtime)
    for stale in archives[:-MAX_ARCHIVED_LOGS]:
        stale.unlink()

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return log_dir / f"{LOG_FILE_BASENAME}_{timestamp}{RECENT_SUFFIX}.log"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return ``file-analyzer.<name>``, or the application logger itself."""
    if name:
        return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")
    return logging.getLogger(LOGGER_NAMESPACE)
