"""Stylesheets bundled with the client."""

from pathlib import Path

from PySide6.QtWidgets import QApplication

from services.logger import get_logger


logger = get_logger("theme")

THEME_DIR = Path(__file__).resolve().parent


def apply_theme(app: QApplication, theme_name: str = "dark") -> bool:
    """Load ``<theme_name>.qss`` into ``app``; the default Qt look stays when it is missing."""
    theme_path = THEME_DIR / f"{theme_name}.qss"
    if not theme_path.is_file():
        logger.warning("Theme %s not found, using the platform style", theme_name)
        return False
    app.setStyleSheet(theme_path.read_text(encoding="utf-8"))
    return True
