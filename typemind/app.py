"""Application entry point and setup for the Typemind typing test."""

import logging
import sys

from PySide6.QtGui import QFont
from PySide6.QtWidgets import QApplication

from typemind.core.history import SessionStore, resolve_identity
from typemind.core.prompts import PromptRepository
from typemind.ui.main_window import MainWindow


def configure_logging() -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def run() -> None:
    """Initialize the application, load prompts, and start the main window."""
    configure_logging()
    app = QApplication(sys.argv)
    app.setApplicationName("Typemind")
    app.setApplicationDisplayName("Typemind")

    app_font = QFont()
    app_font.setPointSize(11)
    app.setFont(app_font)

    prompts = PromptRepository()
    store = SessionStore()
    identity = resolve_identity()
    logging.info(f"Storing sessions for {identity} in {store.file_path}")

    window = MainWindow(prompts=prompts, store=store, identity=identity)
    window.resize(1000, 720)
    window.show()

    sys.exit(app.exec())
