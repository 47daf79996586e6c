"""Skin Lesion Analyzer: on-device skin lesion photo classification.

Entry point for the desktop application.
"""

import logging
import os
import sys

from PyQt6.QtWidgets import QApplication

import i18n
from core.utils import APP_NAME, ORGANIZATION_NAME, load_classifier_config
from ui.theme import ThemeManager

logger = logging.getLogger(__name__)


def main():
    """Application entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    # Handle PyInstaller frozen app
    if getattr(sys, "frozen", False):
        os.chdir(os.path.dirname(sys.executable))

    app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setApplicationVersion("1.0.0")
    app.setOrganizationName(ORGANIZATION_NAME)

    i18n.init()

    theme_manager = ThemeManager(app)
    theme_manager.apply_theme()

    config = load_classifier_config()
    logger.info(
        "Starting %s (model=%s, target_size=%d, device=%s)",
        APP_NAME, config.model_name, config.target_size, config.device,
    )

    # Weights load lazily on the first request, inside the worker thread.
    from core.classifier import get_classifier
    from ui.main_window import MainWindow

    get_classifier(config)

    window = MainWindow(theme_manager, config)
    window.show()

    exit_code = app.exec()
    logger.info("%s shutdown complete", APP_NAME)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
