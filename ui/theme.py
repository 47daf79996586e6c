"""Theme manager: light/dark QSS stylesheets."""

import sys

from PyQt6.QtCore import QSettings
from PyQt6.QtGui import QFont
from PyQt6.QtWidgets import QApplication

from core.utils import APP_NAME, ORGANIZATION_NAME, get_asset_path


class ThemeManager:
    """Manages light/dark theme switching via QSS stylesheets."""

    LIGHT = "light"
    DARK = "dark"

    def __init__(self, app: QApplication):
        self._app = app
        self._settings = QSettings(ORGANIZATION_NAME, APP_NAME)
        self._current_theme = self._settings.value("theme", self.LIGHT)
        if self._current_theme not in (self.LIGHT, self.DARK):
            self._current_theme = self.LIGHT
        self._setup_font()

    def _setup_font(self):
        """Use the platform's native UI font."""
        if sys.platform == "darwin":
            font = QFont(".AppleSystemUIFont", 13)
        elif sys.platform == "win32":
            font = QFont("Segoe UI", 10)
        else:
            font = QFont("Ubuntu", 10)
        font.setHintingPreference(QFont.HintingPreference.PreferNoHinting)
        self._app.setFont(font)

    def apply_theme(self, theme: str = None):
        """Load and apply a QSS theme file."""
        if theme:
            self._current_theme = theme
        self._app.setStyleSheet(self._load_qss(f"{self._current_theme}.qss"))
        self._settings.setValue("theme", self._current_theme)

    def toggle_theme(self) -> str:
        new_theme = self.DARK if self._current_theme == self.LIGHT else self.LIGHT
        self.apply_theme(new_theme)
        return new_theme

    @property
    def current_theme(self) -> str:
        return self._current_theme

    @staticmethod
    def _load_qss(filename: str) -> str:
        qss_path = get_asset_path(f"assets/styles/{filename}")
        try:
            with open(qss_path, "r", encoding="utf-8") as f:
                return f.read()
        except FileNotFoundError:
            return ""
