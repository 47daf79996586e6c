"""Tests for ui.theme module."""

from unittest.mock import patch

from ui.theme import ThemeManager


class FakeSettings:
    values = {}

    def __init__(self, *args):
        pass

    def value(self, key, default=None):
        return self.values.get(key, default)

    def setValue(self, key, value):
        self.values[key] = value


def make_manager(qt_app, stored):
    FakeSettings.values = dict(stored)
    with patch("ui.theme.QSettings", FakeSettings):
        return ThemeManager(qt_app)


class TestThemeManager:
    def test_default_is_light(self, qt_app):
        assert make_manager(qt_app, {}).current_theme == ThemeManager.LIGHT

    def test_saved_theme_restored(self, qt_app):
        assert make_manager(qt_app, {"theme": "dark"}).current_theme == ThemeManager.DARK

    def test_unknown_saved_theme_falls_back_to_light(self, qt_app):
        assert make_manager(qt_app, {"theme": "neon"}).current_theme == ThemeManager.LIGHT

    def test_toggle_applies_and_saves(self, qt_app):
        manager = make_manager(qt_app, {})
        assert manager.toggle_theme() == ThemeManager.DARK
        assert FakeSettings.values["theme"] == ThemeManager.DARK
        assert qt_app.styleSheet() != ""
