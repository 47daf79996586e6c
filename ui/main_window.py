"""Main application window hosting the single classification screen."""

from PyQt6.QtGui import QAction
from PyQt6.QtWidgets import QApplication, QMainWindow

from core.classifier import shutdown_classifier
from core.session import ClassificationSession
from core.utils import ClassifierConfig
from i18n import t
from ui.dialogs.about_dialog import AboutDialog
from ui.skin_widget import SkinWidget
from ui.theme import ThemeManager


class MainWindow(QMainWindow):
    """Single-screen window: the skin lesion classifier plus a menu bar."""

    def __init__(self, theme_manager: ThemeManager, config: ClassifierConfig):
        super().__init__()
        self._theme_manager = theme_manager
        self._config = config
        self._session = ClassificationSession(target_size=config.target_size)
        self.setWindowTitle(t("app.title"))
        self.setMinimumSize(640, 620)
        self.resize(760, 760)
        self._setup_ui()
        self._setup_menu_bar()

    def _setup_ui(self):
        self._skin_widget = SkinWidget(self._session)
        self.setCentralWidget(self._skin_widget)

    def _setup_menu_bar(self):
        menu_bar = self.menuBar()

        file_menu = menu_bar.addMenu(t("menu.file"))
        open_action = QAction(t("menu.open_image"), self)
        open_action.setShortcut("Ctrl+O")
        open_action.triggered.connect(self._skin_widget.open_image_dialog)
        file_menu.addAction(open_action)

        file_menu.addSeparator()
        quit_action = QAction(t("menu.quit"), self)
        quit_action.setShortcut("Ctrl+Q")
        quit_action.triggered.connect(self.close)
        file_menu.addAction(quit_action)

        view_menu = menu_bar.addMenu(t("menu.view"))
        toggle_theme = QAction(t("menu.toggle_dark_mode"), self)
        toggle_theme.setShortcut("Ctrl+D")
        toggle_theme.triggered.connect(self._theme_manager.toggle_theme)
        view_menu.addAction(toggle_theme)

        help_menu = menu_bar.addMenu(t("menu.help"))
        about_action = QAction(t("menu.about"), self)
        about_action.triggered.connect(self._show_about)
        help_menu.addAction(about_action)

    def _show_about(self):
        AboutDialog(self._config, parent=self).exec()

    def closeEvent(self, event):
        """Stop workers and release the model before closing."""
        self._skin_widget.cleanup()
        shutdown_classifier()
        QApplication.processEvents()
        event.accept()
