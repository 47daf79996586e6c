"""About dialog with the model in use and the educational-use notice."""

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QDialog,
    QLabel,
    QPushButton,
    QVBoxLayout,
)

from core.model_manager import get_model_manager
from core.utils import ClassifierConfig
from i18n import t

APP_VERSION = "1.0.0"


class AboutDialog(QDialog):
    """About Skin Lesion Analyzer."""

    def __init__(self, config: ClassifierConfig, parent=None):
        super().__init__(parent)
        self._config = config
        self._setup_ui()

    def _setup_ui(self):
        self.setWindowTitle(t("about.title"))
        self.setFixedSize(420, 320)

        layout = QVBoxLayout(self)
        layout.setSpacing(12)
        layout.setAlignment(Qt.AlignmentFlag.AlignCenter)

        title = QLabel(t("app.title"))
        title.setProperty("class", "sectionTitle")
        title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        title.setStyleSheet("font-size: 20px;")

        version = QLabel(t("about.version", version=APP_VERSION))
        version.setAlignment(Qt.AlignmentFlag.AlignCenter)
        version.setStyleSheet("color: #888;")

        manager = get_model_manager()
        info = manager.get_model_info(self._config.model_name)
        if info is not None:
            model_text = t(
                "about.model",
                model=info.display_name,
                size=self._config.target_size,
                weights=manager.get_model_size_formatted(info.name),
            )
            if not manager.is_model_available(info.name):
                model_text += "\n" + t("about.model_missing")
        else:
            model_text = t("about.model_unknown", model=self._config.model_name)

        model_label = QLabel(model_text)
        model_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        model_label.setWordWrap(True)

        notice = QLabel(t("disclaimer.banner"))
        notice.setAlignment(Qt.AlignmentFlag.AlignCenter)
        notice.setStyleSheet("font-style: italic; color: #888;")
        notice.setWordWrap(True)

        close_btn = QPushButton(t("about.close"))
        close_btn.setProperty("class", "secondaryButton")
        close_btn.clicked.connect(self.accept)

        layout.addWidget(title)
        layout.addWidget(version)
        layout.addWidget(model_label)
        layout.addWidget(notice)
        layout.addStretch()
        layout.addWidget(close_btn, alignment=Qt.AlignmentFlag.AlignCenter)
