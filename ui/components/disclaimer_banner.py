"""Educational-use disclaimer banner shown above the classifier."""

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import QHBoxLayout, QLabel, QWidget

from i18n import t


class DisclaimerBanner(QWidget):
    """Amber warning that the app is not a diagnostic tool. Cannot be dismissed."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setObjectName("disclaimerBanner")
        self._setup_ui()

    def _setup_ui(self):
        layout = QHBoxLayout(self)
        layout.setContentsMargins(16, 12, 16, 12)
        layout.setSpacing(10)

        icon_label = QLabel("⚠")
        icon_label.setProperty("class", "disclaimerIcon")
        icon_label.setFixedWidth(24)
        icon_label.setAlignment(Qt.AlignmentFlag.AlignTop)

        text_label = QLabel(t("disclaimer.banner"))
        text_label.setProperty("class", "disclaimerText")
        text_label.setWordWrap(True)

        layout.addWidget(icon_label)
        layout.addWidget(text_label, 1)
