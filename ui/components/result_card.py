"""Result card: classification text, confidence gauge, probabilities, and preview."""

from PIL.ImageQt import ImageQt
from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtGui import QPixmap
from PyQt6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from core.utils import ClassificationOutcome, PreparedBuffer
from i18n import t
from ui.components.confidence_gauge import ConfidenceGauge
from ui.components.probability_table import ProbabilityTable

PREVIEW_SIDE = 160


class ResultCard(QWidget):
    """Shows the outcome of the latest classification."""

    analyze_another = pyqtSignal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setObjectName("resultCard")
        self._outcome = None
        self._setup_ui()
        self.hide()

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(20, 20, 20, 20)
        layout.setSpacing(16)

        header_row = QHBoxLayout()
        header_row.setSpacing(20)

        self._preview_label = QLabel()
        self._preview_label.setFixedSize(PREVIEW_SIDE, PREVIEW_SIDE)
        self._preview_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._preview_label.setToolTip(t("results.preview_tooltip"))

        self._gauge = ConfidenceGauge(label=t("results.confidence"), size=120)

        info_col = QVBoxLayout()
        info_col.setSpacing(4)
        self._title_label = QLabel(t("results.title"))
        self._title_label.setProperty("class", "sectionTitle")
        self._title_label.setStyleSheet("font-size: 18px;")

        self._message_label = QLabel("")
        self._message_label.setObjectName("resultMessage")
        self._message_label.setWordWrap(True)
        self._message_label.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)

        self._meta_label = QLabel("")
        self._meta_label.setProperty("class", "sectionSubtitle")
        self._meta_label.setStyleSheet("font-size: 12px; color: #888;")

        info_col.addWidget(self._title_label)
        info_col.addWidget(self._message_label)
        info_col.addWidget(self._meta_label)
        info_col.addStretch()

        header_row.addWidget(self._preview_label)
        header_row.addWidget(self._gauge)
        header_row.addLayout(info_col, 1)

        self._probability_table = ProbabilityTable()

        footer_row = QHBoxLayout()
        footer_row.addStretch()
        self._another_btn = QPushButton(t("results.analyze_another"))
        self._another_btn.setObjectName("primaryButton")
        self._another_btn.clicked.connect(self.analyze_another.emit)
        footer_row.addWidget(self._another_btn)

        layout.addLayout(header_row)
        layout.addWidget(self._probability_table)
        layout.addLayout(footer_row)

    def show_outcome(self, outcome: ClassificationOutcome):
        """Display a successful or failed outcome."""
        self._outcome = outcome
        self._message_label.setText(outcome.message)
        self._message_label.setProperty("error", "false" if outcome.success else "true")
        self._message_label.style().unpolish(self._message_label)
        self._message_label.style().polish(self._message_label)

        self._set_preview(outcome.preview)

        if outcome.success and outcome.result is not None:
            self._gauge.show()
            self._gauge.set_score(outcome.result.confidence)
            self._probability_table.set_result(outcome.result)
            meta_parts = [t("results.processing_time", time=outcome.processing_time_ms)]
            if outcome.result.model_name:
                meta_parts.append(t("results.model_used", model=outcome.result.model_name))
            self._meta_label.setText("  |  ".join(meta_parts))
        else:
            self._gauge.reset()
            self._gauge.hide()
            self._probability_table.reset()
            self._meta_label.setText("")

        self.show()

    def _set_preview(self, preview: PreparedBuffer):
        if preview is None:
            self._preview_label.clear()
            self._preview_label.hide()
            return
        # The preview is the stretched image the model saw, scaled only for display.
        pixmap = QPixmap.fromImage(ImageQt(preview.to_image()))
        self._preview_label.setPixmap(pixmap.scaled(
            PREVIEW_SIDE, PREVIEW_SIDE,
            Qt.AspectRatioMode.IgnoreAspectRatio,
            Qt.TransformationMode.SmoothTransformation,
        ))
        self._preview_label.show()

    def reset(self):
        """Clear results and hide."""
        self._outcome = None
        self._message_label.clear()
        self._preview_label.clear()
        self._gauge.reset()
        self._probability_table.reset()
        self.hide()
