"""Table of per-label probabilities for a classification result."""

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QFont
from PyQt6.QtWidgets import (
    QHeaderView,
    QLabel,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from core.formatter import format_confidence
from core.utils import ClassificationResult
from i18n import t


class ProbabilityTable(QWidget):
    """Lists every label the model knows, most probable first."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self._setup_ui()
        self.hide()

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(8)

        title = QLabel(t("results.distribution"))
        title.setProperty("class", "sectionTitle")
        title.setStyleSheet("font-size: 16px;")

        self._table = QTableWidget()
        self._table.setColumnCount(2)
        self._table.setHorizontalHeaderLabels([
            t("results.label"),
            t("results.probability"),
        ])
        self._table.horizontalHeader().setSectionResizeMode(0, QHeaderView.ResizeMode.Stretch)
        self._table.horizontalHeader().setSectionResizeMode(1, QHeaderView.ResizeMode.Fixed)
        self._table.setColumnWidth(1, 120)
        self._table.setSelectionBehavior(QTableWidget.SelectionBehavior.SelectRows)
        self._table.setEditTriggers(QTableWidget.EditTrigger.NoEditTriggers)
        self._table.setAlternatingRowColors(True)
        self._table.verticalHeader().setVisible(False)
        self._table.setShowGrid(False)

        layout.addWidget(title)
        layout.addWidget(self._table)

    def set_result(self, result: ClassificationResult):
        ranked = result.ranked()
        self._table.setRowCount(len(ranked))

        for row, (label, probability) in enumerate(ranked):
            label_item = QTableWidgetItem(label)
            prob_item = QTableWidgetItem(format_confidence(probability))
            prob_item.setTextAlignment(Qt.AlignmentFlag.AlignCenter)

            if label == result.label:
                bold = QFont()
                bold.setBold(True)
                label_item.setFont(bold)
                prob_item.setFont(bold)

            self._table.setItem(row, 0, label_item)
            self._table.setItem(row, 1, prob_item)

        self._table.setMinimumHeight(min(40 + len(ranked) * 32, 300))
        self.show()

    def reset(self):
        self._table.setRowCount(0)
        self.hide()
