"""Circular gauge for the predicted label's confidence."""

from PyQt6.QtCore import QEasingCurve, QPropertyAnimation, QRectF, Qt, pyqtProperty
from PyQt6.QtGui import QColor, QFont, QPainter, QPen
from PyQt6.QtWidgets import QWidget


class ConfidenceGauge(QWidget):
    """Animated arc showing how sure the model is about its top label.

    Colors describe certainty, not clinical concern.
    """

    COLOR_CERTAIN = QColor("#2563EB")
    COLOR_MODERATE = QColor("#F59E0B")
    COLOR_UNCERTAIN = QColor("#9CA3AF")
    COLOR_TRACK = QColor("#E5E7EB")

    def __init__(self, label: str = "", size: int = 120, parent=None):
        super().__init__(parent)
        self._label = label
        self._size = size
        self._score = 0.0
        self._animated_score = 0.0
        self.setFixedSize(size, size)

        self._animation = QPropertyAnimation(self, b"animatedScore")
        self._animation.setDuration(600)
        self._animation.setEasingCurve(QEasingCurve.Type.OutCubic)

    def set_score(self, score: float):
        """Animate to a probability in [0, 1]."""
        self._score = max(0.0, min(1.0, score))
        self._animation.stop()
        self._animation.setStartValue(self._animated_score)
        self._animation.setEndValue(self._score)
        self._animation.start()

    def score(self) -> float:
        return self._score

    def _get_animated_score(self) -> float:
        return self._animated_score

    def _set_animated_score(self, value: float):
        self._animated_score = value
        self.update()

    animatedScore = pyqtProperty(float, _get_animated_score, _set_animated_score)

    def _color_for(self, score: float) -> QColor:
        if score >= 0.7:
            return self.COLOR_CERTAIN
        if score >= 0.4:
            return self.COLOR_MODERATE
        return self.COLOR_UNCERTAIN

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)

        pen_width = 10
        margin = pen_width / 2 + 4
        rect = QRectF(margin, margin, self._size - 2 * margin, self._size - 2 * margin)

        painter.setPen(QPen(self.COLOR_TRACK, pen_width, Qt.PenStyle.SolidLine, Qt.PenCapStyle.RoundCap))
        painter.drawArc(rect, 90 * 16, -360 * 16)

        color = self._color_for(self._animated_score)
        painter.setPen(QPen(color, pen_width, Qt.PenStyle.SolidLine, Qt.PenCapStyle.RoundCap))
        painter.drawArc(rect, 90 * 16, int(-360 * self._animated_score * 16))

        painter.setPen(QPen(color))
        font = QFont()
        font.setPixelSize(int(self._size * 0.2))
        font.setBold(True)
        painter.setFont(font)
        painter.drawText(rect, Qt.AlignmentFlag.AlignCenter, f"{self._animated_score * 100:.0f}%")

        if self._label:
            painter.setPen(QPen(QColor("#888888")))
            label_font = QFont()
            label_font.setPixelSize(int(self._size * 0.1))
            painter.setFont(label_font)
            label_rect = QRectF(rect.x(), rect.center().y() + 12, rect.width(), 20)
            painter.drawText(label_rect, Qt.AlignmentFlag.AlignHCenter | Qt.AlignmentFlag.AlignTop, self._label)

        painter.end()

    def reset(self):
        self._animation.stop()
        self._animated_score = 0.0
        self._score = 0.0
        self.update()
