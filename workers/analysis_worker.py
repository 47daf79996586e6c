"""Background worker that classifies one lesion photo."""

from PyQt6.QtCore import QThread, pyqtSignal

from core.skin_analyzer import SkinAnalyzer
from core.utils import ClassificationRequest


class AnalysisWorker(QThread):
    """Runs SkinAnalyzer off the GUI thread.

    Signals carry the request_id so receivers can drop results of
    superseded requests. Cross-thread signal delivery is queued, so slots run
    on the GUI thread.
    """

    progress = pyqtSignal(int, int, int, str)  # request_id, step, total, message
    finished = pyqtSignal(object)               # ClassificationOutcome
    error = pyqtSignal(int, str)                # request_id, error message

    def __init__(self, request: ClassificationRequest, analyzer: SkinAnalyzer = None, parent=None):
        super().__init__(parent)
        self._request = request
        self._analyzer = analyzer or SkinAnalyzer()
        self._cancelled = False

    @property
    def request_id(self) -> int:
        return self._request.request_id

    def run(self):
        try:
            outcome = self._analyzer.analyze(
                self._request,
                on_progress=self._on_progress,
                is_cancelled=self._is_cancelled,
            )
            self.finished.emit(outcome)
        except Exception as e:
            self.error.emit(self._request.request_id, f"Analysis failed: {str(e)}")

    def cancel(self):
        """Request cancellation; the analyzer stops at the next step boundary."""
        self._cancelled = True

    def _on_progress(self, step: int, total: int, message: str):
        if not self._cancelled:
            self.progress.emit(self._request.request_id, step, total, message)

    def _is_cancelled(self) -> bool:
        return self._cancelled
