"""Skin lesion classification screen."""

import logging
from typing import List

from PyQt6.QtWidgets import (
    QLabel,
    QMessageBox,
    QScrollArea,
    QVBoxLayout,
    QWidget,
)

from core.session import ClassificationSession
from core.skin_analyzer import phase_for_step
from core.utils import (
    PLACEHOLDER_TEXT,
    ClassificationOutcome,
    Phase,
    ScreenState,
    validate_image,
)
from i18n import t
from ui.components.disclaimer_banner import DisclaimerBanner
from ui.components.image_drop_zone import ImageDropZone
from ui.components.progress_widget import ProgressWidget
from ui.components.result_card import ResultCard
from workers.analysis_worker import AnalysisWorker

logger = logging.getLogger(__name__)


class SkinWidget(QWidget):
    """Pick a lesion photo and show the model's label and confidence.

    The widget only renders ScreenState snapshots published by the session;
    worker signals go to the session, which drops superseded requests.
    """

    def __init__(self, session: ClassificationSession, parent=None):
        super().__init__(parent)
        self._session = session
        self._workers: List[AnalysisWorker] = []
        self._setup_ui()
        self._connect_signals()
        self._unsubscribe = self._session.subscribe(self._render)
        self._render(self._session.state)

    def _setup_ui(self):
        scroll = QScrollArea(self)
        scroll.setWidgetResizable(True)
        scroll.setFrameShape(QScrollArea.Shape.NoFrame)

        container = QWidget()
        layout = QVBoxLayout(container)
        layout.setContentsMargins(32, 24, 32, 24)
        layout.setSpacing(16)

        self._disclaimer = DisclaimerBanner()

        title = QLabel(t("skin.title"))
        title.setProperty("class", "sectionTitle")

        subtitle = QLabel(t("skin.subtitle"))
        subtitle.setProperty("class", "sectionSubtitle")
        subtitle.setWordWrap(True)

        self._drop_zone = ImageDropZone(placeholder_text=t("skin.drop_text"))

        self._status_label = QLabel(PLACEHOLDER_TEXT)
        self._status_label.setObjectName("classificationStatus")
        self._status_label.setWordWrap(True)

        self._progress = ProgressWidget()
        self._result_card = ResultCard()

        layout.addWidget(self._disclaimer)
        layout.addWidget(title)
        layout.addWidget(subtitle)
        layout.addWidget(self._drop_zone)
        layout.addWidget(self._status_label)
        layout.addWidget(self._progress)
        layout.addWidget(self._result_card)
        layout.addStretch()

        scroll.setWidget(container)
        main_layout = QVBoxLayout(self)
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.addWidget(scroll)

    def _connect_signals(self):
        self._drop_zone.browse_started.connect(self._session.await_image)
        self._drop_zone.browse_cancelled.connect(self._session.cancel_selection)
        self._drop_zone.file_selected.connect(self._on_file_selected)
        self._drop_zone.file_removed.connect(self._on_file_removed)
        self._progress.cancel_clicked.connect(self._on_cancel)
        self._result_card.analyze_another.connect(self._on_another)

    def open_image_dialog(self):
        """Entry point for the File > Open menu action."""
        self._drop_zone.browse()

    # --- Requests ---

    def _on_file_selected(self, path: str):
        validation = validate_image(path)
        if not validation.valid and not validation.unreadable:
            self._session.cancel_selection()
            QMessageBox.warning(self, t("common.error"), validation.error_message)
            return
        if validation.unreadable:
            logger.info("%s: %s", path, validation.error_message)
        for warning in validation.warnings:
            logger.info("%s: %s", path, warning)

        request = self._session.submit(path)
        if request is None:
            return

        # Superseded workers stop at their next step; anything they return is stale.
        for worker in self._workers:
            worker.cancel()

        worker = AnalysisWorker(request, parent=self)
        worker.progress.connect(self._on_progress)
        worker.finished.connect(self._on_finished)
        worker.error.connect(self._on_error)
        worker.finished.connect(lambda _outcome, w=worker: self._release_worker(w))
        worker.error.connect(lambda _id, _msg, w=worker: self._release_worker(w))
        self._workers.append(worker)
        worker.start()

    def _on_progress(self, request_id: int, step: int, total: int, message: str):
        if self._session.advance(request_id, phase_for_step(step)):
            self._progress.update_progress(step, total, message)

    def _on_finished(self, outcome: ClassificationOutcome):
        self._session.complete(outcome)

    def _on_error(self, request_id: int, message: str):
        logger.error("Request %d crashed: %s", request_id, message)
        self._session.fail(request_id, message)

    def _on_cancel(self):
        for worker in self._workers:
            worker.cancel()
        self._session.reset()

    def _on_file_removed(self):
        self._session.reset()

    def _on_another(self):
        # Emits file_removed, which resets the session.
        self._drop_zone.reset()

    def _release_worker(self, worker: AnalysisWorker):
        if worker in self._workers:
            self._workers.remove(worker)
        # The signal is emitted as the last statement of run(); wait for it to return.
        worker.wait(1000)
        worker.deleteLater()

    # --- Rendering ---

    def _render(self, state: ScreenState):
        self._status_label.setText(self._status_text(state))

        if state.busy:
            if self._progress.isHidden():
                self._progress.start(t("progress.preparing"))
            self._result_card.reset()
        else:
            self._progress.reset()

        if state.phase in (Phase.DISPLAYING_RESULT, Phase.DISPLAYING_ERROR):
            if state.outcome is not None:
                self._result_card.show_outcome(state.outcome)
            else:
                self._result_card.reset()
        elif state.phase == Phase.IDLE:
            self._result_card.reset()

    @staticmethod
    def _status_text(state: ScreenState) -> str:
        if state.phase == Phase.PREPROCESSING:
            return t("progress.preparing")
        if state.phase == Phase.INFERRING:
            return t("progress.classifying")
        if state.phase == Phase.AWAITING_IMAGE:
            return t("skin.awaiting_image")
        return state.message

    def cleanup(self):
        self._unsubscribe()
        for worker in list(self._workers):
            worker.cancel()
            if not worker.wait(5000):
                worker.terminate()
                worker.wait(2000)
