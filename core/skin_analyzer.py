"""Skin lesion classification from a single photo.

Pipeline: decode and stretch the photo to the model's input size, render it
into an ARGB buffer, run one forward pass, and format the top label with its
confidence. The default model is EfficientNet-B0 fine-tuned on HAM10000
(7 diagnostic categories).
"""

import logging
import time
from typing import Optional

from core.classifier import LesionClassifier, get_classifier
from core.errors import ClassificationError, PreprocessingFailure
from core.formatter import CANCELLED_TEXT, format_error, format_result
from core.image_preprocessor import ImagePreprocessor
from core.utils import (
    CancelCheck,
    ClassificationOutcome,
    ClassificationRequest,
    Phase,
    ProgressCallback,
)

logger = logging.getLogger(__name__)

STEP_PREPROCESS = 1
STEP_LOAD_MODEL = 2
STEP_INFER = 3
STEP_FORMAT = 4
TOTAL_STEPS = 4

STEP_PHASES = {
    STEP_PREPROCESS: Phase.PREPROCESSING,
    STEP_LOAD_MODEL: Phase.INFERRING,
    STEP_INFER: Phase.INFERRING,
    STEP_FORMAT: Phase.INFERRING,
}


def phase_for_step(step: int) -> Phase:
    return STEP_PHASES.get(step, Phase.PREPROCESSING)


class SkinAnalyzer:
    """Classifies a lesion photo with the shared on-device model."""

    def __init__(self, classifier: Optional[LesionClassifier] = None):
        self._classifier = classifier

    def analyze(
        self,
        request: ClassificationRequest,
        on_progress: Optional[ProgressCallback] = None,
        is_cancelled: Optional[CancelCheck] = None,
    ) -> ClassificationOutcome:
        """Run the pipeline for one request.

        Pipeline errors become a failed outcome carrying the display message;
        anything else propagates to the caller.
        """
        start_time = time.time()
        preview = None

        def report(step, msg):
            if on_progress:
                on_progress(step, TOTAL_STEPS, msg)

        def cancelled():
            return is_cancelled and is_cancelled()

        try:
            # Step 1: Decode, resize, convert
            report(STEP_PREPROCESS, "Preparing image...")
            if cancelled():
                return self._cancelled_result(request)

            image = ImagePreprocessor.load_image(request.input_path)
            preview = ImagePreprocessor.prepare(image, request.target_size)
            if preview is None:
                raise PreprocessingFailure(
                    f"Could not convert {image.size[0]}x{image.size[1]} image "
                    f"to {request.target_size}x{request.target_size}"
                )

            # Step 2: Load model (no-op after the first request)
            report(STEP_LOAD_MODEL, "Loading skin lesion model...")
            if cancelled():
                return self._cancelled_result(request)

            classifier = self._classifier or get_classifier()
            classifier.ensure_loaded()

            # Step 3: Inference
            report(STEP_INFER, "Classifying lesion...")
            if cancelled():
                return self._cancelled_result(request)

            result = classifier.classify(preview)

            # Step 4: Format
            report(STEP_FORMAT, "Building results...")
            elapsed_ms = int((time.time() - start_time) * 1000)

            return ClassificationOutcome(
                request_id=request.request_id,
                success=True,
                message=format_result(result),
                result=result,
                preview=preview,
                processing_time_ms=elapsed_ms,
                input_path=request.input_path,
            )

        except ClassificationError as e:
            logger.warning("Request %d failed (%s): %s", request.request_id, e.kind.value, e.message)
            return ClassificationOutcome(
                request_id=request.request_id,
                success=False,
                message=format_error(e.kind, e.message),
                error_kind=e.kind,
                preview=preview,
                processing_time_ms=int((time.time() - start_time) * 1000),
                input_path=request.input_path,
            )

    @staticmethod
    def _cancelled_result(request: ClassificationRequest) -> ClassificationOutcome:
        return ClassificationOutcome(
            request_id=request.request_id,
            success=False,
            message=CANCELLED_TEXT,
            input_path=request.input_path,
        )
