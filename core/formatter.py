"""Display strings for classification results and pipeline errors."""

from typing import Optional

from core.utils import ClassificationResult, ErrorKind

PREPROCESSING_ERROR_TEXT = "Error converting image."
CANCELLED_TEXT = "Analysis cancelled."


def format_confidence(probability: float) -> str:
    """Format a probability in [0, 1] as a percentage with two decimals."""
    return f"{probability * 100:.2f}%"


def format_result(result: ClassificationResult) -> str:
    """Render e.g. ``"melanoma with a confidence of 87.34%."``.

    A label missing from the probability mapping is shown with 0.00%.
    """
    probability = result.probabilities.get(result.label, 0.0)
    return f"{result.label} with a confidence of {format_confidence(probability)}."


def format_error(kind: ErrorKind, detail: Optional[str] = "") -> str:
    """Render the message that replaces the result string after a failure."""
    if kind == ErrorKind.PREPROCESSING:
        return PREPROCESSING_ERROR_TEXT
    if kind == ErrorKind.MODEL_LOAD:
        return f"Failed to load model: {detail}"
    return f"Failed to make prediction: {detail}"
