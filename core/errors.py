"""Error types raised by the classification pipeline."""

from core.utils import ErrorKind


class ClassificationError(Exception):
    """Base class for pipeline errors that end a request without crashing."""

    kind: ErrorKind = ErrorKind.INFERENCE

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class PreprocessingFailure(ClassificationError):
    """The image could not be decoded, resized, or converted."""

    kind = ErrorKind.PREPROCESSING


class ModelLoadFailure(ClassificationError):
    """The classifier could not be instantiated or does not fit the configuration."""

    kind = ErrorKind.MODEL_LOAD


class InferenceFailure(ClassificationError):
    """The model rejected the input or failed during prediction."""

    kind = ErrorKind.INFERENCE
