"""On-device skin lesion classifier.

The model is loaded once per process and shared by all requests. Call
``get_classifier()`` to obtain it and ``shutdown_classifier()`` at exit.
"""

import logging
import pickle
import threading
from typing import List, Optional

from core.errors import InferenceFailure, ModelLoadFailure
from core.image_preprocessor import ImagePreprocessor
from core.model_manager import ModelInfo, ModelManager, get_model_manager
from core.utils import (
    ClassificationResult,
    ClassifierConfig,
    PreparedBuffer,
    load_classifier_config,
)

logger = logging.getLogger(__name__)

SUPPORTED_ARCHITECTURES = ("efficientnet_b0", "mobilenet_v3_small")


def build_model(architecture: str, num_classes: int):
    """Create an untrained torchvision backbone with a num_classes head."""
    if architecture not in SUPPORTED_ARCHITECTURES:
        raise ModelLoadFailure(f"Unsupported architecture: {architecture}")

    from torchvision import models

    return getattr(models, architecture)(weights=None, num_classes=num_classes)


class LesionClassifier:
    """Wraps a pre-trained lesion model with explicit load/unload."""

    def __init__(self, config: ClassifierConfig, model_manager: Optional[ModelManager] = None):
        self._config = config
        self._model_manager = model_manager or get_model_manager()
        self._lock = threading.Lock()
        self._model = None
        self._classes: List[str] = []
        self._input_size = 0

    @property
    def config(self) -> ClassifierConfig:
        return self._config

    @property
    def is_loaded(self) -> bool:
        return self._model is not None

    @property
    def classes(self) -> List[str]:
        return list(self._classes)

    @property
    def input_size(self) -> int:
        """Input side length declared by the loaded model (0 before loading)."""
        return self._input_size

    # -- Lifecycle ----------------------------------------------------------

    def load(self) -> None:
        """Load weights and validate them against the configuration.

        Raises:
            ModelLoadFailure: If the model is unknown, missing, corrupt, or its
                declared input size differs from the configured target size.
        """
        with self._lock:
            if self._model is not None:
                return
            self._load_locked()

    def ensure_loaded(self) -> None:
        if self._model is None:
            self.load()

    def unload(self) -> None:
        """Release the model."""
        with self._lock:
            if self._model is not None:
                logger.info("Unloading %s", self._config.model_name)
            self._model = None
            self._classes = []
            self._input_size = 0

    # -- Inference ----------------------------------------------------------

    def classify(self, buffer: PreparedBuffer) -> ClassificationResult:
        """Run one forward pass on a prepared buffer.

        Raises:
            ModelLoadFailure: If the model is not loaded and cannot be loaded.
            InferenceFailure: If the buffer does not match the model input or
                prediction fails.
        """
        self.ensure_loaded()

        with self._lock:
            model = self._model
            classes = list(self._classes)
            input_size = self._input_size
            if model is None:
                raise ModelLoadFailure("Model was unloaded")

            if buffer.pixel_format != "ARGB" or buffer.size != (input_size, input_size):
                raise InferenceFailure(
                    f"Expected a {input_size}x{input_size} ARGB buffer, "
                    f"got {buffer.width}x{buffer.height} {buffer.pixel_format}"
                )

            try:
                import torch

                tensor = ImagePreprocessor.to_tensor(buffer).to(self._config.device)
                with torch.inference_mode():
                    outputs = model(tensor)
                    probabilities = torch.nn.functional.softmax(outputs, dim=1)
                    probs = probabilities.cpu().numpy()[0]
            except (RuntimeError, ValueError, TypeError) as e:
                logger.exception("Inference failed")
                raise InferenceFailure(str(e)) from e

        if len(probs) != len(classes):
            raise InferenceFailure(
                f"Model returned {len(probs)} scores for {len(classes)} classes"
            )

        distribution = {name: float(p) for name, p in zip(classes, probs)}
        label = classes[int(probs.argmax())]
        return ClassificationResult(
            label=label,
            probabilities=distribution,
            model_name=self._config.model_name,
        )

    # -- Internal -----------------------------------------------------------

    def _load_locked(self) -> None:
        name = self._config.model_name
        info = self._model_manager.get_model_info(name)
        if info is None:
            raise ModelLoadFailure(f"Unknown model: {name}")

        model_path = self._model_manager.get_model_path(name)
        if not model_path.exists():
            raise ModelLoadFailure(f"Model weights not found at {model_path}")

        import torch

        try:
            checkpoint = torch.load(str(model_path), map_location="cpu", weights_only=True)
        except (OSError, RuntimeError, EOFError, pickle.UnpicklingError) as e:
            raise ModelLoadFailure(f"Cannot read {model_path.name}: {e}") from e

        state_dict, architecture, input_size, classes = self._unpack_checkpoint(checkpoint, info)

        if input_size != self._config.target_size:
            raise ModelLoadFailure(
                f"{name} expects {input_size}x{input_size} input but the configured "
                f"target size is {self._config.target_size}x{self._config.target_size}"
            )

        model = build_model(architecture, num_classes=len(classes))
        try:
            model.load_state_dict(state_dict)
        except (RuntimeError, TypeError, ValueError) as e:
            raise ModelLoadFailure(f"Weights do not match {architecture}: {e}") from e

        try:
            model.to(self._config.device)
        except (RuntimeError, AssertionError, TypeError, ValueError) as e:
            # AssertionError: torch built without CUDA
            raise ModelLoadFailure(f"Cannot use device {self._config.device!r}: {e}") from e
        model.eval()

        self._model = model
        self._classes = classes
        self._input_size = input_size
        logger.info(
            "Loaded %s (%s, %dx%d, %d classes) from %s",
            name, architecture, input_size, input_size, len(classes), model_path,
        )

    @staticmethod
    def _unpack_checkpoint(checkpoint, info: ModelInfo):
        """Split a checkpoint into (state_dict, architecture, input_size, classes).

        Accepts a bare state_dict or a dict with a "state_dict" entry and
        optional metadata overriding the registry.
        """
        if not isinstance(checkpoint, dict):
            raise ModelLoadFailure("Checkpoint is not a state dict")

        if "state_dict" in checkpoint:
            state_dict = checkpoint["state_dict"]
            architecture = checkpoint.get("architecture", info.architecture)
            try:
                input_size = int(checkpoint.get("input_size", info.input_size))
                classes = [str(name) for name in checkpoint.get("classes", info.classes)]
            except (TypeError, ValueError) as e:
                raise ModelLoadFailure(f"Invalid checkpoint metadata: {e}") from e
        else:
            state_dict = checkpoint
            architecture = info.architecture
            input_size = info.input_size
            classes = list(info.classes)

        if not classes:
            raise ModelLoadFailure("Model declares no classes")
        return state_dict, architecture, input_size, classes


# Module-level singleton
_classifier: Optional[LesionClassifier] = None
_classifier_lock = threading.Lock()


def get_classifier(config: Optional[ClassifierConfig] = None) -> LesionClassifier:
    """Get the process-wide classifier, creating it on first use.

    Without a config the first call reads the saved settings. Passing a
    config that differs from the current one replaces the instance.
    """
    global _classifier
    with _classifier_lock:
        if _classifier is None or (config is not None and config != _classifier.config):
            if _classifier is not None:
                _classifier.unload()
            _classifier = LesionClassifier(config or load_classifier_config())
        return _classifier


def shutdown_classifier() -> None:
    """Unload and drop the process-wide classifier."""
    global _classifier
    with _classifier_lock:
        if _classifier is not None:
            _classifier.unload()
        _classifier = None
