"""Registry and on-disk lookup for the bundled lesion classifiers."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from core.utils import format_file_size, get_asset_path, get_models_dir

# HAM10000 diagnostic categories, in the alphabetical order of their codes
# (akiec, bcc, bkl, df, mel, nv, vasc) used as class indices during training.
HAM10000_CLASSES = [
    "actinic keratosis",
    "basal cell carcinoma",
    "benign keratosis",
    "dermatofibroma",
    "melanoma",
    "melanocytic nevus",
    "vascular lesion",
]

WEIGHTS_FILENAME = "model.pth"


@dataclass
class ModelInfo:
    """Metadata about a bundled classifier."""
    name: str
    display_name: str
    architecture: str
    input_size: int
    size_mb: float
    description: str
    classes: List[str] = field(default_factory=lambda: list(HAM10000_CLASSES))
    accuracy: str = ""


MODEL_REGISTRY: List[ModelInfo] = [
    ModelInfo(
        name="skin-efficientnet-b0",
        display_name="EfficientNet-B0 (Skin Lesion)",
        architecture="efficientnet_b0",
        input_size=224,
        size_mb=16.0,
        description="7-class skin lesion classification. Fine-tuned on HAM10000 (10,015 dermatoscopic images).",
        accuracy="85-92%",
    ),
    ModelInfo(
        name="skin-mobilenetv3",
        display_name="MobileNetV3-Small (Skin Lesion)",
        architecture="mobilenet_v3_small",
        input_size=224,
        size_mb=6.0,
        description="Lightweight 7-class skin lesion classifier for slower machines. Fine-tuned on HAM10000.",
        accuracy="80-86%",
    ),
]


class ModelManager:
    """Looks up classifier metadata and weight files."""

    def __init__(self, models_dir: Optional[Path] = None):
        self._models_dir = models_dir or get_models_dir()

    def get_model_info(self, model_name: str) -> Optional[ModelInfo]:
        """Get info for a specific model."""
        for model in MODEL_REGISTRY:
            if model.name == model_name:
                return model
        return None

    def get_search_paths(self, model_name: str) -> List[Path]:
        """Candidate weight files: user models directory first, then bundled assets."""
        return [
            self._models_dir / model_name / WEIGHTS_FILENAME,
            Path(get_asset_path(f"assets/models/{model_name}/{WEIGHTS_FILENAME}")),
        ]

    def get_model_path(self, model_name: str) -> Path:
        """Get the weights file for a model.

        Returns the first existing candidate, or the user-directory location if
        none exists yet.
        """
        candidates = self.get_search_paths(model_name)
        for path in candidates:
            if path.exists():
                return path
        return candidates[0]

    def is_model_available(self, model_name: str) -> bool:
        """Check if a known model has a weights file on disk."""
        if self.get_model_info(model_name) is None:
            return False
        return self.get_model_path(model_name).exists()

    def get_model_size_formatted(self, model_name: str) -> str:
        """Size of the model's weights file as a human-readable string."""
        path = self.get_model_path(model_name)
        if not path.exists():
            return format_file_size(0)
        return format_file_size(path.stat().st_size)


# Module-level singleton
_model_manager: Optional[ModelManager] = None


def get_model_manager() -> ModelManager:
    """Get the global ModelManager instance."""
    global _model_manager
    if _model_manager is None:
        _model_manager = ModelManager()
    return _model_manager
