"""Shared utilities, dataclasses, validation, and platform-specific paths."""

import logging
import os
import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Callable, Mapping, Optional

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)


# --- Type aliases ---

ProgressCallback = Callable[[int, int, str], None]  # (step, total, message)
CancelCheck = Callable[[], bool]  # Returns True if cancelled


# --- Constants ---

APP_NAME = "SkinLesionAnalyzer"
ORGANIZATION_NAME = "SkinLesionAnalyzer"

DEFAULT_MODEL_NAME = "skin-efficientnet-b0"
DEFAULT_TARGET_SIZE = 224

PLACEHOLDER_TEXT = "No classification yet"
DISCLAIMER_TEXT = (
    "This app is for educational purposes only and not for diagnostic use."
)


# --- Enums ---

class Phase(Enum):
    IDLE = "idle"
    AWAITING_IMAGE = "awaiting_image"
    PREPROCESSING = "preprocessing"
    INFERRING = "inferring"
    DISPLAYING_RESULT = "displaying_result"
    DISPLAYING_ERROR = "displaying_error"


class ErrorKind(Enum):
    PREPROCESSING = "preprocessing"
    MODEL_LOAD = "model_load"
    INFERENCE = "inference"


# --- Dataclasses ---

@dataclass(frozen=True, eq=False)
class PreparedBuffer:
    """Fixed-size ARGB pixel buffer handed to the classifier.

    ``pixels`` has shape (height, width, 4), dtype uint8, channel order A, R, G, B.
    """
    pixels: np.ndarray
    width: int
    height: int
    pixel_format: str = "ARGB"

    @property
    def size(self):
        return self.width, self.height

    def to_image(self) -> Image.Image:
        """Render the buffer back into an RGB image (used for the preview)."""
        return Image.fromarray(np.ascontiguousarray(self.pixels[..., 1:4]))


@dataclass(frozen=True)
class ClassificationResult:
    """Predicted label with the probability distribution over all labels."""
    label: str
    probabilities: Mapping[str, float]
    model_name: str = ""

    def __post_init__(self):
        object.__setattr__(
            self, "probabilities", MappingProxyType(dict(self.probabilities))
        )

    @property
    def confidence(self) -> float:
        return float(self.probabilities.get(self.label, 0.0))

    def ranked(self):
        """Return (label, probability) pairs, most probable first."""
        return sorted(self.probabilities.items(), key=lambda kv: kv[1], reverse=True)


@dataclass(frozen=True)
class ClassificationRequest:
    """One classification request, identified by its token."""
    request_id: int
    input_path: str
    target_size: int = DEFAULT_TARGET_SIZE


@dataclass(frozen=True)
class ClassificationOutcome:
    """Response value for a request: a result or a user-visible error."""
    request_id: int
    success: bool
    message: str
    result: Optional[ClassificationResult] = None
    error_kind: Optional[ErrorKind] = None
    preview: Optional[PreparedBuffer] = None
    processing_time_ms: int = 0
    input_path: str = ""
    disclaimer: str = DISCLAIMER_TEXT


@dataclass(frozen=True)
class ScreenState:
    """Snapshot observed by the presentation layer."""
    phase: Phase = Phase.IDLE
    request_id: int = 0
    input_path: str = ""
    message: str = PLACEHOLDER_TEXT
    outcome: Optional[ClassificationOutcome] = None

    @property
    def busy(self) -> bool:
        return self.phase in (Phase.PREPROCESSING, Phase.INFERRING)


@dataclass
class ClassifierConfig:
    """Configuration for the on-device classifier."""
    model_name: str = DEFAULT_MODEL_NAME
    target_size: int = DEFAULT_TARGET_SIZE
    device: str = "cpu"


@dataclass
class ValidationResult:
    """Result of image validation."""
    valid: bool
    error_message: str = ""
    image_width: int = 0
    image_height: int = 0
    unreadable: bool = False
    warnings: list = field(default_factory=list)


# --- Configuration ---

def load_classifier_config() -> ClassifierConfig:
    """Read classifier settings from QSettings, falling back to defaults."""
    from PyQt6.QtCore import QSettings

    settings = QSettings(ORGANIZATION_NAME, APP_NAME)
    config = ClassifierConfig()
    config.model_name = str(settings.value("classifier/model_name", config.model_name))
    config.device = str(settings.value("classifier/device", config.device))

    raw_size = settings.value("classifier/target_size", config.target_size)
    try:
        config.target_size = int(raw_size)
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid classifier/target_size setting: %r", raw_size)
    return config


# --- Platform-specific paths ---

def get_data_dir() -> Path:
    """Get the platform-specific application data directory."""
    if sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support" / APP_NAME
    elif sys.platform == "win32":
        base = Path(os.environ.get("APPDATA", Path.home())) / APP_NAME
    else:
        base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")) / "skinlesionanalyzer"
    base.mkdir(parents=True, exist_ok=True)
    return base


def get_models_dir() -> Path:
    """Get the directory for user-installed models."""
    models_dir = get_data_dir() / "models"
    models_dir.mkdir(parents=True, exist_ok=True)
    return models_dir


# --- Asset paths ---

def get_asset_path(relative_path: str) -> str:
    """Get absolute path to an asset file, handling PyInstaller frozen apps."""
    if getattr(sys, "frozen", False):
        base = Path(sys._MEIPASS)
    else:
        base = Path(__file__).parent.parent
    return str(base / relative_path)


# --- Validation ---

SUPPORTED_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".bmp", ".tiff", ".tif", ".webp"}

MIN_RECOMMENDED_SIDE = 64


def validate_image(file_path: str) -> ValidationResult:
    """Validate that a file is a supported, readable photo.

    Files with a supported extension that cannot be decoded come back with
    ``unreadable`` set; they are still submitted so the pipeline reports
    the conversion error in place of the result.
    """
    from i18n import t

    if not file_path:
        return ValidationResult(valid=False, error_message=t("validation.no_file"))

    path = Path(file_path)

    ext = path.suffix.lower()
    if ext not in SUPPORTED_IMAGE_EXTENSIONS:
        return ValidationResult(
            valid=False,
            error_message=t("validation.unsupported_format", ext=ext),
        )

    if not path.exists():
        return ValidationResult(
            valid=False, unreadable=True, error_message=t("validation.file_not_found"),
        )

    if not path.is_file():
        return ValidationResult(
            valid=False, unreadable=True, error_message=t("validation.not_a_file"),
        )

    if path.stat().st_size == 0:
        return ValidationResult(
            valid=False, unreadable=True, error_message=t("validation.empty_file"),
        )

    try:
        with Image.open(str(path)) as img:
            width, height = img.size
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        logger.info("Cannot read image header of %s: %s", file_path, e)
        return ValidationResult(
            valid=False,
            unreadable=True,
            error_message=t("validation.cannot_read_image"),
        )

    warnings = []
    if min(width, height) < MIN_RECOMMENDED_SIDE:
        warnings.append(t("validation.low_resolution", width=width, height=height))

    return ValidationResult(
        valid=True,
        image_width=width,
        image_height=height,
        warnings=warnings,
    )


# --- Formatting ---

def format_file_size(size_bytes: int) -> str:
    """Format byte count as human-readable string."""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / (1024 * 1024):.1f} MB"
    return f"{size_bytes / (1024 * 1024 * 1024):.1f} GB"
