"""Shared test fixtures for Skin Lesion Analyzer."""

import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import numpy as np
import pytest
import torch
from PIL import Image
from torch import nn

from core.model_manager import HAM10000_CLASSES, ModelManager
from core.utils import ClassifierConfig

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

MELANOMA_INDEX = HAM10000_CLASSES.index("melanoma")


class TinyLesionNet(nn.Module):
    """Stand-in for the torchvision backbone: global average pool + linear head."""

    def __init__(self, num_classes: int = len(HAM10000_CLASSES)):
        super().__init__()
        self.pool = nn.AdaptiveAvgPool2d(1)
        self.head = nn.Linear(3, num_classes)

    def forward(self, x):
        return self.head(torch.flatten(self.pool(x), 1))


class BrokenLesionNet(TinyLesionNet):
    def forward(self, x):
        raise RuntimeError("CUDA error: device-side assert triggered")


def make_melanoma_state_dict(num_classes: int = len(HAM10000_CLASSES)) -> dict:
    """Weights with a constant prediction, independent of the image.

    With the full HAM10000 head the winner is melanoma; smaller heads favour
    their last class.
    """
    net = TinyLesionNet(num_classes)
    with torch.no_grad():
        net.head.weight.zero_()
        net.head.bias.fill_(0.0)
        net.head.bias[min(MELANOMA_INDEX, num_classes - 1)] = 3.0
    return net.state_dict()


@pytest.fixture
def tmp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as d:
        yield Path(d)


@pytest.fixture
def sample_rgb_image(tmp_dir):
    """A 640x480 RGB photo saved as PNG."""
    img = Image.fromarray(np.random.randint(0, 255, (480, 640, 3), dtype=np.uint8))
    path = tmp_dir / "lesion.png"
    img.save(path)
    return str(path)


@pytest.fixture
def sample_grayscale_image(tmp_dir):
    img = Image.fromarray(np.random.randint(0, 255, (300, 200), dtype=np.uint8))
    path = tmp_dir / "lesion_gray.png"
    img.save(path)
    return str(path)


@pytest.fixture
def corrupt_image(tmp_dir):
    """A .jpg file that is not an image."""
    path = tmp_dir / "corrupt.jpg"
    path.write_bytes(b"\xff\xd8 definitely not a jpeg")
    return str(path)


@pytest.fixture
def oversized_image(tmp_dir, monkeypatch):
    """A PNG that Pillow rejects as a decompression bomb."""
    path = tmp_dir / "huge.png"
    Image.new("1", (100, 100)).save(path)
    # Pillow refuses images over twice this many pixels
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)
    return str(path)


@pytest.fixture
def models_dir(tmp_dir):
    d = tmp_dir / "models"
    d.mkdir()
    return d


@pytest.fixture
def model_manager(models_dir):
    return ModelManager(models_dir=models_dir)


@pytest.fixture
def installed_model(models_dir):
    """Write a bare state_dict checkpoint for the default model."""
    model_dir = models_dir / "skin-efficientnet-b0"
    model_dir.mkdir()
    path = model_dir / "model.pth"
    torch.save(make_melanoma_state_dict(), str(path))
    return path


@pytest.fixture
def tiny_backbone():
    """Replace the torchvision backbone with TinyLesionNet."""
    with patch(
        "core.classifier.build_model",
        side_effect=lambda architecture, num_classes: TinyLesionNet(num_classes),
    ) as mock_build:
        yield mock_build


@pytest.fixture
def classifier_config():
    return ClassifierConfig(model_name="skin-efficientnet-b0", target_size=224)


@pytest.fixture(scope="session")
def qt_app():
    """One QApplication for every test that needs Qt objects."""
    from PyQt6.QtWidgets import QApplication

    return QApplication.instance() or QApplication([])


@pytest.fixture(autouse=True)
def _init_i18n():
    """Load English strings for all tests without touching QSettings."""
    import i18n
    i18n.init("en")
