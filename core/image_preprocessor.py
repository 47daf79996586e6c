"""Lesion photo loading, resizing, and conversion to the model's pixel buffer."""

import logging
from typing import Optional

import numpy as np
from PIL import Image, ImageOps

from core.errors import PreprocessingFailure
from core.utils import PreparedBuffer

logger = logging.getLogger(__name__)

IMAGENET_MEAN = [0.485, 0.456, 0.406]
IMAGENET_STD = [0.229, 0.224, 0.225]


class ImagePreprocessor:
    """Handles loading and preprocessing of lesion photos for model input."""

    @staticmethod
    def load_image(image_path: str) -> Image.Image:
        """Load and fully decode an image file.

        EXIF orientation is applied so camera photos are upright.

        Raises:
            PreprocessingFailure: If the file is missing, truncated, or not an image.
        """
        try:
            with Image.open(image_path) as img:
                img.load()
                return ImageOps.exif_transpose(img)
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            # UnidentifiedImageError and truncated-file errors are both OSErrors
            logger.info("Could not decode %s: %s", image_path, e)
            raise PreprocessingFailure(f"Cannot read image: {image_path}") from e

    @staticmethod
    def resize(image: Image.Image, size: int) -> Image.Image:
        """Stretch an image to exactly size x size pixels (aspect ratio is not kept)."""
        if image.mode != "RGB":
            image = image.convert("RGB")
        return image.resize((size, size), Image.Resampling.BILINEAR)

    @staticmethod
    def to_pixel_buffer(image: Image.Image) -> PreparedBuffer:
        """Render an image into an ARGB buffer of the same dimensions."""
        rgba = np.asarray(image.convert("RGBA"), dtype=np.uint8)
        argb = np.ascontiguousarray(rgba[..., [3, 0, 1, 2]])
        argb.setflags(write=False)
        height, width = argb.shape[:2]
        return PreparedBuffer(pixels=argb, width=width, height=height)

    @staticmethod
    def prepare(image: Optional[Image.Image], size: int) -> Optional[PreparedBuffer]:
        """Resize and convert an image for the classifier.

        Returns None if the source image or target size is unusable; never a
        buffer whose dimensions differ from size x size.
        """
        if image is None or size <= 0:
            return None

        width, height = image.size
        if width == 0 or height == 0:
            logger.info("Refusing to preprocess a zero-size image (%dx%d)", width, height)
            return None

        try:
            resized = ImagePreprocessor.resize(image, size)
            buffer = ImagePreprocessor.to_pixel_buffer(resized)
        except (OSError, ValueError, MemoryError) as e:
            logger.warning("Preprocessing failed: %s", e)
            return None

        if buffer.size != (size, size):
            return None
        return buffer

    @staticmethod
    def to_tensor(buffer: PreparedBuffer) -> "torch.Tensor":
        """Convert an ARGB buffer to a (1, 3, H, W) tensor with ImageNet normalization."""
        from torchvision import transforms

        transform = transforms.Compose([
            transforms.ToTensor(),
            transforms.Normalize(mean=IMAGENET_MEAN, std=IMAGENET_STD),
        ])

        tensor = transform(buffer.to_image())
        return tensor.unsqueeze(0)  # Add batch dimension
