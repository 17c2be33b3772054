"""
Image decoding and resampling shared by every feature extractor.

All extractors go through the same three steps: decode the raw bytes
once, stretch-resize to a fixed working size, and optionally collapse to
a single grayscale channel. Keeping those steps here guarantees the
perceptual hash, palette and brightness all see identical pixels for the
same input bytes.
"""

import io
import logging

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError

from .exceptions import ImageProcessingError

logger = logging.getLogger(__name__)

# Area interpolation averages source pixels when shrinking.
INTERPOLATION = cv2.INTER_AREA


def normalize_image(image_np: np.ndarray) -> np.ndarray:
    """Ensure image is uint8 RGB format (alpha and extra channels dropped)."""
    if image_np.dtype != np.uint8:
        if image_np.max() <= 1.0:
            image_np = (image_np * 255).astype(np.uint8)
        else:
            image_np = np.clip(image_np, 0, 255).astype(np.uint8)

    if image_np.ndim == 2:
        image_np = cv2.cvtColor(image_np, cv2.COLOR_GRAY2RGB)
    elif image_np.shape[2] > 3:
        image_np = np.ascontiguousarray(image_np[:, :, :3])

    return image_np


def decode_image(data: bytes) -> np.ndarray:
    """
    Decode raw image bytes into an RGB uint8 array.

    Animated containers (GIF, WebP) contribute their first frame only.

    Args:
        data: Encoded image bytes in any container Pillow understands.

    Returns:
        Array of shape (height, width, 3).

    Raises:
        ImageProcessingError: If the bytes are empty, corrupt, or not a
            raster image with nonzero dimensions.
    """
    if not data:
        raise ImageProcessingError("Image data is empty")

    try:
        with Image.open(io.BytesIO(data)) as img:
            img.seek(0)
            rgb = img.convert("RGB")
            image_np = np.array(rgb, dtype=np.uint8)
    except (UnidentifiedImageError, OSError, ValueError, SyntaxError,
            Image.DecompressionBombError) as e:
        raise ImageProcessingError(f"Could not decode image: {e}") from e

    if image_np.ndim != 3 or image_np.shape[0] == 0 or image_np.shape[1] == 0:
        raise ImageProcessingError(
            f"Decoded image has invalid shape {image_np.shape}"
        )

    return image_np


def resize_image(image_np: np.ndarray, width: int, height: int) -> np.ndarray:
    """Stretch-resize to exactly width x height, ignoring aspect ratio."""
    try:
        return cv2.resize(image_np, (width, height), interpolation=INTERPOLATION)
    except cv2.error as e:
        raise ImageProcessingError(f"Resize to {width}x{height} failed: {e}") from e


def to_grayscale(image_np: np.ndarray) -> np.ndarray:
    """Collapse an RGB image to a single luminance channel."""
    if image_np.ndim == 2:
        return image_np
    return cv2.cvtColor(image_np, cv2.COLOR_RGB2GRAY)


def resized_grayscale(image_np: np.ndarray, size: int) -> np.ndarray:
    """Resize to size x size, then convert to grayscale."""
    return to_grayscale(resize_image(image_np, size, size))
