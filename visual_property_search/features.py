"""
Feature extraction: raw image bytes to an ImageFeatures value.

Decodes the image once and runs the three extractors over the same
pixels:
    1. Perceptual hash (structure)
    2. Dominant color palette (color)
    3. Aspect ratio and brightness (geometry)
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Tuple

from .color_palette import extract_dominant_colors
from .exceptions import ImageProcessingError
from .geometry import aspect_ratio, compute_brightness
from .perceptual_hash import compute_phash
from .preprocessing import decode_image

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageFeatures:
    """Fingerprint of one image. Immutable once computed."""

    phash: str
    dominant_colors: Tuple[str, ...]
    aspect_ratio: float
    brightness: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pHash": self.phash,
            "dominantColors": list(self.dominant_colors),
            "aspectRatio": self.aspect_ratio,
            "brightness": self.brightness,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImageFeatures":
        return cls(
            phash=data["pHash"],
            dominant_colors=tuple(data["dominantColors"]),
            aspect_ratio=float(data["aspectRatio"]),
            brightness=float(data["brightness"]),
        )


def extract_image_features(data: bytes) -> ImageFeatures:
    """
    Extract all visual features from encoded image bytes.

    Args:
        data: Encoded image (JPEG, PNG, WebP, GIF, ...).

    Returns:
        ImageFeatures for the image.

    Raises:
        ImageProcessingError: If the bytes cannot be decoded or resized.
    """
    try:
        image_np = decode_image(data)
        height, width = image_np.shape[:2]

        return ImageFeatures(
            phash=compute_phash(image_np),
            dominant_colors=extract_dominant_colors(image_np),
            aspect_ratio=aspect_ratio(width, height),
            brightness=compute_brightness(image_np),
        )

    except ImageProcessingError as e:
        logger.error(f"Failed to extract image features: {e}")
        raise
