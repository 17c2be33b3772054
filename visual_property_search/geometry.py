"""
Image geometry and exposure measurements.

Aspect ratio captures framing (portrait room shots vs. wide panoramas);
brightness is stored alongside the other features for display and
future filtering but does not contribute to the composite score.
"""

import numpy as np

from .preprocessing import normalize_image, resized_grayscale
from .utils import round_half_up

BRIGHTNESS_SIZE = 50


def aspect_ratio(width: int, height: int) -> float:
    """width / height rounded to 3 decimals."""
    return round_half_up(width / height, 3)


def compute_brightness(image_np: np.ndarray) -> float:
    """Mean intensity (0-255) of a 50x50 grayscale thumbnail, 1 decimal."""
    gray = resized_grayscale(normalize_image(image_np), BRIGHTNESS_SIZE)
    return round_half_up(float(np.mean(gray)), 1)


def aspect_ratio_similarity(ratio_a: float, ratio_b: float) -> float:
    if ratio_a == 0 and ratio_b == 0:
        return 1.0
    if ratio_a == 0 or ratio_b == 0:
        return 0.0
    return min(ratio_a, ratio_b) / max(ratio_a, ratio_b)
