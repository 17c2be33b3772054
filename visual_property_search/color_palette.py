"""
Dominant color palette extraction and comparison.

Each channel is quantized into 4 buckets (0, 64, 128, 192), giving 64
possible colors. The most frequent quantized colors of a 100x100
thumbnail form the palette. Coarse buckets make palettes robust to
lighting and compression noise at the cost of fine color detail.
"""

import logging
import math
import re
from collections import Counter
from typing import Optional, Sequence, Tuple

import numpy as np

from .preprocessing import normalize_image, resize_image

logger = logging.getLogger(__name__)

PALETTE_SIZE = 100
QUANTIZATION_STEP = 64
MAX_COLORS = 5
MAX_COLOR_DISTANCE = math.sqrt(3 * 255 ** 2)

_HEX_COLOR = re.compile(r"^#?([0-9a-f]{2})([0-9a-f]{2})([0-9a-f]{2})$", re.IGNORECASE)


def extract_dominant_colors(image_np: np.ndarray,
                            max_colors: int = MAX_COLORS) -> Tuple[str, ...]:
    """
    Extract the most frequent quantized colors of an image.

    Args:
        image_np: RGB uint8 image.
        max_colors: Palette size cap.

    Returns:
        Up to max_colors '#RRGGBB' uppercase strings, most frequent first.
        Uniform images yield fewer entries.
    """
    thumb = resize_image(normalize_image(image_np), PALETTE_SIZE, PALETTE_SIZE)
    quantized = (thumb // QUANTIZATION_STEP) * QUANTIZATION_STEP

    # Counter preserves first-seen order, so ties keep row-major scan order.
    counts = Counter(map(tuple, quantized.reshape(-1, 3).tolist()))
    ranked = sorted(counts.items(), key=lambda item: -item[1])[:max_colors]

    return tuple(rgb_to_hex(rgb) for rgb, _ in ranked)


def rgb_to_hex(rgb: Sequence[int]) -> str:
    r, g, b = rgb
    return f"#{int(r):02X}{int(g):02X}{int(b):02X}"


def hex_to_rgb(color: str) -> Optional[Tuple[int, int, int]]:
    """Parse '#RRGGBB' (hash optional, any case); None if malformed."""
    match = _HEX_COLOR.match(color)
    if not match:
        return None
    return tuple(int(channel, 16) for channel in match.groups())


def pairwise_color_similarity(color_a: str, color_b: str) -> float:
    """1 - normalized Euclidean RGB distance; 0 for unparseable colors."""
    rgb_a = hex_to_rgb(color_a)
    rgb_b = hex_to_rgb(color_b)
    if rgb_a is None or rgb_b is None:
        return 0.0

    distance = math.sqrt(sum((a - b) ** 2 for a, b in zip(rgb_a, rgb_b)))
    return 1 - distance / MAX_COLOR_DISTANCE


def color_similarity(palette_a: Sequence[str], palette_b: Sequence[str]) -> float:
    """
    Compare two palettes by best-match averaging.

    For every color in palette_a, take its best similarity against
    palette_b, then average over palette_a. The average runs over the
    first argument only, so the result is asymmetric when the palettes
    differ in length.

    Returns:
        Similarity in [0, 1]; 0.0 when either palette is empty.
    """
    if not palette_a or not palette_b:
        return 0.0

    total = 0.0
    for color_a in palette_a:
        total += max(
            0.0,
            max(pairwise_color_similarity(color_a, color_b) for color_b in palette_b),
        )

    return total / len(palette_a)
