"""
Perceptual hashing for structural image similarity.

Produces a 64-bit fingerprint of an image's coarse luminance layout.
The image is shrunk to 32x32 grayscale and split into an 8x8 grid of
4x4 blocks; the block means stand in for the low-frequency coefficients
of a DCT. Each bit records whether a block is brighter than the median
block, so small color shifts, recompression and rescaling leave most
bits untouched while a different room layout flips many of them.

The bit layout must stay fixed: hashes stored in the index are compared
bit-for-bit against freshly computed query hashes.
"""

import logging

import numpy as np

from .preprocessing import normalize_image, resized_grayscale

logger = logging.getLogger(__name__)

HASH_SIZE = 32
GRID_SIZE = 8
BLOCK_SIZE = HASH_SIZE // GRID_SIZE
HASH_BITS = GRID_SIZE * GRID_SIZE
HASH_LENGTH = HASH_BITS // 4


def compute_block_means(image_np: np.ndarray) -> np.ndarray:
    """
    Compute the 64 block means of the 32x32 grayscale thumbnail.

    Args:
        image_np: RGB uint8 image of any size.

    Returns:
        Float64 array of 64 means in row-major block order.
    """
    gray = resized_grayscale(normalize_image(image_np), HASH_SIZE).astype(np.float64)
    blocks = gray.reshape(GRID_SIZE, BLOCK_SIZE, GRID_SIZE, BLOCK_SIZE)
    return blocks.mean(axis=(1, 3)).flatten()


def compute_phash(image_np: np.ndarray) -> str:
    """
    Generate the perceptual hash of an image.

    Process:
        1. Stretch-resize to 32x32 and convert to grayscale
        2. Average each 4x4 block into 64 block means
        3. Take the median of means 1..63 (the DC block is excluded)
        4. Set bit i when block mean i is strictly above the median
        5. Pack bits 4 at a time into lowercase hex

    Args:
        image_np: RGB uint8 image.

    Returns:
        16-character lowercase hex string.
    """
    means = compute_block_means(image_np)

    # 63 values, so the median is the exact middle element.
    median = float(np.median(means[1:]))
    bits = "".join("1" if value > median else "0" for value in means)

    return "".join(
        format(int(bits[i:i + 4], 2), "x") for i in range(0, HASH_BITS, 4)
    )


def _hex_to_bits(phash: str) -> str:
    return "".join(format(int(char, 16), "04b") for char in phash)


def phash_similarity(hash_a: str, hash_b: str) -> float:
    """
    Similarity of two perceptual hashes from their Hamming distance.

    Returns 0.0 when the hashes differ in length, otherwise
    1 - distance / 64 (1.0 for identical hashes).

    Raises:
        ValueError: If either hash contains a non-hex character.
    """
    if len(hash_a) != len(hash_b):
        return 0.0

    bits_a = _hex_to_bits(hash_a)
    bits_b = _hex_to_bits(hash_b)
    distance = sum(1 for a, b in zip(bits_a, bits_b) if a != b)

    return 1 - distance / HASH_BITS
