"""Shared test fixtures for visual property search tests."""

import cv2
import numpy as np
import pytest

from visual_property_search.collaborators import (
    InMemoryFeatureStore, InMemoryMediaRepository, InMemoryPropertyRepository,
)


def encode_png(image_np: np.ndarray) -> bytes:
    """Encode an RGB uint8 array as PNG bytes."""
    ok, buffer = cv2.imencode(".png", cv2.cvtColor(image_np, cv2.COLOR_RGB2BGR))
    assert ok
    return buffer.tobytes()


def solid_image(width=100, height=100, color=(255, 0, 0)):
    img = np.zeros((height, width, 3), dtype=np.uint8)
    img[:, :] = color
    return img


@pytest.fixture
def red_square_image():
    """Generate a 200x200 red square on white background."""
    img = np.ones((200, 200, 3), dtype=np.uint8) * 255
    img[40:160, 40:160] = [200, 30, 30]  # Red square
    return img


@pytest.fixture
def gradient_image():
    """Generate a 256x64 horizontal grayscale gradient (dark left, bright right)."""
    row = np.arange(256, dtype=np.uint8)
    gray = np.tile(row, (64, 1))
    return np.stack([gray, gray, gray], axis=2)


@pytest.fixture
def noise_image():
    """Generate a 200x200 random noise image."""
    rng = np.random.RandomState(42)
    return rng.randint(0, 255, (200, 200, 3), dtype=np.uint8)


@pytest.fixture
def red_square_png(red_square_image):
    return encode_png(red_square_image)


@pytest.fixture
def gradient_png(gradient_image):
    return encode_png(gradient_image)


@pytest.fixture
def media_repository():
    return InMemoryMediaRepository()


@pytest.fixture
def property_repository():
    return InMemoryPropertyRepository()


@pytest.fixture
def feature_store(media_repository, property_repository):
    return InMemoryFeatureStore(media_repository, property_repository)
