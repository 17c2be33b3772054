"""Tests for dominant color extraction and palette similarity."""

import re

import numpy as np

from visual_property_search.color_palette import (
    MAX_COLORS, color_similarity, extract_dominant_colors, hex_to_rgb,
    pairwise_color_similarity, rgb_to_hex,
)

from conftest import solid_image

HEX_COLOR = re.compile(r"^#[0-9A-F]{6}$")


class TestExtractDominantColors:
    """Tests for palette extraction."""

    def test_solid_image_single_color(self):
        assert extract_dominant_colors(solid_image(color=(255, 0, 0))) == ("#C00000",)

    def test_quantizes_to_bucket_floor(self):
        assert extract_dominant_colors(solid_image(color=(192, 0, 0))) == ("#C00000",)
        assert extract_dominant_colors(solid_image(color=(63, 64, 127))) == ("#004040",)

    def test_ordered_by_frequency(self, red_square_image):
        # White background covers 64% of the image, the red square 36%.
        assert extract_dominant_colors(red_square_image) == ("#C0C0C0", "#C00000")

    def test_hex_format(self, noise_image):
        colors = extract_dominant_colors(noise_image)
        assert all(HEX_COLOR.match(c) for c in colors)

    def test_at_most_five_colors(self, noise_image):
        colors = extract_dominant_colors(noise_image)
        assert len(colors) == MAX_COLORS

    def test_custom_palette_size(self, noise_image):
        assert len(extract_dominant_colors(noise_image, max_colors=2)) == 2

    def test_alpha_ignored(self):
        rgba = np.zeros((20, 20, 4), dtype=np.uint8)
        rgba[:, :, 2] = 255
        assert extract_dominant_colors(rgba) == ("#0000C0",)


class TestHexConversion:

    def test_rgb_to_hex_pads(self):
        assert rgb_to_hex((0, 64, 192)) == "#0040C0"

    def test_hex_to_rgb(self):
        assert hex_to_rgb("#0040C0") == (0, 64, 192)
        assert hex_to_rgb("ff0000") == (255, 0, 0)

    def test_malformed_hex(self):
        assert hex_to_rgb("#GG0000") is None
        assert hex_to_rgb("#FFF") is None


class TestColorSimilarity:
    """Tests for palette comparison."""

    def test_identical_palettes(self):
        colors = ["#FF0000", "#00FF00", "#0000FF"]
        assert color_similarity(colors, colors) == 1.0

    def test_empty_palettes(self):
        assert color_similarity([], ["#FF0000"]) == 0.0
        assert color_similarity(["#FF0000"], []) == 0.0
        assert color_similarity([], []) == 0.0

    def test_opposite_colors_low(self):
        similarity = color_similarity(["#FF0000"] * 3, ["#00FFFF"] * 3)
        assert similarity < 0.5

    def test_similar_colors_high(self):
        similarity = color_similarity(["#FF0000", "#00FF00"], ["#FF0505", "#00FF05"])
        assert similarity > 0.9

    def test_black_white_is_zero(self):
        assert color_similarity(["#000000"], ["#FFFFFF"]) == 0.0

    def test_asymmetric_for_different_lengths(self):
        small = ["#FF0000"]
        large = ["#FF0000", "#0000FF"]
        assert color_similarity(small, large) == 1.0
        assert color_similarity(large, small) < 1.0

    def test_malformed_color_scores_zero(self):
        assert pairwise_color_similarity("#FF0000", "red") == 0.0
        assert color_similarity(["red"], ["#FF0000"]) == 0.0
