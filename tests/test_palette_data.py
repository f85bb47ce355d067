"""Tests for custom palette parsing and K-Means palette building."""

import numpy as np
import pytest

from conftest import BLUE, GREEN, RED, make_raster, quadrants
from pixelizer.core_types import (
    EmptyPaletteSource,
    InvalidPaletteSpec,
    PixelizerOptions,
    RasterImage,
)
from pixelizer.palette_data import (
    build_kmeans_palette,
    build_palette,
    hex_to_rgb,
    parse_custom_palette,
    sample_lab_pixels,
)


def assert_close_rgb(actual, expected, tol=1):
    assert len(actual) == 3
    for a, e in zip(actual, expected):
        assert abs(int(a) - int(e)) <= tol, f"{actual} != {expected}"


class TestParseCustomPalette:
    """Hex list parsing."""

    def test_mixed_case_and_spacing(self):
        palette = parse_custom_palette("FF0000, 00ff00,0000FF")
        assert palette == [(255, 0, 0), (0, 255, 0), (0, 0, 255)]

    def test_hash_prefix_is_optional(self):
        assert parse_custom_palette("#abcdef") == [(171, 205, 239)]

    def test_duplicates_and_order_kept(self):
        palette = parse_custom_palette("000000,FFFFFF,000000")
        assert palette == [(0, 0, 0), (255, 255, 255), (0, 0, 0)]

    def test_empty_tokens_skipped(self):
        assert parse_custom_palette(" , FF0000, ,") == [(255, 0, 0)]

    def test_short_code_rejected(self):
        with pytest.raises(InvalidPaletteSpec):
            parse_custom_palette("FF00")

    def test_non_hex_rejected(self):
        with pytest.raises(InvalidPaletteSpec):
            parse_custom_palette("FF0000,GG0000")

    def test_double_hash_rejected(self):
        with pytest.raises(InvalidPaletteSpec):
            parse_custom_palette("##FF0000")

    @pytest.mark.parametrize("spec", ["", "   ", ",", " , , "])
    def test_empty_palette_rejected(self, spec):
        with pytest.raises(InvalidPaletteSpec, match="cannot be empty"):
            parse_custom_palette(spec)

    def test_invalid_spec_is_value_error(self):
        with pytest.raises(ValueError):
            parse_custom_palette("nothex")

    def test_hex_to_rgb(self):
        assert hex_to_rgb(" #10Ff20 ") == (16, 255, 32)


class TestSampleLabPixels:
    """Strided sampling of visible pixels."""

    def test_transparent_pixels_skipped(self):
        image = make_raster(
            [
                [(255, 0, 0, 255), (0, 255, 0, 0)],
                [(0, 0, 255, 0), (255, 255, 255, 10)],
            ]
        )
        samples = sample_lab_pixels(image)
        assert samples.shape == (2, 3)

    def test_stride_caps_sample_count(self):
        image = RasterImage.solid(100, 100, RED)
        assert sample_lab_pixels(image, max_samples=5000).shape == (5000, 3)
        assert sample_lab_pixels(image, max_samples=100).shape == (100, 3)

    def test_small_image_uses_every_pixel(self):
        image = RasterImage.solid(3, 3, RED)
        assert sample_lab_pixels(image).shape == (9, 3)


class TestBuildKmeansPalette:
    """Palette generation from image content."""

    def test_all_transparent_raises(self):
        image = RasterImage.solid(3, 3, (10, 20, 30, 0))
        with pytest.raises(EmptyPaletteSource, match="No non-transparent pixels"):
            build_kmeans_palette(image, 4)

    def test_solid_image_gives_single_colour(self, solid_red):
        palette = build_kmeans_palette(solid_red, 8)
        assert len(palette) == 1
        assert_close_rgb(palette[0], (255, 0, 0))

    def test_count_never_exceeds_request(self, noisy_image):
        palette = build_kmeans_palette(noisy_image, 5)
        assert len(palette) == 5
        assert all(isinstance(c, int) and 0 <= c <= 255 for rgb in palette for c in rgb)

    def test_two_colour_image(self):
        image = quadrants(8, 8, colors=(RED, BLUE, BLUE, RED))
        palette = build_kmeans_palette(image, 2)
        assert len(palette) == 2
        # seeds are ordered by lightness, blue is darker than red
        assert_close_rgb(palette[0], (0, 0, 255))
        assert_close_rgb(palette[1], (255, 0, 0))

    def test_deterministic(self, noisy_image):
        assert build_kmeans_palette(noisy_image, 6) == build_kmeans_palette(
            noisy_image, 6
        )


class TestBuildPalette:
    """Palette source selection."""

    def test_custom_mode_ignores_image(self, solid_red):
        options = PixelizerOptions(palette_mode="custom", custom_palette_spec="00FF00")
        assert build_palette(solid_red, options) == [(0, 255, 0)]

    def test_fix_palette_source_used(self, solid_red):
        reference = RasterImage.solid(4, 4, BLUE)
        options = PixelizerOptions(n_colors=4, fix_palette_source=reference)
        palette = build_palette(solid_red, options)
        assert len(palette) == 1
        assert_close_rgb(palette[0], (0, 0, 255))

    def test_kmeans_defaults_to_image(self):
        image = RasterImage.solid(4, 4, GREEN)
        palette = build_palette(image, PixelizerOptions())
        assert len(palette) == 1
        assert_close_rgb(palette[0], (0, 255, 0))

    def test_transparent_fix_source_raises(self, solid_red):
        reference = RasterImage(np.zeros((2, 2, 4), dtype=np.uint8))
        options = PixelizerOptions(fix_palette_source=reference)
        with pytest.raises(EmptyPaletteSource):
            build_palette(solid_red, options)
