"""Tests for dominant-colour downscaling."""

import numpy as np
import pytest

from conftest import BLACK, BLUE, GREEN, RED, WHITE, make_raster, quadrants
from pixelizer.core_types import InvalidDimensions, RasterImage, round_half_up
from pixelizer.pixel.downscale import (
    estimate_downscale_resolution,
    mode_downscale,
    select_dominant_pixel,
)


class TestEstimateDownscaleResolution:
    @pytest.mark.parametrize(
        "w, h, scale, expected",
        [
            (512, 512, 1.0, 64),
            (512, 256, 4.0, 32),
            (256, 512, 4.0, 32),
            (100, 50, 1.0, 28),
            (1, 1, 1000.0, 1),
        ],
    )
    def test_values(self, w, h, scale, expected):
        assert estimate_downscale_resolution(w, h, scale) == expected

    def test_larger_scale_is_coarser(self):
        fine = estimate_downscale_resolution(800, 600, 0.5)
        coarse = estimate_downscale_resolution(800, 600, 2.0)
        assert coarse < fine

    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(0.5) == 1
        assert round_half_up(1.49) == 1


class TestSelectDominantPixel:
    def test_empty_band_is_transparent(self):
        assert select_dominant_pixel([], []) == (0, 0, 0, 0)

    def test_most_frequent_wins(self):
        assert select_dominant_pixel([RED, BLUE], [3, 1]) == RED

    def test_tie_goes_to_darker(self):
        assert select_dominant_pixel([WHITE, BLACK], [2, 2]) == BLACK
        assert select_dominant_pixel([BLACK, WHITE], [2, 2]) == BLACK

    def test_weight_biases_towards_dark(self):
        # white: 2 * (1 + 2 * 0) = 2, black: 1 * (1 + 2 * 1) = 3
        assert select_dominant_pixel([WHITE, BLACK], [2, 1], weight_c=0.0) == WHITE
        assert select_dominant_pixel([WHITE, BLACK], [2, 1], weight_c=2.0) == BLACK


class TestModeDownscale:
    def test_majority_column(self):
        image = make_raster([[RED], [RED], [RED], [BLUE]])
        out = mode_downscale(image, 1, 1)
        assert out.data.tolist() == [[list(RED)]]

    def test_band_colour_cap(self):
        # only the first n_colors distinct values of a band are tallied
        image = make_raster([[RED], [BLUE], [BLUE], [BLUE]])
        assert mode_downscale(image, 1, 1, n_colors=1).data[0, 0].tolist() == list(RED)
        assert mode_downscale(image, 1, 1, n_colors=2).data[0, 0].tolist() == list(BLUE)

    def test_same_size_returns_copy(self, quadrant_image):
        out = mode_downscale(quadrant_image, 8, 8)
        np.testing.assert_array_equal(out.data, quadrant_image.data)
        assert out.data is not quadrant_image.data

    def test_quadrants_survive(self):
        out = mode_downscale(quadrants(4, 4), 2, 2)
        assert out.data.tolist() == [
            [list(RED), list(GREEN)],
            [list(BLUE), list(WHITE)],
        ]

    def test_output_shape(self, noisy_image):
        out = mode_downscale(noisy_image, 5, 3)
        assert (out.width, out.height) == (5, 3)

    def test_colours_come_from_input(self, noisy_image):
        out = mode_downscale(noisy_image, 7, 4)
        src = {tuple(p) for p in noisy_image.data.reshape(-1, 4).tolist()}
        dst = {tuple(p) for p in out.data.reshape(-1, 4).tolist()}
        assert dst <= src

    def test_alpha_is_part_of_colour(self):
        image = make_raster([[(255, 0, 0, 255)], [(255, 0, 0, 10)], [(255, 0, 0, 10)]])
        out = mode_downscale(image, 1, 1)
        assert out.data[0, 0].tolist() == [255, 0, 0, 10]

    def test_upscale_repeats_pixels(self):
        image = make_raster([[RED, BLUE]])
        out = mode_downscale(image, 4, 1)
        assert out.data[0, :, 2].tolist() == [0, 0, 255, 255]

    def test_input_not_modified(self, noisy_image):
        before = noisy_image.data.copy()
        mode_downscale(noisy_image, 3, 3)
        np.testing.assert_array_equal(noisy_image.data, before)

    @pytest.mark.parametrize("w, h", [(0, 1), (1, 0), (-1, 3)])
    def test_invalid_target(self, w, h):
        with pytest.raises(InvalidDimensions):
            mode_downscale(RasterImage.solid(2, 2, RED), w, h)

    def test_invalid_band_colours(self):
        with pytest.raises(InvalidDimensions):
            mode_downscale(RasterImage.solid(2, 2, RED), 1, 1, n_colors=0)
