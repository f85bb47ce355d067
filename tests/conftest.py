"""Pytest configuration and fixtures."""

from typing import Sequence, Tuple

import numpy as np
import pytest

from pixelizer.core_types import RasterImage

RED = (255, 0, 0, 255)
GREEN = (0, 255, 0, 255)
BLUE = (0, 0, 255, 255)
WHITE = (255, 255, 255, 255)
BLACK = (0, 0, 0, 255)


def make_raster(rows: Sequence[Sequence[Tuple[int, int, int, int]]]) -> RasterImage:
    """Build a raster from nested rows of RGBA tuples."""
    return RasterImage(np.array(rows, dtype=np.uint8))


def quadrants(
    width: int,
    height: int,
    colors: Sequence[Tuple[int, int, int, int]] = (RED, GREEN, BLUE, WHITE),
) -> RasterImage:
    """Raster split into TL, TR, BL, BR quadrants of the given colours."""
    data = np.zeros((height, width, 4), dtype=np.uint8)
    hh, hw = height // 2, width // 2
    data[:hh, :hw] = colors[0]
    data[:hh, hw:] = colors[1]
    data[hh:, :hw] = colors[2]
    data[hh:, hw:] = colors[3]
    return RasterImage(data)


@pytest.fixture
def solid_red():
    """10x10 opaque red raster."""
    return RasterImage.solid(10, 10, RED)


@pytest.fixture
def quadrant_image():
    """8x8 raster with red, green, blue and white quadrants."""
    return quadrants(8, 8)


@pytest.fixture
def noisy_image():
    """Reproducible 24x16 random RGB raster, fully opaque."""
    rng = np.random.default_rng(1234)
    rgb = rng.integers(0, 256, size=(16, 24, 3), dtype=np.uint8)
    return RasterImage.from_rgb_alpha(rgb)
