from __future__ import annotations

"""
Nearest-neighbour resize. Hard edges only: no filtering, channels copied as-is.
"""

import numpy as np

from ..core_types import InvalidDimensions, RasterImage


def _source_indices(n_in: int, n_out: int) -> np.ndarray:
    """floor(dst * n_in / n_out) for every destination index."""
    scale = n_in / n_out
    idx = np.floor(np.arange(n_out, dtype=np.float64) * scale).astype(np.int64)
    return np.minimum(idx, n_in - 1)


def resize_nearest_neighbor(image: RasterImage, new_w: int, new_h: int) -> RasterImage:
    """
    Scale `image` to new_w x new_h by sampling the source pixel at
    (floor(x * in_w / new_w), floor(y * in_h / new_h)).
    """
    new_w, new_h = int(new_w), int(new_h)
    if new_w < 1 or new_h < 1:
        raise InvalidDimensions(f"resize target must be >= 1x1, got {new_w}x{new_h}")

    ys = _source_indices(image.height, new_h)
    xs = _source_indices(image.width, new_w)
    out = image.data[ys[:, None], xs[None, :]]
    return RasterImage(np.ascontiguousarray(out))


__all__ = ["resize_nearest_neighbor"]
