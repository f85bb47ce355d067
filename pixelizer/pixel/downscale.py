from __future__ import annotations

"""
Dominant-colour downscaling.

Two separable passes: each output row takes, per source column, the dominant
colour of its band of source rows; each output column then does the same
across the intermediate raster's columns. A band keeps at most `n_colors`
distinct RGBA values in first-seen order; later novel values are ignored.
"""

import math
from typing import List, Sequence, Tuple

import numpy as np

from ..constants import (
    DOWNSCALE_BASE,
    DOWNSCALE_HALF,
    LUMA_B,
    LUMA_G,
    LUMA_R,
    SCORE_TIE_EPS,
)
from ..core_types import InvalidDimensions, RasterImage, RGBATuple, round_half_up

_TRANSPARENT: RGBATuple = (0, 0, 0, 0)


def estimate_downscale_resolution(w: int, h: int, relative_scale: float) -> int:
    """
    Number of pixel blocks along the longest side.

    longest * 2 / sqrt(longest * relative_scale / 2), rounded, at least 1.
    Larger relative_scale gives a coarser grid (fewer blocks).
    """
    longest = max(int(w), int(h))
    blocks = longest * (
        DOWNSCALE_BASE / math.sqrt(longest * float(relative_scale) * DOWNSCALE_HALF)
    )
    return max(1, round_half_up(blocks))


def _luminance(rgba: Sequence[int]) -> float:
    return LUMA_R * rgba[0] + LUMA_G * rgba[1] + LUMA_B * rgba[2]


def select_dominant_pixel(
    colors: Sequence[RGBATuple], counts: Sequence[int], weight_c: float = 0.0
) -> RGBATuple:
    """
    Pick the representative colour of a band.

    score = count * (1 + weight_c * (1 - lum / 255)); highest wins, and a score
    within 1e-6 of the best goes to the darker candidate. No colours gives
    transparent black.
    """
    if not colors:
        return _TRANSPARENT
    best_idx = 0
    best_score = -math.inf
    best_lum = math.inf
    for i, (color, count) in enumerate(zip(colors, counts)):
        lum = _luminance(color)
        score = count * (1.0 + weight_c * (1.0 - lum / 255.0))
        if score > best_score or (
            abs(score - best_score) < SCORE_TIE_EPS and lum < best_lum
        ):
            best_idx = i
            best_score = score
            best_lum = lum
    return tuple(colors[best_idx])  # type: ignore[return-value]


def _tally_band(band: List[int], n_colors: int) -> Tuple[List[int], List[int]]:
    """
    Distinct packed RGBA keys of a band with occurrence counts.

    Linear scan in first-seen order; once n_colors keys are held, unseen keys
    are dropped.
    """
    keys: List[int] = []
    counts: List[int] = []
    for key in band:
        for i, seen in enumerate(keys):
            if seen == key:
                counts[i] += 1
                break
        else:
            if len(keys) < n_colors:
                keys.append(key)
                counts.append(1)
    return keys, counts


def _pack_rgba(data: np.ndarray) -> np.ndarray:
    arr = data.astype(np.uint32, copy=False)
    return (arr[..., 0] << 24) | (arr[..., 1] << 16) | (arr[..., 2] << 8) | arr[..., 3]


def _unpack_rgba(key: int) -> RGBATuple:
    return ((key >> 24) & 0xFF, (key >> 16) & 0xFF, (key >> 8) & 0xFF, key & 0xFF)


def _band_bounds(n_in: int, n_out: int) -> List[Tuple[int, int]]:
    """[floor(i * s), min(n_in, ceil((i + 1) * s))) for s = n_in / n_out."""
    scale = n_in / n_out
    return [
        (math.floor(i * scale), min(n_in, math.ceil((i + 1) * scale)))
        for i in range(n_out)
    ]


def _reduce_axis0(
    packed: np.ndarray, n_out: int, n_colors: int, weight_c: float
) -> np.ndarray:
    """
    Reduce the first axis of a packed [N, M] key array to n_out rows.
    Returns uint8 [n_out, M, 4].
    """
    n_in, n_lines = packed.shape
    out = np.zeros((n_out, n_lines, 4), dtype=np.uint8)
    bounds = _band_bounds(n_in, n_out)
    # columns as python lists: the scan below is per element
    lines = [packed[:, j].tolist() for j in range(n_lines)]
    for j, line in enumerate(lines):
        for i, (start, end) in enumerate(bounds):
            keys, counts = _tally_band(line[start:end], n_colors)
            colors = [_unpack_rgba(k) for k in keys]
            out[i, j] = select_dominant_pixel(colors, counts, weight_c)
    return out


def mode_downscale(
    image: RasterImage,
    out_w: int,
    out_h: int,
    n_colors: int = 64,
    weight_c: float = 0.0,
) -> RasterImage:
    """
    Downscale by dominant colour: vertical pass first, then horizontal.

    Args:
      image: source raster
      out_w, out_h: target size (>= 1 each)
      n_colors: distinct colours tracked per band
      weight_c: darkness bias in scoring, 0 = plain frequency
    Returns:
      new RasterImage of size out_w x out_h. Same size as the input returns a copy.
    """
    out_w, out_h = int(out_w), int(out_h)
    if out_w < 1 or out_h < 1:
        raise InvalidDimensions(f"downscale target must be >= 1x1, got {out_w}x{out_h}")
    if n_colors < 1:
        raise InvalidDimensions(f"n_colors must be >= 1, got {n_colors}")
    if (out_w, out_h) == (image.width, image.height):
        return image.copy()

    # vertical: bands of rows, per source column -> [out_h, in_w, 4]
    vertical = _reduce_axis0(_pack_rgba(image.data), out_h, n_colors, weight_c)

    # horizontal: bands of columns, per output row -> [out_w, out_h, 4]
    packed_t = _pack_rgba(vertical).T
    horizontal = _reduce_axis0(packed_t, out_w, n_colors, weight_c)
    return RasterImage(np.ascontiguousarray(horizontal.transpose(1, 0, 2)))


__all__ = [
    "estimate_downscale_resolution",
    "select_dominant_pixel",
    "mode_downscale",
]
