from __future__ import annotations

"""
Nearest-palette quantization in Lab.

Every visible pixel is replaced by the palette entry with the smallest squared
Lab distance (first entry wins on ties) and keeps its original alpha.
Fully transparent pixels become (0, 0, 0, 0).

Lookups are memoised per exact RGB value, keyed by the packed 24-bit integer
(r << 16 | g << 8 | b). The cache lives for one call unless the caller passes
its own dict in.
"""

from typing import Dict, Optional, Sequence

import numpy as np

from .colour_convert import rgb_to_lab
from .core_types import RasterImage, RGBTuple, palette_to_u8_array
from .utils import (
    debug_log,
    key_value_pairs_to_string,
    nearest_palette_indices_lab_distance,
)

QuantCache = Dict[int, int]  # packed rgb -> palette index
# max colour x palette pairs per distance block
_PAIR_BUDGET = 1 << 20


def pack_rgb(rgb: np.ndarray) -> np.ndarray:
    """uint8 [...,3] -> uint32 [...] keys (r << 16 | g << 8 | b)."""
    arr = rgb.astype(np.uint32, copy=False)
    return (arr[..., 0] << 16) | (arr[..., 1] << 8) | arr[..., 2]


def unpack_rgb(keys: np.ndarray) -> np.ndarray:
    """Inverse of pack_rgb. Returns uint8 [...,3]."""
    k = np.asarray(keys, dtype=np.uint32)
    return np.stack([(k >> 16) & 0xFF, (k >> 8) & 0xFF, k & 0xFF], axis=-1).astype(
        np.uint8
    )


def _fill_cache(keys: np.ndarray, pal_lab: np.ndarray, cache: QuantCache) -> None:
    """Resolve every key not yet cached. Keys must be unique."""
    missing = np.array([k for k in keys.tolist() if k not in cache], dtype=np.uint32)
    if missing.size == 0:
        return
    rows = max(1, _PAIR_BUDGET // max(1, pal_lab.shape[0]))
    for start in range(0, missing.size, rows):
        part = missing[start : start + rows]
        src_lab = rgb_to_lab(unpack_rgb(part)).reshape(-1, 3)
        nearest = nearest_palette_indices_lab_distance(src_lab, pal_lab)
        cache.update(zip(part.tolist(), nearest.tolist()))


def apply_palette_quantization(
    image: RasterImage,
    palette: Sequence[RGBTuple],
    *,
    cache: Optional[QuantCache] = None,
    debug: bool = False,
) -> RasterImage:
    """
    Map every pixel of `image` to its nearest palette colour.

    Args:
      image: source raster, not modified
      palette: ordered RGB entries (at least one)
      cache: optional packed-rgb -> palette-index memo; a fresh dict per call
             when omitted. Reusing one across calls is only valid for the same palette.
      debug: print unique-colour and cache statistics
    Returns:
      new RasterImage of the same size
    """
    if len(palette) == 0:
        raise ValueError("palette must contain at least one colour")
    if cache is None:
        cache = {}

    pal_rgb = palette_to_u8_array(palette)
    pal_lab = rgb_to_lab(pal_rgb).reshape(-1, 3)

    src = image.data
    out = np.zeros_like(src)
    visible = src[..., 3] != 0
    if not np.any(visible):
        return RasterImage(out)

    keys = pack_rgb(src[..., :3][visible])
    uniq_keys, inverse = np.unique(keys, return_inverse=True)
    _fill_cache(uniq_keys, pal_lab, cache)

    uniq_idx = np.fromiter(
        (cache[k] for k in uniq_keys.tolist()), dtype=np.int64, count=uniq_keys.size
    )
    mapped = pal_rgb[uniq_idx[inverse.reshape(-1)]]

    out_rgb = out[..., :3]
    out_rgb[visible] = mapped
    out[..., 3] = np.where(visible, src[..., 3], 0)

    if debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Quantize", f"{image.width}x{image.height}"),
                    ("Visible", int(keys.size)),
                    ("Unique colours", int(uniq_keys.size)),
                    ("Cache size", len(cache)),
                    ("Palette", len(palette)),
                ]
            )
        )
    return RasterImage(out)


__all__ = [
    "QuantCache",
    "pack_rgb",
    "unpack_rgb",
    "apply_palette_quantization",
]
