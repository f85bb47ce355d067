from __future__ import annotations

"""
Pixelize stage.

Shrinks a quantized raster onto a coarse grid with the dominant-colour
downscaler, then blows it back up with nearest-neighbour so each grid cell
becomes a hard-edged block.
"""

from typing import Optional, Tuple

from ..constants import MAX_GRID_OVERSCALE
from ..core_types import InvalidDimensions, RasterImage, round_half_up
from ..utils import debug_log, key_value_pairs_to_string
from .downscale import estimate_downscale_resolution, mode_downscale
from .resize import resize_nearest_neighbor


def scale_to_longest(width: int, height: int, longest: int) -> Tuple[int, int]:
    """
    Scale (width, height) by longest / max(width, height), keeping aspect.
    Each side is rounded to nearest and clamped to at least 1.
    """
    ratio = longest / max(width, height)
    return (
        max(1, round_half_up(width * ratio)),
        max(1, round_half_up(height * ratio)),
    )


def pixel_grid_size(width: int, height: int, relative_scale: float) -> Tuple[int, int]:
    """
    Downscale target for a width x height image.

    Raises InvalidDimensions when relative_scale is so small that the grid
    would exceed MAX_GRID_OVERSCALE times the longest side.
    """
    limit = MAX_GRID_OVERSCALE * max(width, height)
    try:
        target = estimate_downscale_resolution(width, height, relative_scale)
    except (OverflowError, ZeroDivisionError):
        target = limit + 1
    if target > limit:
        raise InvalidDimensions(
            f"relative_scale {relative_scale!r} gives a {target}-block grid for a "
            f"{width}x{height} image (limit {limit})"
        )
    return scale_to_longest(width, height, target)


def run_pixelize(
    quantized: RasterImage,
    *,
    relative_scale: float,
    n_colors: int,
    weight_c: float,
    output_size: Optional[int] = None,
    debug: bool = False,
) -> RasterImage:
    """
    Downscale to the pixel grid, then resize to the output size.

    output_size sets the longest side of the result; None restores the
    input dimensions.
    """
    orig_w, orig_h = quantized.width, quantized.height
    down_w, down_h = pixel_grid_size(orig_w, orig_h, relative_scale)
    downscaled = mode_downscale(quantized, down_w, down_h, n_colors, weight_c)

    if output_size:
        final_w, final_h = scale_to_longest(orig_w, orig_h, int(output_size))
    else:
        final_w, final_h = orig_w, orig_h

    if debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Grid", f"{down_w}x{down_h}"),
                    ("Output", f"{final_w}x{final_h}"),
                    ("Band colours", int(n_colors)),
                    ("Weight C", float(weight_c)),
                ]
            )
        )
    return resize_nearest_neighbor(downscaled, final_w, final_h)


__all__ = ["scale_to_longest", "pixel_grid_size", "run_pixelize"]
