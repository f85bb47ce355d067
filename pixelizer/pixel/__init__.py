"""
Pixel-grid API.

Provides:
  run_pixelize(quantized, *, relative_scale, n_colors, weight_c, output_size=None, debug=False) -> RasterImage
    Shrink a quantized raster onto a coarse grid and scale it back up.

    Args:
      quantized      : RasterImage already restricted to the palette
      relative_scale : float > 0, larger gives a coarser grid
      n_colors       : int, distinct colours tracked per downscale band
      weight_c       : float, bias towards darker colours (0 = plain mode)
      output_size    : int|None, longest side of the result; None keeps the input size
      debug          : bool, print grid and output sizes

    Returns:
      RasterImage of the requested output size.

  mode_downscale(image, out_w, out_h, n_colors=64, weight_c=0.0) -> RasterImage
  estimate_downscale_resolution(w, h, relative_scale) -> int
  select_dominant_pixel(colors, counts, weight_c=0.0) -> RGBA tuple
  resize_nearest_neighbor(image, new_w, new_h) -> RasterImage

Notes:
  - Downscale runs vertically, then horizontally.
  - Resizing never interpolates, so block edges stay hard.
"""

from .downscale import (
    estimate_downscale_resolution,
    mode_downscale,
    select_dominant_pixel,
)
from .resize import resize_nearest_neighbor
from .run import pixel_grid_size, run_pixelize, scale_to_longest

__all__ = [
    "run_pixelize",
    "pixel_grid_size",
    "scale_to_longest",
    "mode_downscale",
    "estimate_downscale_resolution",
    "select_dominant_pixel",
    "resize_nearest_neighbor",
]
