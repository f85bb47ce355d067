from __future__ import annotations

"""
End-to-end pixelizer run.

  build palette -> quantize -> (optional) pixelize -> result

Pure and synchronous: inputs are never modified and no state survives the call.
"""

from .core_types import PixelizerOptions, PixelizerResult, RasterImage
from .palette_data import build_palette
from .pixel.run import pixel_grid_size, run_pixelize
from .quantize import apply_palette_quantization


def process_image(
    image: RasterImage, options: PixelizerOptions, *, debug: bool = False
) -> PixelizerResult:
    """
    Quantize `image` to a palette and optionally pixelize it.

    Args:
      image: decoded straight-alpha RGBA raster
      options: palette source, colour count and pixel-grid settings
      debug: print per-stage statistics
    Returns:
      PixelizerResult with the final raster and the palette used.
    Raises:
      InvalidDimensions, InvalidPaletteSpec, EmptyPaletteSource (all PixelizerError)
    """
    options.validate()
    if options.should_pixelize:
        # fail before any palette work
        pixel_grid_size(image.width, image.height, options.relative_scale)

    palette = build_palette(image, options, debug=debug)
    final = apply_palette_quantization(image, palette, debug=debug)

    if options.should_pixelize:
        final = run_pixelize(
            final,
            relative_scale=options.relative_scale,
            n_colors=options.n_colors,
            weight_c=options.weight_c,
            output_size=options.output_size,
            debug=debug,
        )

    return PixelizerResult(final_image=final, palette=list(palette))


__all__ = ["process_image"]
