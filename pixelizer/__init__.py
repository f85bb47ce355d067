"""
pixelizer package.

Purpose:
  Reduce an RGBA image to a small palette and, optionally, a coarse pixel grid.
  See pixelize.py for the CLI.

Public API:
  process_image  : full run (palette -> quantize -> pixelize) on a RasterImage.
  RasterImage    : straight-alpha RGBA raster value object.
  PixelizerOptions / PixelizerResult : per-call options and result.
  colour_convert : sRGB <-> CIE Lab transforms and squared Lab distance.
  palette_data   : custom hex palettes and K-Means palettes.
  kmeans         : deterministic Lab clustering.
  quantize       : nearest-palette mapping with per-RGB memo.
  pixel          : dominant-colour downscale and nearest-neighbour resize.
  image_io       : Pillow decode/encode adapters.
  utils          : shared helpers (reporting, formatting, logging).

Quick start:
  from pixelizer import PixelizerOptions, process_image
  from pixelizer.image_io import load_raster, save_raster
"""

__version__ = "0.1.0"

# Re-export namespaces for convenience.
from . import colour_convert
from . import core_types
from . import kmeans
from . import palette_data
from . import quantize
from . import utils
from . import pixel
from . import image_io

from .core_types import (  # noqa: E402
    EmptyPaletteSource,
    InvalidDimensions,
    InvalidPaletteSpec,
    PixelizerError,
    PixelizerOptions,
    PixelizerResult,
    RasterImage,
)
from .pipeline import process_image  # noqa: E402

__all__ = [
    "__version__",
    "colour_convert",
    "core_types",
    "kmeans",
    "palette_data",
    "quantize",
    "utils",
    "pixel",
    "image_io",
    "RasterImage",
    "PixelizerOptions",
    "PixelizerResult",
    "PixelizerError",
    "InvalidPaletteSpec",
    "EmptyPaletteSource",
    "InvalidDimensions",
    "process_image",
]
