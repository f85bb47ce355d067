# pixelizer/image_io.py
from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from .core_types import RasterImage

"""
Image I/O helpers: decode any Pillow-readable file to a straight RGBA raster
and encode rasters back to PNG. No colour management beyond sRGB as stored.
"""


def load_raster(path: Path) -> RasterImage:
    """Open `path`, apply EXIF orientation and return it as RGBA."""
    with Image.open(path) as im0:
        im = ImageOps.exif_transpose(im0).convert("RGBA")
    arr = np.array(im, dtype=np.uint8)
    return RasterImage(arr)


def save_raster(path: Path, image: RasterImage) -> Path:
    """Write `image` as an RGBA PNG. Non-.png suffixes are replaced."""
    if path.suffix.lower() != ".png":
        path = path.with_suffix(".png")
    Image.fromarray(np.ascontiguousarray(image.data)).save(path)
    return path


def is_image_file(path: Path) -> bool:
    try:
        with Image.open(path) as im:
            im.seek(0)
            im.load()
        return True
    except (UnidentifiedImageError, OSError):
        return False


__all__ = [
    "load_raster",
    "save_raster",
    "is_image_file",
]
