# pixelizer/core_types.py
from __future__ import annotations

"""
Core type aliases, value objects, errors and lightweight helpers.
"""

import math
from dataclasses import dataclass, field
from typing import List, Literal, Optional, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from .constants import N_COLORS_MAX, N_COLORS_MIN

# Basic aliases

RGBTuple = Tuple[int, int, int]
RGBATuple = Tuple[int, int, int, int]
HexStr = str
Palette = List[RGBTuple]  # ordered, duplicates allowed

U8Image = NDArray[np.uint8]  # (H, W, 4) RGBA
U8Mask = NDArray[np.uint8]  # (H, W)
Lab = NDArray[np.float64]  # (..., 3) CIE Lab

PaletteMode = Literal["kmeans", "custom"]
PALETTE_MODES: Tuple[str, ...] = ("kmeans", "custom")

# Errors


class PixelizerError(ValueError):
    """Base class for every failure raised by the pixelizer core."""


class InvalidPaletteSpec(PixelizerError):
    """A custom palette token is not a 6-digit hex code, or the list is empty."""


class EmptyPaletteSource(PixelizerError):
    """Palette sampling found no visible (alpha > 0) pixels."""


class InvalidDimensions(PixelizerError):
    """Raster shape, target size or numeric option is out of range."""


# Value objects


@dataclass(frozen=True, eq=False)
class RasterImage:
    """
    Straight (non-premultiplied) RGBA raster, row-major, 4 bytes per pixel.

    `data` is owned by the instance; constructors copy caller buffers and
    every transform in the package returns a new RasterImage.
    """

    data: U8Image  # shape (H, W, 4)

    def __post_init__(self) -> None:
        arr = self.data
        if not isinstance(arr, np.ndarray):
            raise InvalidDimensions("raster data must be a numpy array")
        if arr.dtype != np.uint8 or arr.ndim != 3 or arr.shape[-1] != 4:
            raise InvalidDimensions(
                f"expected uint8 (H,W,4) RGBA raster, got {arr.dtype} {arr.shape}"
            )
        if arr.shape[0] < 1 or arr.shape[1] < 1:
            raise InvalidDimensions(
                f"raster must be at least 1x1, got {arr.shape[1]}x{arr.shape[0]}"
            )

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    @property
    def rgb(self) -> U8Image:
        """(H, W, 3) view of the colour channels."""
        return self.data[..., :3]

    @property
    def alpha(self) -> U8Mask:
        """(H, W) view of the alpha channel."""
        return self.data[..., 3]

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def copy(self) -> "RasterImage":
        return RasterImage(self.data.copy())

    def to_bytes(self) -> bytes:
        """Row-major RGBA bytes, len == width * height * 4."""
        return np.ascontiguousarray(self.data).tobytes()

    @classmethod
    def from_bytes(
        cls,
        pixels: Union[bytes, bytearray, memoryview, Sequence[int]],
        width: int,
        height: int,
    ) -> "RasterImage":
        """Build a raster from a flat RGBA buffer. The buffer is copied."""
        if int(width) < 1 or int(height) < 1:
            raise InvalidDimensions(
                f"width and height must be >= 1, got {width}x{height}"
            )
        if isinstance(pixels, (bytes, bytearray, memoryview)):
            flat = np.frombuffer(pixels, dtype=np.uint8)
        else:
            flat = np.asarray(pixels, dtype=np.uint8).reshape(-1)
        expected = int(width) * int(height) * 4
        if flat.size != expected:
            raise InvalidDimensions(
                f"pixel buffer has {flat.size} bytes, expected {expected} "
                f"for {width}x{height} RGBA"
            )
        return cls(flat.reshape(int(height), int(width), 4).copy())

    @classmethod
    def from_rgb_alpha(
        cls, rgb: U8Image, alpha: Optional[U8Mask] = None
    ) -> "RasterImage":
        """Join an (H,W,3) colour array and optional (H,W) alpha (default opaque)."""
        rgb_u8 = np.asarray(rgb, dtype=np.uint8)
        if rgb_u8.ndim != 3 or rgb_u8.shape[-1] != 3:
            raise InvalidDimensions(f"expected (H,W,3) rgb array, got {rgb_u8.shape}")
        H, W, _ = rgb_u8.shape
        out = np.empty((H, W, 4), dtype=np.uint8)
        out[..., :3] = rgb_u8
        out[..., 3] = 255 if alpha is None else np.asarray(alpha, dtype=np.uint8)
        return cls(out)

    @classmethod
    def solid(cls, width: int, height: int, rgba: RGBATuple) -> "RasterImage":
        """Uniformly filled raster, handy for tests and placeholders."""
        if int(width) < 1 or int(height) < 1:
            raise InvalidDimensions(
                f"width and height must be >= 1, got {width}x{height}"
            )
        out = np.empty((int(height), int(width), 4), dtype=np.uint8)
        out[...] = np.asarray(rgba, dtype=np.uint8)
        return cls(out)


@dataclass(frozen=True)
class PixelizerOptions:
    """Per-call options for process_image(). Absent optionals have fixed defaults."""

    palette_mode: PaletteMode = "kmeans"
    n_colors: int = 16
    should_pixelize: bool = True
    relative_scale: float = 1.0
    weight_c: float = 0.0
    output_size: Optional[int] = None  # None => restore original dimensions
    fix_palette_source: Optional[RasterImage] = field(default=None, repr=False)
    custom_palette_spec: str = ""

    def validate(self) -> None:
        """Reject out-of-range options instead of clamping them."""
        if self.palette_mode not in PALETTE_MODES:
            raise PixelizerError(
                f"palette_mode must be one of {PALETTE_MODES}, got {self.palette_mode!r}"
            )
        if (
            isinstance(self.n_colors, bool)
            or not isinstance(self.n_colors, (int, np.integer))
            or not N_COLORS_MIN <= int(self.n_colors) <= N_COLORS_MAX
        ):
            raise InvalidDimensions(
                f"n_colors must be an integer in [{N_COLORS_MIN}, {N_COLORS_MAX}], "
                f"got {self.n_colors!r}"
            )
        if not math.isfinite(float(self.relative_scale)) or self.relative_scale <= 0:
            raise InvalidDimensions(
                f"relative_scale must be a finite number > 0, got {self.relative_scale!r}"
            )
        if not math.isfinite(float(self.weight_c)):
            raise InvalidDimensions(f"weight_c must be finite, got {self.weight_c!r}")
        if self.output_size is not None and (
            isinstance(self.output_size, bool)
            or not isinstance(self.output_size, (int, np.integer))
            or int(self.output_size) < 1
        ):
            raise InvalidDimensions(
                f"output_size must be None or an integer >= 1, got {self.output_size!r}"
            )


@dataclass(frozen=True)
class PixelizerResult:
    """Final raster plus the palette actually used to produce it."""

    final_image: RasterImage
    palette: Palette


# Small helpers


def round_half_up(value: float) -> int:
    """Round to nearest integer, halves away from -inf (2.5 -> 3, not 2)."""
    return int(math.floor(value + 0.5))


def rgb_to_hex(rgb: RGBTuple) -> HexStr:
    """RGB tuple to uppercase hex string '#RRGGBB'."""
    return f"#{rgb[0]:02X}{rgb[1]:02X}{rgb[2]:02X}"


def palette_to_hex(palette: Sequence[RGBTuple]) -> List[HexStr]:
    """Palette to a list of '#RRGGBB' strings, order preserved."""
    return [rgb_to_hex(c) for c in palette]


def coerce_to_rgb_tuple(value: Union[Sequence[int], NDArray[np.generic]]) -> RGBTuple:
    """
    Coerce a 3-length sequence or array to an (int, int, int) RGB tuple.
    Helpful when extracting values from NumPy rows.
    """
    if isinstance(value, np.ndarray):
        if value.size < 3:
            raise ValueError("array too small for RGB")
        flat = value.reshape(-1)
        return (int(flat[0]), int(flat[1]), int(flat[2]))
    if len(value) < 3:
        raise ValueError("sequence too small for RGB")
    return (int(value[0]), int(value[1]), int(value[2]))


def palette_to_u8_array(palette: Sequence[RGBTuple]) -> NDArray[np.uint8]:
    """Palette to a (P,3) uint8 array."""
    return np.array([list(c) for c in palette], dtype=np.uint8).reshape(-1, 3)


__all__ = [
    # aliases / types
    "RGBTuple",
    "RGBATuple",
    "HexStr",
    "Palette",
    "U8Image",
    "U8Mask",
    "Lab",
    "PaletteMode",
    "PALETTE_MODES",
    # errors
    "PixelizerError",
    "InvalidPaletteSpec",
    "EmptyPaletteSource",
    "InvalidDimensions",
    # value objects
    "RasterImage",
    "PixelizerOptions",
    "PixelizerResult",
    # helpers
    "round_half_up",
    "rgb_to_hex",
    "palette_to_hex",
    "coerce_to_rgb_tuple",
    "palette_to_u8_array",
]
