# pixelizer/palette_data.py
from __future__ import annotations

"""
Palette sources and builders.

Exports:
  parse_custom_palette(spec) -> Palette
  sample_lab_pixels(image, max_samples=5000) -> Lab [N,3]
  build_kmeans_palette(source, n_colors, debug=False) -> Palette
  build_palette(image, options, debug=False) -> Palette

Notes:
  - custom: comma separated 6-digit hex codes, optional '#', order and duplicates kept.
  - kmeans: strided sample of visible pixels, clustered in Lab, centroids back to RGB.
"""

import re
from typing import List

from .colour_convert import lab_to_rgb, rgb_to_lab
from .constants import MAX_PALETTE_SAMPLES
from .core_types import (
    EmptyPaletteSource,
    InvalidPaletteSpec,
    Lab,
    Palette,
    PixelizerOptions,
    RasterImage,
    RGBTuple,
    coerce_to_rgb_tuple,
)
from .kmeans import kmeans
from .utils import debug_log, key_value_pairs_to_string

_HEX6 = re.compile(r"[0-9a-fA-F]{6}")


def _decode_hex6(token: str) -> RGBTuple:
    """Decode exactly six hex digits (no prefix, no whitespace)."""
    if not _HEX6.fullmatch(token):
        raise InvalidPaletteSpec(
            f"Invalid hex code format. Use 6-digit codes like FFFFFF. Got: {token!r}"
        )
    return (int(token[0:2], 16), int(token[2:4], 16), int(token[4:6], 16))


def hex_to_rgb(token: str) -> RGBTuple:
    """Parse 'RRGGBB' or '#RRGGBB' (case-insensitive) into an RGB tuple."""
    s = token.strip()
    return _decode_hex6(s[1:] if s.startswith("#") else s)


def parse_custom_palette(spec: str) -> Palette:
    """
    Parse a comma separated hex list into a palette.

    Tokens are trimmed, a single leading '#' is dropped and empty tokens are
    skipped. Any remaining malformed token fails the whole parse.
    """
    tokens: List[str] = []
    for raw in spec.split(","):
        tok = raw.strip()
        if tok.startswith("#"):
            tok = tok[1:]
        if tok:
            tokens.append(tok)

    if not tokens:
        raise InvalidPaletteSpec("Custom palette cannot be empty.")
    return [_decode_hex6(tok) for tok in tokens]


def sample_lab_pixels(
    image: RasterImage, max_samples: int = MAX_PALETTE_SAMPLES
) -> Lab:
    """
    Strided sample of visible pixels, converted to Lab.

    Stride is max(1, total // max_samples) over raster order; pixels with
    alpha == 0 are skipped after striding, so fewer than max_samples may come back.
    """
    flat = image.data.reshape(-1, 4)
    stride = max(1, flat.shape[0] // int(max_samples))
    picked = flat[::stride]
    visible = picked[picked[:, 3] > 0]
    return rgb_to_lab(visible[:, :3]).reshape(-1, 3)


def build_kmeans_palette(
    source: RasterImage, n_colors: int, *, debug: bool = False
) -> Palette:
    """Cluster sampled Lab pixels of `source` and return the centroids as RGB."""
    samples = sample_lab_pixels(source)
    if samples.shape[0] == 0:
        raise EmptyPaletteSource(
            "No non-transparent pixels found for palette generation."
        )

    centroids = kmeans(samples, int(n_colors))
    pal_rgb = lab_to_rgb(centroids).reshape(-1, 3)
    palette: Palette = [coerce_to_rgb_tuple(row) for row in pal_rgb]

    if debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Palette source", f"{source.width}x{source.height}"),
                    ("Samples", int(samples.shape[0])),
                    ("Requested", int(n_colors)),
                    ("Clusters", len(palette)),
                ]
            )
        )
    return palette


def build_palette(
    image: RasterImage, options: PixelizerOptions, *, debug: bool = False
) -> Palette:
    """
    Resolve the palette for one pipeline run.

    custom -> parse options.custom_palette_spec
    kmeans -> cluster options.fix_palette_source if given, else `image`
    """
    if options.palette_mode == "custom":
        palette = parse_custom_palette(options.custom_palette_spec)
        if debug:
            debug_log(f"custom palette: {len(palette)} colours")
        return palette

    source = options.fix_palette_source
    if source is None:
        source = image
    return build_kmeans_palette(source, options.n_colors, debug=debug)


__all__ = [
    "hex_to_rgb",
    "parse_custom_palette",
    "sample_lab_pixels",
    "build_kmeans_palette",
    "build_palette",
]
