from __future__ import annotations

"""
Colour conversions and metrics (sRGB <-> CIE Lab, D65).

Exports:
  rgb_to_linear(srgb)
  linear_to_rgb(linear)
  rgb_to_lab(rgb)
  lab_to_rgb(lab)
  lab_distance_sq(lab1, lab2)

All functions are vectorised over a trailing axis of 3 and work in float64.
"""

from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from .constants import (
    LAB_EPSILON,
    LAB_KAPPA_SLOPE,
    LAB_OFFSET,
    LINEAR_RGB_THRESH,
    REF_WHITE_D65,
    SRGB_GAMMA,
    SRGB_GAMMA_THRESH,
    SRGB_LINEAR_DIV,
    SRGB_OFFSET,
    SRGB_SCALE,
)
from .core_types import Lab, U8Image

# Linear RGB -> XYZ (D65) and its inverse
_RGB_TO_XYZ = np.array(
    [
        [0.4124, 0.3576, 0.1805],
        [0.2126, 0.7152, 0.0722],
        [0.0193, 0.1192, 0.9505],
    ],
    dtype=np.float64,
)
_XYZ_TO_RGB = np.array(
    [
        [3.2406, -1.5372, -0.4986],
        [-0.9689, 1.8758, 0.0415],
        [0.0557, -0.2040, 1.0570],
    ],
    dtype=np.float64,
)
_WHITE = np.array(REF_WHITE_D65, dtype=np.float64)


# sRGB <-> linear


def rgb_to_linear(srgb: np.ndarray) -> NDArray[np.float64]:
    """
    Convert sRGB (non-linear 0..1) to linear RGB (0..1). Vectorised.
    Args:
      srgb: array[...] in 0..1 (float)
    Returns:
      float64 array, same shape
    """
    u = np.asarray(srgb, dtype=np.float64)
    return np.where(
        u > SRGB_GAMMA_THRESH,
        ((u + SRGB_OFFSET) / SRGB_SCALE) ** SRGB_GAMMA,
        u / SRGB_LINEAR_DIV,
    )


def linear_to_rgb(linear: np.ndarray) -> NDArray[np.float64]:
    """Inverse of rgb_to_linear. Negative inputs stay on the linear branch."""
    v = np.asarray(linear, dtype=np.float64)
    with np.errstate(invalid="ignore"):
        encoded = SRGB_SCALE * np.power(
            np.maximum(v, LINEAR_RGB_THRESH), 1.0 / SRGB_GAMMA
        ) - SRGB_OFFSET
    return np.where(v > LINEAR_RGB_THRESH, encoded, SRGB_LINEAR_DIV * v)


# sRGB <-> Lab (D65)


def rgb_to_lab(rgb: np.ndarray) -> Lab:
    """
    sRGB bytes [0..255] to CIE Lab (D65).
    Preserves shape (...,3). Returns float64.
    """
    rgb_f = np.asarray(rgb, dtype=np.float64) / 255.0
    lin = rgb_to_linear(rgb_f)

    xyz = (lin @ _RGB_TO_XYZ.T) / _WHITE
    f = np.where(
        xyz > LAB_EPSILON,
        np.cbrt(xyz),
        LAB_KAPPA_SLOPE * xyz + LAB_OFFSET,
    )

    out = np.empty(f.shape, dtype=np.float64)
    out[..., 0] = 116.0 * f[..., 1] - 16.0
    out[..., 1] = 500.0 * (f[..., 0] - f[..., 1])
    out[..., 2] = 200.0 * (f[..., 1] - f[..., 2])
    return out


def lab_to_rgb(lab: np.ndarray) -> U8Image:
    """
    CIE Lab (D65) to sRGB bytes. Exact inverse chain of rgb_to_lab;
    channels are clamped to [0,255] and rounded to nearest.
    Preserves shape (...,3). Returns uint8.
    """
    lab_f = np.asarray(lab, dtype=np.float64)
    fy = (lab_f[..., 0] + 16.0) / 116.0
    fx = lab_f[..., 1] / 500.0 + fy
    fz = fy - lab_f[..., 2] / 200.0
    f = np.stack([fx, fy, fz], axis=-1)

    cubed = f**3
    xyz = np.where(cubed > LAB_EPSILON, cubed, (f - LAB_OFFSET) / LAB_KAPPA_SLOPE)
    lin = (xyz * _WHITE) @ _XYZ_TO_RGB.T

    srgb = linear_to_rgb(lin) * 255.0
    # floor(x + 0.5): halves round up
    return np.floor(np.clip(srgb, 0.0, 255.0) + 0.5).astype(np.uint8)


def lab_distance_sq(
    lab1: Sequence[float] | np.ndarray, lab2: Sequence[float] | np.ndarray
) -> NDArray[np.float64] | float:
    """
    Squared Euclidean distance in Lab. Broadcasts like NumPy.
    Never square-rooted: all comparisons in the package use this value.
    """
    diff = np.asarray(lab1, dtype=np.float64) - np.asarray(lab2, dtype=np.float64)
    d2 = np.sum(diff * diff, axis=-1)
    if np.ndim(d2) == 0:
        return float(d2)
    return d2


__all__ = [
    "rgb_to_linear",
    "linear_to_rgb",
    "rgb_to_lab",
    "lab_to_rgb",
    "lab_distance_sq",
]
