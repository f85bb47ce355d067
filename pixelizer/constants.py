# pixelizer/constants.py
"""
Global tunables used across the project.

- Colour space (D65 white, sRGB gamma, Lab knee)
- Palette sampling and K-Means
- Downscale scoring
- Option ranges and CLI defaults
"""
from __future__ import annotations

from typing import Tuple

# =========================
# Colour space (sRGB, D65)
# =========================
SRGB_GAMMA_THRESH: float = 0.04045
SRGB_LINEAR_DIV: float = 12.92
SRGB_GAMMA: float = 2.4
SRGB_OFFSET: float = 0.055
SRGB_SCALE: float = 1.055
LINEAR_RGB_THRESH: float = 0.0031308

REF_WHITE_D65: Tuple[float, float, float] = (0.95047, 1.0, 1.08883)
LAB_EPSILON: float = 0.008856
LAB_KAPPA_SLOPE: float = 7.787
LAB_OFFSET: float = 16.0 / 116.0

# ======================
# Palette derivation
# ======================
MAX_PALETTE_SAMPLES: int = 5000
KMEANS_MAX_ITERATIONS: int = 20
KMEANS_CONVERGENCE_SQ: float = 1e-4

# ======================
# Downscale (mode pass)
# ======================
LUMA_R: float = 0.2126
LUMA_G: float = 0.7152
LUMA_B: float = 0.0722
SCORE_TIE_EPS: float = 1e-6
DOWNSCALE_BASE: float = 2.0
DOWNSCALE_HALF: float = 0.5
# grid longest side may not exceed this multiple of the image's longest side
MAX_GRID_OVERSCALE: int = 4

# ======================
# Options
# ======================
N_COLORS_MIN: int = 1
N_COLORS_MAX: int = 256
CLI_N_COLORS_MIN: int = 2
CLI_N_COLORS_MAX: int = 64

DEFAULT_N_COLORS: int = 16
DEFAULT_RELATIVE_SCALE: float = 1.0
DEFAULT_WEIGHT_C: float = 0.0

IMAGE_EXTS: Tuple[str, ...] = (".png", ".jpg", ".jpeg", ".webp", ".bmp", ".gif")
PIXELATED_PREFIX: str = "pixelated_"
QUANTIZED_PREFIX: str = "quantized_"

__all__ = [
    "SRGB_GAMMA_THRESH",
    "SRGB_LINEAR_DIV",
    "SRGB_GAMMA",
    "SRGB_OFFSET",
    "SRGB_SCALE",
    "LINEAR_RGB_THRESH",
    "REF_WHITE_D65",
    "LAB_EPSILON",
    "LAB_KAPPA_SLOPE",
    "LAB_OFFSET",
    "MAX_PALETTE_SAMPLES",
    "KMEANS_MAX_ITERATIONS",
    "KMEANS_CONVERGENCE_SQ",
    "LUMA_R",
    "LUMA_G",
    "LUMA_B",
    "SCORE_TIE_EPS",
    "DOWNSCALE_BASE",
    "DOWNSCALE_HALF",
    "MAX_GRID_OVERSCALE",
    "N_COLORS_MIN",
    "N_COLORS_MAX",
    "CLI_N_COLORS_MIN",
    "CLI_N_COLORS_MAX",
    "DEFAULT_N_COLORS",
    "DEFAULT_RELATIVE_SCALE",
    "DEFAULT_WEIGHT_C",
    "IMAGE_EXTS",
    "PIXELATED_PREFIX",
    "QUANTIZED_PREFIX",
]
