# pixelizer/utils.py
from __future__ import annotations

"""
Shared utilities for pixelizer.

Includes nearest-colour search in Lab, colour usage reporting, duration
formatting, and tidy logging used by the CLI and by debug output of the core.
"""

import io
import sys
import threading
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, List, TextIO, Tuple

import numpy as np

from .core_types import Lab, RasterImage, rgb_to_hex


#  Time formatting


def format_seconds_compact(seconds: float) -> str:
    """Human-friendly seconds: '<ms>ms', '<s>s', or 'Mm Ss'."""
    if seconds < 1.0:
        return f"{seconds * 1000.0:.1f}ms"
    if seconds < 60.0:
        return f"{seconds:.3f}s"
    minutes = int(seconds // 60)
    return f"{minutes}m {seconds - 60 * minutes:.1f}s"


def format_total_duration_compact(seconds: float) -> str:
    """Compact total duration: 'Mm Ss', 'Ss.s', or 'ms'."""
    if seconds >= 60.0:
        minutes = int(seconds // 60)
        rem = int(round(seconds - 60 * minutes))
        return f"{minutes}m {rem}s"
    if seconds >= 1.0:
        return f"{seconds:.1f}s"
    return f"{seconds * 1000.0:.1f}ms"


# Colour helpers


def nearest_palette_indices_lab_distance(src_lab: Lab, pal_lab: Lab) -> np.ndarray:
    """
    For each source Lab row, pick the nearest palette row by squared distance.
    Ties resolve to the lowest palette index.
    """
    diff = pal_lab[None, :, :] - src_lab[:, None, :]
    dist2 = np.sum(diff * diff, axis=2)
    return np.argmin(dist2, axis=1).astype(np.int64)


def colour_usage_report(image: RasterImage) -> List[Tuple[str, int]]:
    """
    Count visible pixels per RGB colour.

    Returns a list of ('#RRGGBB', count) sorted by count descending,
    then by hex for a stable order.
    """
    visible_mask = image.alpha > 0
    if not np.any(visible_mask):
        return []
    flat = image.rgb[visible_mask].reshape(-1, 3)
    uniques, counts = np.unique(flat, axis=0, return_counts=True)
    report = [
        (rgb_to_hex((int(r), int(g), int(b))), int(n))
        for (r, g, b), n in zip(uniques.tolist(), counts.tolist())
    ]
    report.sort(key=lambda item: (-item[1], item[0]))
    return report


#  CLI / progress logging


def enable_line_buffered_stdout() -> None:
    """
    Enable line-buffered stdout when supported.
    Helps live progress printing in terminals that expose .reconfigure().
    """
    reconfig = getattr(sys.stdout, "reconfigure", None)
    if callable(reconfig):
        try:
            reconfig(line_buffering=True, write_through=True)
        except (ValueError, OSError):
            pass


# Pretty logging


def format_bool_on_off(value: Any) -> str:
    """Pretty boolean: 'on'/'off' for bools; str(value) otherwise."""
    if isinstance(value, bool):
        return "on" if value else "off"
    return str(value)


def format_number_compact(value: Any) -> str:
    """Pretty number: 1,234 style for ints; compact for floats; passthrough otherwise."""
    if isinstance(value, int):
        return f"{value:,}"
    if isinstance(value, float):
        text = f"{value:.3f}".rstrip("0").rstrip(".")
        return text
    return str(value)


def key_value_pairs_to_string(
    pairs: Iterable[Tuple[str, Any]], sep: str = "  ", eq: str = ": "
) -> str:
    """
    Format (name, value) pairs as 'Name: value' blocks separated by sep.
    Uses format_bool_on_off / format_number_compact for readability.
    """
    out: List[str] = []
    for name, value in pairs:
        display = (
            format_bool_on_off(value)
            if isinstance(value, bool)
            else format_number_compact(value)
        )
        out.append(f"{name}{eq}{display}")
    return sep.join(out)


def print_config_line(
    section: str, pairs: Iterable[Tuple[str, Any]], debug: bool
) -> None:
    """
    Emit a single human-readable config line, e.g.:
      [run] Palette: kmeans  Colours: 16  Pixelize: on  Scale: 1
    Routes to debug_log() when debug=True, else to log().
    """
    line = f"[{section}] {key_value_pairs_to_string(pairs)}"
    (debug_log if debug else log)(line)


_capture = threading.local()


def _log_stream() -> TextIO:
    return getattr(_capture, "stream", None) or sys.stdout


@contextmanager
def capture_logs() -> Iterator[io.StringIO]:
    """
    Collect log lines printed by the current thread into a buffer.
    Other threads keep writing to stdout, so workers can each hold one.
    """
    buf = io.StringIO()
    previous = getattr(_capture, "stream", None)
    _capture.stream = buf
    try:
        yield buf
    finally:
        _capture.stream = previous


def print_banner(title: str) -> None:
    """Section banner."""
    print(f"\n=== {title} ===", file=_log_stream(), flush=True)


def log(message: str) -> None:
    """Plain log line."""
    print(message, file=_log_stream(), flush=True)


def debug_log(message: str) -> None:
    """Debug log line."""
    print(f"[debug] {message}", file=_log_stream(), flush=True)


def warn(message: str) -> None:
    """Warning log line."""
    print(f"[warn] {message}", file=_log_stream(), flush=True)


def error(message: str) -> None:
    """Error log line to stderr."""
    print(f"[error] {message}", file=sys.stderr, flush=True)


__all__ = [
    # formatting
    "format_seconds_compact",
    "format_total_duration_compact",
    "format_bool_on_off",
    "format_number_compact",
    # colour helpers
    "nearest_palette_indices_lab_distance",
    "colour_usage_report",
    # logging / progress
    "enable_line_buffered_stdout",
    "capture_logs",
    "key_value_pairs_to_string",
    "print_config_line",
    "print_banner",
    "log",
    "debug_log",
    "warn",
    "error",
]
