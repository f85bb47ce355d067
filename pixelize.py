#!/usr/bin/env python3
"""
pixelize.py
Reduce RGBA images to a small palette and, optionally, a coarse pixel grid.

Usage:
  python pixelize.py INPUT [--outdir DIR] --palette-mode [kmeans|custom] --colors N
      --palette "FF0000,00FF00" --fix-palette REF --no-pixelize --relative-scale F
      --weight-c F --output-size N --jobs J --debug

Palette modes:
  kmeans : cluster a sample of the image (or of --fix-palette) in CIE Lab.
  custom : use the comma separated hex colours given with --palette.

Input:
  Any Pillow-readable image, or a folder of them. Alpha is preserved.
  Fully transparent pixels stay transparent.

Output:
  PNG. Writes pixelated_<stem>.png (or quantized_<stem>.png with --no-pixelize)
  next to INPUT, or into --outdir.
"""

from __future__ import annotations

import argparse
import sys
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional, Sequence

from pixelizer.constants import (
    CLI_N_COLORS_MAX,
    CLI_N_COLORS_MIN,
    DEFAULT_N_COLORS,
    DEFAULT_RELATIVE_SCALE,
    DEFAULT_WEIGHT_C,
    IMAGE_EXTS,
    PIXELATED_PREFIX,
    QUANTIZED_PREFIX,
)
from pixelizer.core_types import (
    PixelizerError,
    PixelizerOptions,
    RasterImage,
    palette_to_hex,
)
from pixelizer.image_io import load_raster, save_raster
from pixelizer.pipeline import process_image
from pixelizer.utils import (
    # formatting
    format_total_duration_compact,
    format_seconds_compact,
    colour_usage_report,
    # pretty logging
    print_banner,
    log,
    debug_log,
    error,
    print_config_line,
    enable_line_buffered_stdout,
    capture_logs,
    warn,
)

# CLI args & small helpers


def _colour_count(text: str) -> int:
    """argparse type for --colors: integer in the supported range."""
    try:
        value = int(text, 10)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {text!r}")
    if not CLI_N_COLORS_MIN <= value <= CLI_N_COLORS_MAX:
        raise argparse.ArgumentTypeError(
            f"Number of colors must be between {CLI_N_COLORS_MIN} and {CLI_N_COLORS_MAX}."
        )
    return value


def _positive_int(text: str) -> int:
    try:
        value = int(text, 10)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {text!r}")
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {value}")
    return value


def build_arg_parser() -> argparse.ArgumentParser:
    """CLI definition; split out so tests can parse argument lists directly."""
    parser = argparse.ArgumentParser(
        prog="pixelize",
        description="Quantize image(s) to a small palette and pixelize them.",
    )
    parser.add_argument("src", type=Path, help="Input image or folder")
    parser.add_argument(
        "--outdir", type=Path, default=None, help="Output directory (optional)"
    )
    parser.add_argument(
        "--palette-mode",
        choices=["kmeans", "custom"],
        default="kmeans",
        help="Where the palette comes from.",
    )
    parser.add_argument(
        "--colors",
        type=_colour_count,
        default=DEFAULT_N_COLORS,
        help=f"Palette size for kmeans ({CLI_N_COLORS_MIN}-{CLI_N_COLORS_MAX}). "
        "Also caps colours tracked per downscale band.",
    )
    parser.add_argument(
        "--palette",
        default="",
        help='Custom palette, e.g. "#FF0000, 00ff00, 0000FF" (custom mode).',
    )
    parser.add_argument(
        "--fix-palette",
        type=Path,
        default=None,
        help="Derive the kmeans palette from this image instead of the input.",
    )
    parser.add_argument(
        "--no-pixelize",
        dest="pixelize",
        action="store_false",
        help="Only quantize; skip downscale and resize.",
    )
    parser.add_argument(
        "--relative-scale",
        type=float,
        default=DEFAULT_RELATIVE_SCALE,
        help="Pixel grid granularity. Larger => coarser blocks.",
    )
    parser.add_argument(
        "--weight-c",
        type=float,
        default=DEFAULT_WEIGHT_C,
        help="Bias towards darker colours when picking block colours. 0 = plain mode.",
    )
    parser.add_argument(
        "--output-size",
        type=_positive_int,
        default=None,
        help="Longest side of the output. Omit to keep the input size.",
    )
    parser.add_argument(
        "--jobs", type=int, default=1, help="Files processed in parallel"
    )
    parser.add_argument("--debug", action="store_true", help="Verbose stage details")
    return parser


def parse_cli_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """
    Parse CLI arguments.

    Returns:
      argparse.Namespace with:
        src: Path to image or folder
        outdir: optional Path for outputs
        palette_mode: "kmeans" | "custom"
        colors: int palette size
        palette: custom palette string
        fix_palette: optional Path of a palette reference image
        pixelize: bool
        relative_scale, weight_c: float
        output_size: optional int
        jobs: parallel file workers
        debug: bool
    """
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    if args.palette_mode == "custom" and not args.palette.strip():
        parser.error("Custom palette cannot be empty.")
    return args


def output_path_for(src_path: Path, outdir: Optional[Path], pixelize: bool) -> Path:
    """pixelated_<stem>.png or quantized_<stem>.png, in outdir or next to src."""
    prefix = PIXELATED_PREFIX if pixelize else QUANTIZED_PREFIX
    folder = outdir if outdir is not None else src_path.parent
    return folder / f"{prefix}{src_path.stem}.png"


def _is_output_artifact(path: Path) -> bool:
    name = path.name
    return name.startswith(PIXELATED_PREFIX) or name.startswith(QUANTIZED_PREFIX)


def options_from_args(
    args: argparse.Namespace, fix_palette: Optional[RasterImage]
) -> PixelizerOptions:
    return PixelizerOptions(
        palette_mode=args.palette_mode,
        n_colors=args.colors,
        should_pixelize=args.pixelize,
        relative_scale=args.relative_scale,
        weight_c=args.weight_c,
        output_size=args.output_size,
        fix_palette_source=fix_palette,
        custom_palette_spec=args.palette,
    )


# Per-file processing


def _process_single_image(
    src_path: Path, options: PixelizerOptions, outdir: Optional[Path], debug: bool
) -> Path:
    """
    Process a single image path end-to-end:
      load -> palette -> quantize -> pixelize -> save -> report.
    """
    t_start = time.perf_counter()
    out_path = output_path_for(src_path, outdir, options.should_pixelize)

    print_banner(src_path.name)

    image = load_raster(src_path)
    t_loaded = time.perf_counter()
    if debug:
        debug_log(f"Loaded {image.width}x{image.height}")

    result = process_image(image, options, debug=debug)
    t_processed = time.perf_counter()

    if outdir is not None:
        outdir.mkdir(parents=True, exist_ok=True)
    out_path = save_raster(out_path, result.final_image)
    t_saved = time.perf_counter()

    final = result.final_image
    log(
        f"Wrote {out_path.name} | size={final.width}x{final.height} "
        f"| palette_size={len(result.palette)}"
    )
    log("Palette: " + " ".join(palette_to_hex(result.palette)))

    if debug:
        debug_log("Colours used:")
        for hex_code, count in colour_usage_report(final):
            debug_log(f"  {hex_code}: {count:,}")
        debug_log(
            f"Total {format_total_duration_compact(t_saved - t_start)}  "
            f"(load={format_seconds_compact(t_loaded - t_start)}, "
            f"process={format_seconds_compact(t_processed - t_loaded)}, "
            f"save={format_seconds_compact(t_saved - t_processed)})"
        )
    else:
        log(f"Total time {format_total_duration_compact(t_saved - t_start)}")
    return out_path


def _process_one_live(
    path: Path, options: PixelizerOptions, outdir: Optional[Path], debug: bool
) -> bool:
    """Process a single file, stream logs to stdout, report failures. True on success."""
    try:
        _process_single_image(path, options, outdir, debug)
    except (PixelizerError, OSError) as e:
        error(f"{path.name}: {e}")
        return False
    return True


def _process_one_captured(
    path: Path, options: PixelizerOptions, outdir: Optional[Path], debug: bool
) -> tuple[str, bool]:
    """
    Process a single file with stdout capture.

    Useful for concurrent execution where output should be printed in order.
    """
    with capture_logs() as buf:
        ok = _process_one_live(path, options, outdir, debug)
    return buf.getvalue(), ok


def _collect_images(folder: Path) -> List[Path]:
    files = [
        p
        for p in folder.iterdir()
        if p.is_file()
        and p.suffix.lower() in IMAGE_EXTS
        and not _is_output_artifact(p)
    ]
    files.sort(key=lambda p: p.name.lower())
    return files


# Entry point


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    CLI entry point.

    Handles single file or folder. In folder mode supports --jobs parallelism
    while preserving readable output ordering. Returns the process exit code.
    """
    enable_line_buffered_stdout()
    args = parse_cli_args(argv)

    print_config_line(
        "run",
        [
            ("Palette", args.palette_mode),
            ("Colours", args.colors),
            ("Pixelize", args.pixelize),
            ("Scale", args.relative_scale),
            ("Weight C", args.weight_c),
            ("Output size", args.output_size or "-"),
            ("Jobs", args.jobs),
        ],
        debug=False,
    )

    src = args.src
    if not src.exists():
        print(f"error: not found: {src}", file=sys.stderr, flush=True)
        return 2

    fix_palette: Optional[RasterImage] = None
    if args.fix_palette is not None:
        if not args.fix_palette.exists():
            print(f"error: not found: {args.fix_palette}", file=sys.stderr, flush=True)
            return 2
        try:
            fix_palette = load_raster(args.fix_palette)
        except OSError as e:
            error(f"{args.fix_palette.name}: {e}")
            return 2
        if args.debug:
            debug_log(
                f"palette reference {args.fix_palette.name} "
                f"{fix_palette.width}x{fix_palette.height}"
            )

    options = options_from_args(args, fix_palette)
    try:
        options.validate()
    except PixelizerError as e:
        error(str(e))
        return 2

    if not src.is_dir():
        return 0 if _process_one_live(src, options, args.outdir, args.debug) else 1

    files = _collect_images(src)
    if not files:
        warn(f"no images found in {src}")
        return 0
    if args.debug:
        debug_log(f"Images: {len(files)}  Jobs: {args.jobs}")

    if args.jobs <= 1:
        results = [
            _process_one_live(p, options, args.outdir, args.debug) for p in files
        ]
    else:
        with ThreadPoolExecutor(max_workers=args.jobs) as ex:
            futures = [
                ex.submit(_process_one_captured, p, options, args.outdir, args.debug)
                for p in files
            ]
            blocks = [f.result() for f in futures]
        print("".join(text for text, _ in blocks), end="", flush=True)
        results = [ok for _, ok in blocks]

    return 0 if all(results) else 1


if __name__ == "__main__":
    sys.exit(main())
