#!/usr/bin/env python3
"""
nordify.py
Recolour an image to the Nord palette by nearest L1 (Manhattan) RGB distance.

Usage:
  python nordify.py INPUT OUTPUT [--scheme NAME ...] [--extremes]
                    [--dark-max N] [--light-min N] [--workers N] [--debug]

Schemes:
  polar_night, snow_storm, frost, aurora. Repeat --scheme to combine groups;
  the order given is the tie-break order. Omit for the full 16-colour palette.

Input:
  Any Pillow-readable image. Only the first frame is used. Alpha is preserved.

Output:
  Format follows the OUTPUT suffix. PNG and WEBP (written lossless) keep the
  palette colours exactly. JPEG is lossy and drops alpha, so a .jpg output
  will contain colours near, but not in, the palette.

Exit status:
  0 success, 1 read/decode/encode failure, 2 input not found or bad arguments.
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path
from typing import List, Optional

import numpy as np

from nord_map.constants import DARK_LUMA_MAX, LIGHT_LUMA_MIN
from nord_map.image_io import DecodeError, EncodeError, load_image_rgba, save_image_rgba
from nord_map.mapper import MapperConfig, PixelMapper
from nord_map.palette_data import SCHEMES, build_palette
from nord_map.utils import (
    colour_usage_report,
    debug_log,
    default_workers,
    enable_line_buffered_stdout,
    error,
    format_seconds_compact,
    format_total_duration_compact,
    key_value_pairs_to_string,
    log,
    print_banner,
    print_config_line,
)


def parse_cli_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse CLI arguments.

    Returns:
      argparse.Namespace with:
        src: input image Path
        dst: output image Path
        schemes: None or list of Nord group names
        extremes: bool, near-black/near-white pre-filter
        dark_max / light_min: luma thresholds for the pre-filter
        workers: threads for row-partitioned mapping
        debug: bool for verbose timing details
    """
    parser = argparse.ArgumentParser(
        prog="nordify",
        description="Recolour an image to the Nord palette.",
    )
    parser.add_argument("src", type=Path, help="Input image")
    parser.add_argument("dst", type=Path, help="Output image")
    parser.add_argument(
        "--scheme",
        dest="schemes",
        action="append",
        choices=list(SCHEMES),
        default=None,
        help="Nord colour group to include (repeatable). Omit for all groups.",
    )
    parser.add_argument(
        "--extremes",
        action="store_true",
        help="Force near-black/near-white pixels to the darkest/lightest colour.",
    )
    parser.add_argument(
        "--dark-max",
        type=float,
        default=DARK_LUMA_MAX,
        help="Luma at or below which a pixel is near-black (with --extremes).",
    )
    parser.add_argument(
        "--light-min",
        type=float,
        default=LIGHT_LUMA_MIN,
        help="Luma at or above which a pixel is near-white (with --extremes).",
    )
    parser.add_argument(
        "--workers", type=int, default=default_workers(), help="Mapping threads"
    )
    parser.add_argument("--debug", action="store_true", help="Verbose details")
    args = parser.parse_args(argv)
    if args.extremes and args.dark_max >= args.light_min:
        parser.error("--dark-max must be below --light-min")
    if args.workers < 1:
        parser.error("--workers must be at least 1")
    return args


def run(args: argparse.Namespace) -> int:
    """Load -> map -> save -> report. Returns the process exit status."""
    t_start = time.perf_counter()
    src: Path = args.src
    dst: Path = args.dst

    if not src.is_file():
        error(f"not found: {src}")
        return 2

    palette = build_palette(args.schemes)
    config = MapperConfig(
        extremes=args.extremes,
        dark_max=args.dark_max,
        light_min=args.light_min,
        workers=args.workers,
    )
    mapper = PixelMapper(palette, config)

    print_banner(src.name)
    print_config_line(
        "map",
        [
            ("Palette", len(palette)),
            ("Extremes", config.extremes),
            ("Workers", config.workers),
        ],
        debug=args.debug,
    )

    try:
        rgba = load_image_rgba(src)
    except DecodeError as e:
        error(str(e))
        return 1
    except FileNotFoundError:
        error(f"not found: {src}")
        return 2
    except OSError as e:
        error(f"cannot read {src}: {e}")
        return 1
    t_loaded = time.perf_counter()
    height, width = int(rgba.shape[0]), int(rgba.shape[1])
    if args.debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Loaded", f"{width}x{height}"),
                    ("Alpha=0", int(np.count_nonzero(rgba[..., 3] == 0))),
                ]
            )
        )

    mapped = mapper.map_rgba(rgba)
    t_mapped = time.perf_counter()

    try:
        out_path = save_image_rgba(dst, mapped)
    except EncodeError as e:
        error(str(e))
        return 1
    t_saved = time.perf_counter()

    log(f"Wrote {out_path.name} | size={width}x{height} | palette_size={len(palette)}")
    log("Colours used:")
    for hex_code, name, count in colour_usage_report(mapped, palette.name_of()):
        log(f"  {hex_code}  {name}: {count:,}")

    if args.debug:
        map_secs = t_mapped - t_loaded
        if map_secs > 0:
            rate_mpx_s = (width * height / map_secs) / 1e6
            debug_log(f"throughput {rate_mpx_s:.2f} MPx/s")
        debug_log(
            f"Total {format_total_duration_compact(t_saved - t_start)}  "
            f"(load={format_seconds_compact(t_loaded - t_start)}, "
            f"map={format_seconds_compact(map_secs)}, "
            f"save={format_seconds_compact(t_saved - t_mapped)})"
        )
    else:
        log(f"Total time {format_total_duration_compact(t_saved - t_start)}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    enable_line_buffered_stdout()
    args = parse_cli_args(argv)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
