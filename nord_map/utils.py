# nord_map/utils.py
from __future__ import annotations

"""
Shared utilities for nord_map.

Includes time formatting, row partitioning for threaded mapping, a colour
usage report and tidy print-based logging.
"""

import os
import sys
from typing import Any, Iterable, List, Tuple

import numpy as np

from .core_types import NameOf, U8Image


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


# Work splitting


def default_workers() -> int:
    """Leave a few cores free for the system; returns a sensible worker count."""
    n = os.cpu_count() or 4
    reserve = 1 if n <= 6 else 2 if n <= 12 else 3 if n <= 18 else 4
    return max(1, n - reserve)


def split_rows_into_parts(height: int, parts: int) -> List[Tuple[int, int]]:
    """Partition range [0, height) into ~parts contiguous [start, end) row spans."""
    if height <= 0:
        return []
    parts = max(1, int(parts))
    step = (height + parts - 1) // parts
    return [(start, min(start + step, height)) for start in range(0, height, step)]


# Reports


def colour_usage_report(rgba: U8Image, name_of: NameOf) -> List[Tuple[str, str, int]]:
    """
    Colour usage for visible pixels (alpha > 0, or all pixels for RGB input).

    Returns a list of (hex, name, count) sorted by count descending.
    """
    if rgba.shape[-1] == 4:
        visible_mask = rgba[..., 3] > 0
    else:
        visible_mask = np.ones(rgba.shape[:-1], dtype=bool)
    if not np.any(visible_mask):
        return []
    flat = rgba[..., :3][visible_mask].reshape(-1, 3)
    uniques, counts = np.unique(flat, axis=0, return_counts=True)
    report: List[Tuple[str, str, int]] = []
    for rgb_row, count in sorted(zip(uniques, counts), key=lambda x: -int(x[1])):
        hex_str = f"#{int(rgb_row[0]):02x}{int(rgb_row[1]):02x}{int(rgb_row[2]):02x}"
        report.append((hex_str, name_of.get(hex_str, "?"), int(count)))
    return report


#  CLI output


def enable_line_buffered_stdout() -> None:
    """
    Enable line-buffered stdout when supported.
    Helps live printing in terminals that expose .reconfigure().
    """
    reconfig = getattr(sys.stdout, "reconfigure", None)
    if callable(reconfig):
        try:
            reconfig(line_buffering=True, write_through=True)
        except (OSError, ValueError):
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
        return f"{value:.3f}".rstrip("0").rstrip(".")
    return str(value)


def key_value_pairs_to_string(
    pairs: Iterable[Tuple[str, Any]], sep: str = "  ", eq: str = ": "
) -> str:
    """Format (name, value) pairs as 'Name: value' blocks separated by sep."""
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
      [map] Palette: 16  Extremes: off  Workers: 6
    Routes to debug_log() when debug=True, else to log().
    """
    line = f"[{section}] {key_value_pairs_to_string(pairs)}"
    (debug_log if debug else log)(line)


def print_banner(title: str) -> None:
    """Section banner."""
    print(f"\n=== {title} ===", flush=True)


def log(message: str) -> None:
    """Plain log line."""
    print(message, flush=True)


def debug_log(message: str) -> None:
    """Debug log line."""
    print(f"[debug] {message}", flush=True)


def error(message: str) -> None:
    """Error log line to stderr."""
    print(f"[error] {message}", file=sys.stderr, flush=True)


__all__ = [
    "format_seconds_compact",
    "format_total_duration_compact",
    "default_workers",
    "split_rows_into_parts",
    "colour_usage_report",
    "enable_line_buffered_stdout",
    "format_bool_on_off",
    "format_number_compact",
    "key_value_pairs_to_string",
    "print_config_line",
    "print_banner",
    "log",
    "debug_log",
    "error",
]
