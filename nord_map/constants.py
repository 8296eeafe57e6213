# nord_map/constants.py
"""
Tunables shared by the mapper, the pre-filter rules and the CLI.

- Extreme pre-filter thresholds (Rec. 601 luma, 0..255)
- Threaded mapping knobs
- Output naming
"""
from __future__ import annotations

from typing import Tuple

# =========================
# Extreme luminance rules
# =========================
# Off by default: every palette entry is a candidate for every pixel.
EXTREMES_DEFAULT: bool = False
DARK_LUMA_MAX: float = 24.0
LIGHT_LUMA_MIN: float = 232.0

# Rec. 601 weights in thousandths; luma is compared in integers
LUMA_WEIGHTS_MILLI: Tuple[int, int, int] = (299, 587, 114)

# =========================
# Threaded mapping
# =========================
# Images shorter than this run on the calling thread.
THREADED_MIN_ROWS: int = 256
