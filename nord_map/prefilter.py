# nord_map/prefilter.py
from __future__ import annotations

"""
Pre-filter rules evaluated before nearest-colour search.

A rule pairs a vectorised predicate over RGB rows with a fixed palette index.
Rules are checked in list order and the first match decides the pixel; rows no
rule matches fall through to the L1 search.

Exports:
  Rule
  luma_milli(rgb) -> int64 [N], luma in thousandths
  luma(rgb) -> float64 [N]
  extreme_rules(palette, dark_max, light_min) -> [near_black, near_white]
  apply_rules(rules, rgb) -> (indices int32 [N], matched bool [N])
"""

from dataclasses import dataclass
from typing import Callable, List, Sequence, Tuple

import numpy as np

from .constants import DARK_LUMA_MAX, LIGHT_LUMA_MIN, LUMA_WEIGHTS_MILLI
from .core_types import IndexArray, U8Rows
from .palette_data import Palette

Predicate = Callable[[U8Rows], np.ndarray]


@dataclass(frozen=True)
class Rule:
    """Predicate -> palette index."""

    name: str
    predicate: Predicate
    target: int


def luma_milli(rgb: U8Rows) -> np.ndarray:
    """Rec. 601 luma of uint8 [N,3] rows in thousandths, int64 [N] in 0..255000."""
    rows = np.asarray(rgb).reshape(-1, 3).astype(np.int64)
    return rows @ np.array(LUMA_WEIGHTS_MILLI, dtype=np.int64)


def luma(rgb: U8Rows) -> np.ndarray:
    """Rec. 601 luma of uint8 [N,3] rows, float64 [N] in 0..255."""
    return luma_milli(rgb) / 1000.0


def extreme_rules(
    palette: Palette,
    dark_max: float = DARK_LUMA_MAX,
    light_min: float = LIGHT_LUMA_MIN,
) -> List[Rule]:
    """
    Force near-black pixels to the darkest entry and near-white pixels to the
    lightest one. Thresholds are inclusive and compared in thousandths of
    a luma step, so a grey of exactly dark_max counts as near-black.
    """
    if dark_max >= light_min:
        raise ValueError(
            f"dark_max ({dark_max}) must be below light_min ({light_min})"
        )
    dark_idx = palette.darkest_index()
    light_idx = palette.lightest_index()
    dark_milli = int(round(dark_max * 1000))
    light_milli = int(round(light_min * 1000))
    return [
        Rule(
            name="near_black",
            predicate=lambda rgb: luma_milli(rgb) <= dark_milli,
            target=dark_idx,
        ),
        Rule(
            name="near_white",
            predicate=lambda rgb: luma_milli(rgb) >= light_milli,
            target=light_idx,
        ),
    ]


def apply_rules(rules: Sequence[Rule], rgb: U8Rows) -> Tuple[IndexArray, np.ndarray]:
    """
    Evaluate rules over uint8 [N,3] rows.

    Returns:
      indices: int32 [N], the matched rule's target (-1 where nothing matched)
      matched: bool [N]
    """
    rows = np.asarray(rgb).reshape(-1, 3)
    n = rows.shape[0]
    indices = np.full((n,), -1, dtype=np.int32)
    matched = np.zeros((n,), dtype=bool)
    for rule in rules:
        if n == 0:
            break
        hit = np.asarray(rule.predicate(rows), dtype=bool) & ~matched
        indices[hit] = rule.target
        matched |= hit
    return indices, matched


__all__ = ["Rule", "Predicate", "luma_milli", "luma", "extreme_rules", "apply_rules"]
