# nord_map/mapper.py
from __future__ import annotations

"""
Nearest-colour mapper.

Every pixel is replaced by the palette entry with the smallest L1 (Manhattan)
distance over RGB. Alpha never takes part in the distance and is copied through
unchanged. Ties go to the earliest palette entry. Optional pre-filter rules
(see prefilter.py) are checked first.

Steps for a buffer or image:
  1) validate channels (fail before producing any output)
  2) unique colours with inverse index
  3) pre-filter rules, then L1 search for the rest
  4) materialise per pixel

Exports:
  MapperConfig
  PixelMapper(palette, config, rules=None)
      .map_pixel(color) -> Color
      .map_buffer(pixels) -> list[Color]
      .map_rgba(image) -> uint8 [H,W,C]
      .index_rows(rgb) -> int32 [N]
  l1_distances(src_rgb, pal_rgb) -> int32 [N,P]
  nearest_palette_indices_l1(src_rgb, pal_rgb) -> int32 [N]
  map_pixel / map_buffer: module-level shortcuts over the Nord palette
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

import numpy as np

from .constants import (
    DARK_LUMA_MAX,
    EXTREMES_DEFAULT,
    LIGHT_LUMA_MIN,
    THREADED_MIN_ROWS,
)
from .core_types import (
    Color,
    ColorLike,
    IndexArray,
    U8Image,
    U8Rows,
    as_u8_channels,
    coerce_color,
)
from .palette_data import NORD_PALETTE, Palette
from .prefilter import Rule, apply_rules, extreme_rules
from .utils import split_rows_into_parts

# rows per distance block; bounds the [chunk,P,3] int32 temporary
_DISTANCE_CHUNK = 200_000


@dataclass(frozen=True)
class MapperConfig:
    """
    extremes  : force near-black/near-white pixels to the darkest/lightest entry
    dark_max  : luma at or below which a pixel counts as near-black
    light_min : luma at or above which a pixel counts as near-white
    workers   : threads for row-partitioned image mapping (1 = calling thread)
    """

    extremes: bool = EXTREMES_DEFAULT
    dark_max: float = DARK_LUMA_MAX
    light_min: float = LIGHT_LUMA_MIN
    workers: int = 1


def l1_distances(src_rgb: U8Rows, pal_rgb: U8Rows) -> np.ndarray:
    """|dr| + |dg| + |db| for every (source, palette) pair. int32 [N,P]."""
    src = np.asarray(src_rgb).reshape(-1, 3).astype(np.int32)
    pal = np.asarray(pal_rgb).reshape(-1, 3).astype(np.int32)
    return np.abs(src[:, None, :] - pal[None, :, :]).sum(axis=2, dtype=np.int32)


def nearest_palette_indices_l1(src_rgb: U8Rows, pal_rgb: U8Rows) -> IndexArray:
    """
    For each source row, index of the palette row with minimum L1 distance.
    np.argmin keeps the first minimum, so ties resolve to the lowest index.
    """
    src = np.asarray(src_rgb).reshape(-1, 3)
    out = np.empty((src.shape[0],), dtype=np.int32)
    for i in range(0, src.shape[0], _DISTANCE_CHUNK):
        block = src[i : i + _DISTANCE_CHUNK]
        out[i : i + block.shape[0]] = np.argmin(l1_distances(block, pal_rgb), axis=1)
    return out


class PixelMapper:
    """Maps colours onto a fixed palette. Holds no per-call state."""

    def __init__(
        self,
        palette: Palette = NORD_PALETTE,
        config: MapperConfig = MapperConfig(),
        rules: Optional[Sequence[Rule]] = None,
    ) -> None:
        self.palette = palette
        self.config = config
        if rules is None:
            rules = (
                extreme_rules(palette, config.dark_max, config.light_min)
                if config.extremes
                else []
            )
        for rule in rules:
            if not 0 <= rule.target < len(palette):
                raise ValueError(
                    f"rule {rule.name!r} targets index {rule.target} "
                    f"outside palette of {len(palette)}"
                )
        self.rules: tuple = tuple(rules)
        self._pal_rgb = palette.rgb_array()
        self._pal_rgb.setflags(write=False)
        self._pal_tuples = [e.rgb for e in palette]

    # Selection

    def _select(self, rows: U8Rows) -> IndexArray:
        """Palette index for each unique RGB row."""
        indices, matched = apply_rules(self.rules, rows)
        rest = ~matched
        if np.any(rest):
            indices[rest] = nearest_palette_indices_l1(rows[rest], self._pal_rgb)
        return indices

    def index_rows(self, rgb: U8Rows) -> IndexArray:
        """Palette index per uint8 [N,3] row. Each distinct colour is scored once."""
        rows = np.asarray(rgb, dtype=np.uint8).reshape(-1, 3)
        if rows.shape[0] == 0:
            return np.zeros((0,), dtype=np.int32)
        unique_rgb, inverse_idx = np.unique(rows, axis=0, return_inverse=True)
        chosen = self._select(unique_rgb)
        return chosen[inverse_idx.reshape(-1)]

    # Public operations

    def map_pixel(self, color: ColorLike) -> Color:
        """Closest palette colour with the input's alpha."""
        c = coerce_color(color)
        idx = int(self._select(np.array([c.rgb], dtype=np.uint8))[0])
        return c.with_rgb(self._pal_tuples[idx])

    def map_buffer(self, pixels: Iterable[ColorLike]) -> List[Color]:
        """
        Map a row-major pixel sequence. All pixels are validated before any is
        mapped, so a bad channel raises without partial output.
        """
        colors = [coerce_color(p) for p in pixels]
        if not colors:
            return []
        rgb = np.array([c.rgb for c in colors], dtype=np.uint8)
        chosen = self.index_rows(rgb).tolist()
        return [c.with_rgb(self._pal_tuples[j]) for c, j in zip(colors, chosen)]

    def _map_rows(self, arr: np.ndarray) -> U8Image:
        out = arr.copy()
        chosen = self.index_rows(arr[..., :3].reshape(-1, 3))
        out[..., :3] = self._pal_rgb[chosen].reshape(arr.shape[:-1] + (3,))
        return out

    def map_rgba(self, image: np.ndarray) -> U8Image:
        """
        Map an integer [H,W,3] or [H,W,4] image. Returns a new uint8 array of the
        same shape; channel 3 (alpha) is copied unchanged.
        """
        arr = as_u8_channels(image)
        if arr.ndim != 3 or arr.shape[-1] not in (3, 4):
            raise TypeError(f"expected (H,W,3/4) image, got shape {arr.shape}")
        height = int(arr.shape[0])
        workers = int(self.config.workers)
        if workers <= 1 or height < THREADED_MIN_ROWS:
            return self._map_rows(arr)

        spans = split_rows_into_parts(height, workers)
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(self._map_rows, arr[s:e]) for s, e in spans]
            parts = [f.result() for f in futures]
        return np.concatenate(parts, axis=0)


# Shortcuts over the built-in palette

_DEFAULT_MAPPER: Optional[PixelMapper] = None


def _default_mapper() -> PixelMapper:
    global _DEFAULT_MAPPER
    if _DEFAULT_MAPPER is None:
        _DEFAULT_MAPPER = PixelMapper(NORD_PALETTE)
    return _DEFAULT_MAPPER


def map_pixel(color: ColorLike) -> Color:
    """Map one colour onto the Nord palette (no pre-filter rules)."""
    return _default_mapper().map_pixel(color)


def map_buffer(pixels: Iterable[ColorLike]) -> List[Color]:
    """Map a pixel sequence onto the Nord palette (no pre-filter rules)."""
    return _default_mapper().map_buffer(pixels)


__all__ = [
    "MapperConfig",
    "PixelMapper",
    "l1_distances",
    "nearest_palette_indices_l1",
    "map_pixel",
    "map_buffer",
]
