# nord_map/palette_data.py
from __future__ import annotations

"""
Nord palette definitions and builders.

Exports:
  NORD_POLAR_NIGHT, NORD_SNOW_STORM, NORD_FROST, NORD_AURORA
      list[tuple[str, str]]  # [(hex, name), ...]
  SCHEMES: dict[str, (role, colours)] in default order
  Palette: immutable ordered palette
  build_palette(schemes=None) -> Palette
  palette_from_rgb(rgbs, roles=None) -> Palette
  NORD_PALETTE: the full 16-entry Palette (nord0..nord15)
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .constants import LUMA_WEIGHTS_MILLI
from .core_types import (
    NameOf,
    PaletteEntry,
    RGBTuple,
    Role,
    U8Rows,
    coerce_color,
    hex_to_rgb,
)


NORD_POLAR_NIGHT: List[Tuple[str, str]] = [
    ("#2e3440", "Polar Night 0"),
    ("#3b4252", "Polar Night 1"),
    ("#434c5e", "Polar Night 2"),
    ("#4c566a", "Polar Night 3"),
]

NORD_SNOW_STORM: List[Tuple[str, str]] = [
    ("#d8dee9", "Snow Storm 0"),
    ("#e5e9f0", "Snow Storm 1"),
    ("#eceff4", "Snow Storm 2"),
]

NORD_FROST: List[Tuple[str, str]] = [
    ("#8fbcbb", "Frost Teal"),
    ("#88c0d0", "Frost Cyan"),
    ("#81a1c1", "Frost Light Blue"),
    ("#5e81ac", "Frost Blue"),
]

NORD_AURORA: List[Tuple[str, str]] = [
    ("#bf616a", "Aurora Red"),
    ("#d08770", "Aurora Orange"),
    ("#ebcb8b", "Aurora Yellow"),
    ("#a3be8c", "Aurora Green"),
    ("#b48ead", "Aurora Purple"),
]

# group -> (role, colours); iteration order is nord0..nord15
SCHEMES: Dict[str, Tuple[Role, List[Tuple[str, str]]]] = {
    "polar_night": ("dark", NORD_POLAR_NIGHT),
    "snow_storm": ("light", NORD_SNOW_STORM),
    "frost": ("accent", NORD_FROST),
    "aurora": ("accent", NORD_AURORA),
}


@dataclass(frozen=True)
class Palette:
    """Fixed, ordered palette. Order decides ties in nearest-colour search."""

    items: Tuple[PaletteEntry, ...]

    def __post_init__(self) -> None:
        if len(self.items) == 0:
            raise ValueError("palette must contain at least one entry")

    def entries(self) -> Tuple[PaletteEntry, ...]:
        return self.items

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[PaletteEntry]:
        return iter(self.items)

    def __getitem__(self, index: int) -> PaletteEntry:
        return self.items[index]

    def rgb_array(self) -> U8Rows:
        """uint8 [P,3] in palette order. A fresh array per call."""
        return np.array([e.rgb for e in self.items], dtype=np.uint8).reshape(-1, 3)

    def rgb_set(self) -> set:
        return {e.rgb for e in self.items}

    def index_of(self, rgb: RGBTuple) -> int:
        """First index whose RGB equals rgb. Raises ValueError if absent."""
        for i, e in enumerate(self.items):
            if e.rgb == tuple(rgb):
                return i
        raise ValueError(f"{rgb} is not in the palette")

    def name_of(self) -> NameOf:
        """'#rrggbb' -> name. First entry wins for duplicate colours."""
        out: Dict[str, str] = {}
        for e in self.items:
            out.setdefault(e.hex, e.name)
        return out

    def _extreme_index(self, role: Role, lightest: bool) -> int:
        lum = self.rgb_array().astype(np.int64) @ np.array(
            LUMA_WEIGHTS_MILLI, dtype=np.int64
        )
        pool = [i for i, e in enumerate(self.items) if e.role == role]
        if not pool:
            pool = list(range(len(self.items)))
        # strict comparison keeps the earliest entry on equal luma
        best = pool[0]
        for i in pool[1:]:
            if (lum[i] > lum[best]) if lightest else (lum[i] < lum[best]):
                best = i
        return best

    def darkest_index(self) -> int:
        """Lowest-luma entry tagged 'dark', or lowest overall when none is."""
        return self._extreme_index("dark", lightest=False)

    def lightest_index(self) -> int:
        """Highest-luma entry tagged 'light', or highest overall when none is."""
        return self._extreme_index("light", lightest=True)


def build_palette(schemes: Optional[Iterable[str]] = None) -> Palette:
    """
    Build a Palette from Nord colour groups.

    Args:
      schemes: group names in the order wanted; None means all four groups in
               nord0..nord15 order. Repeated names are ignored.
    Raises:
      ValueError on an unknown group name or an empty selection.
    """
    names = list(SCHEMES) if schemes is None else list(schemes)
    seen: List[str] = []
    for name in names:
        if name not in SCHEMES:
            raise ValueError(
                f"unknown scheme {name!r}; expected one of {', '.join(SCHEMES)}"
            )
        if name not in seen:
            seen.append(name)

    items: List[PaletteEntry] = []
    for group in seen:
        role, colours = SCHEMES[group]
        for hx, label in colours:
            items.append(
                PaletteEntry(rgb=hex_to_rgb(hx), name=label, role=role, group=group)
            )
    return Palette(tuple(items))


def palette_from_rgb(
    rgbs: Sequence[Sequence[int]], roles: Optional[Sequence[Role]] = None
) -> Palette:
    """Ad-hoc palette from raw RGB triples, named by position."""
    if roles is not None and len(roles) != len(rgbs):
        raise ValueError("roles must match rgbs in length")
    items: List[PaletteEntry] = []
    for i, rgb in enumerate(rgbs):
        c = coerce_color(rgb)
        items.append(
            PaletteEntry(
                rgb=c.rgb,
                name=f"Colour {i}",
                role=roles[i] if roles is not None else "none",
            )
        )
    return Palette(tuple(items))


NORD_PALETTE: Palette = build_palette()


__all__ = [
    "NORD_POLAR_NIGHT",
    "NORD_SNOW_STORM",
    "NORD_FROST",
    "NORD_AURORA",
    "SCHEMES",
    "Palette",
    "build_palette",
    "palette_from_rgb",
    "NORD_PALETTE",
]
