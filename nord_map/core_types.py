# nord_map/core_types.py
from __future__ import annotations

"""
Core type aliases, small value objects, and lightweight helpers.
"""

from dataclasses import dataclass, replace
from typing import Literal, Mapping, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

# Basic aliases

RGBTuple = Tuple[int, int, int]
RGBATuple = Tuple[int, int, int, int]
HexStr = str

U8Image = NDArray[np.uint8]  # (H, W, 3) or (H, W, 4)
U8Rows = NDArray[np.uint8]  # (N, 3)
IndexArray = NDArray[np.int32]  # (N,)
NameOf = Mapping[HexStr, str]  # "#rrggbb" -> human-readable name

Role = Literal["none", "dark", "light", "accent"]


class InvalidChannelValue(ValueError):
    """A colour channel is not an integer in 0..255."""


# Value objects


@dataclass(frozen=True)
class Color:
    """RGBA colour with 8-bit channels. Alpha defaults to opaque."""

    r: int
    g: int
    b: int
    a: int = 255

    @property
    def rgb(self) -> RGBTuple:
        return (self.r, self.g, self.b)

    def as_tuple(self) -> RGBATuple:
        return (self.r, self.g, self.b, self.a)

    def with_rgb(self, rgb: RGBTuple) -> "Color":
        """Copy with RGB replaced and alpha kept."""
        return replace(self, r=rgb[0], g=rgb[1], b=rgb[2])


@dataclass(frozen=True)
class PaletteEntry:
    """Named palette colour with a semantic role and its colour group."""

    rgb: RGBTuple
    name: str
    role: Role = "none"
    group: str = ""

    @property
    def hex(self) -> HexStr:
        return rgb_to_hex(self.rgb)


ColorLike = Union[Color, Sequence[int]]


# Small helpers


def check_channel(value: object) -> int:
    """Return value as int if it is an integer in 0..255, else raise."""
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise InvalidChannelValue(f"channel must be an int, got {value!r}")
    v = int(value)
    if v < 0 or v > 255:
        raise InvalidChannelValue(f"channel out of range 0..255: {v}")
    return v


def coerce_color(value: ColorLike) -> Color:
    """
    Coerce a Color or a 3/4-length channel sequence into a validated Color.
    Missing alpha means opaque.
    """
    if isinstance(value, Color):
        channels: Sequence[object] = value.as_tuple()
    else:
        channels = tuple(value)
    if len(channels) not in (3, 4):
        raise InvalidChannelValue(f"expected 3 or 4 channels, got {len(channels)}")
    vals = [check_channel(c) for c in channels]
    if len(vals) == 3:
        vals.append(255)
    return Color(vals[0], vals[1], vals[2], vals[3])


def rgb_to_hex(rgb: RGBTuple) -> HexStr:
    """RGB tuple to lowercase hex string '#rrggbb'."""
    return f"#{rgb[0]:02x}{rgb[1]:02x}{rgb[2]:02x}"


def hex_to_rgb(hex_str: str) -> RGBTuple:
    """Parse '#rgb' or '#rrggbb' (case-insensitive) into an RGB tuple."""
    s = hex_str.strip().lower()
    if not s.startswith("#"):
        raise ValueError("hex must start with '#'")
    if len(s) == 4:
        r, g, b = s[1], s[2], s[3]
        s = f"#{r}{r}{g}{g}{b}{b}"
    if len(s) != 7:
        raise ValueError("hex must be '#rrggbb' or '#rgb'")
    return (int(s[1:3], 16), int(s[3:5], 16), int(s[5:7], 16))


def as_u8_channels(arr: np.ndarray) -> np.ndarray:
    """
    Validate an integer array of colour channels and return it as uint8.
    Raises InvalidChannelValue for float dtypes or values outside 0..255.
    """
    a = np.asarray(arr)
    if a.dtype == np.uint8:
        return a
    if not np.issubdtype(a.dtype, np.integer):
        raise InvalidChannelValue(f"expected integer channels, got dtype {a.dtype}")
    if a.size and (int(a.min()) < 0 or int(a.max()) > 255):
        raise InvalidChannelValue(
            f"channel out of range 0..255: min={int(a.min())} max={int(a.max())}"
        )
    return a.astype(np.uint8)


__all__ = [
    # aliases / types
    "RGBTuple",
    "RGBATuple",
    "HexStr",
    "U8Image",
    "U8Rows",
    "IndexArray",
    "NameOf",
    "Role",
    "ColorLike",
    # errors
    "InvalidChannelValue",
    # value objects
    "Color",
    "PaletteEntry",
    # helpers
    "check_channel",
    "coerce_color",
    "rgb_to_hex",
    "hex_to_rgb",
    "as_u8_channels",
]
