# nord_map/__init__.py
"""
nord_map package.

Purpose:
  Recolour images to the Nord palette by nearest L1 colour. See nordify.py for CLI.

Public API:
  PixelMapper   : palette mapper (map_pixel, map_buffer, map_rgba).
  MapperConfig  : mapper options (extreme pre-filter, thresholds, workers).
  map_pixel     : map one colour onto the full Nord palette.
  map_buffer    : map a pixel sequence onto the full Nord palette.
  NORD_PALETTE  : the 16-entry palette, nord0..nord15.
  build_palette : palette from a selection of Nord colour groups.
  core_types    : Color, PaletteEntry, InvalidChannelValue and helpers.
  image_io      : Pillow codec boundary (DecodeError, EncodeError).
  prefilter     : pre-filter rules run before nearest-colour search.
  utils         : shared helpers (formatting, logging).

Quick start:
  from nord_map import PixelMapper, NORD_PALETTE
  PixelMapper(NORD_PALETTE).map_pixel((10, 10, 10, 255))
"""

__version__ = "0.1.0"

from . import core_types
from . import palette_data
from . import prefilter
from . import image_io
from . import utils

from .core_types import Color, PaletteEntry, InvalidChannelValue
from .palette_data import NORD_PALETTE, Palette, build_palette, palette_from_rgb
from .mapper import MapperConfig, PixelMapper, map_buffer, map_pixel

__all__ = [
    "__version__",
    "core_types",
    "palette_data",
    "prefilter",
    "image_io",
    "utils",
    "Color",
    "PaletteEntry",
    "InvalidChannelValue",
    "NORD_PALETTE",
    "Palette",
    "build_palette",
    "palette_from_rgb",
    "MapperConfig",
    "PixelMapper",
    "map_pixel",
    "map_buffer",
]
