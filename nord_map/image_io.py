# nord_map/image_io.py
from __future__ import annotations

import io
from pathlib import Path
from typing import List, Sequence, Tuple

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from .core_types import Color, ColorLike, U8Image, coerce_color

"""
Image codec boundary (8-bit RGBA in sRGB).

Decoding converts whatever Pillow reads into 8-bit RGBA; that conversion is
where higher bit depths and palette/greyscale modes are normalised, so the
mapper only ever sees channels in 0..255. Only the first frame is read.
"""

try:
    from PIL import ImageCms  # ICC conversion if profile present
except ImportError:  # pragma: no cover
    ImageCms = None  # type: ignore[assignment]


class DecodeError(Exception):
    """Input bytes are not a readable image."""


class EncodeError(Exception):
    """Pixels could not be encoded or written."""


def _convert_to_srgb_rgba(im: Image.Image) -> Image.Image:
    im = ImageOps.exif_transpose(im)
    icc_bytes = im.info.get("icc_profile")

    if icc_bytes and ImageCms is not None:
        try:
            src_prof = ImageCms.ImageCmsProfile(io.BytesIO(icc_bytes))
            dst_prof = ImageCms.createProfile("sRGB")
            im2 = ImageCms.profileToProfile(
                im.convert("RGBA"),
                src_prof,
                dst_prof,
                renderingIntent=ImageCms.Intent.PERCEPTUAL,
                outputMode="RGBA",
            )
            if im2 is None:
                return im.convert("RGBA")
            return im2
        except (OSError, ImageCms.PyCMSError):
            return im.convert("RGBA")

    return im.convert("RGBA")


def decode_rgba(data: bytes) -> U8Image:
    """Decode image bytes into a uint8 [H,W,4] array. Raises DecodeError."""
    try:
        with Image.open(io.BytesIO(data)) as im0:
            im0.load()
            im = _convert_to_srgb_rgba(im0)
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        SyntaxError,
        ValueError,
    ) as e:
        raise DecodeError(f"cannot decode image: {e}") from e
    return np.array(im, dtype=np.uint8)


def decode_image(data: bytes) -> Tuple[int, int, List[Color]]:
    """Decode image bytes into (width, height, row-major list of Color)."""
    arr = decode_rgba(data)
    height, width = int(arr.shape[0]), int(arr.shape[1])
    pixels = [Color(r, g, b, a) for r, g, b, a in arr.reshape(-1, 4).tolist()]
    return width, height, pixels


def encode_rgba(rgba: np.ndarray, format: str = "PNG") -> bytes:
    """
    Encode a uint8 [H,W,3/4] array. Raises EncodeError.
    WEBP is written lossless so palette colours survive; JPEG is always lossy.
    """
    arr = np.ascontiguousarray(rgba, dtype=np.uint8)
    if arr.ndim != 3 or arr.shape[-1] not in (3, 4):
        raise EncodeError(f"expected (H,W,3/4) pixels, got shape {arr.shape}")
    buf = io.BytesIO()
    try:
        params = {"lossless": True} if format == "WEBP" else {}
        Image.fromarray(arr).save(buf, format=format, **params)
    except (OSError, ValueError, KeyError) as e:
        raise EncodeError(f"cannot encode {format}: {e}") from e
    return buf.getvalue()


def encode_image(
    width: int, height: int, pixels: Sequence[ColorLike], format: str = "PNG"
) -> bytes:
    """Encode a row-major pixel sequence of width*height colours."""
    if width <= 0 or height <= 0:
        raise EncodeError(f"invalid size {width}x{height}")
    if len(pixels) != width * height:
        raise EncodeError(
            f"pixel count {len(pixels)} does not match {width}x{height}"
        )
    flat = [coerce_color(p).as_tuple() for p in pixels]
    arr = np.array(flat, dtype=np.uint8).reshape(height, width, 4)
    return encode_rgba(arr, format=format)


def load_image_rgba(path: Path) -> U8Image:
    """Read and decode a file. FileNotFoundError propagates unchanged."""
    data = Path(path).read_bytes()
    return decode_rgba(data)


def save_image_rgba(path: Path, rgba: np.ndarray) -> Path:
    """Write rgba in the format implied by the path suffix."""
    path = Path(path)
    fmt = Image.registered_extensions().get(path.suffix.lower())
    if fmt is None:
        raise EncodeError(f"unknown output format for {path.name!r}")
    arr = np.asarray(rgba, dtype=np.uint8)
    if fmt == "JPEG" and arr.ndim == 3 and arr.shape[-1] == 4:
        # JPEG has no alpha channel
        arr = arr[..., :3]
    data = encode_rgba(arr, format=fmt)
    try:
        path.write_bytes(data)
    except OSError as e:
        raise EncodeError(f"cannot write {path}: {e}") from e
    return path


__all__ = [
    "DecodeError",
    "EncodeError",
    "decode_rgba",
    "decode_image",
    "encode_rgba",
    "encode_image",
    "load_image_rgba",
    "save_image_rgba",
]
