import io

import numpy as np
import pytest
from PIL import Image, features

from nord_map.core_types import Color
from nord_map.image_io import (
    DecodeError,
    EncodeError,
    decode_image,
    decode_rgba,
    encode_image,
    load_image_rgba,
    save_image_rgba,
)
from nord_map.mapper import PixelMapper
from nord_map.palette_data import NORD_PALETTE


def _png_bytes(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def test_decode_rgb_png_is_opaque_rgba():
    data = _png_bytes(Image.new("RGB", (3, 2), (10, 20, 30)))
    width, height, pixels = decode_image(data)
    assert (width, height) == (3, 2)
    assert len(pixels) == 6
    assert set(pixels) == {Color(10, 20, 30, 255)}


def test_decode_greyscale_normalised_to_rgba():
    data = _png_bytes(Image.new("L", (1, 1), 200))
    arr = decode_rgba(data)
    assert arr.shape == (1, 1, 4)
    assert arr.dtype == np.uint8
    assert arr[0, 0].tolist() == [200, 200, 200, 255]


def test_decode_garbage_raises():
    with pytest.raises(DecodeError):
        decode_image(b"definitely not an image")


def test_decode_truncated_png_raises():
    data = _png_bytes(Image.new("RGB", (64, 64), (1, 2, 3)))
    with pytest.raises(DecodeError):
        decode_rgba(data[:40])


def test_encode_then_decode_keeps_pixels():
    pixels = [Color(0, 0, 0, 255), Color(255, 255, 255, 0)]
    width, height, back = decode_image(encode_image(2, 1, pixels))
    assert (width, height) == (2, 1)
    assert back == pixels


def test_encode_pixel_count_mismatch():
    with pytest.raises(EncodeError):
        encode_image(2, 2, [(0, 0, 0, 255)])


def test_encode_bad_size():
    with pytest.raises(EncodeError):
        encode_image(0, 1, [])


def test_load_missing_file_propagates(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_image_rgba(tmp_path / "missing.png")


def test_save_unknown_suffix(tmp_path):
    with pytest.raises(EncodeError):
        save_image_rgba(tmp_path / "out.nope", np.zeros((1, 1, 4), dtype=np.uint8))


def test_save_jpeg_drops_alpha(tmp_path):
    path = save_image_rgba(tmp_path / "out.jpg", np.zeros((4, 4, 4), dtype=np.uint8))
    with Image.open(path) as im:
        assert im.mode == "RGB"
        assert im.size == (4, 4)


def test_two_by_one_image_end_to_end(tmp_path):
    src = tmp_path / "in.png"
    src.write_bytes(encode_image(2, 1, [(0, 0, 0, 255), (255, 255, 255, 0)]))
    mapped = PixelMapper(NORD_PALETTE).map_rgba(load_image_rgba(src))
    dst = save_image_rgba(tmp_path / "out.png", mapped)
    width, height, pixels = decode_image(dst.read_bytes())
    assert (width, height) == (2, 1)
    assert pixels == [Color(46, 52, 64, 255), Color(236, 239, 244, 0)]


def test_decompression_bomb_is_decode_error(monkeypatch):
    data = _png_bytes(Image.new("RGB", (64, 64), (1, 2, 3)))
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 10)
    with pytest.raises(DecodeError):
        decode_rgba(data)


@pytest.mark.skipif(not features.check("webp"), reason="Pillow built without WebP")
def test_save_webp_keeps_palette_colours(tmp_path):
    rgba = np.zeros((8, 8, 4), dtype=np.uint8)
    rgba[..., 3] = 255
    rgba[:4, :, :3] = (191, 97, 106)
    rgba[4:, :, :3] = (136, 192, 208)
    path = save_image_rgba(tmp_path / "out.webp", rgba)
    back = load_image_rgba(path)
    assert np.array_equal(back, rgba)
