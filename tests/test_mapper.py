import numpy as np
import pytest

from nord_map.core_types import Color, InvalidChannelValue
from nord_map.mapper import (
    MapperConfig,
    PixelMapper,
    l1_distances,
    map_buffer,
    map_pixel,
    nearest_palette_indices_l1,
)
from nord_map.palette_data import NORD_PALETTE, palette_from_rgb

DARK = (46, 52, 64)
LIGHT = (236, 239, 244)


@pytest.fixture
def mapper():
    return PixelMapper(NORD_PALETTE)


@pytest.fixture
def random_pixels():
    rng = np.random.default_rng(1234)
    return rng.integers(0, 256, size=(500, 4), dtype=np.int64).tolist()


def test_l1_distances_match_hand_computation():
    d = l1_distances(np.array([[10, 10, 10]], dtype=np.uint8), np.array([DARK, LIGHT], dtype=np.uint8))
    assert d.tolist() == [[132, 689]]


def test_l1_does_not_wrap_uint8():
    d = l1_distances(np.array([[0, 0, 0]], dtype=np.uint8), np.array([[255, 255, 255]], dtype=np.uint8))
    assert d.tolist() == [[765]]


def test_two_entry_palette_scenario():
    pal = palette_from_rgb([DARK, LIGHT], roles=["dark", "light"])
    out = PixelMapper(pal).map_pixel((10, 10, 10, 255))
    assert out == Color(46, 52, 64, 255)


def test_tie_goes_to_first_entry():
    a, b = (100, 100, 110), (100, 110, 100)
    px = (100, 100, 100, 10)
    assert PixelMapper(palette_from_rgb([a, b])).map_pixel(px) == Color(*a, 10)
    assert PixelMapper(palette_from_rgb([b, a])).map_pixel(px) == Color(*b, 10)


def test_duplicate_entries_resolve_to_first_index():
    pal = palette_from_rgb([(100, 100, 100), (100, 100, 100), (0, 0, 0)])
    idx = PixelMapper(pal).index_rows(np.array([[100, 100, 100]], dtype=np.uint8))
    assert idx.tolist() == [0]


def test_nearest_indices_tie_order():
    pal = np.array([[0, 0, 10], [0, 10, 0], [10, 0, 0]], dtype=np.uint8)
    src = np.array([[0, 0, 0], [5, 5, 5]], dtype=np.uint8)
    assert nearest_palette_indices_l1(src, pal).tolist() == [0, 0]


def test_full_image_scenario(mapper):
    out = mapper.map_buffer([(0, 0, 0, 255), (255, 255, 255, 0)])
    assert len(out) == 2
    assert out[0] == Color(*DARK, 255)
    assert out[1] == Color(*LIGHT, 0)


def test_closure_and_alpha(mapper, random_pixels):
    rgb_set = NORD_PALETTE.rgb_set()
    out = mapper.map_buffer(random_pixels)
    assert len(out) == len(random_pixels)
    for src, dst in zip(random_pixels, out):
        assert dst.rgb in rgb_set
        assert dst.a == src[3]


def test_buffer_matches_per_pixel(mapper, random_pixels):
    assert mapper.map_buffer(random_pixels) == [mapper.map_pixel(p) for p in random_pixels]


def test_palette_colours_are_fixed_points(mapper):
    for entry in NORD_PALETTE:
        assert mapper.map_pixel(entry.rgb + (77,)) == Color(*entry.rgb, 77)


def test_idempotent(mapper, random_pixels):
    once = mapper.map_buffer(random_pixels)
    assert mapper.map_buffer(once) == once


def test_deterministic(mapper, random_pixels):
    assert mapper.map_buffer(random_pixels) == mapper.map_buffer(random_pixels)


def test_three_channel_input_is_opaque(mapper):
    assert mapper.map_pixel((250, 250, 250)).a == 255


def test_empty_buffer(mapper):
    assert mapper.map_buffer([]) == []


def test_module_shortcuts():
    assert map_pixel((1, 2, 3, 4)) == Color(*DARK, 4)
    assert map_buffer([(255, 255, 255)]) == [Color(*LIGHT, 255)]


@pytest.mark.parametrize(
    "bad",
    [(256, 0, 0), (0, -1, 0), (1.5, 0, 0), (0, 0), (0, 0, 0, 0, 0), (True, 0, 0)],
)
def test_invalid_channels_rejected(mapper, bad):
    with pytest.raises(InvalidChannelValue):
        mapper.map_pixel(bad)


def test_buffer_rejected_before_mapping(mapper):
    with pytest.raises(InvalidChannelValue):
        mapper.map_buffer([(0, 0, 0), (10, 20, 30), (0, 0, 300)])


def test_map_rgba_shape_and_alpha(mapper):
    rng = np.random.default_rng(7)
    img = rng.integers(0, 256, size=(5, 7, 4), dtype=np.uint8)
    out = mapper.map_rgba(img)
    assert out.shape == img.shape
    assert out.dtype == np.uint8
    assert np.array_equal(out[..., 3], img[..., 3])
    pal = {tuple(r) for r in NORD_PALETTE.rgb_array().tolist()}
    assert {tuple(r) for r in out[..., :3].reshape(-1, 3).tolist()} <= pal


def test_map_rgba_does_not_modify_input(mapper):
    img = np.full((2, 2, 4), 128, dtype=np.uint8)
    before = img.copy()
    mapper.map_rgba(img)
    assert np.array_equal(img, before)


def test_map_rgba_rgb_only(mapper):
    img = np.zeros((3, 2, 3), dtype=np.uint8)
    out = mapper.map_rgba(img)
    assert out.shape == (3, 2, 3)
    assert (out.reshape(-1, 3) == np.array(DARK, dtype=np.uint8)).all()


def test_map_rgba_agrees_with_buffer(mapper):
    rng = np.random.default_rng(11)
    img = rng.integers(0, 256, size=(4, 6, 4), dtype=np.uint8)
    flat = mapper.map_buffer(img.reshape(-1, 4).tolist())
    out = mapper.map_rgba(img)
    assert [c.as_tuple() for c in flat] == [tuple(p) for p in out.reshape(-1, 4).tolist()]


def test_threaded_equals_sequential():
    rng = np.random.default_rng(3)
    img = rng.integers(0, 256, size=(300, 9, 4), dtype=np.uint8)
    seq = PixelMapper(NORD_PALETTE, MapperConfig(workers=1)).map_rgba(img)
    par = PixelMapper(NORD_PALETTE, MapperConfig(workers=4)).map_rgba(img)
    assert np.array_equal(seq, par)


def test_map_rgba_wider_int_dtype_validated(mapper):
    ok = np.zeros((1, 1, 4), dtype=np.int32)
    assert mapper.map_rgba(ok).dtype == np.uint8
    with pytest.raises(InvalidChannelValue):
        mapper.map_rgba(np.full((1, 1, 4), 300, dtype=np.int32))
    with pytest.raises(InvalidChannelValue):
        mapper.map_rgba(np.zeros((1, 1, 4), dtype=np.float32))


def test_map_rgba_bad_shape(mapper):
    with pytest.raises(TypeError):
        mapper.map_rgba(np.zeros((4, 4), dtype=np.uint8))
