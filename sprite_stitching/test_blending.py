"""
Tests for the alpha blend operator and channel type conversions.
"""
import numpy as np
import pytest

from sprite_stitching.domain.models import U8, U16, U64, U128, ChannelType
from sprite_stitching.services.blending import blend, blend_pixels


@pytest.mark.parametrize("pixel", [
    [0, 0, 0, 0],
    [10, 20, 30, 127],
    [10, 20, 30, 128],
    [255, 255, 255, 255],
    [1, 254, 77, 64],
])
def test_blending_pixel_with_itself_is_identity(pixel):
    assert blend(pixel, pixel, 4).tolist() == pixel


def test_opaque_top_replaces_bottom():
    assert blend([10, 20, 30, 255], [200, 200, 200, 255], 4).tolist() == [10, 20, 30, 255]


def test_transparent_top_keeps_bottom():
    assert blend([10, 20, 30, 0], [200, 100, 50, 90], 4).tolist() == [200, 100, 50, 90]


def test_alpha_is_thresholded_not_mixed():
    # 127 / 255 is below one half: color mixed, alpha taken from bottom
    assert blend([255, 0, 0, 127], [0, 0, 255, 255], 4).tolist() == [127, 0, 128, 255]
    # 128 / 255 is above one half: alpha taken from top
    assert blend([255, 0, 0, 128], [0, 0, 255, 10], 4).tolist() == [128, 0, 127, 128]


def test_alpha_only_pixels():
    assert blend([200], [10], 1).tolist() == [200]
    assert blend([100], [10], 1).tolist() == [10]


def test_blend_with_16_bit_channels():
    result = blend([65535, 0, 65535], [0, 65535, 0], 3, U16)
    assert result.dtype == np.uint16
    assert result.tolist() == [65535, 0, 65535]


def test_blend_rejects_zero_channels():
    with pytest.raises(ValueError):
        blend([], [], 0)


def test_blend_rejects_wrong_pixel_length():
    with pytest.raises(ValueError):
        blend([1, 2, 3], [1, 2, 3, 4], 4)


def test_blend_pixels_matches_single_pixel_blend():
    rng = np.random.default_rng(5)
    top = rng.integers(0, 256, size=(50, 4)).astype(np.uint8)
    bottom = rng.integers(0, 256, size=(50, 4)).astype(np.uint8)
    rows = blend_pixels(top, bottom, U8)
    for i in range(50):
        assert rows[i].tolist() == blend(top[i], bottom[i], 4).tolist()


def test_from_signed_clamps_to_max_value():
    assert U8.from_signed(7) == 7
    assert U8.from_signed(255) == 255
    assert U8.from_signed(300) == 255
    assert U8.from_signed(-1) == 255
    assert U128.from_signed(2 ** 128) == U128.max_value
    assert U8.to_signed(np.uint8(200)) == 200


def test_from_signed_array_clamps():
    values = np.array([-3.0, 0.0, 100.0, 70000.0])
    assert U16.from_signed_array(values).tolist() == [65535, 0, 100, 65535]
    assert U64.from_signed_array(np.array([2 ** 70, 5], dtype=object)).tolist() == [U64.max_value, 5]


def test_channel_type_lookup():
    assert ChannelType.for_dtype(np.uint16) is U16
    assert ChannelType.for_bits(128) is U128
    assert U8.max_value == 255
    assert U128.dtype == np.dtype(object)
    with pytest.raises(ValueError):
        ChannelType.for_dtype(np.int16)
    with pytest.raises(ValueError):
        ChannelType(12)


@pytest.mark.parametrize("channel_type, pixel", [
    (U64, [2 ** 60 + 1, 5, U64.max_value // 3]),
    (U64, [U64.max_value - 1, 2 ** 63 + 7, U64.max_value]),
    (U128, [2 ** 100 + 3, 5, U128.max_value]),
    (U128, [U128.max_value, 2 ** 127 + 11, 2 ** 90]),
])
def test_wide_channels_blend_with_itself_exactly(channel_type, pixel):
    pixel = np.array(pixel, dtype=channel_type.dtype)
    assert blend(pixel, pixel, 3, channel_type).tolist() == pixel.tolist()


@pytest.mark.parametrize("channel_type", [U64, U128])
def test_opaque_wide_pixel_replaces_bottom_exactly(channel_type):
    top = np.array([2 ** 60 + 1, channel_type.max_value], dtype=channel_type.dtype)
    bottom = np.array([3, channel_type.max_value], dtype=channel_type.dtype)
    assert blend(top, bottom, 2, channel_type).tolist() == [2 ** 60 + 1, channel_type.max_value]


def test_wide_channels_mix_without_float_error():
    # Exactly one third opaque: 3 * (max / 3) / max is 1 with no float error
    max_value = U64.max_value
    top = np.array([3, max_value // 3], dtype=np.uint64)
    bottom = np.array([0, max_value], dtype=np.uint64)
    assert blend(top, bottom, 2, U64).tolist() == [1, max_value]
