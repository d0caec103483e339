"""
Tests for buffer validation, channel conversion and the image adapters.
"""
import numpy as np
import pytest
from PIL import Image

from sprite_stitching.domain.errors import (
    BufferSizeMismatchError,
    EmptyBufferError,
    InvalidDimensionsError
)
from sprite_stitching.domain.models import U8, U16, U128
from sprite_stitching.image_utils import (
    buffer_from_cv2_array,
    buffer_from_pil_image,
    cv2_array_from_buffer,
    empty_pixel_array,
    load_pixel_grid,
    pil_image_from_buffer,
    resolve_channel_type,
    to_channel_array,
    validate_buffer
)


def test_validate_buffer_checks_empty_first():
    with pytest.raises(EmptyBufferError):
        validate_buffer([], 4, 3, 3)
    with pytest.raises(EmptyBufferError):
        validate_buffer(np.array([], dtype=np.uint8), 4, 3, 3)
    with pytest.raises(BufferSizeMismatchError):
        validate_buffer([1, 2, 3], 4, 1, 1)
    validate_buffer(b"\x00\x01\x02\x03", 4, 1, 1)


def test_load_pixel_grid_shapes_buffer():
    grid, channel_type = load_pixel_grid(list(range(12)), 2, 3, 2)
    assert channel_type is U8
    assert grid.shape == (2, 3, 2)
    assert grid[1, 2].tolist() == [10, 11]


def test_load_pixel_grid_rejects_negative_dimensions():
    with pytest.raises(InvalidDimensionsError):
        load_pixel_grid([1, 2], 1, -1, -2)


def test_channel_type_is_taken_from_dtype():
    assert resolve_channel_type(np.zeros(4, dtype=np.uint16)) is U16
    assert resolve_channel_type([1, 2, 3]) is U8
    assert resolve_channel_type([1, 2, 3], U128) is U128


def test_to_channel_array_range_checks():
    assert to_channel_array(b"\x05\x06", U8).tolist() == [5, 6]
    assert to_channel_array([1, 300], U16).dtype == np.uint16
    with pytest.raises(ValueError):
        to_channel_array([1, 300], U8)
    with pytest.raises(ValueError):
        to_channel_array([-1], U8)
    with pytest.raises(ValueError):
        to_channel_array([0.5], U8)


def test_empty_pixel_must_match_channels():
    assert empty_pixel_array((0, 0, 0, 0), 4, U8).tolist() == [0, 0, 0, 0]
    with pytest.raises(ValueError):
        empty_pixel_array((0, 0, 0), 4, U8)


def test_pil_round_trip():
    image = Image.new("RGBA", (3, 2), (1, 2, 3, 4))
    image.putpixel((2, 1), (9, 8, 7, 255))
    sprite = buffer_from_pil_image(image)
    assert (sprite.width, sprite.height, sprite.channels) == (3, 2, 4)
    assert sprite.buffer[-4:].tolist() == [9, 8, 7, 255]

    restored = pil_image_from_buffer(sprite.width, sprite.height, sprite.buffer)
    assert restored.mode == "RGBA"
    assert restored.getpixel((2, 1)) == (9, 8, 7, 255)
    assert restored.getpixel((0, 0)) == (1, 2, 3, 4)


def test_pil_adapter_adds_opaque_alpha():
    image = Image.new("RGB", (2, 2), (10, 20, 30))
    sprite = buffer_from_pil_image(image)
    assert sprite.buffer[:4].tolist() == [10, 20, 30, 255]


def test_cv2_adapter_swaps_channel_order():
    bgr = np.zeros((2, 3, 3), dtype=np.uint8)
    bgr[0, 0] = (255, 0, 0)  # blue in OpenCV order
    sprite = buffer_from_cv2_array(bgr)
    assert (sprite.width, sprite.height) == (3, 2)
    assert sprite.buffer[:4].tolist() == [0, 0, 255, 255]

    bgra = cv2_array_from_buffer(sprite.width, sprite.height, sprite.buffer)
    assert bgra.shape == (2, 3, 4)
    assert bgra[0, 0].tolist() == [255, 0, 0, 255]


def test_cv2_adapter_handles_gray_and_rejects_empty():
    gray = np.full((2, 2), 50, dtype=np.uint8)
    sprite = buffer_from_cv2_array(gray)
    assert sprite.buffer[:4].tolist() == [50, 50, 50, 255]
    with pytest.raises(EmptyBufferError):
        buffer_from_cv2_array(np.zeros((0, 0, 3), dtype=np.uint8))
