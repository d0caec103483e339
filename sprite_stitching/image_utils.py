import cv2
import numpy as np
from PIL import Image

from sprite_stitching.domain.errors import (
    BufferSizeMismatchError,
    EmptyBufferError,
    InvalidDimensionsError
)
from sprite_stitching.domain.models import U8, ChannelType, SpriteImage


def buffer_length(buffer):
    if isinstance(buffer, np.ndarray):
        return int(buffer.size)
    return len(buffer)


def check_dimensions(width, height, channels=1):
    if width < 1 or height < 1:
        raise InvalidDimensionsError(f"Image must be at least 1x1, got {width}x{height}")
    if channels < 1:
        raise InvalidDimensionsError(f"Pixels need at least one channel, got {channels}")


def validate_buffer(buffer, channels, width, height):
    # Empty is reported before any size mismatch
    if buffer is None or buffer_length(buffer) == 0:
        raise EmptyBufferError()
    expected = width * height * channels
    actual = buffer_length(buffer)
    if actual != expected:
        raise BufferSizeMismatchError(expected, actual)


def resolve_channel_type(buffer, channel_type=None):
    if channel_type is not None:
        return channel_type
    if isinstance(buffer, np.ndarray) and buffer.dtype.kind == "u":
        return ChannelType.for_dtype(buffer.dtype)
    return U8


def to_channel_array(values, channel_type):
    """Flat array of channel values in channel_type's dtype, range checked."""
    if isinstance(values, (bytes, bytearray, memoryview)):
        flat = np.frombuffer(values, dtype=np.uint8)
    else:
        flat = np.asarray(values)
    flat = flat.reshape(-1)
    if flat.dtype == channel_type.dtype:
        return flat
    if flat.dtype.kind not in "uiO":
        raise ValueError(f"Channel values must be integers, got {flat.dtype}")
    if flat.size == 0:
        return flat.astype(channel_type.dtype)
    if flat.dtype.kind == "O":
        as_ints = [int(v) for v in flat]
        low, high = min(as_ints), max(as_ints)
    else:
        low, high = int(flat.min()), int(flat.max())
    if low < 0 or high > channel_type.max_value:
        raise ValueError(
            f"Channel values {low}..{high} do not fit {channel_type.bits}-bit channels")
    if channel_type.dtype.kind == "O":
        return np.array([int(v) for v in flat], dtype=object)
    return flat.astype(channel_type.dtype)


def load_pixel_grid(buffer, channels, width, height, channel_type=None):
    """
    Validate a flat buffer and view it as a (height, width, channels) grid.

    Returns the grid and the channel type its values are stored in.
    """
    validate_buffer(buffer, channels, width, height)
    check_dimensions(width, height, channels)
    channel_type = resolve_channel_type(buffer, channel_type)
    grid = to_channel_array(buffer, channel_type).reshape(height, width, channels)
    return grid, channel_type


def empty_pixel_array(empty, channels, channel_type):
    pixel = to_channel_array(empty, channel_type)
    if pixel.size != channels:
        raise ValueError(f"Empty pixel has {pixel.size} values, expected {channels}")
    return pixel


def pixels_equal(a, b):
    # Whole pixels compare equal only when every channel matches
    return np.all(a == b, axis=-1)


def buffer_from_pil_image(image):
    rgba_image = image.convert("RGBA")
    width, height = rgba_image.size
    buffer = np.asarray(rgba_image, dtype=np.uint8).reshape(-1).copy()
    return SpriteImage(buffer=buffer, width=width, height=height, channels=4)


def pil_image_from_buffer(width, height, buffer):
    check_dimensions(width, height)
    flat = np.asarray(buffer)
    if flat.dtype != np.uint8:
        flat = to_channel_array(flat, U8)
    channels = flat.size // (width * height)
    validate_buffer(flat, channels, width, height)
    if channels not in (1, 2, 3, 4):
        raise ValueError(f"Pillow images need 1 to 4 channels, got {channels}")
    array = flat.reshape(height, width, channels)
    if channels == 1:
        array = array[:, :, 0]
    return Image.fromarray(np.ascontiguousarray(array))


def buffer_from_cv2_array(image_array):
    """Convert an OpenCV BGR, BGRA or grayscale array into an RGBA sprite."""
    if image_array is None or image_array.size == 0:
        raise EmptyBufferError()

    if len(image_array.shape) == 2: # Grayscale
        rgba = cv2.cvtColor(image_array, cv2.COLOR_GRAY2RGBA)
    elif len(image_array.shape) == 3 and image_array.shape[2] == 4: # BGRA
        rgba = cv2.cvtColor(image_array, cv2.COLOR_BGRA2RGBA)
    elif len(image_array.shape) == 3 and image_array.shape[2] == 3: # BGR
        rgba = cv2.cvtColor(image_array, cv2.COLOR_BGR2RGBA)
    else:
        raise ValueError(f"Image has unsupported shape {image_array.shape}")

    height, width = rgba.shape[:2]
    return SpriteImage(buffer=rgba.reshape(-1).copy(), width=width, height=height, channels=4)


def cv2_array_from_buffer(width, height, buffer, channels=4):
    """Reshape a flat RGB(A) buffer into a BGR(A) array that cv2.imwrite accepts."""
    validate_buffer(buffer, channels, width, height)
    grid = np.ascontiguousarray(np.asarray(buffer).reshape(height, width, channels))
    if channels == 4:
        return cv2.cvtColor(grid, cv2.COLOR_RGBA2BGRA)
    if channels == 3:
        return cv2.cvtColor(grid, cv2.COLOR_RGB2BGR)
    if channels == 1:
        return grid[:, :, 0].copy()
    raise ValueError(f"OpenCV images need 1, 3 or 4 channels, got {channels}")
