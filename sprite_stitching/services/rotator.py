"""
Service for nearest-neighbour rotation of pixel buffers.
"""
import logging
import math
from typing import Optional, Sequence

import numpy as np

from sprite_stitching.domain.models import ChannelType, TransformResult
from sprite_stitching.image_utils import empty_pixel_array, load_pixel_grid
from sprite_stitching.services.geometry import rotated_dimensions, round_half_away
from sprite_stitching.stitch_config import is_trace_enabled

logger = logging.getLogger(__name__)


def rotate_grid(grid: np.ndarray, empty_pixel: np.ndarray, angle: float) -> np.ndarray:
    """
    Rotate a (height, width, channels) grid about its centre.

    Every output pixel is mapped back into the source; positions that land
    outside the source get empty_pixel. Pixels are copied, never mixed.

    Args:
        grid: The image as a (height, width, channels) array
        empty_pixel: Pixel written where the source has no data
        angle: Rotation in radians, positive is counter-clockwise

    Returns:
        Newly allocated rotated grid, sized to the rotated bounding box
    """
    height, width, channels = grid.shape
    new_width, new_height = rotated_dimensions(width, height, angle)
    sin = math.sin(angle)
    cos = math.cos(angle)

    # Output pixel centres relative to the centre of the new canvas
    pos_x, pos_y = np.meshgrid(
        np.arange(new_width) + 0.5 - new_width / 2.0,
        np.arange(new_height) + 0.5 - new_height / 2.0
    )

    src_x = round_half_away(pos_x * cos - pos_y * sin + width / 2.0 - 0.5)
    src_y = round_half_away(pos_x * sin + pos_y * cos + height / 2.0 - 0.5)
    inside = (src_x >= 0) & (src_x < width) & (src_y >= 0) & (src_y < height)

    rotated = np.empty((new_height, new_width, channels), dtype=grid.dtype)
    rotated[:] = empty_pixel
    rotated[inside] = grid[src_y[inside].astype(np.intp), src_x[inside].astype(np.intp)]

    if is_trace_enabled():
        logger.debug(
            "Rotated %dx%d by %.4f rad into %dx%d (%d pixels sampled)",
            width, height, angle, new_width, new_height, int(np.count_nonzero(inside)))

    return rotated


def rotate(
    buf: Sequence[int],
    empty: Sequence[int],
    channels: int,
    width: int,
    height: int,
    angle: float,
    channel_type: Optional[ChannelType] = None
) -> TransformResult:
    """
    Rotate an image with nearest-neighbour sampling (the fast algorithm).

    Never introduces new colors. The result may look noisy for low resolution
    sprites; fancy_rotate gives smoother edges.

    Args:
        buf: Flat, channel-interleaved, row-major pixel buffer
        empty: Pixel used to fill space the source does not cover
        channels: Number of channels per pixel
        width: Width of the image
        height: Height of the image
        angle: Rotation in radians, positive is counter-clockwise
        channel_type: Channel type of buf, inferred from its dtype when omitted

    Returns:
        TransformResult with the new width, height and flat buffer

    Raises:
        EmptyBufferError: If buf has no data
        BufferSizeMismatchError: If len(buf) != width * height * channels
    """
    grid, channel_type = load_pixel_grid(buf, channels, width, height, channel_type)
    empty_pixel = empty_pixel_array(empty, channels, channel_type)

    rotated = rotate_grid(grid, empty_pixel, angle)
    new_height, new_width = rotated.shape[:2]
    return TransformResult(new_width, new_height, rotated.reshape(-1))


fast_rotate = rotate
