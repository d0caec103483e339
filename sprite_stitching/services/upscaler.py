"""
Edge-preserving 2x upscaling (Scale2x).

Each source pixel becomes a 2x2 block. A block corner takes the colour of a
neighbour only where two neighbours agree along a diagonal edge, otherwise it
keeps the centre colour, so no colour outside the pixel's 4-neighbourhood is
ever produced.
"""
import logging
from typing import Optional, Sequence

import numpy as np

from sprite_stitching.domain.models import ChannelType, TransformResult
from sprite_stitching.image_utils import load_pixel_grid, pixels_equal
from sprite_stitching.stitch_config import is_trace_enabled

logger = logging.getLogger(__name__)


def scale2x_grid(grid: np.ndarray) -> np.ndarray:
    """Apply one Scale2x pass to a (height, width, channels) grid."""
    height, width, channels = grid.shape

    # Edge padding: a missing neighbour is the centre pixel itself
    padded = np.pad(grid, ((1, 1), (1, 1), (0, 0)), mode="edge")
    center = grid
    up = padded[:-2, 1:-1]
    down = padded[2:, 1:-1]
    left = padded[1:-1, :-2]
    right = padded[1:-1, 2:]

    left_is_up = pixels_equal(left, up)
    left_is_down = pixels_equal(left, down)
    up_is_right = pixels_equal(up, right)
    right_is_down = pixels_equal(right, down)

    top_left = left_is_up & ~left_is_down & ~up_is_right
    top_right = up_is_right & ~left_is_up & ~right_is_down
    bottom_left = left_is_down & ~right_is_down & ~left_is_up
    bottom_right = right_is_down & ~up_is_right & ~left_is_down

    scaled = np.empty((height * 2, width * 2, channels), dtype=grid.dtype)
    scaled[0::2, 0::2] = np.where(top_left[..., None], up, center)
    scaled[0::2, 1::2] = np.where(top_right[..., None], right, center)
    scaled[1::2, 0::2] = np.where(bottom_left[..., None], left, center)
    scaled[1::2, 1::2] = np.where(bottom_right[..., None], down, center)
    return scaled


def upscale(
    buf: Sequence[int],
    channels: int,
    width: int,
    height: int,
    channel_type: Optional[ChannelType] = None
) -> TransformResult:
    """
    Double the width and height of an image with the Scale2x rule.

    Args:
        buf: Flat, channel-interleaved, row-major pixel buffer
        channels: Number of channels per pixel
        width: Width of the image
        height: Height of the image
        channel_type: Channel type of buf, inferred from its dtype when omitted

    Returns:
        TransformResult of size (2 * width, 2 * height)
    """
    return upscale_times(buf, channels, width, height, 1, channel_type)


def upscale_times(
    buf: Sequence[int],
    channels: int,
    width: int,
    height: int,
    passes: int,
    channel_type: Optional[ChannelType] = None
) -> TransformResult:
    """Apply Scale2x passes times, growing the image by 2 ** passes."""
    if passes < 0:
        raise ValueError(f"Number of upscale passes cannot be negative, got {passes}")
    grid, _ = load_pixel_grid(buf, channels, width, height, channel_type)
    if passes == 0:
        grid = grid.copy()
    for _ in range(passes):
        grid = scale2x_grid(grid)
        if is_trace_enabled():
            logger.debug("Scale2x pass produced %dx%d", grid.shape[1], grid.shape[0])
    return TransformResult(grid.shape[1], grid.shape[0], grid.reshape(-1))
