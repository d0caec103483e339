"""
Service for shrinking images by majority vote (mode reduction).
"""
import logging
from typing import Optional, Sequence

import numpy as np

from sprite_stitching.domain.models import ChannelType, TransformResult
from sprite_stitching.image_utils import load_pixel_grid, pixels_equal
from sprite_stitching.stitch_config import is_trace_enabled

logger = logging.getLogger(__name__)


def find_mode(blocks: np.ndarray) -> np.ndarray:
    """
    Most frequent pixel of each block in a (..., pixel_count, channels) stack.

    Pixels are given in scan order. Ties go to the value whose first occurrence
    comes earliest in the block. A single (pixel_count, channels) block yields
    one pixel.
    """
    matches = pixels_equal(blocks[..., :, None, :], blocks[..., None, :, :])
    # argmax returns the first index holding the highest count
    winners = np.asarray(np.argmax(matches.sum(axis=-1), axis=-1))
    return np.take_along_axis(blocks, winners[..., None, None], axis=-2)[..., 0, :]


def downscale_grid(grid: np.ndarray, factor: int) -> np.ndarray:
    """
    Replace each factor x factor block of a grid with its most frequent pixel.

    Rows and columns that do not fill a whole block are dropped. Blocks are
    scanned row-major, which decides ties between equally frequent pixels.
    """
    if factor < 1:
        raise ValueError(f"Downscale factor must be at least 1, got {factor}")

    height, width, channels = grid.shape
    new_width = width // factor
    new_height = height // factor
    result = np.empty((new_height, new_width, channels), dtype=grid.dtype)
    if new_width == 0 or new_height == 0:
        return result

    block_size = factor * factor
    # One row of blocks at a time keeps the pairwise comparison small
    for row in range(new_height):
        band = grid[row * factor:(row + 1) * factor, :new_width * factor]
        blocks = band.reshape(factor, new_width, factor, channels) \
            .transpose(1, 0, 2, 3) \
            .reshape(new_width, block_size, channels)
        result[row] = find_mode(blocks)

    return result


def downscale(
    buf: Sequence[int],
    channels: int,
    width: int,
    height: int,
    factor: int,
    channel_type: Optional[ChannelType] = None
) -> TransformResult:
    """
    Shrink an image by an integer factor keeping only existing colors.

    Args:
        buf: Flat, channel-interleaved, row-major pixel buffer
        channels: Number of channels per pixel
        width: Width of the image
        height: Height of the image
        factor: Edge length of the square block reduced to one pixel
        channel_type: Channel type of buf, inferred from its dtype when omitted

    Returns:
        TransformResult of size (width // factor, height // factor)
    """
    grid, _ = load_pixel_grid(buf, channels, width, height, channel_type)
    reduced = downscale_grid(grid, factor)
    if is_trace_enabled():
        logger.debug(
            "Mode reduced %dx%d by %d into %dx%d",
            width, height, factor, reduced.shape[1], reduced.shape[0])
    return TransformResult(reduced.shape[1], reduced.shape[0], reduced.reshape(-1))
