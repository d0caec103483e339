"""
High quality ("fancy") rotation for pixel art.

The image is upscaled with Scale2x, rotated with nearest-neighbour sampling at
the higher resolution and mode reduced back down, which smooths the jagged
edges a direct rotation leaves while still never mixing colors.
"""
import logging
from typing import Optional, Sequence

from sprite_stitching import stitch_config
from sprite_stitching.domain.models import ChannelType, StitchingQuality, TransformResult
from sprite_stitching.image_utils import empty_pixel_array, load_pixel_grid
from sprite_stitching.services.downscaler import downscale_grid
from sprite_stitching.services.rotator import rotate, rotate_grid
from sprite_stitching.services.upscaler import scale2x_grid
from sprite_stitching.stitch_config import is_trace_enabled

logger = logging.getLogger(__name__)


def fancy_rotate(
    buf: Sequence[int],
    empty: Sequence[int],
    channels: int,
    width: int,
    height: int,
    angle: float,
    channel_type: Optional[ChannelType] = None,
    upscale_passes: Optional[int] = None
) -> TransformResult:
    """
    Rotate an image using the upscale, rotate, downscale pipeline.

    Args:
        buf: Flat, channel-interleaved, row-major pixel buffer
        empty: Pixel used to fill space the source does not cover
        channels: Number of channels per pixel
        width: Width of the image
        height: Height of the image
        angle: Rotation in radians, positive is counter-clockwise
        channel_type: Channel type of buf, inferred from its dtype when omitted
        upscale_passes: Scale2x passes before rotating, FANCY_UPSCALE_PASSES if None

    Returns:
        TransformResult with the new width, height and flat buffer

    Raises:
        EmptyBufferError: If buf has no data
        BufferSizeMismatchError: If len(buf) != width * height * channels
    """
    passes = stitch_config.FANCY_UPSCALE_PASSES if upscale_passes is None else upscale_passes
    if passes < 0:
        raise ValueError(f"Number of upscale passes cannot be negative, got {passes}")

    grid, channel_type = load_pixel_grid(buf, channels, width, height, channel_type)
    empty_pixel = empty_pixel_array(empty, channels, channel_type)

    for _ in range(passes):
        grid = scale2x_grid(grid)
    rotated = rotate_grid(grid, empty_pixel, angle)
    del grid
    factor = 2 ** passes
    reduced = downscale_grid(rotated, factor)

    if is_trace_enabled():
        logger.debug(
            "Fancy rotation of %dx%d at %dx working size: %dx%d -> %dx%d",
            width, height, factor, rotated.shape[1], rotated.shape[0],
            reduced.shape[1], reduced.shape[0])

    return TransformResult(reduced.shape[1], reduced.shape[0], reduced.reshape(-1))


def rotate_with_quality(
    buf: Sequence[int],
    empty: Sequence[int],
    channels: int,
    width: int,
    height: int,
    angle: float,
    quality: StitchingQuality,
    channel_type: Optional[ChannelType] = None
) -> TransformResult:
    """Rotate with the fast or the fancy algorithm."""
    if quality is StitchingQuality.FANCY:
        return fancy_rotate(buf, empty, channels, width, height, angle, channel_type)
    if quality is StitchingQuality.FAST:
        return rotate(buf, empty, channels, width, height, angle, channel_type)
    raise ValueError(f"Unknown stitching quality: {quality!r}")
