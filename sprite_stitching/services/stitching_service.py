"""
Facade service for stitching functionality.

This module aligns a rotated appendage with a source image at their anchor
points and composites the two onto a shared canvas.
"""
import logging
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from sprite_stitching.domain.errors import AnchorOutOfBoundsError
from sprite_stitching.domain.models import (
    ChannelType,
    Dimension,
    FrameSpec,
    Position,
    SpriteImage,
    StitchingConfig,
    StitchingOrder,
    StitchingQuality,
    StitchJob,
    StitchResult,
    TransformResult
)
from sprite_stitching.image_utils import (
    empty_pixel_array,
    load_pixel_grid
)
from sprite_stitching.services.blending import blend_pixels
from sprite_stitching.services.geometry import rotate_point
from sprite_stitching.services.quality_pipeline import rotate_with_quality
from sprite_stitching.stitch_config import is_trace_enabled

logger = logging.getLogger(__name__)

DimensionLike = Union[Dimension, Tuple[int, int]]
PositionLike = Union[Position, Tuple[int, int]]


def _as_dimension(value: DimensionLike) -> Dimension:
    if isinstance(value, Dimension):
        return value
    width, height = value
    return Dimension(int(width), int(height))


def _check_anchor(anchor: Position, dimension: Dimension, name: str) -> None:
    if not (0 <= anchor.x < dimension.width and 0 <= anchor.y < dimension.height):
        raise AnchorOutOfBoundsError(
            f"{name} anchor ({anchor.x}, {anchor.y}) lies outside its "
            f"{dimension.width}x{dimension.height} image")


def stitch(
    src: Sequence[int],
    appendage: Sequence[int],
    empty: Sequence[int],
    channels: int,
    src_dimensions: DimensionLike,
    src_anchor: PositionLike,
    src_angle: float,
    appendage_dimensions: DimensionLike,
    appendage_anchor: PositionLike,
    appendage_angle: float,
    order: StitchingOrder,
    quality: StitchingQuality,
    channel_type: Optional[ChannelType] = None
) -> StitchResult:
    """
    Stitch an appendage onto a source image at their anchor points.

    The appendage is rotated by src_angle - appendage_angle so that it ends
    up at the desired angle, then both images are placed on a canvas just
    large enough to hold them with their anchors on the same pixel.

    Args:
        src: The source image buffer, placed unrotated
        appendage: The appendage image buffer
        empty: Pixel used for canvas space neither image covers
        channels: Number of channels per pixel, the last one being alpha
        src_dimensions: (width, height) of the source
        src_anchor: Point on the source where the appendage attaches
        src_angle: Desired angle of the appendage in radians
        appendage_dimensions: (width, height) of the appendage
        appendage_anchor: Point on the appendage that attaches to the source
        appendage_angle: Current angle of the appendage in its image
        order: Which image ends up on top where they overlap
        quality: Rotation algorithm used for the appendage
        channel_type: Channel type of both buffers, inferred when omitted

    Returns:
        StitchResult with canvas width, height, buffer and placement offsets

    Raises:
        EmptyBufferError: If either buffer has no data
        BufferSizeMismatchError: If either buffer does not match its dimensions
        AnchorOutOfBoundsError: If an anchor lies outside its image
    """
    if not isinstance(order, StitchingOrder):
        raise ValueError(f"Unknown stitching order: {order!r}")

    src_dimensions = _as_dimension(src_dimensions)
    appendage_dimensions = _as_dimension(appendage_dimensions)
    src_anchor = Position.coerce(src_anchor)
    appendage_anchor = Position.coerce(appendage_anchor)

    src_grid, channel_type = load_pixel_grid(
        src, channels, src_dimensions.width, src_dimensions.height, channel_type)
    empty_pixel = empty_pixel_array(empty, channels, channel_type)
    _check_anchor(src_anchor, src_dimensions, "Source")
    _check_anchor(appendage_anchor, appendage_dimensions, "Appendage")

    rotation = src_angle - appendage_angle
    rotated = rotate_with_quality(
        appendage, empty, channels,
        appendage_dimensions.width, appendage_dimensions.height,
        rotation, quality, channel_type)

    rotated_anchor = rotate_point(
        appendage_anchor, appendage_dimensions.width, appendage_dimensions.height, rotation)
    rotated_anchor = Position(
        min(max(rotated_anchor.x, 0), rotated.width),
        min(max(rotated_anchor.y, 0), rotated.height)
    )

    # Anchor to edge distances: top, right, bottom, left
    src_distances = (
        src_anchor.y,
        src_dimensions.width - src_anchor.x,
        src_dimensions.height - src_anchor.y,
        src_anchor.x
    )
    rotated_distances = (
        rotated_anchor.y,
        rotated.width - rotated_anchor.x,
        rotated.height - rotated_anchor.y,
        rotated_anchor.x
    )
    top, right, bottom, left = (
        max(s, r) for s, r in zip(src_distances, rotated_distances))

    width = left + right
    height = top + bottom
    appendage_offset = Position(left - rotated_anchor.x, top - rotated_anchor.y)
    src_offset = Position(left - src_anchor.x, top - src_anchor.y)

    if is_trace_enabled():
        logger.debug(
            "Post rotation anchor is at (%d, %d) in an image of %dx%d",
            rotated_anchor.x, rotated_anchor.y, rotated.width, rotated.height)
        logger.debug(
            "Canvas %dx%d, appendage at (%d, %d), source at (%d, %d)",
            width, height, appendage_offset.x, appendage_offset.y,
            src_offset.x, src_offset.y)

    canvas = np.empty((height, width, channels), dtype=src_grid.dtype)
    canvas[:] = empty_pixel
    canvas[
        src_offset.y:src_offset.y + src_dimensions.height,
        src_offset.x:src_offset.x + src_dimensions.width
    ] = src_grid

    rotated_grid = rotated.buffer.reshape(rotated.height, rotated.width, channels)
    region = canvas[
        appendage_offset.y:appendage_offset.y + rotated.height,
        appendage_offset.x:appendage_offset.x + rotated.width
    ]
    appendage_pixels = rotated_grid.reshape(-1, channels)
    canvas_pixels = region.reshape(-1, channels)

    if order is StitchingOrder.APPENDAGE_ON_TOP:
        blended = blend_pixels(appendage_pixels, canvas_pixels, channel_type)
    else:
        blended = blend_pixels(canvas_pixels, appendage_pixels, channel_type)
    region[:] = blended.reshape(rotated.height, rotated.width, channels)

    return StitchResult(
        width=width,
        height=height,
        buffer=canvas.reshape(-1),
        source_offset=src_offset,
        appendage_offset=appendage_offset
    )


class StitchingService:
    """
    Facade service for rotating sprites and stitching them together.
    """

    def __init__(self, config: Optional[StitchingConfig] = None):
        """
        Initialize the stitching service with a configuration.

        Args:
            config: Stitching configuration or None to use default
        """
        self.config = config or StitchingConfig.default()

    def _check_channels(self, image: SpriteImage) -> None:
        if image.channels != self.config.channels:
            raise ValueError(
                f"Image has {image.channels} channels, service is configured "
                f"for {self.config.channels}")

    def rotate(
        self,
        image: SpriteImage,
        angle: float,
        quality: Optional[StitchingQuality] = None
    ) -> TransformResult:
        """
        Rotate a sprite with the configured quality.

        Args:
            image: The sprite to rotate
            angle: Rotation in radians, positive is counter-clockwise
            quality: Overrides the configured quality when given

        Returns:
            TransformResult with the rotated sprite
        """
        self._check_channels(image)
        return rotate_with_quality(
            image.buffer,
            self.config.empty_pixel,
            image.channels,
            image.width,
            image.height,
            angle,
            quality or self.config.quality,
            self.config.channel_type
        )

    def stitch(
        self,
        source: SpriteImage,
        source_anchor: PositionLike,
        source_angle: float,
        appendage: SpriteImage,
        appendage_anchor: PositionLike,
        appendage_angle: float,
        order: Optional[StitchingOrder] = None,
        quality: Optional[StitchingQuality] = None
    ) -> StitchResult:
        """
        Stitch an appendage sprite onto a source sprite.

        Args:
            source: The base sprite
            source_anchor: Point on the source where the appendage attaches
            source_angle: Desired angle of the appendage in radians
            appendage: The sprite to attach
            appendage_anchor: Point on the appendage that attaches
            appendage_angle: Angle of the appendage in its own image
            order: Overrides the configured stitching order when given
            quality: Overrides the configured quality when given

        Returns:
            StitchResult for the combined sprite
        """
        self._check_channels(source)
        self._check_channels(appendage)
        return stitch(
            source.buffer,
            appendage.buffer,
            self.config.empty_pixel,
            self.config.channels,
            source.dimensions,
            source_anchor,
            source_angle,
            appendage.dimensions,
            appendage_anchor,
            appendage_angle,
            order or self.config.order,
            quality or self.config.quality,
            self.config.channel_type
        )

    def stitch_frames(
        self,
        frames: Sequence[FrameSpec],
        appendage: SpriteImage,
        appendage_anchor: PositionLike,
        appendage_angle: float,
        order: Optional[StitchingOrder] = None,
        quality: Optional[StitchingQuality] = None
    ) -> List[StitchResult]:
        """
        Stitch the same appendage onto every frame of an animation.

        Args:
            frames: Frames with their anchors and desired appendage angles
            appendage: The sprite to attach to each frame
            appendage_anchor: Point on the appendage that attaches
            appendage_angle: Angle of the appendage in its own image

        Returns:
            One StitchResult per frame, in frame order
        """
        results = []
        for index, frame in enumerate(frames):
            result = self.stitch(
                frame.image,
                frame.anchor,
                frame.angle,
                appendage,
                appendage_anchor,
                appendage_angle,
                order,
                quality
            )
            if is_trace_enabled():
                logger.debug("Frame %d stitched into %dx%d", index, result.width, result.height)
            results.append(result)
        return results

    def run_job(
        self,
        job: StitchJob,
        frame_images: Sequence[SpriteImage],
        appendage: SpriteImage
    ) -> List[StitchResult]:
        """Stitch an appendage onto frames using the anchors, angles and options of a job."""
        return self.stitch_frames(
            job.frames_for(list(frame_images)),
            appendage,
            job.appendage_anchor,
            job.appendage_angle,
            job.order,
            job.quality
        )
