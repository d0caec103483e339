"""
Sprite stitching package.

Rotates pixel-art sprites without introducing new colors and stitches a
rotated appendage onto a source sprite at matching anchor points.
"""
from sprite_stitching.domain.errors import (
    AnchorOutOfBoundsError,
    BufferSizeMismatchError,
    EmptyBufferError,
    InvalidDimensionsError,
    ParsingError,
    StitchJobError
)
from sprite_stitching.domain.models import (
    U8,
    U16,
    U32,
    U64,
    U128,
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
from sprite_stitching.services import (
    StitchingService,
    blend,
    downscale,
    fancy_rotate,
    fast_rotate,
    rotate,
    rotate_point,
    rotated_dimensions,
    stitch,
    upscale
)
