"""
Domain models and errors for the sprite stitching package.
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
