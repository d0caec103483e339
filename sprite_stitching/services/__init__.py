"""
Services for the sprite stitching package.
"""
from sprite_stitching.services.geometry import (
    rotate_point,
    rotated_dimensions
)
from sprite_stitching.services.rotator import (
    fast_rotate,
    rotate
)
from sprite_stitching.services.upscaler import (
    upscale,
    upscale_times
)
from sprite_stitching.services.downscaler import (
    downscale,
    find_mode
)
from sprite_stitching.services.quality_pipeline import (
    fancy_rotate,
    rotate_with_quality
)
from sprite_stitching.services.blending import (
    blend,
    blend_pixels
)
from sprite_stitching.services.stitching_service import (
    StitchingService,
    stitch
)
