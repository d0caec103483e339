"""
Domain models for sprite rotation and stitching.
"""
import enum
from typing import Iterator, List, Optional, Tuple, Union
import attr
import numpy as np


_NUMPY_UNSIGNED_BITS = (8, 16, 32, 64)


@attr.s(frozen=True)
class ChannelType:
    """
    Unsigned integer channel type of a fixed bit width.

    Buffers of up to 64 bits per channel use the matching numpy unsigned dtype.
    Wider channels (128 bit) are stored as Python ints in an object array.
    """
    bits: int = attr.ib()

    @bits.validator
    def _check_bits(self, attribute, value):
        if value not in _NUMPY_UNSIGNED_BITS + (128,):
            raise ValueError(f"Unsupported channel width: {value} bits")

    @property
    def max_value(self) -> int:
        """Largest value a channel can hold."""
        return (1 << self.bits) - 1

    @property
    def dtype(self) -> np.dtype:
        """Numpy dtype used for buffers of this channel type."""
        if self.bits in _NUMPY_UNSIGNED_BITS:
            return np.dtype(f"uint{self.bits}")
        return np.dtype(object)

    def to_signed(self, value) -> int:
        """Widen a channel value into the signed integer domain."""
        return int(value)

    def from_signed(self, value: int) -> int:
        """
        Narrow a signed value back into this channel type.

        Values that do not fit (negative or above max_value) become max_value.
        """
        value = int(value)
        if value < 0 or value > self.max_value:
            return self.max_value
        return value

    def from_signed_array(self, values: np.ndarray) -> np.ndarray:
        """Array form of from_signed for already rounded float or int values."""
        if self.bits <= 32:
            values = np.asarray(values, dtype=np.float64)
            overflow = (values < 0) | (values > self.max_value)
            return np.where(overflow, self.max_value, values).astype(self.dtype)
        # float64 cannot represent every 64/128 bit value, clamp on Python ints
        flat = [self.from_signed(int(v)) for v in np.asarray(values).ravel()]
        return np.array(flat, dtype=self.dtype).reshape(np.shape(values))

    @classmethod
    def for_bits(cls, bits: int) -> 'ChannelType':
        return _CHANNEL_TYPES_BY_BITS[bits]

    @classmethod
    def for_dtype(cls, dtype) -> 'ChannelType':
        """Look up the channel type matching a numpy unsigned dtype."""
        dtype = np.dtype(dtype)
        if dtype.kind != "u":
            raise ValueError(f"Channel buffers must be unsigned, got {dtype}")
        return _CHANNEL_TYPES_BY_BITS[dtype.itemsize * 8]


U8 = ChannelType(8)
U16 = ChannelType(16)
U32 = ChannelType(32)
U64 = ChannelType(64)
U128 = ChannelType(128)

_CHANNEL_TYPES_BY_BITS = {t.bits: t for t in (U8, U16, U32, U64, U128)}


class StitchingOrder(enum.Enum):
    """Which image ends up on top where the two overlap."""
    SOURCE_ON_TOP = "source_on_top"
    APPENDAGE_ON_TOP = "appendage_on_top"


class StitchingQuality(enum.Enum):
    """Rotation algorithm used for the appendage before stitching."""
    FAST = "fast"
    FANCY = "fancy"


@attr.s(frozen=True)
class Dimension:
    """Represents image dimensions."""
    width: int = attr.ib()
    height: int = attr.ib()


@attr.s(frozen=True)
class Position:
    """Represents a pixel position inside an image, e.g. an anchor point."""
    x: int = attr.ib()
    y: int = attr.ib()

    @classmethod
    def coerce(cls, value: Union['Position', Tuple[int, int]]) -> 'Position':
        if isinstance(value, Position):
            return value
        x, y = value
        return cls(int(x), int(y))


@attr.s(eq=False)
class TransformResult:
    """Width, height and flat buffer of a transformed image."""
    width: int = attr.ib()
    height: int = attr.ib()
    buffer: np.ndarray = attr.ib()

    def __iter__(self) -> Iterator:
        return iter((self.width, self.height, self.buffer))


@attr.s(eq=False)
class StitchResult(TransformResult):
    """Stitched canvas plus where each image was placed on it."""
    source_offset: Position = attr.ib(default=Position(0, 0))
    appendage_offset: Position = attr.ib(default=Position(0, 0))


@attr.s(eq=False)
class SpriteImage:
    """A decoded image as handed over by an image loading collaborator."""
    buffer: np.ndarray = attr.ib()
    width: int = attr.ib()
    height: int = attr.ib()
    channels: int = attr.ib(default=4)

    @property
    def dimensions(self) -> Dimension:
        return Dimension(self.width, self.height)


@attr.s(eq=False)
class FrameSpec:
    """One animation frame together with where and at which angle to attach."""
    image: SpriteImage = attr.ib()
    anchor: Position = attr.ib(converter=Position.coerce)
    angle: float = attr.ib(default=0.0)


@attr.s(frozen=True)
class StitchJob:
    """Out-of-band anchor and angle metadata for stitching one appendage onto frames."""
    appendage_anchor: Position = attr.ib(converter=Position.coerce)
    appendage_angle: float = attr.ib()
    frame_anchors: Tuple[Position, ...] = attr.ib(
        converter=lambda anchors: tuple(Position.coerce(a) for a in anchors))
    frame_angles: Tuple[float, ...] = attr.ib(converter=tuple)
    order: StitchingOrder = attr.ib(default=StitchingOrder.APPENDAGE_ON_TOP)
    quality: StitchingQuality = attr.ib(default=StitchingQuality.FANCY)

    @frame_angles.validator
    def _check_frame_count(self, attribute, value):
        if len(value) != len(self.frame_anchors):
            raise ValueError(
                f"{len(self.frame_anchors)} frame anchors but {len(value)} frame angles")

    def frames_for(self, images: List[SpriteImage]) -> List[FrameSpec]:
        """Pair frame images with this job's anchors and angles, in order."""
        if len(images) != len(self.frame_anchors):
            raise ValueError(
                f"Job describes {len(self.frame_anchors)} frames, got {len(images)} images")
        return [
            FrameSpec(image=image, anchor=anchor, angle=angle)
            for image, anchor, angle in zip(images, self.frame_anchors, self.frame_angles)
        ]


@attr.s(frozen=True)
class StitchingConfig:
    """Configuration for rotating and stitching sprites."""
    empty_pixel: Tuple[int, ...] = attr.ib(converter=tuple)
    channels: int = attr.ib(default=4)
    order: StitchingOrder = attr.ib(default=StitchingOrder.APPENDAGE_ON_TOP)
    quality: StitchingQuality = attr.ib(default=StitchingQuality.FANCY)
    channel_type: Optional[ChannelType] = attr.ib(default=None)

    @empty_pixel.validator
    def _check_empty_pixel(self, attribute, value):
        if len(value) != self.channels:
            raise ValueError(
                f"Empty pixel has {len(value)} values but images have {self.channels} channels")

    @classmethod
    def default(cls) -> 'StitchingConfig':
        """Create a default stitching configuration."""
        from sprite_stitching.stitch_config import (
            DEFAULT_CHANNELS,
            DEFAULT_EMPTY_PIXEL,
            DEFAULT_STITCHING_ORDER,
            DEFAULT_STITCHING_QUALITY
        )
        return cls(
            empty_pixel=DEFAULT_EMPTY_PIXEL,
            channels=DEFAULT_CHANNELS,
            order=StitchingOrder(DEFAULT_STITCHING_ORDER),
            quality=StitchingQuality(DEFAULT_STITCHING_QUALITY)
        )
