"""
Exceptions raised by the rotation and stitching services.
"""


class ParsingError(ValueError):
    """Base class for errors found while reading an image buffer."""


class EmptyBufferError(ParsingError):
    """The image buffer passed contains no data."""

    def __init__(self, message: str = "Buffer is empty"):
        super().__init__(message)


class BufferSizeMismatchError(ParsingError):
    """The buffer length does not match width * height * channels."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Buffer is incomplete: expected {expected} values, got {actual}"
        )


class InvalidDimensionsError(ValueError):
    """Width, height or channel count is zero or negative."""


class AnchorOutOfBoundsError(ValueError):
    """An anchor point lies outside the image it belongs to."""


class StitchJobError(ValueError):
    """A stitch job file could not be interpreted."""
