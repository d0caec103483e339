"""
Geometry of rotating a rectangular image about its own centre.
"""
import logging
import math
from typing import Tuple, Union

import numpy as np

from sprite_stitching.domain.models import Position
from sprite_stitching.image_utils import check_dimensions
from sprite_stitching.stitch_config import is_trace_enabled

logger = logging.getLogger(__name__)


def round_half_away(value):
    """
    Round to the nearest integer, halves away from zero.

    Works on scalars and numpy arrays. Python's round() rounds halves to even,
    which would shift every other pixel centre.
    """
    if isinstance(value, np.ndarray):
        return np.sign(value) * np.floor(np.abs(value) + 0.5)
    return math.copysign(math.floor(abs(value) + 0.5), value)


def rotated_dimensions(width: int, height: int, angle: float) -> Tuple[int, int]:
    """
    Calculate the axis-aligned bounding box of a width x height rectangle
    rotated by angle radians (positive is counter-clockwise).

    Args:
        width: Width of the unrotated image
        height: Height of the unrotated image
        angle: Rotation in radians

    Returns:
        Tuple of the new width and height

    Raises:
        InvalidDimensionsError: If width or height is below 1
    """
    check_dimensions(width, height)

    diag_length = math.sqrt(width ** 2 + height ** 2)
    diag_angle = math.atan(height / width)
    diag_angle_1 = diag_angle + angle
    diag_angle_2 = -diag_angle + angle

    new_width = round_half_away(
        max(abs(math.cos(diag_angle_1)), abs(math.cos(diag_angle_2))) * diag_length)
    new_height = round_half_away(
        max(abs(math.sin(diag_angle_1)), abs(math.sin(diag_angle_2))) * diag_length)

    if is_trace_enabled():
        logger.debug(
            "Diagonal %.3f at angles %.4f & %.4f gives %dx%d",
            diag_length, diag_angle_1, diag_angle_2, new_width, new_height)

    return int(new_width), int(new_height)


def rotate_point(
    point: Union[Position, Tuple[int, int]],
    width: int,
    height: int,
    angle: float
) -> Position:
    """
    Map a pixel of the unrotated image to the pixel it lands on after rotation.

    The sampling in the rotator maps output back to input; this maps input to
    output, so the sine terms carry the opposite sign.

    Args:
        point: Pixel position in the unrotated image
        width: Width of the unrotated image
        height: Height of the unrotated image
        angle: Rotation in radians

    Returns:
        Position of the pixel inside the rotated image's bounding box
    """
    point = Position.coerce(point)
    new_width, new_height = rotated_dimensions(width, height, angle)
    sin = math.sin(angle)
    cos = math.cos(angle)

    # Pixel centre relative to the image centre
    pos_x = point.x - width / 2.0 + 0.5
    pos_y = point.y - height / 2.0 + 0.5

    rotated_x = pos_x * cos + pos_y * sin
    rotated_y = pos_y * cos - pos_x * sin

    final_point = Position(
        math.floor(rotated_x + new_width / 2.0),
        math.floor(rotated_y + new_height / 2.0)
    )

    if is_trace_enabled():
        logger.debug(
            "Point (%d, %d) rotated to (%.3f, %.3f) resolved as (%d, %d) in %dx%d",
            point.x, point.y, rotated_x, rotated_y,
            final_point.x, final_point.y, new_width, new_height)

    return final_point
