"""
Alpha compositing of pixels whose last channel is opacity.
"""
from typing import Sequence

import numpy as np

from sprite_stitching.domain.models import U8, ChannelType
from sprite_stitching.image_utils import to_channel_array


def _blend_exact(top: np.ndarray, bottom: np.ndarray, channel_type: ChannelType) -> np.ndarray:
    # 64 and 128 bit channels do not fit a float64, mix them as Python ints
    max_value = channel_type.max_value
    top_ints = top.astype(object)
    bottom_ints = bottom.astype(object)
    alpha = top_ints[:, -1]

    blended = np.empty_like(top)
    opaque = np.array([2 * a > max_value for a in alpha], dtype=bool)
    blended[:, -1] = np.where(opaque, top[:, -1], bottom[:, -1])

    if top.shape[-1] > 1:
        alpha_column = alpha[:, None]
        mixed = top_ints[:, :-1] * alpha_column + bottom_ints[:, :-1] * (max_value - alpha_column)
        # mixed / max_value rounded half up
        rounded = (2 * mixed + max_value) // (2 * max_value)
        blended[:, :-1] = channel_type.from_signed_array(rounded)

    return blended


def blend_pixels(top: np.ndarray, bottom: np.ndarray, channel_type: ChannelType) -> np.ndarray:
    """
    Blend rows of pixels, top over bottom.

    Color channels are mixed by the top pixel's opacity. The alpha channel is
    not mixed: the result keeps the top alpha when the top pixel is more than
    half opaque and the bottom alpha otherwise.

    Args:
        top: (N, channels) array of upper pixels
        bottom: (N, channels) array of lower pixels
        channel_type: Channel type both arrays are stored in

    Returns:
        (N, channels) array of blended pixels in the same dtype
    """
    channels = top.shape[-1]
    if channels < 1:
        raise ValueError("Pixel cannot have 0 channels")

    if channel_type.bits > 32:
        return _blend_exact(top, bottom, channel_type)

    alpha = top[:, -1].astype(np.float64) / float(channel_type.max_value)
    blended = np.empty_like(top)
    blended[:, -1] = np.where(alpha > 0.5, top[:, -1], bottom[:, -1])

    if channels > 1:
        alpha_column = alpha[:, None]
        mixed = top[:, :-1].astype(np.float64) * alpha_column \
            + bottom[:, :-1].astype(np.float64) * (1.0 - alpha_column)
        blended[:, :-1] = channel_type.from_signed_array(np.floor(mixed + 0.5))

    return blended


def blend(
    top: Sequence[int],
    bottom: Sequence[int],
    channels: int,
    channel_type: ChannelType = U8
) -> np.ndarray:
    """
    Blend a single top pixel over a bottom pixel.

    Args:
        top: Upper pixel, alpha in its last channel
        bottom: Lower pixel
        channels: Number of channels per pixel
        channel_type: Channel type of both pixels

    Returns:
        The blended pixel as a numpy array
    """
    if channels < 1:
        raise ValueError("Pixel cannot have 0 channels")
    top_pixel = to_channel_array(top, channel_type)
    bottom_pixel = to_channel_array(bottom, channel_type)
    if top_pixel.size != channels or bottom_pixel.size != channels:
        raise ValueError(
            f"Expected {channels}-channel pixels, got {top_pixel.size} and {bottom_pixel.size}")
    return blend_pixels(top_pixel[None, :], bottom_pixel[None, :], channel_type)[0]
