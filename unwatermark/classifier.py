"""Pixel classification for light, desaturated watermark overlays.

A pixel is considered watermark-like when it is bright (mean channel
intensity above ``threshold``) and close to gray (every pair of channels
differs by less than ``tolerance``). Position and shape play no part, so
white paper and light gray UI chrome are flagged too.
"""

from dataclasses import dataclass

import numpy as np

from .utils import Color, ImageArray, MaskArray, check_image

CHANNEL_MIN = 0
CHANNEL_MAX = 255


@dataclass(frozen=True)
class ClassificationParameters:
    """Brightness threshold and channel-difference tolerance."""

    threshold: int
    tolerance: int

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Raise ``ValueError`` unless both values lie in the channel range."""
        for name in ("threshold", "tolerance"):
            value = getattr(self, name)
            if not isinstance(value, (int, np.integer)) or isinstance(value, bool):
                raise ValueError(f"{name} must be an integer, got {value!r}")
            if not CHANNEL_MIN <= value <= CHANNEL_MAX:
                raise ValueError(
                    f"{name} must be between {CHANNEL_MIN} and {CHANNEL_MAX}, got {value}"
                )


def is_watermark_like(color: Color, threshold: int, tolerance: int) -> bool:
    """Return True if ``color`` looks like part of a light gray watermark.

    Args:
        color: Three channel intensities
        threshold: Brightness above which a pixel counts as light
        tolerance: Maximum (exclusive) difference between any two channels

    Returns:
        True when the pixel is both light and grayish
    """
    a, b, c = (int(v) for v in color)
    brightness = (a + b + c) // 3
    is_light = brightness > threshold
    is_grayish = abs(a - b) < tolerance and abs(a - c) < tolerance and abs(b - c) < tolerance
    return is_light and is_grayish


def watermark_mask(image: ImageArray, threshold: int, tolerance: int) -> MaskArray:
    """Evaluate :func:`is_watermark_like` for every pixel of ``image``.

    Args:
        image: H×W×3 uint8 array
        threshold: Brightness threshold
        tolerance: Channel-difference tolerance

    Returns:
        H×W boolean array, True where the pixel is watermark-like
    """
    check_image(image)
    channels = image.astype(np.int16)
    a, b, c = channels[:, :, 0], channels[:, :, 1], channels[:, :, 2]

    brightness = (a + b + c) // 3
    is_light = brightness > threshold
    is_grayish = (
        (np.abs(a - b) < tolerance)
        & (np.abs(a - c) < tolerance)
        & (np.abs(b - c) < tolerance)
    )
    return is_light & is_grayish
