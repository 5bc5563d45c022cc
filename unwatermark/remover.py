"""Whole-image watermark removal.

Every pixel flagged by the classifier is replaced with the background
estimate computed from the *original* image; all other pixels are copied.
The input array is never modified.
"""

import time
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .background import BackgroundEstimator
from .classifier import ClassificationParameters, watermark_mask
from .codec import decode_image, encode_image
from .utils import DEFAULT_EXTENSION, ImageArray, check_image, setup_logger

logger = setup_logger(__name__)


@dataclass
class RemovalResult:
    """Outcome of removing watermarks from an encoded image or document.

    ``fallback`` is True when processing failed and ``data`` holds the
    untouched input bytes.
    """

    data: bytes
    fallback: bool = False
    error: Optional[str] = None
    pages: int = 1

    @property
    def ok(self) -> bool:
        return not self.fallback


class ImageWatermarkRemover:
    """Replace watermark-like pixels with locally estimated background."""

    def __init__(self, estimator: Optional[BackgroundEstimator] = None) -> None:
        self.estimator = estimator or BackgroundEstimator()

    def process(self, image: ImageArray, threshold: int, tolerance: int) -> ImageArray:
        """Remove watermark-like pixels from ``image``.

        Args:
            image: H×W×3 uint8 array, left unchanged
            threshold: Brightness threshold for the primary classification
            tolerance: Channel-difference tolerance for the primary classification

        Returns:
            New array of identical shape with flagged pixels replaced
        """
        check_image(image)
        ClassificationParameters(threshold, tolerance)

        flagged = watermark_mask(image, threshold, tolerance)
        result = image.copy()

        flagged_count = int(np.count_nonzero(flagged))
        if flagged_count == 0:
            logger.debug("No watermark-like pixels found - returning copy of original")
            return result

        estimates, has_samples = self.estimator.estimate_all(image)
        result[flagged] = estimates[flagged]

        replaced = int(np.count_nonzero(flagged & has_samples))
        total = image.shape[0] * image.shape[1]
        logger.info(
            f"Flagged {flagged_count:,} of {total:,} pixels "
            f"({100 * flagged_count / total:.1f}%), replaced {replaced:,}"
        )
        return result


def remove_watermark_from_image_bytes(
    data: bytes,
    threshold: int,
    tolerance: int,
    fmt: str = DEFAULT_EXTENSION,
    remover: Optional[ImageWatermarkRemover] = None,
) -> RemovalResult:
    """Decode, clean and re-encode an image.

    Any failure after decoding returns the original bytes with
    ``fallback=True`` instead of raising.

    Raises:
        InvalidInputError: If ``data`` is not a decodable image
        ValueError: If ``threshold`` or ``tolerance`` is out of range
    """
    ClassificationParameters(threshold, tolerance)
    image = decode_image(data)
    remover = remover or ImageWatermarkRemover()

    start_time = time.time()
    try:
        processed = remover.process(image, threshold, tolerance)
        output = encode_image(processed, fmt)
    except Exception as e:
        logger.exception(f"Watermark removal failed, returning original image: {e}")
        return RemovalResult(data=data, fallback=True, error=str(e))

    logger.info(f"Image processed in {time.time() - start_time:.2f}s")
    return RemovalResult(data=output)
