"""Local background estimation for pixels flagged as watermark.

The replacement color for a pixel is the mean of its neighbours in a square
window, skipping the pixel itself and any neighbour that is watermark-like
under the estimator's own sampling parameters. Those parameters are fixed
(threshold 200, tolerance 30) and do not follow the caller's classification
parameters.
"""

from typing import Optional, Tuple

import numpy as np

from .classifier import ClassificationParameters, is_watermark_like, watermark_mask
from .utils import Color, ImageArray, MaskArray, check_image, setup_logger

logger = setup_logger(__name__)

DEFAULT_SAMPLE_SIZE = 5
SAMPLE_THRESHOLD = 200
SAMPLE_TOLERANCE = 30


def _window_sums(values: np.ndarray, radius: int) -> np.ndarray:
    """Sum ``values`` over a (2r+1)×(2r+1) window centred on every pixel.

    Pixels outside the array count as zero. Uses a summed-area table so the
    cost does not depend on the window size.
    """
    k = 2 * radius + 1
    padded = np.pad(values, ((radius + 1, radius), (radius + 1, radius)))
    # int32 may wrap on very large pages; window differences stay exact
    integral = padded.cumsum(axis=0, dtype=np.int32).cumsum(axis=1, dtype=np.int32)
    return integral[k:, k:] - integral[:-k, k:] - integral[k:, :-k] + integral[:-k, :-k]


class BackgroundEstimator:
    """Estimate a background color from the unflagged neighbourhood of a pixel."""

    def __init__(
        self,
        sample_size: int = DEFAULT_SAMPLE_SIZE,
        sample_params: Optional[ClassificationParameters] = None,
    ) -> None:
        """Create an estimator.

        Args:
            sample_size: Half-width of the sampling window. 5 gives 11×11.
            sample_params: Parameters used to reject neighbours that are
                themselves watermark-like. Defaults to threshold 200,
                tolerance 30.
        """
        if sample_size <= 0:
            raise ValueError("sample_size must be positive")
        self.sample_size = sample_size
        self.sample_params = sample_params or ClassificationParameters(
            SAMPLE_THRESHOLD, SAMPLE_TOLERANCE
        )

    def estimate(self, image: ImageArray, x: int, y: int) -> Color:
        """Estimate the background color at ``(x, y)``.

        Args:
            image: H×W×3 uint8 array, read only
            x: Column of the pixel
            y: Row of the pixel

        Returns:
            Truncated per-channel mean of the qualifying neighbours, or the
            pixel's own color when no neighbour qualifies.

        Raises:
            IndexError: If ``(x, y)`` lies outside the image
        """
        height, width = image.shape[:2]
        if not (0 <= x < width and 0 <= y < height):
            raise IndexError(f"pixel ({x}, {y}) outside {width}×{height} image")

        threshold = self.sample_params.threshold
        tolerance = self.sample_params.tolerance
        s = self.sample_size
        sums = [0, 0, 0]
        samples = 0

        for sy in range(max(0, y - s), min(height, y + s + 1)):
            for sx in range(max(0, x - s), min(width, x + s + 1)):
                if sx == x and sy == y:
                    continue
                color = tuple(int(v) for v in image[sy, sx])
                if is_watermark_like(color, threshold, tolerance):
                    continue
                for channel in range(3):
                    sums[channel] += color[channel]
                samples += 1

        if samples == 0:
            return tuple(int(v) for v in image[y, x])

        return tuple(total // samples for total in sums)

    def estimate_all(self, image: ImageArray) -> Tuple[ImageArray, MaskArray]:
        """Estimate the background color of every pixel at once.

        Gives the same answer as calling :meth:`estimate` for each pixel,
        including the fallback to the original color when a pixel has no
        qualifying neighbours.

        Args:
            image: H×W×3 uint8 array, read only

        Returns:
            Tuple of (H×W×3 uint8 estimates, H×W bool array that is True
            where at least one neighbour was sampled)
        """
        check_image(image)
        s = self.sample_size
        usable = ~watermark_mask(
            image, self.sample_params.threshold, self.sample_params.tolerance
        )
        usable_count = usable.astype(np.int32)

        # The centre pixel is removed from its own window
        counts = _window_sums(usable_count, s) - usable_count
        has_samples = counts > 0

        estimates = image.copy()
        for channel in range(3):
            values = image[:, :, channel].astype(np.int32) * usable_count
            sums = _window_sums(values, s) - values
            estimates[:, :, channel][has_samples] = (
                sums[has_samples] // counts[has_samples]
            ).astype(np.uint8)

        logger.debug(
            f"Estimated background for {image.shape[1]}×{image.shape[0]} image, "
            f"{int(np.count_nonzero(~has_samples))} pixels without samples"
        )
        return estimates, has_samples
