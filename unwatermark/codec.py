"""Image encode/decode helpers built on OpenCV."""

from pathlib import Path

import cv2
import numpy as np

from .errors import InvalidInputError
from .utils import DEFAULT_EXTENSION, ImageArray, ImagePath, check_image

JPEG_QUALITY = 97
PNG_COMPRESSION = 8

# Extensions cv2.imencode accepts under a different spelling
_FORMAT_ALIASES = {
    'jpeg': 'jpg',
    'tif': 'tiff',
}


def normalize_format(fmt: str) -> str:
    """Map an extension-derived format tag onto one OpenCV can encode."""
    fmt = (fmt or DEFAULT_EXTENSION).lower().lstrip('.')
    fmt = _FORMAT_ALIASES.get(fmt, fmt)
    if fmt not in {'jpg', 'png', 'bmp', 'tiff', 'webp'}:
        return DEFAULT_EXTENSION
    return fmt


def _encode_params(fmt: str, quality: int) -> list:
    if fmt == 'jpg':
        return [cv2.IMWRITE_JPEG_QUALITY, quality]
    elif fmt == 'png':
        return [cv2.IMWRITE_PNG_COMPRESSION, PNG_COMPRESSION]
    return []


def decode_image(data: bytes) -> ImageArray:
    """Decode image bytes into a BGR array.

    Args:
        data: Encoded image (any format OpenCV reads)

    Returns:
        H×W×3 uint8 BGR array. Alpha is dropped and grayscale is expanded.

    Raises:
        InvalidInputError: If the bytes are not a readable image
    """
    if not data:
        raise InvalidInputError("Empty image data")
    buffer = np.frombuffer(data, dtype=np.uint8)
    image = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
    if image is None:
        raise InvalidInputError("Could not decode image data")
    return image


def encode_image(image: ImageArray, fmt: str = DEFAULT_EXTENSION, quality: int = JPEG_QUALITY) -> bytes:
    """Encode a BGR array to bytes.

    Args:
        image: H×W×3 uint8 BGR array
        fmt: Extension-derived format tag; unknown tags encode as JPEG
        quality: JPEG quality (ignored for other formats)

    Returns:
        Encoded image bytes

    Raises:
        ValueError: If OpenCV refuses to encode the image
    """
    check_image(image)
    fmt = normalize_format(fmt)
    success, buffer = cv2.imencode(f".{fmt}", image, _encode_params(fmt, quality))
    if not success:
        raise ValueError(f"Could not encode image as {fmt}")
    return buffer.tobytes()


def load_image(image_path: ImagePath) -> ImageArray:
    """Load an image from file path.

    Raises:
        InvalidInputError: If the file is not a readable image
    """
    return decode_image(Path(image_path).read_bytes())


def save_image(image: ImageArray, output_path: ImagePath, quality: int = JPEG_QUALITY) -> None:
    """Save an image to file, picking the format from the file suffix."""
    output_path = Path(output_path)
    output_path.write_bytes(encode_image(image, output_path.suffix, quality))
