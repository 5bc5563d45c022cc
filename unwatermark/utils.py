"""Shared utilities and type definitions for unwatermark."""

import logging
from pathlib import Path
from typing import List, Optional, Tuple, Union

import numpy as np

# Type aliases for clarity
ImageArray = np.ndarray  # H×W×3 BGR uint8
MaskArray = np.ndarray   # H×W bool
Color = Tuple[int, int, int]  # BGR color tuple
MediaBox = Tuple[float, float]  # (width, height) in PDF points
ImagePath = Union[str, Path]

# Supported input extensions
IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.bmp', '.tiff', '.tif', '.webp'}
PDF_EXTENSIONS = {'.pdf'}

DEFAULT_EXTENSION = "jpg"


def setup_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """Set up a logger with consistent formatting.

    Args:
        name: Logger name
        level: Logging level

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if not logger.handlers:  # Avoid duplicate handlers
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level)
    return logger


def file_extension(filename: Optional[str]) -> str:
    """Return the lower-cased extension of ``filename`` without the dot.

    Falls back to ``"jpg"`` when there is no name, no dot, or the name
    ends with a dot.
    """
    if not filename:
        return DEFAULT_EXTENSION
    dot = filename.rfind('.')
    if dot == -1 or dot == len(filename) - 1:
        return DEFAULT_EXTENSION
    return filename[dot + 1:].lower()


def get_input_files(path: Path) -> List[Path]:
    """Get list of image and PDF files from path (file or directory).

    Args:
        path: Path to file or directory

    Returns:
        Sorted list of supported file paths
    """
    supported = IMAGE_EXTENSIONS | PDF_EXTENSIONS
    if path.is_file():
        if path.suffix.lower() in supported:
            return [path]
        else:
            return []

    return sorted(f for f in path.glob("*") if f.suffix.lower() in supported)


def is_pdf(path: ImagePath) -> bool:
    return Path(path).suffix.lower() in PDF_EXTENSIONS


def check_image(image: ImageArray) -> None:
    """Validate that ``image`` is a non-empty H×W×3 uint8 array.

    Raises:
        ValueError: If the array does not have that layout
    """
    if image is None:
        raise ValueError("image must not be None")
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"image must be H×W×3, got shape {image.shape}")
    if image.dtype != np.uint8:
        raise ValueError(f"image must be uint8, got {image.dtype}")
    if image.shape[0] == 0 or image.shape[1] == 0:
        raise ValueError("image must have non-zero width and height")
