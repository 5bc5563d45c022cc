"""Unwatermark: heuristic removal of light gray watermarks.

This package flags bright, desaturated pixels as watermark and replaces
them with the mean of their unflagged neighbours, for single images and
for every page of a PDF.
"""

__version__ = "0.1.0"
__author__ = "Unwatermark Team"

# Main pipeline components
from .classifier import ClassificationParameters, is_watermark_like, watermark_mask
from .background import BackgroundEstimator
from .remover import ImageWatermarkRemover, RemovalResult, remove_watermark_from_image_bytes
from .document import (
    DocumentWatermarkRemover,
    open_document,
    media_box,
    page_geometry,
    rasterize_page,
    embed_page,
    remove_watermark_from_pdf_bytes,
)
from .codec import decode_image, encode_image, load_image, save_image
from .errors import (
    UnwatermarkError,
    InvalidInputError,
    ProcessingFailure,
    ProcessingCancelled,
    StorageError,
)
from .utils import setup_logger

# CLI entry point
from .cli import main

__all__ = [
    "ClassificationParameters",
    "is_watermark_like",
    "watermark_mask",
    "BackgroundEstimator",
    "ImageWatermarkRemover",
    "RemovalResult",
    "remove_watermark_from_image_bytes",
    "DocumentWatermarkRemover",
    "open_document",
    "media_box",
    "page_geometry",
    "rasterize_page",
    "embed_page",
    "remove_watermark_from_pdf_bytes",
    "decode_image",
    "encode_image",
    "load_image",
    "save_image",
    "UnwatermarkError",
    "InvalidInputError",
    "ProcessingFailure",
    "ProcessingCancelled",
    "StorageError",
    "setup_logger",
    "main",
]
