"""Page-by-page watermark removal for PDF documents.

Each page is rendered to a raster with PyMuPDF, cleaned by
:class:`ImageWatermarkRemover`, and written into a new document as a JPEG
stretched over the visible area of a page that keeps the original MediaBox,
CropBox and rotation. The output has the same page count and order as the
input.
"""

import threading
import time
from typing import NamedTuple, Optional

import cv2
import fitz  # PyMuPDF
import numpy as np
from tqdm import tqdm

from .classifier import ClassificationParameters
from .codec import encode_image
from .errors import InvalidInputError, ProcessingCancelled, ProcessingFailure
from .remover import ImageWatermarkRemover, RemovalResult
from .utils import ImageArray, MediaBox, check_image, setup_logger

logger = setup_logger(__name__)

DEFAULT_DPI = 300
PAGE_JPEG_QUALITY = 90


def open_document(data: bytes) -> fitz.Document:
    """Open PDF bytes as a PyMuPDF document.

    Raises:
        InvalidInputError: If the bytes are not a PDF with at least one page
    """
    if not data:
        raise InvalidInputError("Empty PDF data")
    try:
        document = fitz.open(stream=data, filetype="pdf")
    except Exception as e:
        raise InvalidInputError(f"Could not open PDF: {e}") from e
    if document.page_count == 0:
        document.close()
        raise InvalidInputError("PDF has no pages")
    return document


class PageGeometry(NamedTuple):
    """Where a page's visible area sits inside its media box."""

    media_box: MediaBox
    crop_box: fitz.Rect  # unrotated, relative to the media box top-left
    rotation: int


def media_box(document: fitz.Document, index: int) -> MediaBox:
    """Return the ``(width, height)`` of a page's MediaBox in PDF points."""
    box = document[index].mediabox
    return box.width, box.height


def page_geometry(document: fitz.Document, index: int) -> PageGeometry:
    page = document[index]
    return PageGeometry(media_box(document, index), fitz.Rect(page.cropbox), page.rotation)


def rasterize_page(document: fitz.Document, index: int, dpi: int = DEFAULT_DPI) -> ImageArray:
    """Render the visible area of one page to an H×W×3 BGR array at ``dpi``.

    The raster is in the page's unrotated orientation, so it lines up with
    the page's CropBox rather than with how a viewer displays it.
    """
    page = document[index]
    pix = page.get_pixmap(dpi=dpi, colorspace=fitz.csRGB, alpha=False)
    rgb = np.frombuffer(pix.samples, dtype=np.uint8).reshape(pix.height, pix.width, pix.n)
    # get_pixmap applies /Rotate clockwise; np.rot90 turns counter-clockwise
    turns = (page.rotation // 90) % 4
    if turns:
        rgb = np.ascontiguousarray(np.rot90(rgb, k=turns))
    return cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR)


def embed_page(
    document: fitz.Document,
    image: ImageArray,
    box: MediaBox,
    crop_box: Optional[fitz.Rect] = None,
    rotation: int = 0,
    quality: int = PAGE_JPEG_QUALITY,
) -> None:
    """Append a page with MediaBox ``box`` to ``document`` showing ``image``.

    The image is stretched over ``crop_box`` (the whole page when omitted)
    regardless of its pixel dimensions. The CropBox and rotation are then
    copied onto the new page.
    """
    check_image(image)
    width, height = box
    page = document.new_page(width=width, height=height)
    full_page = fitz.Rect(page.rect)
    target = fitz.Rect(crop_box) if crop_box is not None else full_page

    stream = encode_image(image, "jpg", quality)
    page.insert_image(target, stream=stream, keep_proportion=False)

    if target != full_page:
        page.set_cropbox(target)
    if rotation:
        page.set_rotation(rotation)


class DocumentWatermarkRemover:
    """Run :class:`ImageWatermarkRemover` over every page of a PDF."""

    def __init__(
        self,
        image_remover: Optional[ImageWatermarkRemover] = None,
        dpi: int = DEFAULT_DPI,
        jpeg_quality: int = PAGE_JPEG_QUALITY,
        show_progress: bool = False,
    ) -> None:
        if dpi <= 0:
            raise ValueError("dpi must be positive")
        self.image_remover = image_remover or ImageWatermarkRemover()
        self.dpi = dpi
        self.jpeg_quality = jpeg_quality
        self.show_progress = show_progress

    def process(
        self,
        document: fitz.Document,
        threshold: int,
        tolerance: int,
        cancel_event: Optional[threading.Event] = None,
    ) -> fitz.Document:
        """Build a new document with every page cleaned.

        Args:
            document: Source document, left unchanged
            threshold: Brightness threshold for classification
            tolerance: Channel-difference tolerance for classification
            cancel_event: Checked before each page; when set, processing stops

        Returns:
            New document with the same page count, order and page sizes.
            The caller owns it and must close it.

        Raises:
            ProcessingCancelled: If ``cancel_event`` is set between pages
            ProcessingFailure: If any page fails to render, clean or embed
        """
        ClassificationParameters(threshold, tolerance)
        output = fitz.open()
        pages = range(document.page_count)

        try:
            for index in tqdm(pages, desc="Pages", unit="page", disable=not self.show_progress):
                if cancel_event is not None and cancel_event.is_set():
                    raise ProcessingCancelled(f"Cancelled before page {index + 1}")

                try:
                    geometry = page_geometry(document, index)
                    raster = rasterize_page(document, index, self.dpi)
                    cleaned = self.image_remover.process(raster, threshold, tolerance)
                    embed_page(
                        output,
                        cleaned,
                        geometry.media_box,
                        crop_box=geometry.crop_box,
                        rotation=geometry.rotation,
                        quality=self.jpeg_quality,
                    )
                except Exception as e:
                    raise ProcessingFailure(f"Page {index + 1} failed: {e}") from e

                logger.debug(
                    f"Page {index + 1}/{document.page_count}: "
                    f"{raster.shape[1]}×{raster.shape[0]} px, "
                    f"{geometry.media_box[0]:.1f}×{geometry.media_box[1]:.1f} pt, "
                    f"rotation {geometry.rotation}"
                )
        except Exception:
            output.close()
            raise

        return output


def remove_watermark_from_pdf_bytes(
    data: bytes,
    threshold: int,
    tolerance: int,
    remover: Optional[DocumentWatermarkRemover] = None,
    cancel_event: Optional[threading.Event] = None,
) -> RemovalResult:
    """Open, clean and re-serialise a PDF.

    Any failure after the PDF has been opened returns the original bytes
    with ``fallback=True``. Cancellation is not a failure and propagates.

    Raises:
        InvalidInputError: If ``data`` is not a readable PDF
        ValueError: If ``threshold`` or ``tolerance`` is out of range
        ProcessingCancelled: If ``cancel_event`` is set between pages
    """
    ClassificationParameters(threshold, tolerance)
    document = open_document(data)
    remover = remover or DocumentWatermarkRemover()
    page_count = document.page_count

    start_time = time.time()
    try:
        processed = remover.process(document, threshold, tolerance, cancel_event=cancel_event)
        try:
            output = processed.tobytes(garbage=3, deflate=True)
        finally:
            processed.close()
    except ProcessingCancelled:
        raise
    except Exception as e:
        logger.exception(f"Watermark removal failed, returning original PDF: {e}")
        return RemovalResult(data=data, fallback=True, error=str(e), pages=page_count)
    finally:
        document.close()

    logger.info(f"Processed {page_count} page(s) in {time.time() - start_time:.2f}s")
    return RemovalResult(data=output, pages=page_count)
