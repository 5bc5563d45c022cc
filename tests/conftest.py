"""Common test fixtures."""

import cv2
import fitz
import numpy as np
import pytest

from unwatermark.config import ServiceConfig

DARK = (50, 50, 50)
LIGHT = (240, 240, 240)


@pytest.fixture
def block_image():
    """10×10 dark image with a light 3×3 block in the top-left corner."""
    image = np.full((10, 10, 3), DARK, dtype=np.uint8)
    image[0:3, 0:3] = LIGHT
    return image


@pytest.fixture
def striped_image():
    """Dark image crossed by a thin light gray stripe."""
    image = np.full((40, 60, 3), (40, 60, 80), dtype=np.uint8)
    image[18:21, :] = (235, 235, 232)
    return image


@pytest.fixture
def png_bytes(striped_image):
    success, buffer = cv2.imencode(".png", striped_image)
    assert success
    return buffer.tobytes()


def make_pdf(sizes=((200, 100),), stripe=True, cropbox=None, rotation=0) -> bytes:
    """Build a PDF whose pages are dark gray with a thin light stripe.

    ``cropbox`` and ``rotation`` are applied to every page after drawing.
    """
    document = fitz.open()
    for width, height in sizes:
        page = document.new_page(width=width, height=height)
        page.draw_rect(page.rect, color=None, fill=(0.2, 0.2, 0.2))
        if stripe:
            y = height / 2
            page.draw_rect(fitz.Rect(0, y - 2, width, y + 2), color=None, fill=(0.94, 0.94, 0.94))
        if cropbox is not None:
            page.set_cropbox(fitz.Rect(cropbox))
        if rotation:
            page.set_rotation(rotation)
    data = document.tobytes()
    document.close()
    return data


@pytest.fixture
def pdf_bytes():
    return make_pdf(sizes=((200, 100), (100, 150)))


@pytest.fixture
def service_config(tmp_path):
    return ServiceConfig(
        upload_dir=tmp_path / "uploads",
        output_dir=tmp_path / "outputs",
        dpi=72,
    )
