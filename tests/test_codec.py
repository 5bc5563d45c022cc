"""Tests for image encoding helpers and file name handling."""

import cv2
import numpy as np
import pytest

from unwatermark.codec import decode_image, encode_image, load_image, normalize_format, save_image
from unwatermark.errors import InvalidInputError
from unwatermark.utils import file_extension, get_input_files


@pytest.mark.parametrize("filename, expected", [
    ("photo.PNG", "png"),
    ("archive.tar.gz", "gz"),
    ("scan.jpeg", "jpeg"),
    ("noextension", "jpg"),
    ("trailingdot.", "jpg"),
    ("", "jpg"),
    (None, "jpg"),
])
def test_file_extension(filename, expected):
    assert file_extension(filename) == expected


@pytest.mark.parametrize("fmt, expected", [
    ("png", "png"),
    (".PNG", "png"),
    ("jpeg", "jpg"),
    ("tif", "tiff"),
    ("gif", "jpg"),
    ("", "jpg"),
])
def test_normalize_format(fmt, expected):
    assert normalize_format(fmt) == expected


def test_png_is_lossless(striped_image):
    decoded = decode_image(encode_image(striped_image, "png"))
    np.testing.assert_array_equal(decoded, striped_image)


def test_unknown_format_encodes_jpeg(striped_image):
    data = encode_image(striped_image, "xyz")
    assert data[:2] == b"\xff\xd8"


def test_decode_expands_grayscale():
    gray = np.full((4, 6), 77, dtype=np.uint8)
    success, buffer = cv2.imencode(".png", gray)
    assert success
    image = decode_image(buffer.tobytes())
    assert image.shape == (4, 6, 3)


def test_decode_rejects_garbage():
    with pytest.raises(InvalidInputError):
        decode_image(b"\x00\x01\x02")


def test_save_and_load(tmp_path, striped_image):
    path = tmp_path / "out.png"
    save_image(striped_image, path)
    np.testing.assert_array_equal(load_image(path), striped_image)


def test_get_input_files(tmp_path):
    for name in ("a.png", "b.PDF", "c.txt", "d.jpg"):
        (tmp_path / name).write_bytes(b"x")

    files = get_input_files(tmp_path)
    assert [f.name for f in files] == ["a.png", "b.PDF", "d.jpg"]
    assert get_input_files(tmp_path / "a.png") == [tmp_path / "a.png"]
    assert get_input_files(tmp_path / "c.txt") == []
