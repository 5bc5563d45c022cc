"""Tests for watermark pixel classification."""

import numpy as np
import pytest

from unwatermark.classifier import ClassificationParameters, is_watermark_like, watermark_mask


def test_light_gray_is_watermark():
    assert is_watermark_like((230, 230, 230), 200, 20) is True


def test_saturated_color_is_not_watermark():
    assert is_watermark_like((230, 100, 50), 200, 20) is False


def test_dark_gray_is_not_watermark():
    assert is_watermark_like((120, 120, 120), 200, 20) is False


def test_brightness_must_exceed_threshold():
    """Brightness equal to the threshold is not light."""
    assert is_watermark_like((200, 200, 200), 200, 20) is False
    assert is_watermark_like((201, 201, 201), 200, 20) is True


def test_brightness_uses_floor_division():
    # (201 + 201 + 200) // 3 == 200
    assert is_watermark_like((201, 201, 200), 200, 20) is False


def test_channel_difference_must_be_below_tolerance():
    assert is_watermark_like((240, 220, 230), 200, 20) is False
    assert is_watermark_like((240, 221, 230), 200, 20) is True


def test_classification_is_repeatable():
    color = (215, 210, 205)
    results = {is_watermark_like(color, 200, 15) for _ in range(5)}
    assert results == {True}


def test_accepts_numpy_channels():
    pixel = np.array([230, 230, 230], dtype=np.uint8)
    assert is_watermark_like(pixel, 200, 20) is True


def test_mask_matches_scalar_classifier():
    """The array form must agree with the per-pixel form everywhere."""
    rng = np.random.default_rng(7)
    image = rng.integers(150, 256, size=(24, 31, 3), dtype=np.uint8)

    for threshold, tolerance in [(200, 20), (180, 5), (0, 255), (255, 0)]:
        mask = watermark_mask(image, threshold, tolerance)
        assert mask.shape == (24, 31)
        assert mask.dtype == bool
        for y in range(image.shape[0]):
            for x in range(image.shape[1]):
                assert mask[y, x] == is_watermark_like(tuple(image[y, x]), threshold, tolerance)


def test_mask_does_not_overflow_uint8():
    image = np.full((2, 2, 3), 255, dtype=np.uint8)
    assert watermark_mask(image, 200, 20).all()


def test_mask_rejects_grayscale_arrays():
    with pytest.raises(ValueError):
        watermark_mask(np.zeros((5, 5), dtype=np.uint8), 200, 20)


def test_parameters_validate_range():
    params = ClassificationParameters(200, 30)
    assert params.threshold == 200
    assert params.tolerance == 30

    with pytest.raises(ValueError):
        ClassificationParameters(256, 30)
    with pytest.raises(ValueError):
        ClassificationParameters(200, -1)
    with pytest.raises(ValueError):
        ClassificationParameters(200.5, 30)
    with pytest.raises(ValueError):
        ClassificationParameters(True, 30)
