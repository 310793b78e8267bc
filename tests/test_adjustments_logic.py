import numpy as np
import pytest

from pix3l.features.adjustments.logic import (
    adjust_brightness,
    adjust_contrast,
    adjust_saturation,
    adjust_hue,
    adjust_gamma,
    adjust_temperature,
    adjust_exposure,
    adjust_shadows,
    adjust_highlights,
    apply_adjustments,
)
from pix3l.features.adjustments.models import AdjustmentParameters
from images import row, solid

IDENTITY_CALLS = [
    (adjust_brightness, 0),
    (adjust_contrast, 0),
    (adjust_saturation, 0),
    (adjust_hue, 0),
    (adjust_gamma, 1.0),
    (adjust_gamma, 1.005),
    (adjust_temperature, 0),
    (adjust_exposure, 0),
    (adjust_shadows, 0),
    (adjust_highlights, 0),
]


@pytest.mark.parametrize("fn,value", IDENTITY_CALLS)
def test_identity_values_return_equal_copy(noisy, fn, value):
    res = fn(noisy, value)
    assert res is not noisy
    np.testing.assert_array_equal(res, noisy)


@pytest.mark.parametrize("fn,value", IDENTITY_CALLS)
def test_empty_input_is_passed_through(fn, value):
    assert fn(None, value) is None
    empty = np.zeros((0, 0, 4), dtype=np.uint8)
    assert fn(empty, value) is empty


def test_input_is_never_mutated(noisy):
    before = noisy.copy()
    adjust_brightness(noisy, 40)
    adjust_saturation(noisy, 60)
    adjust_shadows(noisy, -30)
    np.testing.assert_array_equal(noisy, before)


def test_brightness_mid_gray(gray_2x2):
    res = adjust_brightness(gray_2x2, 50)
    assert np.all(res[..., :3] == 178)
    assert np.all(res[..., 3] == 255)


def test_brightness_clamps_values_and_parameter():
    img = solid(1, 3, (250, 10, 120, 77))
    res = adjust_brightness(img, 50)
    np.testing.assert_array_equal(res[0, 0], [255, 60, 170, 77])
    # Parameter itself is bounded to [-100, 100]
    np.testing.assert_array_equal(adjust_brightness(img, -500), adjust_brightness(img, -100))


def test_contrast_pivots_on_mid_gray():
    img = solid(1, 1, (128, 200, 20, 255))
    res = adjust_contrast(img, 50)
    # factor = 259 * 305 / (255 * 209) ~= 1.4822
    np.testing.assert_array_equal(res[0, 0], [128, 234, 0, 255])


def test_saturation_removes_colour():
    img = solid(1, 1, (255, 0, 0, 255))
    res = adjust_saturation(img, -100)
    np.testing.assert_array_equal(res[0, 0], [255, 255, 255, 255])


def test_saturation_leaves_gray_alone(gray_2x2):
    np.testing.assert_array_equal(adjust_saturation(gray_2x2, 80), gray_2x2)


@pytest.mark.parametrize(
    "offset,expected",
    [(120, [0, 255, 0]), (-120, [0, 0, 255]), (180, [0, 255, 255])],
)
def test_hue_rotation_wraps(offset, expected):
    img = solid(1, 1, (255, 0, 0, 200))
    res = adjust_hue(img, offset)
    np.testing.assert_array_equal(res[0, 0, :3], expected)
    assert res[0, 0, 3] == 200


def test_gamma_truncates():
    img = solid(1, 1, (64, 0, 255, 255))
    res = adjust_gamma(img, 2.0)
    # 255 * (64/255)^0.5 = 127.75
    np.testing.assert_array_equal(res[0, 0], [127, 0, 255, 255])


def test_gamma_outside_tolerance_is_applied(gray_2x2):
    assert not np.array_equal(adjust_gamma(gray_2x2, 1.05), gray_2x2)


def test_temperature_warm_and_cool_are_asymmetric():
    img = solid(1, 1, (100, 100, 100, 255))
    np.testing.assert_array_equal(adjust_temperature(img, 20)[0, 0], [100, 90, 80, 255])
    np.testing.assert_array_equal(adjust_temperature(img, -20)[0, 0], [120, 110, 100, 255])
    np.testing.assert_array_equal(adjust_temperature(img, -21)[0, 0], [121, 110, 100, 255])


def test_exposure_is_one_stop_per_fifty():
    img = solid(1, 1, (100, 100, 100, 255))
    assert adjust_exposure(img, 50)[0, 0, 0] == 200
    assert adjust_exposure(img, -50)[0, 0, 0] == 50
    assert adjust_exposure(img, 100)[0, 0, 0] == 255


def test_shadows_only_touch_dark_half():
    img = row((50, 50, 50, 255), (200, 200, 200, 255))
    res = adjust_shadows(img, 50)
    # 1 + 0.5 * (1 - 2 * 50/255) = 1.3039
    np.testing.assert_array_equal(res[0, 0], [65, 65, 65, 255])
    np.testing.assert_array_equal(res[0, 1], [200, 200, 200, 255])


def test_highlights_only_touch_bright_half():
    img = row((50, 50, 50, 255), (200, 200, 200, 255))
    res = adjust_highlights(img, 50)
    # 1 - 0.5 * (2 * 200/255 - 1) = 0.7157
    np.testing.assert_array_equal(res[0, 0], [50, 50, 50, 255])
    np.testing.assert_array_equal(res[0, 1], [143, 143, 143, 255])


def test_apply_adjustments_identity(noisy):
    res = apply_adjustments(noisy, AdjustmentParameters())
    np.testing.assert_array_equal(res, noisy)
    assert res is not noisy


def test_apply_adjustments_fixed_order(noisy):
    params = AdjustmentParameters(brightness=10, contrast=20, gamma=1.4, shadows=15)
    expected = adjust_shadows(
        adjust_gamma(adjust_contrast(adjust_brightness(noisy, 10), 20), 1.4), 15
    )
    np.testing.assert_array_equal(apply_adjustments(noisy, params), expected)
