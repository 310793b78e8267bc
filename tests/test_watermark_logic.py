import numpy as np

from pix3l.features.watermark.logic import add_text_watermark, add_image_watermark
from images import solid


def test_text_watermark_draws_half_transparent_white():
    img = solid(40, 120, (0, 0, 0, 255))
    res = add_text_watermark(img, "Pix3l", 5, 30)
    assert res.shape == img.shape
    assert res.dtype == np.uint8
    changed = np.any(res != img, axis=-1)
    assert changed.any()
    # White at alpha 128 over black never exceeds ~50%
    assert res[..., :3].max() <= 129
    assert np.all(res[..., 3] == 255)
    # Input untouched
    assert np.all(img[..., :3] == 0)


def test_text_watermark_empty_text_is_noop():
    img = solid(10, 10)
    res = add_text_watermark(img, "", 0, 5)
    np.testing.assert_array_equal(res, img)
    assert res is not img


def test_image_watermark_half_opacity_source_over():
    img = solid(4, 4, (0, 0, 0, 255))
    mark = solid(2, 2, (255, 0, 0, 255))
    res = add_image_watermark(img, mark, 1, 1)
    np.testing.assert_array_equal(res[1, 1], [128, 0, 0, 255])
    np.testing.assert_array_equal(res[2, 2], [128, 0, 0, 255])
    np.testing.assert_array_equal(res[0, 0], [0, 0, 0, 255])
    np.testing.assert_array_equal(res[3, 3], [0, 0, 0, 255])


def test_image_watermark_clipped_to_bounds():
    img = solid(4, 4, (0, 0, 0, 255))
    mark = solid(3, 3, (0, 255, 0, 255))
    res = add_image_watermark(img, mark, 3, -2)
    changed = np.argwhere(np.any(res != img, axis=-1))
    np.testing.assert_array_equal(changed, [[0, 3]])


def test_image_watermark_transparent_pixels_do_nothing():
    img = solid(3, 3, (10, 20, 30, 255))
    mark = solid(3, 3, (255, 255, 255, 0))
    np.testing.assert_array_equal(add_image_watermark(img, mark, 0, 0), img)


def test_image_watermark_missing_mark_is_noop():
    img = solid(3, 3)
    np.testing.assert_array_equal(add_image_watermark(img, None, 0, 0), img)
    np.testing.assert_array_equal(
        add_image_watermark(img, np.zeros((0, 0, 4), dtype=np.uint8), 0, 0), img
    )
