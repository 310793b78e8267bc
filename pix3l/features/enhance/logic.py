import math
import numpy as np
from pix3l.core.types import RasterBuffer, Histogram
from pix3l.core.constants import BRIGHT_PIXEL_THRESHOLD, DARK_PIXEL_THRESHOLD
from pix3l.core.validation import is_empty
from pix3l.kernel.image.logic import (
    get_hsv_saturation,
    get_luminance,
    get_luminance_index,
)
from pix3l.features.adjustments.models import AdjustmentParameters
from pix3l.features.enhance.models import ImageStatistics


def calculate_histogram(img: RasterBuffer) -> Histogram:
    """
    256-bucket count of integer luminance. Sums to the pixel count.
    """
    if is_empty(img):
        return np.zeros(256, dtype=np.int64)
    idx = get_luminance_index(img).ravel()
    return np.bincount(idx, minlength=256).astype(np.int64)


def calculate_statistics(img: RasterBuffer) -> ImageStatistics:
    if is_empty(img):
        return ImageStatistics()
    lum = get_luminance(img)
    total = lum.size
    dark = int(np.count_nonzero(lum < DARK_PIXEL_THRESHOLD))
    bright = int(np.count_nonzero(lum > BRIGHT_PIXEL_THRESHOLD))
    return ImageStatistics(
        average_brightness=float(lum.mean()),
        contrast=float(lum.std()),
        saturation=float(get_hsv_saturation(img).mean()),
        dark_pixels=(dark * 100) // total,
        bright_pixels=(bright * 100) // total,
    )


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def _half_toward_zero(value: int) -> int:
    return int(value / 2)


def suggest_auto_enhancement(stats: ImageStatistics) -> AdjustmentParameters:
    """
    Maps image statistics to tonal corrections with a fixed rule table.

    Dark images are brightened toward ~115, bright ones pulled toward ~140.
    Flat images gain contrast, harsh ones lose some. Dull colour is boosted
    and oversaturated colour damped. Heavy shadow or highlight tails get
    recovery that leans on the brightness correction.
    """
    avg = stats.average_brightness
    if avg < 100:
        brightness = _clamp(_round_half_away((115 - avg) * 0.6), -100, 100)
    elif avg > 155:
        brightness = _clamp(_round_half_away((140 - avg) * 0.6), -100, 100)
    else:
        brightness = 0

    c = stats.contrast
    if c < 40:
        contrast = _clamp(_round_half_away((50 - c) * 1.5), 0, 50)
    elif c > 75:
        contrast = _clamp(_round_half_away((65 - c) * 0.5), -30, 0)
    else:
        contrast = 0

    s = stats.saturation
    if s < 0.25:
        saturation = _clamp(_round_half_away((0.40 - s) * 150), 0, 40)
    elif s > 0.65:
        saturation = _clamp(_round_half_away((0.50 - s) * 100), -30, 0)
    else:
        saturation = 0

    shadows = 0
    if stats.dark_pixels > 40:
        shadows = _clamp(20 + _half_toward_zero(brightness), 0, 50)

    highlights = 0
    if stats.bright_pixels > 30:
        highlights = _clamp(-15 + _half_toward_zero(brightness), -50, 0)

    return AdjustmentParameters(
        brightness=brightness,
        contrast=contrast,
        saturation=saturation,
        shadows=shadows,
        highlights=highlights,
    )


def analyze_image(img: RasterBuffer) -> AdjustmentParameters:
    """Statistics plus rule table in one call. Identity for an empty raster."""
    if is_empty(img):
        return AdjustmentParameters()
    return suggest_auto_enhancement(calculate_statistics(img))
