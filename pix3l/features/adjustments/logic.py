import numpy as np
import cv2
from typing import Callable
from pix3l.core.types import RasterBuffer
from pix3l.core.validation import is_empty
from pix3l.core.performance import time_function
from pix3l.kernel.image.logic import get_luminance, with_rgb
from pix3l.features.adjustments.models import (
    AdjustmentParameters,
    GAMMA_MAX,
    GAMMA_MIN,
    is_identity_gamma,
)


def _clamp_value(value: int, low: int, high: int) -> int:
    return max(low, min(high, int(value)))


def _rgb(img: RasterBuffer) -> np.ndarray:
    return img[..., :3].astype(np.float64)


def adjust_brightness(img: RasterBuffer, brightness: int) -> RasterBuffer:
    """
    Adds a constant offset to every colour channel.
    """
    if is_empty(img):
        return img
    b = _clamp_value(brightness, -100, 100)
    if b == 0:
        return img.copy()
    return with_rgb(img, img[..., :3].astype(np.int16) + b)


def adjust_contrast(img: RasterBuffer, contrast: int) -> RasterBuffer:
    """
    Stretches channels around mid-grey (128) with the classic 259/255 factor.
    """
    if is_empty(img):
        return img
    c = _clamp_value(contrast, -100, 100)
    if c == 0:
        return img.copy()
    factor = (259.0 * (c + 255)) / (255.0 * (259 - c))
    return with_rgb(img, factor * (_rgb(img) - 128.0) + 128.0)


def _transform_hsv(
    img: RasterBuffer, fn: Callable[[np.ndarray], np.ndarray]
) -> RasterBuffer:
    rgb = img[..., :3].astype(np.float32) / 255.0
    # H in degrees [0, 360), S and V in [0, 1] for float input
    hsv = cv2.cvtColor(rgb, cv2.COLOR_RGB2HSV)
    hsv = fn(hsv).astype(np.float32)
    out = cv2.cvtColor(hsv, cv2.COLOR_HSV2RGB)
    return with_rgb(img, np.rint(out * 255.0))


def adjust_saturation(img: RasterBuffer, saturation: int) -> RasterBuffer:
    if is_empty(img):
        return img
    s = _clamp_value(saturation, -100, 100)
    if s == 0:
        return img.copy()
    scale = 1.0 + s / 100.0

    def _scale(hsv: np.ndarray) -> np.ndarray:
        hsv[..., 1] = np.clip(hsv[..., 1] * scale, 0.0, 1.0)
        return hsv

    return _transform_hsv(img, _scale)


def adjust_hue(img: RasterBuffer, hue: int) -> RasterBuffer:
    """
    Rotates the hue wheel; negative results wrap into [0, 360).
    """
    if is_empty(img):
        return img
    offset = _clamp_value(hue, -180, 180)
    if offset == 0:
        return img.copy()

    def _rotate(hsv: np.ndarray) -> np.ndarray:
        hsv[..., 0] = np.mod(hsv[..., 0] + offset, 360.0)
        return hsv

    return _transform_hsv(img, _rotate)


def adjust_gamma(img: RasterBuffer, gamma: float) -> RasterBuffer:
    if is_empty(img):
        return img
    if is_identity_gamma(gamma):
        return img.copy()
    g = max(GAMMA_MIN, min(GAMMA_MAX, float(gamma)))
    lut = 255.0 * np.power(np.arange(256, dtype=np.float64) / 255.0, 1.0 / g)
    lut_u8 = np.clip(lut, 0, 255).astype(np.uint8)
    res = img.copy()
    res[..., :3] = lut_u8[img[..., :3]]
    return res


def adjust_temperature(img: RasterBuffer, temperature: int) -> RasterBuffer:
    """
    Warm (positive) pulls green by half and blue fully down.
    Cool (negative) pushes red fully and green by half up.
    The two branches are intentionally not mirror images.
    """
    if is_empty(img):
        return img
    t = _clamp_value(temperature, -100, 100)
    if t == 0:
        return img.copy()
    rgb = img[..., :3].astype(np.int16)
    if t > 0:
        rgb[..., 1] -= t // 2
        rgb[..., 2] -= t
    else:
        amount = -t
        rgb[..., 0] += amount
        rgb[..., 1] += amount // 2
    return with_rgb(img, rgb)


def adjust_exposure(img: RasterBuffer, exposure: int) -> RasterBuffer:
    """
    Multiplies channels by 2^(exposure / 50), so +/-50 is one stop.
    """
    if is_empty(img):
        return img
    e = _clamp_value(exposure, -100, 100)
    if e == 0:
        return img.copy()
    return with_rgb(img, _rgb(img) * (2.0 ** (e / 50.0)))


def adjust_shadows(img: RasterBuffer, shadows: int) -> RasterBuffer:
    """
    Lifts (or crushes) pixels darker than mid luminance; brighter pixels are untouched.
    """
    if is_empty(img):
        return img
    s = _clamp_value(shadows, -100, 100)
    if s == 0:
        return img.copy()
    f = s / 100.0
    lum = get_luminance(img) / 255.0
    mask = lum < 0.5
    factor = np.where(mask, 1.0 + f * (1.0 - 2.0 * lum), 1.0)
    rgb = _rgb(img) * factor[..., None]
    rgb = np.where(mask[..., None], rgb, img[..., :3])
    return with_rgb(img, rgb)


def adjust_highlights(img: RasterBuffer, highlights: int) -> RasterBuffer:
    """
    Compresses (or boosts) pixels brighter than mid luminance; darker pixels are untouched.
    """
    if is_empty(img):
        return img
    h = _clamp_value(highlights, -100, 100)
    if h == 0:
        return img.copy()
    f = h / 100.0
    lum = get_luminance(img) / 255.0
    mask = lum > 0.5
    factor = np.where(mask, 1.0 - f * (2.0 * lum - 1.0), 1.0)
    rgb = _rgb(img) * factor[..., None]
    rgb = np.where(mask[..., None], rgb, img[..., :3])
    return with_rgb(img, rgb)


@time_function
def apply_adjustments(
    img: RasterBuffer, params: AdjustmentParameters
) -> RasterBuffer:
    """
    Runs the full tonal chain in a fixed order, skipping identity values.
    Used for previews; committed edits go through individual commands.
    """
    if is_empty(img):
        return img
    res = img.copy()
    if params.brightness != 0:
        res = adjust_brightness(res, params.brightness)
    if params.contrast != 0:
        res = adjust_contrast(res, params.contrast)
    if params.saturation != 0:
        res = adjust_saturation(res, params.saturation)
    if params.hue != 0:
        res = adjust_hue(res, params.hue)
    if not is_identity_gamma(params.gamma):
        res = adjust_gamma(res, params.gamma)
    if params.temperature != 0:
        res = adjust_temperature(res, params.temperature)
    if params.exposure != 0:
        res = adjust_exposure(res, params.exposure)
    if params.shadows != 0:
        res = adjust_shadows(res, params.shadows)
    if params.highlights != 0:
        res = adjust_highlights(res, params.highlights)
    return res
