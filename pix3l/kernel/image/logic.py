import numpy as np
from typing import cast
from pix3l.core.types import RasterBuffer, LUMA_R, LUMA_G, LUMA_B

# Guards integer bucketing against 254.99999... from float luma sums
_LUMA_EPSILON = 1e-9


def get_luminance(img: RasterBuffer) -> np.ndarray:
    """
    Per-pixel luminance (0.0 - 255.0) using Rec. 601 weights.
    Accepts (H, W, 3+) arrays; extra channels (alpha) are ignored.
    """
    rgb = img[..., :3].astype(np.float64)
    return cast(
        np.ndarray, LUMA_R * rgb[..., 0] + LUMA_G * rgb[..., 1] + LUMA_B * rgb[..., 2]
    )


def get_luminance_index(img: RasterBuffer) -> np.ndarray:
    """
    Integer luminance bucket (0 - 255) per pixel.
    """
    lum = np.floor(get_luminance(img) + _LUMA_EPSILON)
    return np.clip(lum, 0, 255).astype(np.int64)


def to_grey(img: RasterBuffer) -> np.ndarray:
    """
    Integer grey level per pixel: (11R + 16G + 5B) / 32.
    """
    rgb = img[..., :3].astype(np.int32)
    return cast(np.ndarray, (rgb[..., 0] * 11 + rgb[..., 1] * 16 + rgb[..., 2] * 5) // 32)


def grey_to_raster(grey: np.ndarray) -> RasterBuffer:
    """
    Expands a single grey channel to opaque RGBA.
    """
    g = np.clip(grey, 0, 255).astype(np.uint8)
    alpha = np.full(g.shape, 255, dtype=np.uint8)
    return np.stack([g, g, g, alpha], axis=-1)


def to_uint8(values: np.ndarray) -> np.ndarray:
    """
    Clamps to [0, 255] and truncates toward zero, matching an int cast followed by a clamp.
    """
    return cast(np.ndarray, np.clip(values, 0, 255).astype(np.uint8))


def with_rgb(img: RasterBuffer, rgb: np.ndarray) -> RasterBuffer:
    """
    Returns a new raster with the colour channels replaced and alpha kept.
    """
    res = img.copy()
    res[..., :3] = to_uint8(rgb)
    return res


def get_hsv_saturation(img: RasterBuffer) -> np.ndarray:
    """
    HSV saturation (0.0 - 1.0) per pixel; black pixels have zero saturation.
    """
    rgb = img[..., :3].astype(np.float64)
    mx = rgb.max(axis=-1)
    mn = rgb.min(axis=-1)
    with np.errstate(divide="ignore", invalid="ignore"):
        sat = np.where(mx > 0, (mx - mn) / mx, 0.0)
    return cast(np.ndarray, sat)
