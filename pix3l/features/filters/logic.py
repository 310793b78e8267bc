import numpy as np
from numba import njit, prange  # type: ignore
from pix3l.core.types import RasterBuffer
from pix3l.core.constants import (
    PROCESSING_CONSTANTS,
    SEPIA_MATRIX,
    SHARPEN_KERNEL,
    SOBEL_X,
    SOBEL_Y,
)
from pix3l.core.validation import is_empty
from pix3l.core.performance import time_function
from pix3l.kernel.image.logic import grey_to_raster, to_grey, with_rgb
from pix3l.kernel.system.logging import get_logger

logger = get_logger(__name__)


@njit(parallel=True, cache=True)
def _convolve_rgb_3x3_jit(src: np.ndarray, kernel: np.ndarray) -> np.ndarray:
    """
    3x3 convolution of the colour channels. Reads only from src;
    the outer ring and the alpha channel are copied through.
    """
    h, w, c = src.shape
    res = src.copy()
    for y in prange(1, h - 1):
        for x in range(1, w - 1):
            for ch in range(3):
                acc = 0
                for ky in range(3):
                    for kx in range(3):
                        acc += kernel[ky, kx] * src[y + ky - 1, x + kx - 1, ch]
                if acc < 0:
                    acc = 0
                elif acc > 255:
                    acc = 255
                res[y, x, ch] = acc
    return res


@njit(parallel=True, cache=True)
def _sobel_magnitude_jit(
    grey: np.ndarray, kx_kernel: np.ndarray, ky_kernel: np.ndarray
) -> np.ndarray:
    h, w = grey.shape
    res = grey.copy()
    for y in prange(1, h - 1):
        for x in range(1, w - 1):
            gx = 0
            gy = 0
            for ky in range(3):
                for kx in range(3):
                    v = grey[y + ky - 1, x + kx - 1]
                    gx += kx_kernel[ky, kx] * v
                    gy += ky_kernel[ky, kx] * v
            mag = int(np.sqrt(float(gx * gx + gy * gy)) / 4.0)
            if mag > 255:
                mag = 255
            res[y, x] = mag
    return res


def apply_black_and_white(img: RasterBuffer) -> RasterBuffer:
    """
    Integer grey level (11R + 16G + 5B) / 32 on every colour channel, fully opaque.
    """
    if is_empty(img):
        return img
    return grey_to_raster(to_grey(img))


def apply_sepia(img: RasterBuffer) -> RasterBuffer:
    if is_empty(img):
        return img
    rgb = img[..., :3].astype(np.float64)
    matrix = np.array(SEPIA_MATRIX, dtype=np.float64)
    return with_rgb(img, rgb @ matrix.T)


def apply_vignette(img: RasterBuffer) -> RasterBuffer:
    """
    Linear radial darkening from the centre, reaching black at half the shorter side.
    """
    if is_empty(img):
        return img
    h, w = img.shape[:2]
    cx, cy = w // 2, h // 2
    radius = min(w, h) / 2.0
    ys, xs = np.mgrid[0:h, 0:w]
    dist = np.sqrt((xs - cx) ** 2 + (ys - cy) ** 2)
    factor = np.clip(1.0 - dist / radius, 0.0, 1.0)
    return with_rgb(img, img[..., :3].astype(np.float64) * factor[..., None])


@time_function
def apply_sharpen(img: RasterBuffer) -> RasterBuffer:
    if is_empty(img):
        return img
    kernel = np.array(SHARPEN_KERNEL, dtype=np.int32)
    res = _convolve_rgb_3x3_jit(img.astype(np.int32), kernel)
    return res.astype(np.uint8)


def _box_average(arr: np.ndarray, radius: int, axis: int) -> np.ndarray:
    """
    Mean over a (2r + 1) window along one axis with edge indices clamped.
    Integer floor division, like summing ints and dividing by the count.
    """
    window = 2 * radius + 1
    pad = [(0, 0)] * arr.ndim
    pad[axis] = (radius, radius)
    padded = np.pad(arr, pad, mode="edge")
    lead = [(0, 0)] * arr.ndim
    lead[axis] = (1, 0)
    csum = np.pad(np.cumsum(padded, axis=axis, dtype=np.int64), lead)
    n = arr.shape[axis]
    upper = np.take(csum, np.arange(window, window + n), axis=axis)
    lower = np.take(csum, np.arange(0, n), axis=axis)
    return (upper - lower) // window


def apply_gaussian_blur(img: RasterBuffer, radius: int) -> RasterBuffer:
    """
    Two-pass box blur approximating a Gaussian. All four channels are averaged.
    """
    if is_empty(img):
        return img
    r = max(
        PROCESSING_CONSTANTS["blur_min_radius"],
        min(PROCESSING_CONSTANTS["blur_max_radius"], int(radius)),
    )
    horizontal = _box_average(img.astype(np.int64), r, axis=1)
    vertical = _box_average(horizontal, r, axis=0)
    return vertical.astype(np.uint8)


@time_function
def apply_blur(img: RasterBuffer, radius: int) -> RasterBuffer:
    if is_empty(img):
        logger.warning("apply_blur called with empty image")
        return img
    h, w = img.shape[:2]
    if w * h > PROCESSING_CONSTANTS["blur_log_pixels"]:
        logger.debug(f"Processing blur on large image: {w}x{h}, radius={radius}")
    return apply_gaussian_blur(img, radius)


@time_function
def apply_edge_detection(img: RasterBuffer) -> RasterBuffer:
    """
    Sobel gradient magnitude / 4 over the grey image. The outer ring keeps its grey value.
    """
    if is_empty(img):
        return img
    grey = to_grey(img).astype(np.int32)
    mag = _sobel_magnitude_jit(
        grey,
        np.array(SOBEL_X, dtype=np.int32),
        np.array(SOBEL_Y, dtype=np.int32),
    )
    return grey_to_raster(mag)
