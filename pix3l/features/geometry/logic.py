import math
import numpy as np
import cv2
from pix3l.core.types import RasterBuffer, Rect
from pix3l.core.validation import is_empty
from pix3l.core.performance import time_function


def rotated_bounds(width: int, height: int, angle: float) -> tuple[int, int]:
    """
    Size of the axis-aligned box that contains a width x height image rotated by angle degrees.
    """
    rad = math.radians(angle)
    cos_a, sin_a = abs(math.cos(rad)), abs(math.sin(rad))
    # Epsilon keeps exact fits (e.g. cos(90) ~ 6e-17) from rounding up a pixel
    new_w = math.ceil(width * cos_a + height * sin_a - 1e-9)
    new_h = math.ceil(width * sin_a + height * cos_a - 1e-9)
    return max(1, new_w), max(1, new_h)


@time_function
def rotate(img: RasterBuffer, angle: int) -> RasterBuffer:
    """
    Rotates clockwise by angle degrees. The canvas grows to fit and exposed
    corners are transparent. Quarter turns are lossless.
    """
    if is_empty(img):
        return img
    normalized = int(angle) % 360
    if normalized == 0:
        return img.copy()
    if normalized % 90 == 0:
        return np.ascontiguousarray(np.rot90(img, k=-(normalized // 90)))

    h, w = img.shape[:2]
    new_w, new_h = rotated_bounds(w, h, normalized)
    # OpenCV treats positive angles as counter-clockwise
    m_mat = cv2.getRotationMatrix2D(((w - 1) / 2.0, (h - 1) / 2.0), -normalized, 1.0)
    m_mat[0, 2] += (new_w - w) / 2.0
    m_mat[1, 2] += (new_h - h) / 2.0

    res = cv2.warpAffine(
        img,
        m_mat,
        (new_w, new_h),
        flags=cv2.INTER_LINEAR,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=(0, 0, 0, 0),
    )
    return np.ascontiguousarray(res, dtype=np.uint8)


def flip_horizontal(img: RasterBuffer) -> RasterBuffer:
    if is_empty(img):
        return img
    return img[:, ::-1].copy()


def flip_vertical(img: RasterBuffer) -> RasterBuffer:
    if is_empty(img):
        return img
    return img[::-1].copy()


@time_function
def resize(img: RasterBuffer, width: int, height: int) -> RasterBuffer:
    """
    Scales to exactly width x height; aspect ratio is not preserved.
    A non-positive target leaves the image as it is.
    """
    if is_empty(img):
        return img
    if width <= 0 or height <= 0:
        return img.copy()
    h, w = img.shape[:2]
    if (w, h) == (width, height):
        return img.copy()
    interp = cv2.INTER_AREA if width <= w and height <= h else cv2.INTER_LINEAR
    res = cv2.resize(img, (int(width), int(height)), interpolation=interp)
    return np.ascontiguousarray(res, dtype=np.uint8)


def crop(img: RasterBuffer, rect: Rect) -> RasterBuffer:
    """
    Cuts out (x, y, w, h). The result always has the requested size;
    any part of the rectangle outside the source is transparent.
    """
    if is_empty(img):
        return img
    x, y, cw, ch = (int(v) for v in rect)
    if cw <= 0 or ch <= 0:
        return img.copy()
    h, w = img.shape[:2]
    res = np.zeros((ch, cw, img.shape[2]), dtype=np.uint8)

    sx0, sy0 = max(x, 0), max(y, 0)
    sx1, sy1 = min(x + cw, w), min(y + ch, h)
    if sx1 > sx0 and sy1 > sy0:
        res[sy0 - y : sy1 - y, sx0 - x : sx1 - x] = img[sy0:sy1, sx0:sx1]
    return res
