from typing import Any, Optional
import numpy as np
from pix3l.core.types import RasterBuffer, RGBA_CHANNELS


def is_empty(img: Optional[np.ndarray]) -> bool:
    """True for the null raster: None or an array without pixels."""
    return img is None or img.size == 0


def ensure_raster(arr: Any) -> RasterBuffer:
    """
    Ensures the input is an (H, W, 4) uint8 numpy array and returns it as a RasterBuffer.
    Grey, RGB and float (0.0 - 1.0) inputs are converted; alpha defaults to opaque.
    """
    if not isinstance(arr, np.ndarray):
        raise TypeError(f"Expected numpy.ndarray, got {type(arr)}")

    if arr.dtype != np.uint8:
        if np.issubdtype(arr.dtype, np.floating):
            arr = np.clip(np.rint(arr * 255.0), 0, 255).astype(np.uint8)
        elif arr.dtype == np.uint16:
            arr = (arr >> 8).astype(np.uint8)
        else:
            arr = np.clip(arr, 0, 255).astype(np.uint8)

    if arr.ndim == 2:
        arr = arr[:, :, None]
    if arr.ndim != 3:
        raise ValueError(f"Expected a 2D or 3D image array, got shape {arr.shape}")

    channels = arr.shape[2]
    h, w = arr.shape[:2]
    if channels == RGBA_CHANNELS:
        return np.ascontiguousarray(arr)
    if channels == 1:
        rgb = np.repeat(arr, 3, axis=2)
        alpha = np.full((h, w, 1), 255, dtype=np.uint8)
    elif channels == 2:
        # Grey + alpha
        rgb = np.repeat(arr[:, :, :1], 3, axis=2)
        alpha = arr[:, :, 1:2]
    elif channels == 3:
        rgb = arr
        alpha = np.full((h, w, 1), 255, dtype=np.uint8)
    else:
        rgb = arr[:, :, :3]
        alpha = arr[:, :, 3:4]
    return np.ascontiguousarray(np.concatenate([rgb, alpha], axis=2))


def validate_float(val: Any, default: float = 0.0) -> float:
    """Ensures a value is a float, providing a default if None."""
    if val is None:
        return default
    try:
        return float(val)
    except (TypeError, ValueError):
        return default


def validate_int(val: Any, default: int = 0) -> int:
    """Ensures a value is an int, providing a default if None."""
    if val is None:
        return default
    try:
        return int(val)
    except (TypeError, ValueError, OverflowError):
        return default
