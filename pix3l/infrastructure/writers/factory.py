import os
import numpy as np
import imageio.v3 as iio
from PIL import Image
from typing import Optional
from pix3l.core.constants import PROCESSING_CONSTANTS
from pix3l.core.errors import ImageSaveError
from pix3l.core.raster import Raster
from pix3l.kernel.system.logging import get_logger

logger = get_logger(__name__)

JPEG_EXTENSIONS = (".jpg", ".jpeg")
# Formats without an alpha channel
OPAQUE_EXTENSIONS = JPEG_EXTENSIONS + (".bmp",)


def save_raster(raster: Raster, file_path: str, quality: Optional[int] = None) -> None:
    """
    Writes raster to file_path; the format follows the extension.
    JPEG drops alpha and defaults to quality 90.
    """
    if not file_path:
        raise ImageSaveError(file_path, "no file path given")
    if raster is None or raster.is_null:
        raise ImageSaveError(file_path, "nothing to save")

    ext = os.path.splitext(file_path)[1].lower()
    if not ext:
        raise ImageSaveError(file_path, "file name has no extension")

    pixels = np.ascontiguousarray(raster.pixels)
    if ext in OPAQUE_EXTENSIONS:
        pixels = np.ascontiguousarray(pixels[..., :3])

    try:
        if ext in JPEG_EXTENSIONS:
            q = quality if quality is not None else PROCESSING_CONSTANTS["jpeg_default_quality"]
            Image.fromarray(pixels).save(
                file_path, format="JPEG", quality=max(1, min(100, int(q)))
            )
        else:
            iio.imwrite(file_path, pixels)
    except Exception as e:
        raise ImageSaveError(file_path, str(e) or type(e).__name__) from e

    logger.info(f"Saved {os.path.basename(file_path)}: {raster.width}x{raster.height}")
