from typing import Optional
import numpy as np
from PIL import Image, ImageDraw, ImageFont
from pix3l.core.types import RasterBuffer
from pix3l.core.constants import PROCESSING_CONSTANTS
from pix3l.core.validation import is_empty
from pix3l.kernel.system.logging import get_logger

logger = get_logger(__name__)

_FONT_CANDIDATES = ("DejaVuSans.ttf", "Arial.ttf", "arial.ttf")


def _load_font(size: int) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
    for name in _FONT_CANDIDATES:
        try:
            return ImageFont.truetype(name, size)
        except OSError:
            continue
    logger.debug("No TrueType font found, using Pillow's default font")
    return ImageFont.load_default(size=size)


def add_text_watermark(img: RasterBuffer, text: str, x: int, y: int) -> RasterBuffer:
    """
    Draws text in semi-transparent white with its left baseline at (x, y).
    """
    if is_empty(img):
        return img
    if not text:
        return img.copy()

    base = Image.fromarray(np.ascontiguousarray(img))
    overlay = Image.new("RGBA", base.size, (255, 255, 255, 0))
    draw = ImageDraw.Draw(overlay)
    draw.text(
        (x, y),
        text,
        font=_load_font(PROCESSING_CONSTANTS["watermark_font_size"]),
        fill=(255, 255, 255, PROCESSING_CONSTANTS["watermark_text_alpha"]),
        anchor="ls",
    )
    return np.array(Image.alpha_composite(base, overlay), dtype=np.uint8)


def add_image_watermark(
    img: RasterBuffer, watermark: Optional[RasterBuffer], x: int, y: int
) -> RasterBuffer:
    """
    Composites watermark source-over at half opacity with its top-left at (x, y),
    clipped to the image bounds.
    """
    if is_empty(img):
        return img
    if is_empty(watermark):
        return img.copy()
    assert watermark is not None

    res = img.copy()
    h, w = img.shape[:2]
    wh, ww = watermark.shape[:2]
    x0, y0 = max(x, 0), max(y, 0)
    x1, y1 = min(x + ww, w), min(y + wh, h)
    if x1 <= x0 or y1 <= y0:
        return res

    src = watermark[y0 - y : y1 - y, x0 - x : x1 - x].astype(np.float64) / 255.0
    dst = img[y0:y1, x0:x1].astype(np.float64) / 255.0

    src_a = src[..., 3:4] * PROCESSING_CONSTANTS["watermark_image_opacity"]
    dst_a = dst[..., 3:4]
    out_a = src_a + dst_a * (1.0 - src_a)
    with np.errstate(divide="ignore", invalid="ignore"):
        out_rgb = np.where(
            out_a > 0,
            (src[..., :3] * src_a + dst[..., :3] * dst_a * (1.0 - src_a)) / out_a,
            0.0,
        )
    blended = np.concatenate([out_rgb, out_a], axis=-1)
    res[y0:y1, x0:x1] = np.clip(np.rint(blended * 255.0), 0, 255).astype(np.uint8)
    return res
