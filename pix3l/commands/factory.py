from enum import Enum
from typing import Optional
import numpy as np
from pix3l.core.interfaces import IRasterSlot
from pix3l.core.raster import Raster
from pix3l.core.types import Rect
from pix3l.commands.command import CompoundCommand, ImageCommand
from pix3l.commands.models import Operation, OperationKind
from pix3l.features.adjustments.models import AdjustmentParameters, is_identity_gamma


class FilterType(Enum):
    BLACK_AND_WHITE = "bw"
    SEPIA = "sepia"
    VIGNETTE = "vignette"
    SHARPEN = "sharpen"
    EDGE_DETECTION = "edges"


class FlipDirection(Enum):
    HORIZONTAL = "h"
    VERTICAL = "v"


_FILTER_KINDS = {
    FilterType.BLACK_AND_WHITE: OperationKind.BLACK_AND_WHITE,
    FilterType.SEPIA: OperationKind.SEPIA,
    FilterType.VIGNETTE: OperationKind.VIGNETTE,
    FilterType.SHARPEN: OperationKind.SHARPEN,
    FilterType.EDGE_DETECTION: OperationKind.EDGE_DETECTION,
}


def create_command(
    slot: IRasterSlot, kind: OperationKind, *args, label: Optional[str] = None
) -> ImageCommand:
    return ImageCommand(slot, Operation(kind, tuple(args)), label)


# Adjustments
def create_brightness_command(slot: IRasterSlot, value: int) -> ImageCommand:
    return create_command(slot, OperationKind.BRIGHTNESS, int(value))


def create_contrast_command(slot: IRasterSlot, value: int) -> ImageCommand:
    return create_command(slot, OperationKind.CONTRAST, int(value))


def create_saturation_command(slot: IRasterSlot, value: int) -> ImageCommand:
    return create_command(slot, OperationKind.SATURATION, int(value))


def create_hue_command(slot: IRasterSlot, value: int) -> ImageCommand:
    return create_command(slot, OperationKind.HUE, int(value))


def create_gamma_command(slot: IRasterSlot, value: float) -> ImageCommand:
    return create_command(slot, OperationKind.GAMMA, float(value))


def create_temperature_command(slot: IRasterSlot, value: int) -> ImageCommand:
    return create_command(slot, OperationKind.TEMPERATURE, int(value))


def create_exposure_command(slot: IRasterSlot, value: int) -> ImageCommand:
    return create_command(slot, OperationKind.EXPOSURE, int(value))


def create_shadows_command(slot: IRasterSlot, value: int) -> ImageCommand:
    return create_command(slot, OperationKind.SHADOWS, int(value))


def create_highlights_command(slot: IRasterSlot, value: int) -> ImageCommand:
    return create_command(slot, OperationKind.HIGHLIGHTS, int(value))


# Filters
def create_filter_command(slot: IRasterSlot, filter_type: FilterType) -> ImageCommand:
    return create_command(slot, _FILTER_KINDS[FilterType(filter_type)])


def create_blur_command(slot: IRasterSlot, radius: int) -> ImageCommand:
    return create_command(slot, OperationKind.BLUR, int(radius))


# Geometry
def create_rotate_command(slot: IRasterSlot, angle: int) -> ImageCommand:
    return create_command(slot, OperationKind.ROTATE, int(angle))


def create_flip_command(slot: IRasterSlot, direction: FlipDirection) -> ImageCommand:
    if FlipDirection(direction) == FlipDirection.HORIZONTAL:
        return create_command(slot, OperationKind.FLIP_HORIZONTAL)
    return create_command(slot, OperationKind.FLIP_VERTICAL)


def create_resize_command(slot: IRasterSlot, width: int, height: int) -> ImageCommand:
    return create_command(slot, OperationKind.RESIZE, int(width), int(height))


def create_crop_command(slot: IRasterSlot, rect: Rect) -> ImageCommand:
    x, y, w, h = (int(v) for v in rect)
    return create_command(slot, OperationKind.CROP, (x, y, w, h))


# Watermarks
def create_text_watermark_command(
    slot: IRasterSlot, text: str, x: int, y: int
) -> ImageCommand:
    return create_command(slot, OperationKind.TEXT_WATERMARK, str(text), int(x), int(y))


def create_image_watermark_command(
    slot: IRasterSlot, watermark: Optional[Raster], x: int, y: int
) -> ImageCommand:
    # The command owns a frozen copy so later edits to the source cannot leak in
    pixels: Optional[np.ndarray] = None
    if watermark is not None and not watermark.is_null:
        pixels = watermark.snapshot().pixels
    return create_command(slot, OperationKind.IMAGE_WATERMARK, pixels, int(x), int(y))


def create_compound_adjustment(
    slot: IRasterSlot,
    params: AdjustmentParameters,
    label: Optional[str] = None,
) -> CompoundCommand:
    """
    One history entry for a full parameter set. Identity values get no child,
    so an all-identity set yields an empty (but valid) compound.
    """
    compound = CompoundCommand(label or "Apply Adjustments")
    if params.brightness != 0:
        compound.add(create_brightness_command(slot, params.brightness))
    if params.contrast != 0:
        compound.add(create_contrast_command(slot, params.contrast))
    if params.saturation != 0:
        compound.add(create_saturation_command(slot, params.saturation))
    if params.hue != 0:
        compound.add(create_hue_command(slot, params.hue))
    if not is_identity_gamma(params.gamma):
        compound.add(create_gamma_command(slot, params.gamma))
    if params.temperature != 0:
        compound.add(create_temperature_command(slot, params.temperature))
    if params.exposure != 0:
        compound.add(create_exposure_command(slot, params.exposure))
    if params.shadows != 0:
        compound.add(create_shadows_command(slot, params.shadows))
    if params.highlights != 0:
        compound.add(create_highlights_command(slot, params.highlights))
    return compound
