from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Tuple, TypeAlias, Union
from pix3l.core.raster import Raster
from pix3l.core.types import RasterBuffer
from pix3l.features.adjustments import logic as adjustments
from pix3l.features.filters import logic as filters
from pix3l.features.geometry import logic as geometry
from pix3l.features.watermark import logic as watermark


@dataclass(frozen=True)
class Pending:
    """Before-snapshot captured; the result has not been computed yet."""

    before: Raster


@dataclass(frozen=True)
class Computed:
    """Both snapshots are materialised; apply and undo only copy them back."""

    before: Raster
    after: Raster


CommandState: TypeAlias = Union[Pending, Computed]


class OperationKind(Enum):
    BRIGHTNESS = "brightness"
    CONTRAST = "contrast"
    SATURATION = "saturation"
    HUE = "hue"
    GAMMA = "gamma"
    TEMPERATURE = "temperature"
    EXPOSURE = "exposure"
    SHADOWS = "shadows"
    HIGHLIGHTS = "highlights"
    BLACK_AND_WHITE = "black_and_white"
    SEPIA = "sepia"
    VIGNETTE = "vignette"
    SHARPEN = "sharpen"
    EDGE_DETECTION = "edge_detection"
    BLUR = "blur"
    ROTATE = "rotate"
    FLIP_HORIZONTAL = "flip_horizontal"
    FLIP_VERTICAL = "flip_vertical"
    RESIZE = "resize"
    CROP = "crop"
    TEXT_WATERMARK = "text_watermark"
    IMAGE_WATERMARK = "image_watermark"


LABELS: Dict[OperationKind, str] = {
    OperationKind.BRIGHTNESS: "Adjust Brightness",
    OperationKind.CONTRAST: "Adjust Contrast",
    OperationKind.SATURATION: "Adjust Saturation",
    OperationKind.HUE: "Adjust Hue",
    OperationKind.GAMMA: "Adjust Gamma",
    OperationKind.TEMPERATURE: "Adjust Color Temperature",
    OperationKind.EXPOSURE: "Adjust Exposure",
    OperationKind.SHADOWS: "Adjust Shadows",
    OperationKind.HIGHLIGHTS: "Adjust Highlights",
    OperationKind.BLACK_AND_WHITE: "Apply Black & White",
    OperationKind.SEPIA: "Apply Sepia",
    OperationKind.VIGNETTE: "Apply Vignette",
    OperationKind.SHARPEN: "Apply Sharpen",
    OperationKind.EDGE_DETECTION: "Apply Edge Detection",
    OperationKind.BLUR: "Apply Blur",
    OperationKind.ROTATE: "Rotate Image",
    OperationKind.FLIP_HORIZONTAL: "Flip Horizontal",
    OperationKind.FLIP_VERTICAL: "Flip Vertical",
    OperationKind.RESIZE: "Resize Image",
    OperationKind.CROP: "Crop Image",
    OperationKind.TEXT_WATERMARK: "Add Text Watermark",
    OperationKind.IMAGE_WATERMARK: "Add Image Watermark",
}

_TRANSFORMS: Dict[OperationKind, Callable[..., RasterBuffer]] = {
    OperationKind.BRIGHTNESS: adjustments.adjust_brightness,
    OperationKind.CONTRAST: adjustments.adjust_contrast,
    OperationKind.SATURATION: adjustments.adjust_saturation,
    OperationKind.HUE: adjustments.adjust_hue,
    OperationKind.GAMMA: adjustments.adjust_gamma,
    OperationKind.TEMPERATURE: adjustments.adjust_temperature,
    OperationKind.EXPOSURE: adjustments.adjust_exposure,
    OperationKind.SHADOWS: adjustments.adjust_shadows,
    OperationKind.HIGHLIGHTS: adjustments.adjust_highlights,
    OperationKind.BLACK_AND_WHITE: filters.apply_black_and_white,
    OperationKind.SEPIA: filters.apply_sepia,
    OperationKind.VIGNETTE: filters.apply_vignette,
    OperationKind.SHARPEN: filters.apply_sharpen,
    OperationKind.EDGE_DETECTION: filters.apply_edge_detection,
    OperationKind.BLUR: filters.apply_blur,
    OperationKind.ROTATE: geometry.rotate,
    OperationKind.FLIP_HORIZONTAL: geometry.flip_horizontal,
    OperationKind.FLIP_VERTICAL: geometry.flip_vertical,
    OperationKind.RESIZE: geometry.resize,
    OperationKind.CROP: geometry.crop,
    OperationKind.TEXT_WATERMARK: watermark.add_text_watermark,
    OperationKind.IMAGE_WATERMARK: watermark.add_image_watermark,
}


@dataclass(frozen=True, eq=False)
class Operation:
    """
    A closed tagged variant: which transformation to run and its scalar payload.
    """

    kind: OperationKind
    args: Tuple[Any, ...] = ()

    @property
    def label(self) -> str:
        return LABELS[self.kind]

    def transform(self, raster: Raster) -> Raster:
        """
        Runs the transformation on a copy of raster's pixels. Null rasters pass through.
        """
        if raster.is_null:
            return raster.copy()
        pixels = _TRANSFORMS[self.kind](raster.pixels, *self.args)
        return Raster(pixels, raster.depth)

    def __repr__(self) -> str:
        shown = tuple(
            f"<raster {a.shape[1]}x{a.shape[0]}>" if hasattr(a, "shape") else a
            for a in self.args
        )
        return f"Operation({self.kind.value}, {shown!r})"
