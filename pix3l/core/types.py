from typing import TypeAlias, Tuple
import numpy as np
import numpy.typing as npt
from dataclasses import dataclass


# Image Types
# 8-bit RGBA image (Height, Width, 4)
RasterBuffer: TypeAlias = npt.NDArray[np.uint8]

# Geometry Types
# (x, y, width, height)
Rect: TypeAlias = Tuple[int, int, int, int]

# Domain Types
Histogram: TypeAlias = npt.NDArray[np.int64]

# Rec. 601 luma, the weighting used for brightness statistics and tonal masks
LUMA_R = 0.299
LUMA_G = 0.587
LUMA_B = 0.114

RGBA_CHANNELS = 4


@dataclass
class AppConfig:
    preview_max_dimension: int
    jpeg_quality: int
    log_level: int
    presets_dir: str
