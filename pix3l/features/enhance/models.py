from dataclasses import dataclass


@dataclass(frozen=True)
class ImageStatistics:
    """
    Read-only summary of a raster. Always recomputed from pixels, never cached.

    average_brightness: mean luminance (0 - 255)
    contrast: population standard deviation of luminance
    saturation: mean HSV saturation (0.0 - 1.0)
    dark_pixels / bright_pixels: integer percentage of pixels below 64 / above 192
    """

    average_brightness: float = 0.0
    contrast: float = 0.0
    saturation: float = 0.0
    dark_pixels: int = 0
    bright_pixels: int = 0
