from dataclasses import dataclass
from typing import Optional
import numpy as np
from pix3l.core.types import RasterBuffer, RGBA_CHANNELS
from pix3l.core.validation import ensure_raster


@dataclass(eq=False)
class Raster:
    """
    A width x height grid of 8-bit RGBA pixels plus the bit depth reported by its source.
    """

    pixels: RasterBuffer
    depth: int = 32

    @classmethod
    def from_array(cls, arr: np.ndarray, depth: Optional[int] = None) -> "Raster":
        """
        Wraps any grey/RGB/RGBA array, normalising it to 8-bit RGBA.
        """
        if depth is None:
            channels = 1 if arr.ndim == 2 else arr.shape[2]
            depth = channels * arr.dtype.itemsize * 8
        return cls(ensure_raster(arr), depth)

    @classmethod
    def blank(
        cls, width: int, height: int, color: tuple = (0, 0, 0, 255)
    ) -> "Raster":
        pixels = np.empty((height, width, RGBA_CHANNELS), dtype=np.uint8)
        pixels[...] = np.array(color, dtype=np.uint8)
        return cls(pixels)

    @classmethod
    def null(cls) -> "Raster":
        return cls(np.zeros((0, 0, RGBA_CHANNELS), dtype=np.uint8))

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1]) if self.pixels.ndim >= 2 else 0

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0]) if self.pixels.ndim >= 2 else 0

    @property
    def is_null(self) -> bool:
        return self.pixels.size == 0

    @property
    def is_frozen(self) -> bool:
        return not self.pixels.flags.writeable

    def copy(self) -> "Raster":
        """Returns a writable deep copy."""
        return Raster(self.pixels.copy(), self.depth)

    def snapshot(self) -> "Raster":
        """
        Returns an immutable memento. A frozen raster is returned as-is since
        nothing can change it anymore.
        """
        if self.is_frozen:
            return self
        pixels = self.pixels.copy()
        pixels.setflags(write=False)
        return Raster(pixels, self.depth)

    def same_pixels(self, other: Optional["Raster"]) -> bool:
        if other is None:
            return False
        return bool(np.array_equal(self.pixels, other.pixels))
