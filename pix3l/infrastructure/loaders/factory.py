import os
import numpy as np
import imageio.v3 as iio
from abc import ABC, abstractmethod
from typing import List
from pix3l.core.errors import ImageLoadError
from pix3l.core.raster import Raster
from pix3l.kernel.system.logging import get_logger

logger = get_logger(__name__)

RAW_EXTENSIONS = (
    ".dng",
    ".cr2",
    ".cr3",
    ".nef",
    ".arw",
    ".raf",
    ".orf",
    ".rw2",
    ".pef",
    ".srw",
)


class BaseLoader(ABC):
    """
    Base class for all image loaders.
    """

    @abstractmethod
    def can_handle(self, file_path: str) -> bool: ...

    @abstractmethod
    def load(self, file_path: str) -> Raster: ...


class RawpyLoader(BaseLoader):
    """
    Camera RAW files (DNG, CR2, NEF, etc.), developed to 8-bit sRGB.
    """

    def can_handle(self, file_path: str) -> bool:
        return file_path.lower().endswith(RAW_EXTENSIONS)

    def load(self, file_path: str) -> Raster:
        import rawpy

        with rawpy.imread(file_path) as raw:
            rgb = raw.postprocess(output_bps=8, use_camera_wb=True)
        return Raster.from_array(np.ascontiguousarray(rgb))


class ImageioLoader(BaseLoader):
    """
    Everything imageio can decode (PNG, JPEG, TIFF, BMP, WebP, ...).
    Only the first frame of animated formats is read.
    """

    def can_handle(self, file_path: str) -> bool:
        return True

    def load(self, file_path: str) -> Raster:
        img = iio.imread(file_path, index=0)
        return Raster.from_array(np.asarray(img))


class ImageLoaderFactory:
    """
    Dispatches the appropriate loader for a given file.
    """

    def __init__(self) -> None:
        # Ordered by specificity, catch-all last
        self.loaders: List[BaseLoader] = [RawpyLoader(), ImageioLoader()]

    def get_loader(self, file_path: str) -> BaseLoader:
        for loader in self.loaders:
            if loader.can_handle(file_path):
                return loader
        raise ImageLoadError(file_path, "no loader available for this file type")

    def load(self, file_path: str) -> Raster:
        if not file_path:
            raise ImageLoadError(file_path, "no file path given")
        if not os.path.isfile(file_path):
            raise ImageLoadError(file_path, "file does not exist")

        loader = self.get_loader(file_path)
        try:
            raster = loader.load(file_path)
        except ImageLoadError:
            raise
        except Exception as e:
            raise ImageLoadError(file_path, f"cannot decode image ({e})") from e

        if raster.is_null:
            raise ImageLoadError(file_path, "image has zero width or height")
        logger.info(
            f"Loaded {os.path.basename(file_path)}: {raster.width}x{raster.height}, depth {raster.depth}"
        )
        return raster


# Global instance
loader_factory = ImageLoaderFactory()


def load_raster(file_path: str) -> Raster:
    return loader_factory.load(file_path)
