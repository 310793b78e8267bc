from enum import Enum
from typing import Callable, List, Optional
from pix3l.core.errors import ImageSaveError
from pix3l.core.raster import Raster
from pix3l.infrastructure.loaders.factory import load_raster
from pix3l.infrastructure.writers.factory import save_raster
from pix3l.kernel.system.logging import get_logger

logger = get_logger(__name__)


class DocumentEvent(Enum):
    IMAGE_CHANGED = "image_changed"
    LOADED = "loaded"
    SAVED = "saved"
    CLEARED = "cleared"


DocumentListener = Callable[[DocumentEvent, "ImageDocument"], None]


class ImageDocument:
    """
    Owns the single working raster (the slot commands write into),
    the untouched original and the file it came from.
    """

    def __init__(self, raster: Optional[Raster] = None, file_path: str = ""):
        self._raster: Optional[Raster] = raster
        self._original: Optional[Raster] = raster.snapshot() if raster else None
        self._file_path = file_path
        self._modified = False
        self._listeners: List[DocumentListener] = []

    @property
    def raster(self) -> Optional[Raster]:
        return self._raster

    @property
    def original(self) -> Optional[Raster]:
        return self._original

    @property
    def file_path(self) -> str:
        return self._file_path

    @property
    def is_modified(self) -> bool:
        return self._modified

    def is_empty(self) -> bool:
        return self._raster is None or self._raster.is_null

    @property
    def width(self) -> int:
        return 0 if self._raster is None else self._raster.width

    @property
    def height(self) -> int:
        return 0 if self._raster is None else self._raster.height

    @property
    def depth(self) -> int:
        return 0 if self._raster is None or self._raster.is_null else self._raster.depth

    def add_listener(self, listener: DocumentListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: DocumentListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, event: DocumentEvent) -> None:
        for listener in list(self._listeners):
            listener(event, self)

    def replace_raster(self, raster: Optional[Raster]) -> None:
        """
        Swaps the working raster wholesale. Anyone holding the old object must re-read.
        """
        self._raster = raster
        self._modified = True
        self._emit(DocumentEvent.IMAGE_CHANGED)

    def load(self, file_path: str) -> None:
        """
        Raises ImageLoadError; on failure the current raster, original and path are kept.
        """
        logger.info(f"Loading image: {file_path}")
        raster = load_raster(file_path)

        self._raster = raster
        self._original = raster.snapshot()
        self._file_path = file_path
        self._modified = False
        self._emit(DocumentEvent.IMAGE_CHANGED)
        self._emit(DocumentEvent.LOADED)

    def save(self, quality: Optional[int] = None) -> None:
        if not self._file_path:
            raise ImageSaveError(self._file_path, "no file path specified")
        self.save_as(self._file_path, quality)

    def save_as(self, file_path: str, quality: Optional[int] = None) -> None:
        if self._raster is None or self._raster.is_null:
            raise ImageSaveError(file_path, "no image loaded")
        save_raster(self._raster, file_path, quality)

        self._file_path = file_path
        self._modified = False
        self._emit(DocumentEvent.SAVED)

    def clear(self) -> None:
        self._raster = None
        self._original = None
        self._file_path = ""
        self._modified = False
        self._emit(DocumentEvent.IMAGE_CHANGED)
        self._emit(DocumentEvent.CLEARED)
