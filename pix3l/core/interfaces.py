from typing import Protocol, Optional, runtime_checkable
from pix3l.core.raster import Raster


@runtime_checkable
class IRasterSlot(Protocol):
    """
    The single mutable raster owned by a document.
    Commands read it and replace its contents wholesale; they never patch it.
    """

    @property
    def raster(self) -> Optional[Raster]: ...

    def replace_raster(self, raster: Optional[Raster]) -> None: ...
