import threading
import cv2
import numpy as np
from typing import Callable, Optional, Tuple
from pix3l.core.raster import Raster
from pix3l.core.types import AppConfig
from pix3l.features.adjustments.logic import apply_adjustments
from pix3l.features.adjustments.models import AdjustmentParameters
from pix3l.kernel.system.config import APP_CONFIG
from pix3l.kernel.system.logging import get_logger

logger = get_logger(__name__)

PreviewCallback = Callable[[Raster], None]
ProcessingCallback = Callable[[bool], None]


class PreviewService:
    """
    Renders unapplied adjustments against a downscaled copy of the image.

    Requests are serialised: while one render runs, new requests only replace
    the pending slot (last write wins) and the running caller drains it
    before releasing the in-flight flag.
    """

    def __init__(
        self,
        config: AppConfig = APP_CONFIG,
        on_ready: Optional[PreviewCallback] = None,
        on_processing_changed: Optional[ProcessingCallback] = None,
    ):
        self.config = config
        self.on_ready = on_ready
        self.on_processing_changed = on_processing_changed
        self._lock = threading.Lock()
        self._processing = False
        self._pending: Optional[Tuple[Raster, AdjustmentParameters]] = None

    @property
    def is_processing(self) -> bool:
        with self._lock:
            return self._processing

    def get_preview_source(
        self, raster: Raster, max_dimension: Optional[int] = None
    ) -> Raster:
        """
        Nearest-neighbour downscale keeping aspect ratio; small images are returned as-is.
        """
        limit = max_dimension or self.config.preview_max_dimension
        if raster.is_null or (raster.width <= limit and raster.height <= limit):
            return raster
        scale = limit / max(raster.width, raster.height)
        target_w = max(1, int(round(raster.width * scale)))
        target_h = max(1, int(round(raster.height * scale)))
        small = cv2.resize(
            raster.pixels, (target_w, target_h), interpolation=cv2.INTER_NEAREST
        )
        return Raster(np.ascontiguousarray(small), raster.depth)

    def generate_preview(self, source: Raster, params: AdjustmentParameters) -> Raster:
        if source.is_null:
            return source
        return Raster(apply_adjustments(source.pixels, params), source.depth)

    def _set_processing(self, processing: bool) -> bool:
        # Caller holds the lock; True when the flag flipped
        if self._processing == processing:
            return False
        self._processing = processing
        return True

    def _notify_processing(self, processing: bool) -> None:
        # Never called with the lock held, so callbacks may query the service
        if self.on_processing_changed:
            self.on_processing_changed(processing)

    def request_preview(
        self, source: Raster, params: AdjustmentParameters
    ) -> Optional[Raster]:
        """
        Returns the newest preview rendered by this call, or None when another
        render is already in flight (the request is queued for it instead).
        """
        with self._lock:
            if self._processing:
                self._pending = (source, params)
                return None
            self._set_processing(True)
        self._notify_processing(True)

        result: Optional[Raster] = None
        job: Optional[Tuple[Raster, AdjustmentParameters]] = (source, params)
        try:
            while job is not None:
                result = self.generate_preview(*job)
                if self.on_ready:
                    self.on_ready(result)
                with self._lock:
                    job, self._pending = self._pending, None
                    if job is None:
                        self._set_processing(False)
        except Exception:
            with self._lock:
                self._pending = None
                released = self._set_processing(False)
            logger.exception("Preview rendering failed")
            if released:
                self._notify_processing(False)
            raise
        self._notify_processing(False)
        return result
