from typing import Iterable, List, Optional
from pix3l.core.raster import Raster
from pix3l.core.types import AppConfig, Histogram, Rect
from pix3l.commands import factory
from pix3l.commands.command import ImageCommand
from pix3l.commands.factory import FilterType, FlipDirection
from pix3l.commands.models import Operation
from pix3l.commands.stack import CommandStack
from pix3l.domain.document import ImageDocument
from pix3l.features.adjustments.models import AdjustmentParameters
from pix3l.features.enhance.logic import (
    calculate_histogram,
    calculate_statistics,
    suggest_auto_enhancement,
)
from pix3l.features.enhance.models import ImageStatistics
from pix3l.features.suggestions.logic import suggestion_to_operation
from pix3l.features.suggestions.models import EnhancementSuggestion
from pix3l.kernel.system.config import APP_CONFIG
from pix3l.kernel.system.logging import get_logger
from pix3l.services.preview.service import PreviewService

logger = get_logger(__name__)


class ImageEditor:
    """
    Ties one document to its undo history. Every edit goes through the stack.
    """

    def __init__(
        self,
        config: AppConfig = APP_CONFIG,
        document: Optional[ImageDocument] = None,
        stack: Optional[CommandStack] = None,
        preview: Optional[PreviewService] = None,
    ):
        self.config = config
        self.document = document or ImageDocument()
        self.stack = stack or CommandStack()
        self.preview = preview or PreviewService(config)

    @property
    def raster(self) -> Optional[Raster]:
        return self.document.raster

    def open(self, file_path: str) -> None:
        """
        Loads a new image and discards the previous history.
        Raises ImageLoadError and keeps everything as it was on failure.
        """
        self.document.load(file_path)
        self.stack.clear()

    def save(self, file_path: Optional[str] = None, quality: Optional[int] = None) -> None:
        q = quality if quality is not None else self.config.jpeg_quality
        if file_path:
            self.document.save_as(file_path, q)
        else:
            self.document.save(q)

    def _push(self, command: ImageCommand) -> bool:
        if self.document.is_empty():
            logger.warning(f"Ignoring '{command.label}': no image loaded")
            return False
        self.stack.push(command)
        return True

    def apply_operation(self, operation: Operation, label: Optional[str] = None) -> bool:
        return self._push(ImageCommand(self.document, operation, label))

    def apply_adjustments(
        self, params: AdjustmentParameters, label: Optional[str] = None
    ) -> bool:
        """
        Pushes one compound entry for params. Identity parameters add nothing.
        """
        if self.document.is_empty() or not params.has_any_adjustment():
            return False
        self.stack.push(factory.create_compound_adjustment(self.document, params, label))
        return True

    def apply_filter(self, filter_type: FilterType) -> bool:
        return self._push(factory.create_filter_command(self.document, filter_type))

    def blur(self, radius: int) -> bool:
        return self._push(factory.create_blur_command(self.document, radius))

    def rotate(self, angle: int) -> bool:
        return self._push(factory.create_rotate_command(self.document, angle))

    def flip(self, direction: FlipDirection) -> bool:
        return self._push(factory.create_flip_command(self.document, direction))

    def resize(self, width: int, height: int) -> bool:
        return self._push(factory.create_resize_command(self.document, width, height))

    def crop(self, rect: Rect) -> bool:
        return self._push(factory.create_crop_command(self.document, rect))

    def add_text_watermark(self, text: str, x: int, y: int) -> bool:
        return self._push(
            factory.create_text_watermark_command(self.document, text, x, y)
        )

    def add_image_watermark(self, watermark: Raster, x: int, y: int) -> bool:
        return self._push(
            factory.create_image_watermark_command(self.document, watermark, x, y)
        )

    def statistics(self) -> ImageStatistics:
        if self.raster is None or self.raster.is_null:
            return ImageStatistics()
        return calculate_statistics(self.raster.pixels)

    def histogram(self) -> Histogram:
        pixels = None if self.raster is None else self.raster.pixels
        return calculate_histogram(pixels)

    def auto_enhance(self) -> AdjustmentParameters:
        """
        Analyses the current image and applies the suggested corrections as one entry.
        Returns the parameters used (identity when nothing was needed).
        """
        if self.document.is_empty():
            return AdjustmentParameters()
        params = suggest_auto_enhancement(self.statistics())
        if not params.has_any_adjustment():
            logger.info("Auto-enhance: no adjustments needed")
            return params
        logger.info(
            f"Auto-enhance: brightness={params.brightness}, contrast={params.contrast}, "
            f"saturation={params.saturation}, shadows={params.shadows}, highlights={params.highlights}"
        )
        self.apply_adjustments(params, "Auto Enhance")
        return params

    def apply_suggestions(self, suggestions: Iterable[EnhancementSuggestion]) -> int:
        """
        One history entry per selected suggestion. Unknown operations are skipped.
        Returns how many were applied.
        """
        selected = [s for s in suggestions if s.selected]
        applied = 0
        for s in selected:
            logger.info(
                f"Applying suggestion {s.operation}={s.value} (confidence={s.confidence}, reason={s.reason})"
            )
            op = suggestion_to_operation(s)
            if op is not None and self.apply_operation(op):
                applied += 1
        logger.info(f"Applied {applied} of {len(selected)} suggestions")
        return applied

    def render_preview(self, params: AdjustmentParameters) -> Optional[Raster]:
        if self.raster is None or self.raster.is_null:
            return None
        source = self.preview.get_preview_source(self.raster)
        return self.preview.request_preview(source, params)

    def undo(self) -> bool:
        return self.stack.undo()

    def redo(self) -> bool:
        return self.stack.redo()

    def history(self) -> List[str]:
        return self.stack.labels()
