import threading
import numpy as np
import pytest
from unittest.mock import MagicMock

from pix3l.core.raster import Raster
from pix3l.features.adjustments.logic import apply_adjustments
from pix3l.features.adjustments.models import AdjustmentParameters
from pix3l.kernel.system.config import load_app_config
from pix3l.services.preview.service import PreviewService
from images import solid


@pytest.fixture
def service():
    return PreviewService(load_app_config())


def test_preview_source_downscales_keeping_aspect(service):
    source = Raster(solid(20, 40))
    small = service.get_preview_source(source, max_dimension=10)
    assert (small.width, small.height) == (10, 5)


def test_preview_source_small_image_is_returned_as_is(service):
    source = Raster(solid(20, 40))
    assert service.get_preview_source(source, max_dimension=100) is source


def test_preview_source_uses_configured_limit():
    config = load_app_config()
    config.preview_max_dimension = 8
    small = PreviewService(config).get_preview_source(Raster(solid(16, 4)))
    assert (small.width, small.height) == (2, 8)


def test_generate_preview_matches_adjustment_chain(service, noisy):
    params = AdjustmentParameters(brightness=20, saturation=-40)
    preview = service.generate_preview(Raster(noisy), params)
    np.testing.assert_array_equal(preview.pixels, apply_adjustments(noisy, params))


def test_request_preview_notifies(noisy):
    on_ready = MagicMock()
    on_processing = MagicMock()
    service = PreviewService(load_app_config(), on_ready, on_processing)
    result = service.request_preview(Raster(noisy), AdjustmentParameters(contrast=10))
    assert result is not None
    on_ready.assert_called_once_with(result)
    assert [c.args[0] for c in on_processing.call_args_list] == [True, False]
    assert not service.is_processing


def test_overlapping_request_is_queued_and_drained(noisy):
    source = Raster(noisy)
    first = AdjustmentParameters(brightness=10)
    latest = AdjustmentParameters(brightness=-30)
    rendered = []
    nested_results = []

    def on_ready(preview):
        rendered.append(preview)
        if len(rendered) == 1:
            # Two requests while the first render is still in flight: last one wins
            nested_results.append(service.request_preview(source, AdjustmentParameters(hue=5)))
            nested_results.append(service.request_preview(source, latest))

    service = PreviewService(load_app_config(), on_ready=on_ready)
    result = service.request_preview(source, first)

    assert nested_results == [None, None]
    assert len(rendered) == 2
    np.testing.assert_array_equal(result.pixels, apply_adjustments(noisy, latest))
    assert not service.is_processing


def test_concurrent_requests_are_serialised(noisy):
    source = Raster(noisy)
    active = []
    overlaps = []
    lock = threading.Lock()

    def on_ready(_preview):
        with lock:
            active.append(1)
            if len(active) > 1:
                overlaps.append(True)
        active.pop()

    service = PreviewService(load_app_config(), on_ready=on_ready)
    threads = [
        threading.Thread(
            target=service.request_preview,
            args=(source, AdjustmentParameters(brightness=i)),
        )
        for i in range(8)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert overlaps == []
    assert not service.is_processing


def test_failed_render_releases_flag(noisy):
    def on_ready(_preview):
        raise RuntimeError("view gone")

    service = PreviewService(load_app_config(), on_ready=on_ready)
    with pytest.raises(RuntimeError):
        service.request_preview(Raster(noisy), AdjustmentParameters(brightness=5))
    assert not service.is_processing


def test_processing_callback_can_query_service(noisy):
    seen = []
    service = PreviewService(
        load_app_config(),
        on_processing_changed=lambda flag: seen.append((flag, service.is_processing)),
    )
    worker = threading.Thread(
        target=service.request_preview,
        args=(Raster(noisy), AdjustmentParameters(brightness=5)),
        daemon=True,
    )
    worker.start()
    worker.join(5)
    assert not worker.is_alive()
    assert seen == [(True, True), (False, False)]
