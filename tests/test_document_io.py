import os
import numpy as np
import imageio.v3 as iio
import pytest
from unittest.mock import MagicMock, patch

from pix3l.core.errors import ImageIOError, ImageLoadError, ImageSaveError
from pix3l.core.raster import Raster
from pix3l.domain.document import DocumentEvent, ImageDocument
from pix3l.infrastructure.loaders.factory import (
    ImageioLoader,
    ImageLoaderFactory,
    RawpyLoader,
    load_raster,
)
from pix3l.infrastructure.writers.factory import save_raster
from images import solid


@pytest.fixture
def png_path(tmp_path):
    path = str(tmp_path / "input.png")
    rgb = np.zeros((6, 8, 3), dtype=np.uint8)
    rgb[..., 0] = 200
    rgb[2:4, 2:4] = 50
    iio.imwrite(path, rgb)
    return path


def test_load_rgb_png_becomes_rgba(png_path):
    raster = load_raster(png_path)
    assert raster.pixels.shape == (6, 8, 4)
    assert raster.depth == 24
    assert np.all(raster.pixels[..., 3] == 255)
    np.testing.assert_array_equal(raster.pixels[0, 0], [200, 0, 0, 255])


def test_load_gray_expands_to_rgba(tmp_path):
    path = str(tmp_path / "gray.png")
    iio.imwrite(path, np.full((3, 3), 77, dtype=np.uint8))
    raster = load_raster(path)
    assert raster.depth == 8
    np.testing.assert_array_equal(raster.pixels[1, 1], [77, 77, 77, 255])


def test_loader_dispatch():
    factory = ImageLoaderFactory()
    assert isinstance(factory.get_loader("shot.NEF"), RawpyLoader)
    assert isinstance(factory.get_loader("shot.dng"), RawpyLoader)
    assert isinstance(factory.get_loader("scan.tiff"), ImageioLoader)


def test_load_missing_file(tmp_path):
    path = str(tmp_path / "nope.png")
    with pytest.raises(ImageLoadError) as err:
        load_raster(path)
    assert err.value.operation == "load"
    assert err.value.path == path
    assert str(err.value).startswith("Cannot load ")
    assert str(err.value).endswith(": file does not exist")


def test_load_empty_path():
    with pytest.raises(ImageLoadError):
        load_raster("")


def test_load_corrupt_file(tmp_path):
    path = tmp_path / "broken.png"
    path.write_bytes(b"definitely not a png")
    with pytest.raises(ImageLoadError) as err:
        load_raster(str(path))
    assert "cannot decode" in err.value.reason


def test_load_rejects_zero_area(png_path):
    with patch.object(ImageioLoader, "load", return_value=Raster.null()):
        with pytest.raises(ImageLoadError) as err:
            load_raster(png_path)
    assert "zero" in err.value.reason


def test_save_png_round_trip(tmp_path, noisy):
    path = str(tmp_path / "out.png")
    save_raster(Raster(noisy), path)
    np.testing.assert_array_equal(load_raster(path).pixels, noisy)


def test_save_jpeg_drops_alpha(tmp_path, noisy):
    path = str(tmp_path / "out.jpg")
    save_raster(Raster(noisy), path, quality=75)
    assert iio.imread(path).shape == (12, 16, 3)


def test_save_failures(tmp_path, noisy):
    with pytest.raises(ImageSaveError):
        save_raster(Raster(noisy), "")
    with pytest.raises(ImageSaveError):
        save_raster(Raster.null(), str(tmp_path / "x.png"))
    with pytest.raises(ImageSaveError):
        save_raster(Raster(noisy), str(tmp_path / "missing_dir" / "x.png"))
    with pytest.raises(ImageIOError):
        save_raster(Raster(noisy), str(tmp_path / "no_extension"))


def test_document_load_and_events(png_path):
    doc = ImageDocument()
    listener = MagicMock()
    doc.add_listener(listener)
    assert doc.is_empty()
    doc.load(png_path)
    assert not doc.is_empty()
    assert (doc.width, doc.height, doc.depth) == (8, 6, 24)
    assert doc.file_path == png_path
    assert not doc.is_modified
    np.testing.assert_array_equal(doc.original.pixels, doc.raster.pixels)
    events = [c.args[0] for c in listener.call_args_list]
    assert events == [DocumentEvent.IMAGE_CHANGED, DocumentEvent.LOADED]


def test_failed_load_keeps_document(png_path, tmp_path):
    doc = ImageDocument()
    doc.load(png_path)
    before = doc.raster
    with pytest.raises(ImageLoadError):
        doc.load(str(tmp_path / "missing.png"))
    assert doc.raster is before
    assert doc.file_path == png_path


def test_replace_raster_marks_modified(png_path):
    doc = ImageDocument()
    doc.load(png_path)
    doc.replace_raster(Raster(solid(2, 2)))
    assert doc.is_modified
    assert doc.width == 2
    # Original is untouched
    assert doc.original.width == 8


def test_save_as_updates_path(png_path, tmp_path):
    doc = ImageDocument()
    doc.load(png_path)
    doc.replace_raster(Raster(solid(2, 2)))
    out = str(tmp_path / "saved.png")
    doc.save_as(out)
    assert os.path.isfile(out)
    assert doc.file_path == out
    assert not doc.is_modified


def test_save_without_path_or_image(tmp_path):
    with pytest.raises(ImageSaveError):
        ImageDocument().save()
    with pytest.raises(ImageSaveError):
        ImageDocument().save_as(str(tmp_path / "a.png"))


def test_clear(png_path):
    doc = ImageDocument()
    doc.load(png_path)
    doc.clear()
    assert doc.is_empty()
    assert doc.original is None
    assert doc.file_path == ""
    assert doc.depth == 0
