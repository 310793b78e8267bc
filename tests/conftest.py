import os

os.environ.setdefault("NUMBA_THREADING_LAYER", "workqueue")
os.environ.setdefault("MPLBACKEND", "Agg")

import numpy as np
import pytest

from pix3l.core.raster import Raster
from pix3l.domain.document import ImageDocument
from images import solid


@pytest.fixture
def gray_2x2() -> np.ndarray:
    return solid(2, 2)


@pytest.fixture
def noisy() -> np.ndarray:
    rng = np.random.default_rng(42)
    img = rng.integers(0, 256, size=(12, 16, 4), dtype=np.uint8)
    img[..., 3] = rng.integers(100, 256, size=(12, 16), dtype=np.uint8)
    return img


@pytest.fixture
def document(noisy) -> ImageDocument:
    return ImageDocument(Raster(noisy.copy()))
