import numpy as np
import matplotlib.pyplot as plt
import scipy.ndimage as ndimage
from typing import Tuple
from pix3l.core.types import RasterBuffer
from pix3l.core.constants import BRIGHT_PIXEL_THRESHOLD, DARK_PIXEL_THRESHOLD
from pix3l.features.enhance.logic import calculate_histogram


def plot_histogram(
    img: RasterBuffer, figsize: Tuple[float, float] = (3, 1.4), dpi: int = 150
) -> plt.Figure:
    """
    RGB + luminance histogram. Dotted lines mark the dark/bright tail thresholds
    used by the auto-enhance statistics.
    """
    fig, ax = plt.subplots(figsize=figsize, dpi=dpi)
    ax.set_facecolor("#000000")
    fig.patch.set_facecolor("#000000")

    bins = np.arange(256)
    colors = ("#ff4b4b", "#28df99", "#3182ce")
    for i, color in enumerate(colors):
        hist = np.bincount(img[..., i].ravel(), minlength=256)
        ax.plot(bins, hist, color=color, lw=1.2, alpha=0.8)
        ax.fill_between(bins, hist, color=color, alpha=0.1)

    l_hist = ndimage.gaussian_filter1d(calculate_histogram(img).astype(np.float64), sigma=1)
    ax.plot(bins, l_hist, color="#e0e0e0", lw=1.5, alpha=0.9, label="Luma")
    ax.fill_between(bins, l_hist, color="#e0e0e0", alpha=0.05)

    ax.axvline(x=128, color="#7d7d7d", alpha=0.3, lw=1, ls="--")
    ax.axvline(x=DARK_PIXEL_THRESHOLD, color="#7d7d7d", alpha=0.2, lw=0.8, ls=":")
    ax.axvline(x=BRIGHT_PIXEL_THRESHOLD, color="#7d7d7d", alpha=0.2, lw=0.8, ls=":")

    ax.set_xlim(0, 256)
    for side in ("top", "right", "left", "bottom"):
        ax.spines[side].set_visible(False)
    ax.set_yticks([])
    ax.set_xticks([])
    fig.tight_layout()
    return fig


def save_histogram_plot(img: RasterBuffer, path: str) -> None:
    fig = plot_histogram(img)
    try:
        fig.savefig(path, facecolor=fig.get_facecolor())
    finally:
        plt.close(fig)
