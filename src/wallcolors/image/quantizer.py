"""Quantizer adapters producing color histograms.

Two strategies, chosen by ``QuantizationBudget``: Celebi from
materialyoucolor for quality, k-means from scikit-learn when cheap.
"""

from typing import Dict

import numpy as np
from materialyoucolor.quantize import QuantizeCelebi
from sklearn.cluster import KMeans

from ..core.hints import as_rgba_array
from ..utils.config import QuantizationBudget
from ..utils.logging import get_logger

logger = get_logger(__name__)


def normalize_histogram(raw: Dict[int, int]) -> Dict[int, int]:
    """Strip alpha bits from color keys and merge colliding populations."""
    histogram: Dict[int, int] = {}
    for color, population in raw.items():
        key = int(color) & 0xFFFFFF
        histogram[key] = histogram.get(key, 0) + int(population)
    return histogram


class ColorQuantizer:
    """Reduce a pixel buffer to a color -> population histogram."""

    def __init__(
        self,
        budget: QuantizationBudget = QuantizationBudget.HIGH_QUALITY,
        fast_max_colors: int = 5,
        quality_max_colors: int = 128,
        random_seed: int = 42,
    ):
        """Initialize quantizer.

        Args:
            budget: Quantizer strategy
            fast_max_colors: Cluster count of the k-means strategy
            quality_max_colors: Color count of the Celebi strategy
            random_seed: Seed for k-means initialization
        """
        self.budget = QuantizationBudget.parse(budget)
        self.fast_max_colors = fast_max_colors
        self.quality_max_colors = quality_max_colors
        self.random_seed = random_seed

    def quantize(self, pixels) -> Dict[int, int]:
        """Quantize the non-transparent pixels of a buffer.

        Returns:
            Mapping from 24-bit RGB color to population; empty when every
            pixel is transparent
        """
        rgba = as_rgba_array(pixels)
        rgba = rgba[rgba[:, 3] != 0]
        if rgba.shape[0] == 0:
            return {}

        if self.budget is QuantizationBudget.FAST:
            histogram = self._quantize_kmeans(rgba[:, :3])
        else:
            histogram = self._quantize_celebi(rgba)

        logger.debug(
            f"{self.budget.value} quantizer reduced {rgba.shape[0]} pixels "
            f"to {len(histogram)} colors"
        )
        return histogram

    def _quantize_celebi(self, rgba: np.ndarray) -> Dict[int, int]:
        pixel_array = [list(pixel) for pixel in rgba.tolist()]
        return normalize_histogram(QuantizeCelebi(pixel_array, self.quality_max_colors))

    def _quantize_kmeans(self, rgb: np.ndarray) -> Dict[int, int]:
        unique_colors = np.unique(rgb, axis=0)
        n_clusters = min(self.fast_max_colors, unique_colors.shape[0])

        kmeans = KMeans(n_clusters=n_clusters, random_state=self.random_seed, n_init=10)
        labels = kmeans.fit_predict(rgb.astype(np.float64))
        centers = np.clip(np.rint(kmeans.cluster_centers_), 0, 255).astype(np.int64)
        counts = np.bincount(labels, minlength=n_clusters)

        raw = {}
        for center, count in zip(centers, counts):
            if count == 0:
                continue
            color = (int(center[0]) << 16) | (int(center[1]) << 8) | int(center[2])
            raw[color] = raw.get(color, 0) + int(count)
        return normalize_histogram(raw)
