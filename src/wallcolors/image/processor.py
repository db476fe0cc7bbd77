"""Image loading and downscaling for color extraction."""

import math
from pathlib import Path
from typing import Sequence, Tuple, Union

import numpy as np
from PIL import Image

from ..utils.config import MAX_WALLPAPER_EXTRACTION_AREA
from ..utils.logging import get_logger

logger = get_logger(__name__)


def calculate_optimal_size(
    width: int, height: int, max_area: int = MAX_WALLPAPER_EXTRACTION_AREA
) -> Tuple[int, int]:
    """Scale a size down uniformly so its area fits in ``max_area``.

    Args:
        width: Requested width
        height: Requested height
        max_area: Maximum number of pixels

    Returns:
        (width, height), each at least 1
    """
    requested_area = width * height
    scale = 1.0
    if requested_area > max_area:
        scale = math.sqrt(max_area / float(requested_area))

    new_width = max(int(width * scale), 1)
    new_height = max(int(height * scale), 1)
    return new_width, new_height


def pixels_from_argb(values: Sequence[int], width: int, height: int) -> np.ndarray:
    """Unpack packed 32-bit ARGB integers into an (H, W, 4) RGBA array."""
    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid buffer size {width}x{height}")

    packed = np.asarray(values, dtype=np.int64) & 0xFFFFFFFF
    if packed.size != width * height:
        raise ValueError(
            f"Expected {width * height} pixels for {width}x{height}, got {packed.size}"
        )

    rgba = np.stack(
        [
            (packed >> 16) & 0xFF,
            (packed >> 8) & 0xFF,
            packed & 0xFF,
            (packed >> 24) & 0xFF,
        ],
        axis=-1,
    ).astype(np.uint8)
    return rgba.reshape(height, width, 4)


class ImageProcessor:
    """Prepare wallpaper images for analysis."""

    def __init__(self, max_area: int = MAX_WALLPAPER_EXTRACTION_AREA):
        """Initialize image processor.

        Args:
            max_area: Pixel budget images are scaled down to
        """
        if max_area <= 0:
            raise ValueError("max_area must be positive")
        self.max_area = max_area

    def load_image(self, image_path: Union[str, Path]) -> Image.Image:
        """Open an image file as RGBA."""
        if image_path is None:
            raise ValueError("Image path cannot be None")
        with Image.open(image_path) as image:
            return image.convert("RGBA")

    def bound_image(self, image: Image.Image) -> Image.Image:
        """Downscale an image to fit the pixel budget, without filtering."""
        width, height = image.size
        if width * height <= self.max_area:
            return image

        new_size = calculate_optimal_size(width, height, self.max_area)
        logger.debug(f"Scaling {width}x{height} down to {new_size[0]}x{new_size[1]}")
        return image.resize(new_size, Image.NEAREST)

    def to_pixel_buffer(self, image: Image.Image) -> np.ndarray:
        """Convert an image to an (H, W, 4) uint8 RGBA array."""
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        return np.asarray(image, dtype=np.uint8)

    def bound_pixels(self, pixels: np.ndarray) -> np.ndarray:
        """Downscale an (H, W, C) or flat (N, C) pixel array to fit the pixel budget."""
        array = np.asarray(pixels)
        if array.ndim == 2:
            count = array.shape[0]
            if count <= self.max_area:
                return array
            logger.debug(f"Sampling {self.max_area} of {count} pixels")
            indices = (np.arange(self.max_area) * count // self.max_area).astype(np.intp)
            return array[indices]
        if array.ndim != 3:
            return array

        height, width = array.shape[:2]
        if width * height <= self.max_area:
            return array

        new_width, new_height = calculate_optimal_size(width, height, self.max_area)
        # Nearest neighbour sampling, as an unfiltered bitmap scale
        rows = (np.arange(new_height) * height // new_height).astype(np.intp)
        cols = (np.arange(new_width) * width // new_width).astype(np.intp)
        return array[rows][:, cols]

    def load_pixels(self, image_path: Union[str, Path]) -> np.ndarray:
        """Load an image file as a bounded RGBA pixel buffer."""
        image = self.bound_image(self.load_image(image_path))
        logger.debug(f"Loaded {image_path} as {image.size[0]}x{image.size[1]}")
        return self.to_pixel_buffer(image)
