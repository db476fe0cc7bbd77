"""Image loading and quantization for wallcolors."""

from .processor import ImageProcessor, calculate_optimal_size, pixels_from_argb
from .quantizer import ColorQuantizer

__all__ = [
    "ColorQuantizer",
    "ImageProcessor",
    "calculate_optimal_size",
    "pixels_from_argb",
]
