"""wallcolors: seed colors and presentation hints for wallpapers."""

__version__ = "0.1.0"
__author__ = "wallcolors Team"

from .core.hints import ColorHints, DarkHintAnalyzer, calculate_dark_hints
from .core.result import WallpaperColors
from .core.seeds import SeedColorSelector, select_seeds
from .image.processor import ImageProcessor, calculate_optimal_size

__all__ = [
    "WallpaperColors",
    "ColorHints",
    "SeedColorSelector",
    "DarkHintAnalyzer",
    "ImageProcessor",
    "select_seeds",
    "calculate_dark_hints",
    "calculate_optimal_size",
]
