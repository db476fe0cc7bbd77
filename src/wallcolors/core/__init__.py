"""Seed color scoring and dark hint analysis."""

from .hints import ColorHints, DarkHintAnalyzer, HintStatistics, calculate_dark_hints
from .seeds import SeedColorSelector, hue_distance, score_colors, select_seeds
from .result import WallpaperColors

__all__ = [
    "ColorHints",
    "DarkHintAnalyzer",
    "HintStatistics",
    "SeedColorSelector",
    "WallpaperColors",
    "calculate_dark_hints",
    "hue_distance",
    "score_colors",
    "select_seeds",
]
