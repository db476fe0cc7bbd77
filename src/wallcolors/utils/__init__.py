"""Utility modules for wallcolors."""

from .color import ColorConverter, color_to_hex, hex_to_rgb, parse_color
from .config import Config, ConfigManager, QuantizationBudget
from .logging import setup_logging

__all__ = [
    "ColorConverter",
    "Config",
    "ConfigManager",
    "QuantizationBudget",
    "color_to_hex",
    "hex_to_rgb",
    "parse_color",
    "setup_logging",
]
