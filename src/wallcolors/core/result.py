"""Immutable wallpaper color extraction result."""

import types
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple, Union

from ..image.processor import ImageProcessor
from ..image.quantizer import ColorQuantizer
from ..utils.color import (
    ColorConverter,
    ColorLike,
    color_to_hex,
    color_to_rgb,
    parse_color,
)
from ..utils.config import Config, QuantizationBudget
from ..utils.logging import PerformanceLogger, get_logger
from .hints import DARK_THEME_MEAN_LUMINANCE, ColorHints, DarkHintAnalyzer
from .seeds import select_seeds

logger = get_logger(__name__)


class WallpaperColors:
    """Seed colors, color histogram and presentation hints of a wallpaper.

    Instances are immutable; equality and hashing cover all three parts.
    Use the ``from_*`` constructors rather than calling the class directly.
    """

    __slots__ = ("_main_colors", "_all_colors", "_color_hints")

    def __init__(
        self,
        main_colors: Tuple[int, ...],
        all_colors: Mapping[int, int],
        color_hints: Union[int, ColorHints] = 0,
    ):
        if main_colors is None or all_colors is None:
            raise ValueError("main_colors and all_colors cannot be None")
        self._main_colors = tuple(int(c) & 0xFFFFFF for c in main_colors)
        self._all_colors = types.MappingProxyType(
            {int(c) & 0xFFFFFF: int(p) for c, p in all_colors.items()}
        )
        self._color_hints = ColorHints(int(color_hints))

    @classmethod
    def from_colors(
        cls,
        primary: ColorLike,
        secondary: Optional[ColorLike] = None,
        tertiary: Optional[ColorLike] = None,
        hints: Optional[Union[int, ColorHints]] = None,
    ) -> "WallpaperColors":
        """Build from explicitly chosen colors.

        Every color gets a population of zero. When ``hints`` is omitted, the
        dark theme bit is set if the primary color's L* is below 30.

        Args:
            primary: Primary color, required
            secondary: Secondary color
            tertiary: Tertiary color, only allowed together with ``secondary``
            hints: Explicit hint bitmask
        """
        if primary is None:
            raise ValueError("Primary color should never be None.")
        if tertiary is not None and secondary is None:
            raise ValueError("tertiary color can't be specified when secondary color is None")

        main_colors = [parse_color(primary)]
        if secondary is not None:
            main_colors.append(parse_color(secondary))
        if tertiary is not None:
            main_colors.append(parse_color(tertiary))

        all_colors = {color: 0 for color in main_colors}

        if hints is None:
            hints = ColorHints(0)
            converter = ColorConverter()
            rgb = converter.as_tensor(color_to_rgb(main_colors[0]))
            if converter.lightness(rgb).item() < DARK_THEME_MEAN_LUMINANCE:
                hints |= ColorHints.SUPPORTS_DARK_THEME

        return cls(tuple(main_colors), all_colors, hints)

    @classmethod
    def from_histogram(
        cls, histogram: Mapping[int, int], hints: Union[int, ColorHints] = 0
    ) -> "WallpaperColors":
        """Build from a color -> population histogram, selecting seed colors.

        Args:
            histogram: Mapping from 24-bit RGB color to population
            hints: Hint bitmask stored as given
        """
        if histogram is None:
            raise ValueError("Histogram cannot be None")
        parsed: Dict[int, int] = {}
        for color, population in histogram.items():
            if int(population) < 0:
                raise ValueError(f"Negative population for {color!r}")
            key = parse_color(color)
            parsed[key] = parsed.get(key, 0) + int(population)

        return cls(select_seeds(parsed), parsed, hints)

    @classmethod
    def from_pixels(
        cls,
        pixels,
        dim_amount: float = 0.0,
        budget: Union[str, QuantizationBudget] = QuantizationBudget.HIGH_QUALITY,
        config: Optional[Config] = None,
    ) -> "WallpaperColors":
        """Build from a pixel buffer: quantize, select seeds, compute hints.

        Args:
            pixels: RGBA/RGB pixel buffer, see ``core.hints.as_rgba_array``
            dim_amount: Simulated dimming in [0, 1], saturated when out of range
            budget: Quantizer strategy
            config: Full extraction settings; replaces ``dim_amount`` and
                ``budget`` when given
        """
        if pixels is None:
            raise ValueError("Pixels can't be None")

        if config is None:
            config = Config(
                dim_amount=dim_amount, quantization_budget=QuantizationBudget.parse(budget)
            )
        else:
            dim_amount = config.dim_amount

        perf = PerformanceLogger()
        pixels = ImageProcessor(config.max_extraction_area).bound_pixels(pixels)

        quantizer = ColorQuantizer(
            budget=config.quantization_budget,
            fast_max_colors=config.fast_max_colors,
            quality_max_colors=config.quality_max_colors,
            random_seed=config.random_seed,
        )
        perf.start_timer("quantize")
        histogram = quantizer.quantize(pixels)
        perf.end_timer("quantize")

        perf.start_timer("dark_hints")
        hints = DarkHintAnalyzer(config.device).calculate_hints(pixels, dim_amount)
        perf.end_timer("dark_hints")

        return cls(select_seeds(histogram), histogram, ColorHints.FROM_BITMAP | hints)

    @classmethod
    def from_image(
        cls,
        image_path: Union[str, Path],
        dim_amount: float = 0.0,
        budget: Union[str, QuantizationBudget] = QuantizationBudget.HIGH_QUALITY,
        config: Optional[Config] = None,
    ) -> "WallpaperColors":
        """Build from an image file, see ``from_pixels``."""
        if image_path is None:
            raise ValueError("Image path can't be None")

        max_area = config.max_extraction_area if config else Config().max_extraction_area
        pixels = ImageProcessor(max_area).load_pixels(image_path)
        logger.info(f"Extracting colors from {image_path}")
        return cls.from_pixels(pixels, dim_amount=dim_amount, budget=budget, config=config)

    @property
    def main_colors(self) -> Tuple[int, ...]:
        """Seed colors, primary first."""
        return self._main_colors

    @property
    def all_colors(self) -> Mapping[int, int]:
        """Read-only color -> population histogram."""
        return self._all_colors

    @property
    def color_hints(self) -> ColorHints:
        return self._color_hints

    @property
    def primary_color(self) -> Optional[int]:
        return self._main_colors[0] if self._main_colors else None

    @property
    def secondary_color(self) -> Optional[int]:
        return self._main_colors[1] if len(self._main_colors) > 1 else None

    @property
    def tertiary_color(self) -> Optional[int]:
        return self._main_colors[2] if len(self._main_colors) > 2 else None

    def supports(self, hint: ColorHints) -> bool:
        """Whether every bit of ``hint`` is set."""
        return (self._color_hints & hint) == hint

    def to_dict(self) -> Dict:
        """Plain representation for display and JSON output."""
        return {
            "main_colors": [color_to_hex(c) for c in self._main_colors],
            "all_colors": {
                color_to_hex(c): p
                for c, p in sorted(self._all_colors.items(), key=lambda item: -item[1])
            },
            "color_hints": int(self._color_hints),
            "hint_names": [
                hint.name for hint in ColorHints if hint in self._color_hints
            ],
        }

    def __setattr__(self, name, value):
        if hasattr(self, "_color_hints"):
            raise AttributeError(f"{type(self).__name__} is immutable")
        super().__setattr__(name, value)

    def __eq__(self, other) -> bool:
        if not isinstance(other, WallpaperColors):
            return NotImplemented
        return (
            self._main_colors == other._main_colors
            and dict(self._all_colors) == dict(other._all_colors)
            and self._color_hints == other._color_hints
        )

    def __hash__(self) -> int:
        return hash(
            (self._main_colors, frozenset(self._all_colors.items()), int(self._color_hints))
        )

    def __repr__(self) -> str:
        colors = " ".join(f"{c:06x}" for c in self._main_colors)
        return f"[WallpaperColors: {colors} h: {int(self._color_hints)}]"
