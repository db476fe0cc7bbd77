"""Seed color selection from a color histogram.

Every histogram color is placed in CAM16 (hue, chroma). Colors are scored by
how colorful they are plus how much of the image shares their hue, and the
best scoring colors are picked greedily while keeping their hues apart.
"""

import math
from typing import Dict, List, Mapping, Optional, Tuple

from materialyoucolor.hct.cam16 import Cam16

from ..utils.logging import get_logger

logger = get_logger(__name__)

MAX_SEED_COLORS = 3
MIN_HUE_DISTANCE = 15.0
HUE_WINDOW = 15
PROPORTION_WEIGHT = 100.0


def wrap_degrees(degrees: int) -> int:
    """Wrap an integer angle into [0, 360)."""
    return ((degrees % 360) + 360) % 360


def round_hue(hue: float) -> int:
    """Round half-up and wrap into a hue bucket index."""
    return wrap_degrees(int(math.floor(hue + 0.5)))


def hue_distance(hue_a: float, hue_b: float) -> float:
    """Circular distance between two hues, in [0, 180]."""
    return 180.0 - abs(abs(hue_a - hue_b) - 180.0)


def to_cams(colors) -> Dict[int, Cam16]:
    """CAM16 coordinates for every 24-bit RGB color."""
    return {color: Cam16.from_int(0xFF000000 | (color & 0xFFFFFF)) for color in colors}


def hue_proportions(
    color_to_cam: Mapping[int, Cam16], histogram: Mapping[int, int]
) -> List[float]:
    """Share of the total population falling in each integer hue bucket.

    Args:
        color_to_cam: CAM16 coordinates per color
        histogram: Population per color

    Returns:
        360 floats summing to ~1.0, or all zeros when the population is zero
    """
    proportions = [0.0] * 360

    total_population = float(sum(histogram.values()))
    if total_population <= 0:
        return proportions

    for color, population in histogram.items():
        bucket = round_hue(color_to_cam[color].hue)
        proportions[bucket] += population / total_population

    return proportions


def color_to_hue_proportion(
    color_to_cam: Mapping[int, Cam16], proportions: List[float]
) -> Dict[int, float]:
    """Population share within ``[hue - 15, hue + 15)`` of each color's hue."""
    result = {}
    for color, cam in color_to_cam.items():
        hue = round_hue(cam.hue)
        result[color] = sum(
            proportions[wrap_degrees(i)]
            for i in range(hue - HUE_WINDOW, hue + HUE_WINDOW)
        )
    return result


def score(cam: Cam16, proportion: float) -> float:
    """Chroma plus weighted hue prominence."""
    return cam.chroma + proportion * PROPORTION_WEIGHT


def score_colors(
    histogram: Mapping[int, int],
    color_to_cam: Optional[Mapping[int, Cam16]] = None,
) -> List[Tuple[int, float]]:
    """Score every histogram color, best first.

    Equal scores are ordered by ascending color value so the ranking does not
    depend on mapping iteration order.

    Args:
        histogram: Mapping from 24-bit RGB color to population
        color_to_cam: Precomputed CAM16 coordinates, computed when omitted

    Returns:
        List of (color, score) sorted by score descending
    """
    if color_to_cam is None:
        color_to_cam = to_cams(histogram)
    proportions = hue_proportions(color_to_cam, histogram)
    color_proportions = color_to_hue_proportion(color_to_cam, proportions)

    scored = [
        (color, score(color_to_cam[color], proportion))
        for color, proportion in color_proportions.items()
    ]
    scored.sort(key=lambda item: (-item[1], item[0]))
    return scored


class SeedColorSelector:
    """Pick up to three representative, hue-distinct colors from a histogram."""

    def __init__(
        self,
        max_colors: int = MAX_SEED_COLORS,
        min_hue_distance: float = MIN_HUE_DISTANCE,
    ):
        """Initialize selector.

        Args:
            max_colors: Maximum number of seed colors to return
            min_hue_distance: Minimum circular hue distance between seeds
        """
        if max_colors <= 0:
            raise ValueError("max_colors must be positive")
        self.max_colors = max_colors
        self.min_hue_distance = min_hue_distance

    def select(self, histogram: Optional[Mapping[int, int]]) -> Tuple[int, ...]:
        """Select seed colors, primary first.

        Args:
            histogram: Mapping from 24-bit RGB color to population

        Returns:
            Tuple of at most ``max_colors`` colors; empty when the histogram is
            empty or its total population is zero
        """
        if histogram is None:
            raise ValueError("Histogram cannot be None")

        if not histogram or sum(histogram.values()) <= 0:
            logger.debug("Empty histogram, no seed colors")
            return ()

        color_to_cam = to_cams(histogram)
        candidates = [color for color, _ in score_colors(histogram, color_to_cam)]

        seeds: List[int] = []
        for color in candidates:
            if self._is_hue_distinct(color, seeds, color_to_cam):
                seeds.append(color)
                if len(seeds) >= self.max_colors:
                    break

        logger.debug(
            f"Selected {len(seeds)} seed colors from {len(candidates)} candidates: "
            + ", ".join(f"#{c:06x}" for c in seeds)
        )
        return tuple(seeds)

    def _is_hue_distinct(
        self, color: int, seeds: List[int], color_to_cam: Mapping[int, Cam16]
    ) -> bool:
        hue = color_to_cam[color].hue
        return all(
            hue_distance(hue, color_to_cam[seed].hue) >= self.min_hue_distance
            for seed in seeds
        )


def select_seeds(histogram: Mapping[int, int]) -> Tuple[int, ...]:
    """Select up to three seed colors from a histogram."""
    return SeedColorSelector().select(histogram)
