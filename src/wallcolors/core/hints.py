"""Dark text / dark theme hints from a pixel buffer."""

import enum
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np
import torch

from ..utils.color import ColorConverter
from ..utils.logging import get_logger

logger = get_logger(__name__)

DARK_THEME_MEAN_LUMINANCE = 30.0
BRIGHT_IMAGE_MEAN_LUMINANCE = 70.0
DARK_PIXEL_CONTRAST = 5.5
MAX_DARK_AREA = 0.05


class ColorHints(enum.IntFlag):
    """Presentation hints, combinable as a bitmask."""

    SUPPORTS_DARK_TEXT = 1 << 0
    SUPPORTS_DARK_THEME = 1 << 1
    FROM_BITMAP = 1 << 2


@dataclass(frozen=True)
class HintStatistics:
    """Outcome of one sweep over a pixel buffer."""

    mean_luminance: float
    dark_pixels: int
    pixel_count: int
    dim_amount: float
    hints: ColorHints


def saturate(value: float) -> float:
    """Clamp into [0, 1]; NaN maps to 0."""
    if math.isnan(value):
        return 0.0
    return min(max(value, 0.0), 1.0)


def as_rgba_array(pixels) -> np.ndarray:
    """Flatten a pixel buffer into an (N, 4) uint8 RGBA array.

    Accepts (H, W, 4), (H, W, 3), (N, 4) and (N, 3) arrays or tensors; three
    channel input is treated as opaque. Integer buffers hold 0-255 channels,
    floating point buffers hold 0-1 channels.
    """
    if isinstance(pixels, torch.Tensor):
        pixels = pixels.detach().cpu().numpy()
    array = np.asarray(pixels)

    if array.ndim not in (2, 3) or array.shape[-1] not in (3, 4):
        raise ValueError(
            f"Pixel buffer must have shape (H, W, 3|4) or (N, 3|4), got {array.shape}"
        )

    array = array.reshape(-1, array.shape[-1])
    if np.issubdtype(array.dtype, np.floating):
        array = np.rint(array * 255.0)
    array = np.clip(array, 0, 255).astype(np.uint8)

    if array.shape[-1] == 3:
        alpha = np.full((array.shape[0], 1), 255, dtype=np.uint8)
        array = np.concatenate([array, alpha], axis=1)

    return array


class DarkHintAnalyzer:
    """Sweep pixels with a simulated dimming overlay and derive hints."""

    def __init__(self, device: str = "cpu"):
        """Initialize analyzer.

        Args:
            device: Device for tensor operations
        """
        self.converter = ColorConverter(device)

    def analyze(self, pixels, dim_amount: float = 0.0) -> HintStatistics:
        """Compute luminance statistics and hints for a pixel buffer.

        Mean luminance is the CIE L* of each pixel as displayed under a black
        overlay of alpha ``round(255 * dim_amount)``. Dark pixels are counted
        on the undimmed image: non-transparent pixels whose contrast against
        black is at most 5.5.

        Args:
            pixels: Pixel buffer, see ``as_rgba_array``; None means no pixels
            dim_amount: Dimming in [0, 1], saturated when out of range

        Returns:
            HintStatistics with the text and theme bits only
        """
        dim_amount = saturate(float(dim_amount))

        if pixels is None:
            return HintStatistics(0.0, 0, 0, dim_amount, ColorHints(0))

        rgba = as_rgba_array(pixels)
        pixel_count = rgba.shape[0]
        if pixel_count == 0:
            return HintStatistics(0.0, 0, 0, dim_amount, ColorHints(0))

        values = self.converter.as_tensor(rgba)
        rgb = values[:, :3]
        alpha = values[:, 3] / 255.0
        black = torch.zeros_like(rgb)
        opaque = torch.ones_like(alpha)

        overlay_alpha = math.floor(255 * dim_amount + 0.5) / 255.0
        displayed_rgb, _ = self.converter.composite_over(
            black, torch.full_like(alpha, overlay_alpha), rgb, alpha
        )
        mean_luminance = self.converter.lightness(displayed_rgb).mean().item()

        # Translucent pixels are judged as shown over black
        undimmed_rgb, _ = self.converter.composite_over(rgb, alpha, black, opaque)
        contrast = self.converter.contrast_ratio(undimmed_rgb, black)
        dark_pixels = int(((contrast <= DARK_PIXEL_CONTRAST) & (alpha != 0)).sum().item())

        hints = ColorHints(0)
        if (
            mean_luminance > BRIGHT_IMAGE_MEAN_LUMINANCE
            and dark_pixels < MAX_DARK_AREA * pixel_count
        ):
            hints |= ColorHints.SUPPORTS_DARK_TEXT
        if mean_luminance < DARK_THEME_MEAN_LUMINANCE:
            hints |= ColorHints.SUPPORTS_DARK_THEME

        logger.debug(
            f"l: {mean_luminance:.2f}, d: {dark_pixels}, "
            f"maxD: {MAX_DARK_AREA * pixel_count:.1f}, numPixels: {pixel_count}, "
            f"dim: {dim_amount:.2f}"
        )

        return HintStatistics(
            mean_luminance=mean_luminance,
            dark_pixels=dark_pixels,
            pixel_count=pixel_count,
            dim_amount=dim_amount,
            hints=hints,
        )

    def calculate_hints(self, pixels, dim_amount: float = 0.0) -> ColorHints:
        """Dark text / dark theme bits for a pixel buffer."""
        return self.analyze(pixels, dim_amount).hints


def calculate_dark_hints(
    pixels, dim_amount: float = 0.0, device: Optional[str] = None
) -> ColorHints:
    """Dark text / dark theme bits for a pixel buffer."""
    return DarkHintAnalyzer(device or "cpu").calculate_hints(pixels, dim_amount)
