"""Color space conversion utilities for wallcolors."""

from typing import Sequence, Tuple, Union

import torch

ColorLike = Union[int, str, Sequence[int]]


def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    """Convert hex color string to RGB tuple."""
    hex_color = hex_color.lstrip("#")
    if hex_color.lower().startswith("0x"):
        hex_color = hex_color[2:]
    if len(hex_color) != 6:
        raise ValueError(f"Expected 6 hex digits, got '{hex_color}'")
    rgb_values = tuple(int(hex_color[i : i + 2], 16) for i in (0, 2, 4))
    return (rgb_values[0], rgb_values[1], rgb_values[2])


def rgb_to_color(r: int, g: int, b: int) -> int:
    """Pack 8-bit channels into a 24-bit RGB integer."""
    return ((r & 0xFF) << 16) | ((g & 0xFF) << 8) | (b & 0xFF)


def color_to_rgb(color: int) -> Tuple[int, int, int]:
    """Unpack a 24-bit RGB integer (alpha bits ignored)."""
    return ((color >> 16) & 0xFF, (color >> 8) & 0xFF, color & 0xFF)


def color_to_hex(color: int) -> str:
    """Format a color as ``#rrggbb``."""
    return f"#{color & 0xFFFFFF:06x}"


def parse_color(value: ColorLike) -> int:
    """Parse an int, hex string or RGB triple into a 24-bit RGB integer.

    Args:
        value: ``0xRRGGBB`` int, ``"#RRGGBB"`` / ``"0xRRGGBB"`` / decimal
            string, or a sequence of three 0-255 channels

    Returns:
        24-bit RGB integer
    """
    if value is None:
        raise ValueError("Color cannot be None")

    if isinstance(value, bool):
        raise ValueError(f"Invalid color value: {value!r}")

    if isinstance(value, int):
        if value < 0:
            raise ValueError(f"Invalid color value: {value}")
        return value & 0xFFFFFF

    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return parse_color(int(text))
        try:
            return rgb_to_color(*hex_to_rgb(text))
        except ValueError as e:
            raise ValueError(f"Invalid color literal '{value}': {e}")

    channels = tuple(value)
    if len(channels) != 3 or any(not 0 <= int(c) <= 255 for c in channels):
        raise ValueError(f"Expected three 0-255 channels, got {value!r}")
    return rgb_to_color(*(int(c) for c in channels))


class ColorConverter:
    """Perceptual conversions on batches of colors.

    All methods take channel-last tensors, i.e. ``(..., 3)`` RGB values in
    ``[0, 255]`` and ``(...)`` alpha values in ``[0, 1]``.
    """

    def __init__(self, device: str = "cpu"):
        """Initialize color converter.

        Args:
            device: Device for tensor operations
        """
        self.device = torch.device(device)
        # mps has no float64 support
        self.dtype = torch.float64 if self.device.type == "cpu" else torch.float32

        # D65 illuminant white point for XYZ conversion
        self.white_point = torch.tensor(
            [0.95047, 1.0, 1.08883], dtype=self.dtype, device=self.device
        )

        # sRGB to XYZ conversion matrix (D65 illuminant)
        self.rgb_to_xyz_matrix = torch.tensor(
            [
                [0.4124564, 0.3575761, 0.1804375],
                [0.2126729, 0.7151522, 0.0721750],
                [0.0193339, 0.1191920, 0.9503041],
            ],
            dtype=self.dtype,
            device=self.device,
        )

    def as_tensor(self, values) -> torch.Tensor:
        """Move array-like data onto the converter's device and dtype."""
        return torch.as_tensor(values, device=self.device).to(self.dtype)

    def rgb_to_lab(self, rgb: torch.Tensor, eps: float = 1e-12) -> torch.Tensor:
        """Convert sRGB colors to CIELAB.

        Args:
            rgb: RGB tensor in range [0, 255] with shape (..., 3)
            eps: Small epsilon value to stabilize power operations

        Returns:
            LAB tensor with L* in [0, 100]
        """
        rgb_linear = self._srgb_to_linear(torch.clamp(rgb / 255.0, 0.0, 1.0), eps)
        xyz = torch.matmul(rgb_linear, self.rgb_to_xyz_matrix.t())
        return self._xyz_to_lab(xyz / self.white_point, eps)

    def lightness(self, rgb: torch.Tensor) -> torch.Tensor:
        """CIE L* of sRGB colors, shape (...)."""
        return self.rgb_to_lab(rgb)[..., 0]

    def relative_luminance(self, rgb: torch.Tensor, eps: float = 1e-12) -> torch.Tensor:
        """WCAG relative luminance in [0, 1] of sRGB colors, shape (...)."""
        rgb_linear = self._srgb_to_linear(torch.clamp(rgb / 255.0, 0.0, 1.0), eps)
        return torch.matmul(rgb_linear, self.rgb_to_xyz_matrix[1])

    def composite_over(
        self,
        fg_rgb: torch.Tensor,
        fg_alpha: torch.Tensor,
        bg_rgb: torch.Tensor,
        bg_alpha: torch.Tensor,
    ) -> Tuple[torch.Tensor, torch.Tensor]:
        """Source-over composite of a foreground on a background.

        Returns:
            Tuple of (rgb, alpha); rgb is zero where the result is fully
            transparent
        """
        out_alpha = fg_alpha + bg_alpha * (1.0 - fg_alpha)
        weighted = (
            fg_rgb * fg_alpha.unsqueeze(-1)
            + bg_rgb * (bg_alpha * (1.0 - fg_alpha)).unsqueeze(-1)
        )
        safe_alpha = torch.where(out_alpha > 0, out_alpha, torch.ones_like(out_alpha))
        out_rgb = torch.where(
            (out_alpha > 0).unsqueeze(-1),
            weighted / safe_alpha.unsqueeze(-1),
            torch.zeros_like(weighted),
        )
        return out_rgb, out_alpha

    def contrast_ratio(self, fg_rgb: torch.Tensor, bg_rgb: torch.Tensor) -> torch.Tensor:
        """WCAG contrast ratio between two opaque colors, in [1, 21]."""
        fg_lum = self.relative_luminance(fg_rgb) + 0.05
        bg_lum = self.relative_luminance(bg_rgb) + 0.05
        return torch.maximum(fg_lum, bg_lum) / torch.minimum(fg_lum, bg_lum)

    def _srgb_to_linear(self, srgb: torch.Tensor, eps: float) -> torch.Tensor:
        """Apply inverse gamma correction to convert sRGB to linear RGB."""
        threshold = 0.04045
        return torch.where(
            srgb <= threshold,
            srgb / 12.92,
            torch.pow(torch.clamp((srgb + 0.055) / 1.055, min=eps), 2.4),
        )

    def _xyz_to_lab(self, xyz_normalized: torch.Tensor, eps: float) -> torch.Tensor:
        """Convert white-point normalized XYZ to LAB."""
        epsilon = 216.0 / 24389.0  # (6/29)^3
        kappa = 24389.0 / 27.0  # (29/3)^3

        f_xyz = torch.where(
            xyz_normalized > epsilon,
            torch.pow(torch.clamp(xyz_normalized, min=eps), 1.0 / 3.0),
            (kappa * xyz_normalized + 16) / 116,
        )

        fX = f_xyz[..., 0]
        fY = f_xyz[..., 1]
        fZ = f_xyz[..., 2]

        L = 116 * fY - 16
        a = 500 * (fX - fY)
        b = 200 * (fY - fZ)

        return torch.stack([L, a, b], dim=-1)
