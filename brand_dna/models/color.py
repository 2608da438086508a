"""HSL color values.

Colors are stored as ``"H S% L%"`` strings (e.g. ``"221.2 83.2% 53.3%"``),
the same form the scoped style variables expect.
"""

from __future__ import annotations

import re
from typing import NamedTuple, Optional, Tuple

HSL_PATTERN = re.compile(
    r"^(\d{1,3}(?:\.\d+)?)\s+(\d{1,3}(?:\.\d+)?)%\s+(\d{1,3}(?:\.\d+)?)%$"
)


class HSLColor(NamedTuple):
    hue: float
    saturation: float
    lightness: float

    def __str__(self) -> str:
        return f"{_fmt(self.hue)} {_fmt(self.saturation)}% {_fmt(self.lightness)}%"

    def to_rgb(self) -> Tuple[int, int, int]:
        """Convert to 8-bit sRGB channels."""
        h = self.hue / 360
        s = self.saturation / 100
        v = self.lightness / 100

        if s == 0:
            r = g = b = v
        else:
            q = v * (1 + s) if v < 0.5 else v + s - v * s
            p = 2 * v - q
            r = _hue_to_channel(p, q, h + 1 / 3)
            g = _hue_to_channel(p, q, h)
            b = _hue_to_channel(p, q, h - 1 / 3)

        return round(r * 255), round(g * 255), round(b * 255)


def _fmt(value: float) -> str:
    return f"{value:g}"


def _hue_to_channel(p: float, q: float, t: float) -> float:
    if t < 0:
        t += 1
    if t > 1:
        t -= 1
    if t < 1 / 6:
        return p + (q - p) * 6 * t
    if t < 1 / 2:
        return q
    if t < 2 / 3:
        return p + (q - p) * (2 / 3 - t) * 6
    return p


def parse_hsl(value: object) -> Optional[HSLColor]:
    """Parse an HSL string; returns None when the format or ranges are wrong."""
    if not isinstance(value, str):
        return None
    match = HSL_PATTERN.match(value.strip())
    if not match:
        return None
    hue, saturation, lightness = (float(g) for g in match.groups())
    if hue > 360 or saturation > 100 or lightness > 100:
        return None
    return HSLColor(hue, saturation, lightness)


def is_valid_hsl(value: object) -> bool:
    return parse_hsl(value) is not None


def hsl_to_rgb(value: str) -> Tuple[int, int, int]:
    color = parse_hsl(value)
    if color is None:
        raise ValueError(f"Invalid HSL color: {value}")
    return color.to_rgb()


def relative_luminance(value: str) -> float:
    """WCAG relative luminance (0-1) of an HSL color."""

    def linearize(channel: int) -> float:
        c = channel / 255
        return c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4

    r, g, b = hsl_to_rgb(value)
    return 0.2126 * linearize(r) + 0.7152 * linearize(g) + 0.0722 * linearize(b)
