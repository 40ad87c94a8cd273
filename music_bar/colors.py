"""
Color model for music_bar package.
RGB <-> HSL conversion and accent normalization. Pure functions, no I/O.

Dependencies: state (for the configured bands and default accent)
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple

from . import state


@dataclass(frozen=True)
class Color:
    """An RGB triple with channels in [0, 255]. Channels may be fractional."""
    r: float
    g: float
    b: float

    @classmethod
    def from_hex(cls, value: str) -> "Color":
        value = value.strip().lstrip("#")
        if len(value) == 3:
            value = "".join(c * 2 for c in value)
        if len(value) != 6:
            raise ValueError(f"Invalid hex color: {value!r}")
        return cls(int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16))

    def rounded(self) -> Tuple[int, int, int]:
        return (
            int(round(clamp(self.r, 0, 255))),
            int(round(clamp(self.g, 0, 255))),
            int(round(clamp(self.b, 0, 255))),
        )

    def to_hex(self) -> str:
        r, g, b = self.rounded()
        return f"#{r:02x}{g:02x}{b:02x}"

    def to_css(self, alpha: float = None) -> str:
        r, g, b = self.rounded()
        if alpha is None:
            return f"rgb({r}, {g}, {b})"
        return f"rgba({r}, {g}, {b}, {alpha})"


def clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


def rgb_to_hsl(r: float, g: float, b: float) -> Tuple[float, float, float]:
    """Convert 0-255 RGB to (h, s, l), each in [0, 1]."""
    r /= 255
    g /= 255
    b /= 255
    high = max(r, g, b)
    low = min(r, g, b)
    h = s = 0.0
    l = (high + low) / 2

    if high != low:
        d = high - low
        s = d / (2 - high - low) if l > 0.5 else d / (high + low)
        if high == r:
            h = (g - b) / d + (6 if g < b else 0)
        elif high == g:
            h = (b - r) / d + 2
        else:
            h = (r - g) / d + 4
        h /= 6
    return h, s, l


def _hue_to_rgb(p: float, q: float, t: float) -> float:
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


def hsl_to_rgb(h: float, s: float, l: float) -> Tuple[float, float, float]:
    """Convert (h, s, l) in [0, 1] back to 0-255 RGB floats."""
    if s == 0:
        r = g = b = l
    else:
        q = l * (1 + s) if l < 0.5 else l + s - l * s
        p = 2 * l - q
        r = _hue_to_rgb(p, q, h + 1 / 3)
        g = _hue_to_rgb(p, q, h)
        b = _hue_to_rgb(p, q, h - 1 / 3)
    return r * 255, g * 255, b * 255


def normalize_accent(
    color: Color,
    saturation_band: Tuple[float, float] = None,
    lightness_band: Tuple[float, float] = None,
) -> Color:
    """
    Clamp a sampled color into a presentation-safe band.

    Saturation and lightness are clamped independently; hue is kept as is.
    Total: any channel values produce a usable accent.
    """
    s_low, s_high = saturation_band or state.SATURATION_BAND
    l_low, l_high = lightness_band or state.LIGHTNESS_BAND
    h, s, l = rgb_to_hsl(color.r, color.g, color.b)
    return Color(*hsl_to_rgb(h, clamp(s, s_low, s_high), clamp(l, l_low, l_high)))


try:
    DEFAULT_ACCENT = Color.from_hex(state.DEFAULT_ACCENT_HEX)
except (ValueError, AttributeError):
    state.logger.warning(f"Invalid accent.default_color {state.DEFAULT_ACCENT_HEX!r}, using #7c5cff")
    DEFAULT_ACCENT = Color(124, 92, 255)
