"""Scheme palette and per-syllable shading of a scheme's base color."""

import colorsys
import re

import numpy as np

# Distinct, vibrant colors for rhyme highlighting on a dark background
RHYME_COLORS = [
    "#FF5733",  # red-orange
    "#33FF57",  # bright green
    "#3357FF",  # bright blue
    "#FF33F6",  # magenta
    "#F3FF33",  # yellow
    "#33FFF6",  # cyan
    "#FF8333",  # orange
    "#8333FF",  # purple
    "#FF3383",  # pink
    "#33FF83",  # mint
    "#83FF33",  # lime
    "#3383FF",  # sky blue
    "#FF6F61",  # coral
    "#5733FF",  # indigo
    "#FF3333",  # red
    "#33FFCC",  # turquoise
]

_LIGHT_OFFSET = 20
_LIGHT_CAP = 85
_DARK_OFFSET = 15
_DARK_FLOOR = 20

_HEX = re.compile(r"#?([0-9a-fA-F]{6})")


def get_rhyme_color(index: int, palette: list[str] = RHYME_COLORS) -> str:
    """Palette color for the index-th scheme, cycling past the end."""
    return palette[abs(index) % len(palette)]


def hex_to_hsl(color: str) -> tuple[float, float, float]:
    """Convert "#RRGGBB" to (hue degrees, saturation %, lightness %)."""
    m = _HEX.fullmatch(color.strip())
    if m is None:
        raise ValueError(f"Not a hex color: {color!r}")
    digits = m.group(1)
    r, g, b = (int(digits[i:i + 2], 16) / 255 for i in (0, 2, 4))
    h, l, s = colorsys.rgb_to_hls(r, g, b)
    return h * 360, s * 100, l * 100


def hsl_to_hex(h: float, s: float, l: float) -> str:
    """Convert (hue degrees, saturation %, lightness %) to "#RRGGBB"."""
    r, g, b = colorsys.hls_to_rgb((h % 360) / 360, l / 100, s / 100)
    return "#" + "".join(f"{int(round(c * 255)):02X}" for c in (r, g, b))


def get_scheme_shades(base_color: str, k: int) -> list[str]:
    """Return k shades of base_color for a hit spanning k syllables.

    Lightness runs from min(L+20, 85) at position 0 down to max(L-15, 20)
    at position k-1; hue and saturation stay fixed. A single syllable
    keeps the base color unchanged.
    """
    if k <= 0:
        return []
    if k == 1:
        return [base_color]

    h, s, l = hex_to_hsl(base_color)
    light = min(l + _LIGHT_OFFSET, _LIGHT_CAP)
    dark = max(l - _DARK_OFFSET, _DARK_FLOOR)
    return [hsl_to_hex(h, s, float(lightness)) for lightness in np.linspace(light, dark, k)]
