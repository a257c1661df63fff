"""Color conversion and small math helpers shared by the effect engines."""

import math
import re
from typing import Optional, Tuple

RGB = Tuple[int, int, int]

WHITE: RGB = (255, 255, 255)

_HEX_RE = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.IGNORECASE)


def hex_to_rgb(value: str) -> Optional[RGB]:
    """Parse ``#RRGGBB`` (leading ``#`` optional). Returns None when invalid."""
    if not isinstance(value, str):
        return None
    m = _HEX_RE.match(value.strip())
    if not m:
        return None
    return int(m.group(1), 16), int(m.group(2), 16), int(m.group(3), 16)


def hex_to_rgb_or_white(value: str) -> RGB:
    return hex_to_rgb(value) or WHITE


def rgb_to_hex(rgb: RGB) -> str:
    r, g, b = (int(clamp(c, 0, 255)) for c in rgb)
    return f"#{r:02x}{g:02x}{b:02x}"


def hsv_to_rgb(h: float, s: float, v: float) -> RGB:
    """HSV to RGB, hue in degrees (wraps), s and v in [0, 1]."""
    h = h % 360.0
    c = v * s
    x = c * (1 - abs((h / 60.0) % 2 - 1))
    m = v - c

    if h < 60:
        r, g, b = c, x, 0.0
    elif h < 120:
        r, g, b = x, c, 0.0
    elif h < 180:
        r, g, b = 0.0, c, x
    elif h < 240:
        r, g, b = 0.0, x, c
    elif h < 300:
        r, g, b = x, 0.0, c
    else:
        r, g, b = c, 0.0, x

    return (int(round((r + m) * 255)),
            int(round((g + m) * 255)),
            int(round((b + m) * 255)))


def rgb_to_bgr(rgb: RGB) -> RGB:
    return rgb[2], rgb[1], rgb[0]


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def distance(x1: float, y1: float, x2: float, y2: float) -> float:
    return math.hypot(x2 - x1, y2 - y1)


def per_frame(rate: float, frames: float) -> float:
    """Convert a per-60fps-frame smoothing rate to the rate for ``frames`` frames."""
    return 1.0 - (1.0 - rate) ** frames
