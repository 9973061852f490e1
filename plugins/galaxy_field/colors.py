"""
Color helpers for particle fields

Colors are RGB triples of floats in [0, 1]. Hex strings ("#ff6030" or
"#f63") are accepted wherever a color is configured.
"""

import numpy as np


def _parse_hex(text):
    digits = text.strip().lstrip("#")
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    if len(digits) != 6:
        raise ValueError(f"expected #rrggbb or #rgb, got {text!r}")
    try:
        raw = int(digits, 16)
    except ValueError:
        raise ValueError(f"invalid hex color {text!r}") from None
    return ((raw >> 16) & 0xFF) / 255.0, ((raw >> 8) & 0xFF) / 255.0, (raw & 0xFF) / 255.0


def parse_color(value):
    """Return an (r, g, b) float tuple from a hex string or a 3-sequence.

    Raises ValueError if the value is malformed or a component falls
    outside [0, 1]. Components are never clamped.
    """
    if isinstance(value, str):
        return _parse_hex(value)
    try:
        components = tuple(float(c) for c in value)
    except TypeError:
        raise ValueError(f"expected a hex string or RGB triple, got {value!r}") from None
    if len(components) != 3:
        raise ValueError(f"expected 3 color components, got {len(components)}")
    for c in components:
        if not (0.0 <= c <= 1.0):
            raise ValueError(f"color component {c} outside [0, 1]")
    return components


def to_rgb255(color):
    """RGB float triple -> 8-bit tuple (for pygame drawing)."""
    return tuple(int(round(c * 255)) for c in color)


def lerp_colors(inside, outside, t):
    """Mix two colors by t, per element.

    Args:
        inside: RGB at t=0
        outside: RGB at t=1
        t: 1D array of mix factors

    Returns:
        (len(t), 3) float64 array. t=0 reproduces `inside` exactly.
    """
    inside = np.asarray(inside, dtype=np.float64)
    outside = np.asarray(outside, dtype=np.float64)
    t = np.asarray(t, dtype=np.float64)
    return inside + t[:, np.newaxis] * (outside - inside)
