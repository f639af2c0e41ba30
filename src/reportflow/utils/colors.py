"""Color helpers for engine option values.

Colors travel through option lists as ``{#rrggbb}`` (braces optional) or as one of
a few names; the engine needs RGB fractions.
"""

from typing import Tuple

RGB = Tuple[float, float, float]

NAMED_COLORS = {
    'black': (0.0, 0.0, 0.0),
    'white': (1.0, 1.0, 1.0),
    'red': (1.0, 0.0, 0.0),
    'green': (0.0, 0.5, 0.0),
    'blue': (0.0, 0.0, 1.0),
    'gray': (0.5, 0.5, 0.5),
}


def convert_hex_to_rgb(hex_code: str) -> RGB:
    """Convert ``{#rrggbb}``/``#rgb`` to RGB fractions in 0..1.

    Three-digit codes are expanded (``#abc`` -> ``#aabbcc``).
    """
    code = hex_code.replace('{', '').replace('}', '').replace('#', '').strip()
    if len(code) == 3:
        code = ''.join(ch * 2 for ch in code)
    if len(code) != 6:
        raise ValueError(f'Invalid hex color: {hex_code!r}')
    red = int(code[0:2], 16) / 255
    green = int(code[2:4], 16) / 255
    blue = int(code[4:6], 16) / 255
    return (red, green, blue)


def parse_color(value: str) -> RGB:
    """Parse a color option value: a name, a hex code, or ``rgb r g b`` fractions."""
    v = str(value).strip().strip('{}').strip()
    lowered = v.lower()
    if lowered in NAMED_COLORS:
        return NAMED_COLORS[lowered]
    if lowered.startswith('rgb'):
        parts = lowered[3:].split()
        if len(parts) == 3:
            return (float(parts[0]), float(parts[1]), float(parts[2]))
    return convert_hex_to_rgb(v)


def rgb_to_hex(rgb: RGB) -> str:
    r, g, b = (max(0, min(255, round(c * 255))) for c in rgb)
    return f'#{r:02x}{g:02x}{b:02x}'
