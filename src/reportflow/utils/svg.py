"""SVG size lookup without rendering."""

import pathlib
import re
import warnings
import xml.etree.ElementTree as ET
from typing import Tuple, Union

_LEADING_NUMBER_RE = re.compile(r'^\s*([-+]?\d*\.?\d+(?:[eE][-+]?\d+)?)')


def _leading_float(value: str) -> float:
    # '45px' -> 45.0, '' -> 0.0
    m = _LEADING_NUMBER_RE.match(value or '')
    return float(m.group(1)) if m else 0.0


def get_svg_dimensions(path: Union[str, pathlib.Path]) -> Tuple[float, float]:
    """Return ``(width, height)`` of an SVG file from its root attributes.

    ``width``/``height`` win when both are set; otherwise the viewBox size is used.
    A missing file, an unreadable file or a file without any size information yields
    ``(0, 0)``, which callers treat as "let the engine decide" (fitmethod auto).
    """
    p = pathlib.Path(path)
    if not p.is_file():
        warnings.warn(f'SVG not found, using zero size: {p}', UserWarning)
        return (0.0, 0.0)
    try:
        root = ET.parse(str(p)).getroot()
    except (ET.ParseError, OSError) as e:
        warnings.warn(f'SVG could not be parsed, using zero size: {p} ({e})', UserWarning)
        return (0.0, 0.0)

    width = root.get('width') or ''
    height = root.get('height') or ''
    if width and height:
        return (_leading_float(width), _leading_float(height))

    view_box = (root.get('viewBox') or '').strip()
    if view_box:
        parts = re.split(r'[\s,]+', view_box)
        if len(parts) == 4:
            return (_leading_float(parts[2]), _leading_float(parts[3]))

    warnings.warn(f'SVG has no size information, using zero size: {p}', UserWarning)
    return (0.0, 0.0)
