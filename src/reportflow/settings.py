"""Layout configuration: defaults and payload overrides.

A payload may carry a ``settings`` mapping whose upper-case keys override
``DEFAULTS`` (``{"MARGIN_LEFT": 35, "PAGINATION_LABEL": "Seite"}``). Unknown keys
are reported with a warning and otherwise ignored.
"""

import warnings
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional

DEFAULTS: Dict[str, Any] = {
    'PAGE_WIDTH': 595,
    'PAGE_HEIGHT': 842,
    'ROTATE_PAGE': False,
    'MARGIN_LEFT': 40,
    'MARGIN_RIGHT': 40,
    'START_Y': 755,
    'END_Y': 100,
    'MIN_DISTANCE_END_BOTTOM': 30,
    'COLOR_BLACK': '{#000000}',
    'COLOR_WHITE': '{#ffffff}',
    'COLOR_GRAY': '{#adb5bd}',
    'COLOR_TEXT_MARK': '{#ffc107}',
    'COLOR_PRIMARY': '{#bf203d}',
    'COLOR_SECONDARY': '{#bea895}',
    'FONT_SIZE': 10,
    'FONT_SIZE_SMALL': 8,
    'FONT_SIZE_SMALLER': 6,
    'LIST_BULLET': '&mdash;',
    'LIST_INDENT': 10,
    'RENDER_TEMPLATE_AFTER_CONTENT': True,
    'HAS_PAGINATION': True,
    'PAGINATION_LABEL': '',
    'PAGINATION_START_Y': 55,
    'PAGINATION_HEIGHT': 14,
    'PAGINATION_WIDTH': 100,
    'PAGINATION_FONT_SIZE': 8,
    'PAGINATION_TEXT_COLOR': '{#000000}',
    'PAGINATION_ALIGNMENT': 'right',
    'PAGE_LAYOUT': '',
}


@dataclass(frozen=True)
class LayoutSettings:
    page_width: float = DEFAULTS['PAGE_WIDTH']
    page_height: float = DEFAULTS['PAGE_HEIGHT']
    rotate_page: bool = DEFAULTS['ROTATE_PAGE']
    margin_left: float = DEFAULTS['MARGIN_LEFT']
    margin_right: float = DEFAULTS['MARGIN_RIGHT']
    start_y: float = DEFAULTS['START_Y']
    end_y: float = DEFAULTS['END_Y']
    min_distance_end_bottom: float = DEFAULTS['MIN_DISTANCE_END_BOTTOM']
    color_black: str = DEFAULTS['COLOR_BLACK']
    color_white: str = DEFAULTS['COLOR_WHITE']
    color_gray: str = DEFAULTS['COLOR_GRAY']
    color_text_mark: str = DEFAULTS['COLOR_TEXT_MARK']
    color_primary: str = DEFAULTS['COLOR_PRIMARY']
    color_secondary: str = DEFAULTS['COLOR_SECONDARY']
    font_size: float = DEFAULTS['FONT_SIZE']
    font_size_small: float = DEFAULTS['FONT_SIZE_SMALL']
    font_size_smaller: float = DEFAULTS['FONT_SIZE_SMALLER']
    list_bullet: str = DEFAULTS['LIST_BULLET']
    list_indent: float = DEFAULTS['LIST_INDENT']
    render_template_after_content: bool = DEFAULTS['RENDER_TEMPLATE_AFTER_CONTENT']
    has_pagination: bool = DEFAULTS['HAS_PAGINATION']
    pagination_label: str = DEFAULTS['PAGINATION_LABEL']
    pagination_start_y: float = DEFAULTS['PAGINATION_START_Y']
    pagination_height: float = DEFAULTS['PAGINATION_HEIGHT']
    pagination_width: float = DEFAULTS['PAGINATION_WIDTH']
    pagination_font_size: float = DEFAULTS['PAGINATION_FONT_SIZE']
    pagination_text_color: str = DEFAULTS['PAGINATION_TEXT_COLOR']
    pagination_alignment: str = DEFAULTS['PAGINATION_ALIGNMENT']
    page_layout: str = DEFAULTS['PAGE_LAYOUT']

    @property
    def element_start_left(self) -> float:
        return self.margin_left

    @property
    def element_end_right(self) -> float:
        return self.page_width - self.margin_right

    @property
    def page_mid_x(self) -> float:
        return self.page_width / 2

    @property
    def page_mid_y(self) -> float:
        return self.page_height / 2

    @property
    def element_start_half(self) -> float:
        return self.page_mid_x

    @property
    def pagination_end_x(self) -> float:
        return self.element_end_right

    @property
    def pagination_start_x(self) -> float:
        return self.pagination_end_x - self.pagination_width

    @property
    def pagination_end_y(self) -> float:
        return self.pagination_start_y - self.pagination_height


def _coerce(value: Any, default: Any) -> Any:
    """Convert an override to the type of its default."""
    if isinstance(default, bool):
        if isinstance(value, str):
            return value.strip().lower() in ('1', 'true', 'yes', 'on')
        return bool(value)
    if isinstance(default, (int, float)):
        return float(value)
    return '' if value is None else str(value)


def meta_defaults(meta: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    d = DEFAULTS.copy()
    for k, v in (meta or {}).items():
        key = str(k).upper()
        if key in d:
            d[key] = _coerce(v, DEFAULTS[key])
        else:
            warnings.warn(f"Unknown layout setting '{k}' ignored", UserWarning)
    return d


def settings_from_meta(
    meta: Optional[Mapping[str, Any]], base: Optional[LayoutSettings] = None
) -> LayoutSettings:
    """Build LayoutSettings from ``base`` (or the defaults) plus a payload's overrides.

    Only keys present in ``meta`` replace values of ``base``.
    """
    base = base or LayoutSettings()
    merged = meta_defaults(meta)
    present = {str(k).upper() for k in (meta or {})}
    values = {
        f.name: merged[f.name.upper()] if f.name.upper() in present else getattr(base, f.name)
        for f in fields(LayoutSettings)
    }
    return LayoutSettings(**values)
