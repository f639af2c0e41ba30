"""Shared utilities for reportflow.

This package contains common functionality used across multiple modules:
- colors: hex/named color parsing
- file_ops: search-path resolution for assets and fonts
- fonts: fontTools based font discovery
- svg: SVG dimension lookup
"""

from .colors import NAMED_COLORS, convert_hex_to_rgb, parse_color, rgb_to_hex
from .file_ops import (
    SEARCH_PATH_ENV,
    ensure_export_dir,
    find_font_file,
    format_file_size,
    resolve_asset_path,
    search_paths_from_env,
)
from .fonts import FontFamily, discover_fonts, read_family_name, read_font_names
from .svg import get_svg_dimensions

__all__ = [
    # Colors
    'NAMED_COLORS',
    'convert_hex_to_rgb',
    'parse_color',
    'rgb_to_hex',
    # File operations
    'SEARCH_PATH_ENV',
    'ensure_export_dir',
    'find_font_file',
    'format_file_size',
    'resolve_asset_path',
    'search_paths_from_env',
    # Fonts
    'FontFamily',
    'discover_fonts',
    'read_family_name',
    'read_font_names',
    # SVG
    'get_svg_dimensions',
]
