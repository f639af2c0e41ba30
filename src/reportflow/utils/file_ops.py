"""File operations and path handling utilities."""

import os
import pathlib
from typing import Iterable, List, Optional, Sequence, Union

SEARCH_PATH_ENV = 'REPORTFLOW_SEARCH_PATH'


def ensure_export_dir(export_dir: Union[str, pathlib.Path]) -> pathlib.Path:
    """Ensure export directory exists and return Path object."""
    export_path = pathlib.Path(export_dir)
    export_path.mkdir(parents=True, exist_ok=True)
    return export_path


def search_paths_from_env() -> List[str]:
    """Directories listed in ``REPORTFLOW_SEARCH_PATH`` (os.pathsep separated)."""
    raw = os.environ.get(SEARCH_PATH_ENV, '')
    return [p for p in raw.split(os.pathsep) if p]


def resolve_asset_path(
    asset_path: Union[str, pathlib.Path], search_paths: Sequence[Union[str, pathlib.Path]]
) -> Optional[pathlib.Path]:
    """Resolve an asset against the search path.

    Asset references are written relative to the search path even when they start
    with a slash (``/templates/main.pdf``). An existing absolute path is used as is.
    Returns None when nothing matches.
    """
    asset = pathlib.Path(asset_path)

    if asset.is_absolute() and asset.exists():
        return asset

    relative = str(asset_path).lstrip('/\\')
    for base in search_paths:
        resolved = pathlib.Path(base) / relative
        if resolved.exists():
            return resolved.resolve()

    # Try relative to current working directory
    cwd_resolved = pathlib.Path.cwd() / relative
    if relative and cwd_resolved.exists():
        return cwd_resolved.resolve()

    return None


def find_font_file(
    name: str,
    search_paths: Sequence[Union[str, pathlib.Path]],
    extensions: Iterable[str] = ('.ttf', '.otf'),
) -> Optional[pathlib.Path]:
    """Find a font file by name: exact file, ``name.<ext>``, or a ``fonts/`` subdirectory."""
    exts = [''] + list(extensions)
    candidates = [name + ext for ext in exts]
    for base in search_paths:
        for sub in ('', 'fonts'):
            for cand in candidates:
                p = pathlib.Path(base) / sub / cand
                if p.is_file():
                    return p.resolve()
    direct = pathlib.Path(name)
    if direct.is_file():
        return direct.resolve()
    return None


def format_file_size(size_bytes: int) -> str:
    """Format file size in human-readable format."""
    if size_bytes == 0:
        return "0 B"

    units = ["B", "KB", "MB", "GB", "TB"]
    unit_index = 0
    size = float(size_bytes)

    while size >= 1024 and unit_index < len(units) - 1:
        size /= 1024
        unit_index += 1

    if unit_index == 0:
        return f"{int(size)} {units[unit_index]}"
    return f"{size:.1f} {units[unit_index]}"
