"""Font discovery on the asset search path using fontTools."""

import pathlib
import struct
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Union

from fontTools.ttLib import TTFont, TTLibError
from fontTools.ttLib.ttCollection import TTCollection

from .file_ops import format_file_size

FONT_EXTENSIONS = {'.ttf', '.otf', '.ttc', '.otc'}
# Typographic family first, then legacy family
_FAMILY_NAME_IDS = (16, 1)
_SUBFAMILY_NAME_IDS = (17, 2)


@dataclass
class FontFamily:
    """Font family information."""

    name: str
    files: List[str] = field(default_factory=list)
    styles: List[str] = field(default_factory=list)
    total_size: int = 0

    @property
    def total_size_human(self) -> str:
        return format_file_size(self.total_size)


def _name_record(font: TTFont, name_ids: Iterable[int]) -> Optional[str]:
    table = font.get('name')
    if table is None:
        return None
    for name_id in name_ids:
        record = table.getDebugName(name_id)
        if record and record.strip():
            return record.strip()
    return None


def read_font_names(path: Union[str, pathlib.Path]) -> List[tuple]:
    """Return ``[(family, style), ...]`` for a font file (one entry per face in collections)."""
    p = pathlib.Path(path)
    if p.suffix.lower() in {'.ttc', '.otc'}:
        collection = TTCollection(str(p), lazy=True)
        fonts = list(collection.fonts)
    else:
        fonts = [TTFont(str(p), lazy=True)]
    names = []
    for font in fonts:
        family = _name_record(font, _FAMILY_NAME_IDS) or p.stem
        style = _name_record(font, _SUBFAMILY_NAME_IDS) or 'Regular'
        names.append((family, style))
        font.close()
    return names


def read_family_name(path: Union[str, pathlib.Path]) -> str:
    """Family name of the first face in ``path``; the file stem when the name table is empty."""
    names = read_font_names(path)
    return names[0][0] if names else pathlib.Path(path).stem


def discover_fonts(search_paths: Sequence[Union[str, pathlib.Path]]) -> Dict[str, FontFamily]:
    """Scan the search path recursively and group font files by real family name.

    Unreadable files are skipped; they would fail loudly once the engine loads them.
    """
    families: Dict[str, FontFamily] = {}
    for base in search_paths:
        root = pathlib.Path(base)
        if not root.exists():
            continue
        for f in sorted(root.rglob('*')):
            if not f.is_file() or f.suffix.lower() not in FONT_EXTENSIONS:
                continue
            try:
                names = read_font_names(f)
            except (TTLibError, OSError, KeyError, ValueError, struct.error):
                continue
            for family_name, style in names:
                fam = families.setdefault(family_name, FontFamily(name=family_name))
                if str(f) not in fam.files:
                    fam.files.append(str(f))
                    try:
                        fam.total_size += f.stat().st_size
                    except OSError:
                        pass
                if style not in fam.styles:
                    fam.styles.append(style)
    return families
