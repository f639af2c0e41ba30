"""HTML-subset to inline engine markup.

- entities: whitespace cleanup and entity round-tripping
- lists: nested list flattening with per-scope counters
- transpiler: the full conversion pipeline
"""

from .entities import (
    encode_html_entities,
    fix_html_paddings,
    remove_tag_attributes,
    restore_angle_brackets,
)
from .lists import ListKind, ListScope, normalize_lists, tokenize
from .transpiler import MarkupOptions, MarkupText, transpile

__all__ = [
    'encode_html_entities',
    'fix_html_paddings',
    'remove_tag_attributes',
    'restore_angle_brackets',
    'ListKind',
    'ListScope',
    'normalize_lists',
    'tokenize',
    'MarkupOptions',
    'MarkupText',
    'transpile',
]
