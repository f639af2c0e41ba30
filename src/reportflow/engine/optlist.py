"""Option-list parsing for engine markup.

Option lists look like ``font=3 fontsize=10 fillcolor={#000000}``; values may be
brace-grouped and nest (``matchbox={fillcolor={#ffc107} boxheight={ascender descender}}``).
Inline markup interleaves such lists in angle brackets with text.
"""

import html
import re
from typing import Dict, List, Tuple, Union

INLINE_RE = re.compile(r'<([^<>]*)>')

Segment = Tuple[str, Union[str, Dict[str, str]]]


def _read_group(s: str, i: int) -> Tuple[str, int]:
    """Read a ``{...}`` group starting at s[i] == '{'; return (inner, index after)."""
    depth = 0
    start = i + 1
    while i < len(s):
        ch = s[i]
        if ch == '{':
            depth += 1
        elif ch == '}':
            depth -= 1
            if depth == 0:
                return s[start:i], i + 1
        i += 1
    # Unbalanced: take the rest
    return s[start:], len(s)


def parse_optlist(s: str) -> Dict[str, str]:
    """Parse an option list into a dict of lower-cased keys to raw string values.

    A key without ``=value`` is a flag and maps to ``'true'``. Brace groups are
    returned without their outer braces; nested lists stay unparsed so callers can
    feed them back into this function.
    """
    out: Dict[str, str] = {}
    if not isinstance(s, str):
        return out
    i = 0
    n = len(s)
    while i < n:
        while i < n and s[i].isspace():
            i += 1
        if i >= n:
            break
        start = i
        while i < n and s[i] != '=' and not s[i].isspace():
            i += 1
        key = s[start:i].strip().lower()
        if i < n and s[i] == '=':
            i += 1
            if i < n and s[i] == '{':
                value, i = _read_group(s, i)
            else:
                vstart = i
                while i < n and not s[i].isspace():
                    i += 1
                value = s[vstart:i]
        else:
            value = 'true'
        if key:
            out[key] = value
    return out


def split_inline(markup: str) -> List[Segment]:
    """Split inline markup into ``('options', dict)`` and ``('text', str)`` segments.

    Text segments have character references decoded. Anything between angle
    brackets is read as an option list, including brackets that were part of the
    original content.
    """
    segments: List[Segment] = []
    pos = 0
    for m in INLINE_RE.finditer(markup):
        if m.start() > pos:
            segments.append(('text', html.unescape(markup[pos : m.start()])))
        segments.append(('options', parse_optlist(m.group(1))))
        pos = m.end()
    if pos < len(markup):
        segments.append(('text', html.unescape(markup[pos:])))
    return segments


def parse_percent(value: str, base: float) -> float:
    """'60%' of base, or a plain number."""
    v = str(value).strip()
    if v.endswith('%'):
        return float(v[:-1]) / 100.0 * base
    return float(v)
