"""Whitespace cleanup and HTML-entity round-tripping for raw markup."""

import html
import re
from html.entities import codepoint2name

# Upstream editors emit a newline after list/line-break tags; drop it so it does not
# turn into an empty line once the tags collapse.
PADDING_FIXES = {
    '<ul>\n': '<ul>',
    '</ul>\n': '</ul>',
    '</ul>\r\n': '</ul><br>',
    '<ol>\n': '<ol>',
    '</ol>\n': '</ol>',
    '<br />\n': '<br />',
}

# Tag names may contain hyphens so custom tags like <text-right> keep their name.
TAG_ATTRIBUTES_RE = re.compile(r'<([a-z][a-z0-9-]*)[^>]*?(/?)>', re.I | re.S)


def fix_html_paddings(text: str) -> str:
    if not text:
        return text
    for search, replacement in PADDING_FIXES.items():
        text = text.replace(search, replacement)
    return text


def remove_tag_attributes(text: str) -> str:
    """Reduce every opening or self-closing tag to its bare name.

    ``<p class="lead">`` becomes ``<p>``, ``<br />`` becomes ``<br/>``.
    """
    if not text:
        return text
    return TAG_ATTRIBUTES_RE.sub(r'<\1\2>', text)


def decode_entities(text: str) -> str:
    return html.unescape(text)


def encode_html_entities(text: str) -> str:
    """Decode existing entities, then encode every character that has an entity.

    Named entities are used where HTML 4 defines one, ``&#039;`` for the
    apostrophe. Decoding first keeps already encoded input from being
    double-escaped.
    """
    if not text:
        return text
    text = decode_entities(text)
    out = []
    for ch in text:
        if ch == "'":
            out.append('&#039;')
            continue
        name = codepoint2name.get(ord(ch))
        out.append(f'&{name};' if name else ch)
    return ''.join(out)


def restore_angle_brackets(text: str) -> str:
    """Turn ``&lt;``/``&gt;`` back into live characters so inline option lists work.

    This also revives any literal angle brackets that were part of the content.
    """
    return text.replace('&lt;', '<').replace('&gt;', '>')
