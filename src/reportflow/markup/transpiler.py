"""Convert the supported HTML subset into inline option-list markup for the engine.

Processing order matters and must not be rearranged:

1. fix whitespace left by editors around list and line-break tags
2. strip every tag attribute
3. flatten (nested) lists into indented lines
4. apply the tag substitution table, upper-case keys first, then as written
5. entity round-trip, then revive ``<``/``>`` so the inserted option lists are live
"""

from dataclasses import dataclass
from typing import Dict, Optional

from .entities import (
    encode_html_entities,
    fix_html_paddings,
    remove_tag_attributes,
    restore_angle_brackets,
)
from .lists import DEFAULT_BULLET, DEFAULT_INDENT, normalize_lists

DEFAULT_MARK_COLOR = '{#ffc107}'


@dataclass(frozen=True)
class MarkupOptions:
    list_bullet: str = DEFAULT_BULLET
    list_indent: float = DEFAULT_INDENT
    mark_color: str = DEFAULT_MARK_COLOR
    small_font_size: float = 6


def _num(val: float) -> str:
    """Render a number the way string concatenation would (10.0 -> '10')."""
    f = float(val)
    if f.is_integer():
        return str(int(f))
    return repr(f)


def build_substitutions(
    font_regular: int,
    font_bold: int,
    base_font_size: float,
    font_unicode: int,
    options: MarkupOptions,
) -> Dict[str, str]:
    """Tag -> inline markup table. Insertion order is the application order."""
    size = _num(base_font_size)
    small = _num(options.small_font_size)
    return {
        "</p>\n": "\n",
        '</p><p>': "\n",
        '<p> </p>': "\n",
        '<p>': '',
        '<strong>': f'<font={font_bold}>',
        '</strong>': f'<font={font_regular}>',
        '<sup>': f'<textrise=60% fontsize={small}>',
        '</sup>': f'<textrise=0 fontsize={size}>',
        '<sub>': f'<textrise=-60% fontsize={small}>',
        '</sub>': f'<textrise=0 fontsize={size}>',
        '<i>': '<italicangle=-12>',
        '</i>': '<italicangle=0>',
        '<em>': '<italicangle=-12>',
        '</em>': '<italicangle=0>',
        '<br/>': "\n",
        '<br>': "\n",
        '<u>': '<underline=true underlinewidth=7% underlineposition=-20%>',
        '</u>': '<underline=false>',
        '<s>': '<strikeout=true>',
        '</s>': '<strikeout=false>',
        '<ol>': '',
        '</ol>': '<leftindent=0>',
        '<ul>': '',
        '</ul>': '<leftindent=0>',
        '<span>': '',
        '</span>': '',
        '<br />': "\n",
        "\t": '',
        "\r\n": '',
        "\r": '',
        '</p>': '',
        '<li>': '',
        '</li>': '',
        '</div><div>': "\n",
        '<div> </div>': "\n",
        '<div>': '',
        '</div>': "\n",
        '<table>': '',
        '</table>': "\n",
        '<tbody>': '',
        '</tbody>': "\n",
        '<tr>': '',
        '</tr>': "\n",
        '<td>': '',
        '</td>': "\n",
        '≤': '<unicode>&le;</unicode>',
        '≥': '<unicode>&ge;</unicode>',
        '√': '<unicode>&#8730;</unicode>',
        '<unicode>': f'<font={font_unicode}>',
        '</unicode>': f'<font={font_regular}>',
        '<b>': f'<font={font_bold}>',
        '</b>': f'<font={font_regular}>',
        '<text-right>': '<alignment=right>',
        '</text-right>': '<alignment=left>',
        '<text-center>': '<alignment=center>',
        '</text-center>': '<alignment=left>',
        '<leader>': "<leader={alignment={grid}}>\t",
        '<mark>': (
            f'<matchbox={{fillcolor={options.mark_color} boxheight={{ascender descender}}}}>'
        ),
        '</mark>': '<matchbox=end>',
        '<a>': '',
        '</a>': '',
    }


def apply_substitutions(text: str, table: Dict[str, str]) -> str:
    # Upper-case spellings first (<STRONG>), then the keys as written (<strong>)
    for key, value in table.items():
        text = text.replace(key.upper(), value)
    for key, value in table.items():
        text = text.replace(key, value)
    return text


def transpile(
    raw: Optional[str],
    font_regular: int,
    font_bold: int,
    base_font_size: float = 10,
    *,
    font_unicode: Optional[int] = None,
    options: Optional[MarkupOptions] = None,
) -> str:
    """Transpile a raw HTML-subset string into engine-ready inline markup.

    Args:
        raw: Text possibly containing the supported tags. Empty input is returned as ''.
        font_regular: Engine font handle used for regular text.
        font_bold: Engine font handle switched to by ``strong``/``b``.
        base_font_size: Size restored after ``sup``/``sub``.
        font_unicode: Font handle for the math symbols; defaults to ``font_regular``.
        options: List bullet/indent and highlight color.

    Returns:
        Engine markup. Attributes are discarded, so class/style carry no meaning.
    """
    if not raw:
        return ''
    options = options or MarkupOptions()
    if font_unicode is None:
        font_unicode = font_regular

    text = fix_html_paddings(raw)
    text = remove_tag_attributes(text)
    text = normalize_lists(text, options.list_bullet, options.list_indent)

    table = build_substitutions(font_regular, font_bold, base_font_size, font_unicode, options)
    text = apply_substitutions(text, table)

    text = encode_html_entities(text)
    return restore_angle_brackets(text)


@dataclass(frozen=True)
class MarkupText:
    """A markup string tagged with its stage; raw -> engine-ready only."""

    value: str
    engine_ready: bool = False

    @classmethod
    def raw(cls, value: str) -> 'MarkupText':
        return cls(value or '', False)

    def to_engine(
        self,
        font_regular: int,
        font_bold: int,
        base_font_size: float = 10,
        *,
        font_unicode: Optional[int] = None,
        options: Optional[MarkupOptions] = None,
    ) -> 'MarkupText':
        if self.engine_ready:
            return self
        converted = transpile(
            self.value,
            font_regular,
            font_bold,
            base_font_size,
            font_unicode=font_unicode,
            options=options,
        )
        return MarkupText(converted, True)

    def __str__(self) -> str:
        return self.value
