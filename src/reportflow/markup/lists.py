"""Flatten (nested) HTML lists into indented lines with bullet or number markers.

The walker keeps an explicit stack of list scopes over a tokenized tag sequence:

    <ol><li>a</li><li>b<ul><li>x</li></ul></li></ol>

becomes one line per item, each prefixed with ``<leftindent=0>MARKER<leftindent=N>``
where N is the indent of the item's nesting depth. Counters live on their scope and
disappear when it is popped, so every ``<ol>`` starts again at 1.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

LIST_TAG_RE = re.compile(r'<(/?)(ul|ol|li)>', re.I)
LIST_OPEN_RE = re.compile(r'<(ul|ol)>', re.I)
PARAGRAPH_CLOSE_TAIL_RE = re.compile(r'</p>$', re.I)

DEFAULT_BULLET = '&mdash;'
DEFAULT_INDENT = 10


class ListKind(Enum):
    ORDERED = 'ol'
    UNORDERED = 'ul'


@dataclass
class ListScope:
    kind: ListKind
    counter: int = 0
    indent_level: int = 0
    # Walker bookkeeping for the item currently open in this scope
    in_item: bool = False
    line_dirty: bool = False
    item_has_lines: bool = False

    def indent(self, unit: float) -> float:
        return unit * (self.indent_level + 1)

    def marker(self, bullet: str) -> str:
        if self.kind is ListKind.ORDERED:
            return f'{self.counter}.'
        return bullet


@dataclass(frozen=True)
class Token:
    kind: str  # 'text' | 'open' | 'close'
    value: str
    tag: Optional[str] = None


def tokenize(markup: str) -> List[Token]:
    """Split markup into list-tag tokens and the text between them."""
    tokens: List[Token] = []
    pos = 0
    for m in LIST_TAG_RE.finditer(markup):
        if m.start() > pos:
            tokens.append(Token('text', markup[pos : m.start()]))
        kind = 'close' if m.group(1) else 'open'
        tokens.append(Token(kind, m.group(0), m.group(2).lower()))
        pos = m.end()
    if pos < len(markup):
        tokens.append(Token('text', markup[pos:]))
    return tokens


def _fmt_indent(val: float) -> str:
    return (f"{float(val):.4f}").rstrip('0').rstrip('.')


def normalize_lists(
    markup: str, bullet: str = DEFAULT_BULLET, indent_unit: float = DEFAULT_INDENT
) -> str:
    """Replace every ``ul``/``ol``/``li`` tag with inline indent and marker codes.

    Markup without list tags is returned unchanged. Stray ``li`` tags outside a list
    are dropped, as are whitespace-only runs between list tags.
    """
    if not markup or not LIST_OPEN_RE.search(markup):
        return markup

    out: List[str] = []
    stack: List[ListScope] = []

    def ends_with_newline() -> bool:
        return bool(out) and out[-1].endswith('\n')

    def start_outer_list() -> None:
        # A list after a paragraph gets a blank line, after other text a line break
        prior = ''.join(out)
        m = PARAGRAPH_CLOSE_TAIL_RE.search(prior)
        if m:
            out[:] = [prior[: m.start()], '\n\n']
        elif prior.strip() and not prior.endswith('\n'):
            out.append('\n')

    for tok in tokenize(markup):
        scope = stack[-1] if stack else None

        if tok.kind == 'text':
            if scope is not None and not scope.in_item and not tok.value.strip():
                continue
            out.append(tok.value)
            if scope is not None and scope.in_item and tok.value.strip():
                scope.line_dirty = not tok.value.endswith('\n')
            continue

        if tok.tag in ('ul', 'ol'):
            if tok.kind == 'open':
                if scope is not None and scope.in_item:
                    if scope.line_dirty and not ends_with_newline():
                        out.append('\n')
                    scope.line_dirty = False
                    scope.item_has_lines = True
                elif scope is None:
                    start_outer_list()
                kind = ListKind.ORDERED if tok.tag == 'ol' else ListKind.UNORDERED
                stack.append(ListScope(kind=kind, indent_level=len(stack)))
            elif scope is not None:
                stack.pop()
                if stack:
                    out.append(f'<leftindent={_fmt_indent(stack[-1].indent(indent_unit))}>')
                else:
                    out.append('<leftindent=0>')
            continue

        # <li> / </li>
        if scope is None:
            continue
        if tok.kind == 'open':
            scope.counter += 1
            scope.in_item = True
            scope.line_dirty = False
            scope.item_has_lines = False
            out.append(
                f'<leftindent=0>{scope.marker(bullet)}'
                f'<leftindent={_fmt_indent(scope.indent(indent_unit))}>'
            )
        else:
            if scope.line_dirty or not scope.item_has_lines:
                out.append('\n')
            scope.in_item = False
            scope.line_dirty = False

    return ''.join(out)
