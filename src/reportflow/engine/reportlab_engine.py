"""Typesetting engine on top of ReportLab.

Pages are kept as in-memory draw buffers until ``end_document`` so that a page can
be suspended and resumed out of order (the pagination pass revisits every page).
Each buffer is a list of layers of canvas operations; PDF template stamps sit
between layers and are merged with pypdf when the document is assembled, so a
template placed after content covers it and one placed before sits underneath.

Textflows accept the inline option-list markup produced by
``reportflow.markup.transpile``. Each markup line becomes one ReportLab
``Paragraph``; a line that starts ``<leftindent=A>marker<leftindent=B>`` becomes a
paragraph with ``bulletText`` so list markers hang in front of the item text.
"""

import html
import io
import pathlib
import warnings
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from pypdf import PageObject, PdfReader, PdfWriter
from pypdf.errors import PyPdfError
from reportlab.graphics import renderPDF
from reportlab.lib.colors import Color, black
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY, TA_LEFT, TA_RIGHT
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas
from reportlab.platypus import Flowable, Image, Paragraph, Spacer, Table, TableStyle
from svglib.svglib import svg2rlg

from ..errors import EngineProtocolError, EngineResourceError
from ..geometry import Region
from ..utils.colors import RGB, parse_color, rgb_to_hex
from ..utils.file_ops import find_font_file, resolve_asset_path
from ..utils.fonts import read_family_name
from .base import FitStatus, TypesettingEngine
from .optlist import parse_optlist, parse_percent, split_inline

DrawOp = Callable[[canvas.Canvas], None]

DEFAULT_FONT = 'Helvetica'
_EPSILON = 1e-6

_ALIGNMENTS = {
    'left': TA_LEFT,
    'right': TA_RIGHT,
    'center': TA_CENTER,
    'justify': TA_JUSTIFY,
}

_PAGE_LAYOUTS = {
    'singlepage': '/SinglePage',
    'onecolumn': '/OneColumn',
    'twocolumnleft': '/TwoColumnLeft',
    'twocolumnright': '/TwoColumnRight',
    'twopageleft': '/TwoPageLeft',
    'twopageright': '/TwoPageRight',
}

# Inline options that have no ReportLab counterpart and are dropped silently
_IGNORED_INLINE = {
    'charref',
    'wordspacing',
    'underlinewidth',
    'underlineposition',
    'leader',
    'encoding',
    'embedding',
}

_VALIGN = {'top': 'TOP', 'center': 'MIDDLE', 'middle': 'MIDDLE', 'bottom': 'BOTTOM'}


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (list, tuple)):
        return ' '.join(_format_value(v) for v in value)
    if isinstance(value, dict):
        return ' '.join(f'{k}={{{_format_value(v)}}}' for k, v in value.items())
    return str(value)


def normalize_options(options: Any) -> Dict[str, str]:
    """Accept an option-list string or a mapping; return lower-cased keys to strings."""
    if not options:
        return {}
    if isinstance(options, str):
        return parse_optlist(options)
    return {str(k).lower(): _format_value(v) for k, v in options.items()}


def _numbers(value: Optional[str]) -> List[float]:
    if not value:
        return []
    out = []
    for part in value.replace('{', ' ').replace('}', ' ').split():
        try:
            out.append(float(part))
        except ValueError:
            continue
    return out


def _position_fractions(position: Optional[str]) -> Tuple[float, float]:
    """Horizontal and vertical reference fractions for a ``position`` option.

    Accepts keywords (``left``, ``right``, ``top``, ``bottom``, ``center``) in any
    order, or one or two percentages (``50`` == centered). Default is lower left.
    """
    if not position:
        return (0.0, 0.0)
    tokens = position.replace('{', ' ').replace('}', ' ').split()
    hx: Optional[float] = None
    vy: Optional[float] = None
    numbers: List[float] = []
    centered = False
    for tok in tokens:
        t = tok.lower()
        if t == 'left':
            hx = 0.0
        elif t == 'right':
            hx = 1.0
        elif t == 'top':
            vy = 1.0
        elif t == 'bottom':
            vy = 0.0
        elif t == 'center':
            centered = True
        else:
            try:
                numbers.append(float(t) / 100.0)
            except ValueError:
                continue
    if numbers:
        hx = numbers[0] if hx is None else hx
        vy = (numbers[1] if len(numbers) > 1 else numbers[0]) if vy is None else vy
    if centered:
        hx = 0.5 if hx is None else hx
        vy = 0.5 if vy is None else vy
    return (0.0 if hx is None else hx, 0.0 if vy is None else vy)


def fit_box(
    natural_w: float, natural_h: float, x: float, y: float, options: Dict[str, str]
) -> Tuple[float, float, float, float]:
    """Compute ``(x0, y0, width, height)`` for an image or graphic at reference point (x, y).

    Supports ``boxsize``, ``fitmethod`` (nofit, auto, meet, slice, entire), ``scale``
    and ``position``.
    """
    scale = _numbers(options.get('scale')) or [1.0]
    w = natural_w * scale[0]
    h = natural_h * scale[-1]
    box = _numbers(options.get('boxsize'))
    bw, bh = (box[0], box[1]) if len(box) >= 2 else (0.0, 0.0)
    fitmethod = options.get('fitmethod', 'nofit').lower()

    if bw > 0 and bh > 0 and natural_w > 0 and natural_h > 0:
        if fitmethod == 'meet' or (fitmethod == 'auto' and (w > bw or h > bh)):
            s = min(bw / natural_w, bh / natural_h)
            w, h = natural_w * s, natural_h * s
        elif fitmethod == 'slice':
            s = max(bw / natural_w, bh / natural_h)
            w, h = natural_w * s, natural_h * s
        elif fitmethod == 'entire':
            w, h = bw, bh
    else:
        bw = bh = 0.0

    hx, vy = _position_fractions(options.get('position'))
    return (x + (bw - w) * hx, y + (bh - h) * vy, w, h)


@dataclass
class _PageBuffer:
    width: float
    height: float
    rotate: int = 0
    layers: List[List[DrawOp]] = field(default_factory=lambda: [[]])
    # (layer index the stamp is merged below, template page)
    stamps: List[Tuple[int, PageObject]] = field(default_factory=list)
    finalized: bool = False


@dataclass
class _InlineState:
    font: Optional[int] = None
    fontsize: float = 10.0
    fillcolor: RGB = (0.0, 0.0, 0.0)
    textrise: str = '0'
    italic: bool = False
    underline: bool = False
    strikeout: bool = False
    matchbox: Optional[RGB] = None
    alignment: str = 'left'
    leftindent: float = 0.0
    leading: Optional[str] = None


@dataclass
class _Run:
    text: str
    state: _InlineState


class _Textflow:
    def __init__(self) -> None:
        self.chunks: List[Tuple[str, Dict[str, str]]] = []
        self.pending: Optional[List[Flowable]] = None
        self.bottom_y: Optional[float] = None
        self.stalled = False


@dataclass
class _Cell:
    text: str
    options: Dict[str, str]


class _Table:
    def __init__(self) -> None:
        self.cells: Dict[Tuple[int, int], _Cell] = {}
        self.pending: Optional[List[Flowable]] = None
        self.bottom_y: Optional[float] = None
        self.stalled = False


@dataclass
class _ImageResource:
    path: str
    width: float
    height: float


@dataclass
class _GraphicResource:
    path: str
    drawing: Any


class ReportlabEngine(TypesettingEngine):
    """Typesetting engine writing PDF through ReportLab and pypdf."""

    def __init__(self) -> None:
        self.search_paths: List[str] = []
        self.info: Dict[str, str] = {}
        self.document_options: Dict[str, str] = {}
        self.pages: List[_PageBuffer] = []
        self._active: Optional[int] = None
        self._started = False
        self._next_handle = 1
        self._fonts: Dict[int, str] = {}
        self._textflows: Dict[int, _Textflow] = {}
        self._tables: Dict[int, _Table] = {}
        self._images: Dict[int, _ImageResource] = {}
        self._graphics: Dict[int, _GraphicResource] = {}
        self._templates: Dict[str, PdfReader] = {}
        self._warned: set = set()

    # Document lifecycle

    def set_search_path(self, paths: Sequence[str]) -> None:
        self.search_paths = [str(p) for p in paths if p]

    def set_info(self, key: str, value: str) -> None:
        self.info[key] = value

    def begin_document(self, options: Optional[Dict[str, Any]] = None) -> None:
        if self._started:
            raise EngineProtocolError('begin_document called twice')
        self.document_options = normalize_options(options)
        self._started = True

    def end_document(self) -> bytes:
        if not self._started:
            raise EngineProtocolError('end_document without begin_document')
        if self._active is not None:
            raise EngineProtocolError(f'page {self._active + 1} is still open')
        open_pages = [i + 1 for i, p in enumerate(self.pages) if not p.finalized]
        if open_pages:
            raise EngineProtocolError(f'pages not finished: {open_pages}')
        if not self.pages:
            raise EngineProtocolError('document has no pages')

        rendered, index = self._render_layers()
        writer = PdfWriter()
        for pi, page in enumerate(self.pages):
            writer.add_page(PageObject.create_blank_page(width=page.width, height=page.height))
            out = writer.pages[-1]
            for li in range(len(page.layers)):
                for stamp_index, stamp in page.stamps:
                    if stamp_index == li:
                        out.merge_page(stamp)
                if (pi, li) in index:
                    out.merge_page(rendered.pages[index[(pi, li)]])
            if page.rotate:
                out.rotate(page.rotate)

        layout = _PAGE_LAYOUTS.get(self.document_options.get('pagelayout', '').lower())
        if layout:
            writer.page_layout = layout
        if self.info:
            writer.add_metadata({f'/{k}': v for k, v in self.info.items()})

        out_buf = io.BytesIO()
        writer.write(out_buf)
        self._started = False
        return out_buf.getvalue()

    def _render_layers(self) -> Tuple[PdfReader, Dict[Tuple[int, int], int]]:
        buf = io.BytesIO()
        c = canvas.Canvas(buf, pageCompression=1)
        index: Dict[Tuple[int, int], int] = {}
        n = 0
        for pi, page in enumerate(self.pages):
            for li, layer in enumerate(page.layers):
                if not layer:
                    continue
                c.setPageSize((page.width, page.height))
                for op in layer:
                    op(c)
                c.showPage()
                index[(pi, li)] = n
                n += 1
        if n == 0:
            # canvas refuses to save an empty document
            c.setPageSize((self.pages[0].width, self.pages[0].height))
            c.showPage()
        c.save()
        return PdfReader(io.BytesIO(buf.getvalue())), index

    # Pages

    def begin_page(self, width: float, height: float, rotate: int = 0) -> None:
        if not self._started:
            raise EngineProtocolError('begin_page outside of a document')
        if self._active is not None:
            raise EngineProtocolError(
                f'begin_page while page {self._active + 1} is active; suspend or end it first'
            )
        self.pages.append(_PageBuffer(width=width, height=height, rotate=rotate))
        self._active = len(self.pages) - 1

    def end_page(self) -> None:
        page = self._page()
        page.finalized = True
        self._active = None

    def suspend_page(self) -> None:
        self._page()
        self._active = None

    def resume_page(self, page_number: int) -> None:
        if self._active is not None:
            raise EngineProtocolError(
                f'resume_page({page_number}) while page {self._active + 1} is active'
            )
        if page_number < 1 or page_number > len(self.pages):
            raise EngineProtocolError(f'page {page_number} does not exist')
        if self.pages[page_number - 1].finalized:
            raise EngineProtocolError(f'page {page_number} is already finished')
        self._active = page_number - 1

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def _page(self) -> _PageBuffer:
        if self._active is None:
            raise EngineProtocolError('no active page')
        return self.pages[self._active]

    def _draw(self, op: DrawOp) -> None:
        self._page().layers[-1].append(op)

    def _new_handle(self) -> int:
        handle = self._next_handle
        self._next_handle += 1
        return handle

    def _warn_once(self, message: str) -> None:
        if message not in self._warned:
            self._warned.add(message)
            warnings.warn(message, UserWarning)

    # Text

    def create_textflow(self, text: str, options: Dict[str, Any]) -> int:
        return self.add_textflow(None, text, options)

    def add_textflow(self, handle: Optional[int], text: str, options: Dict[str, Any]) -> int:
        if handle is None or handle == 0:
            handle = self._new_handle()
            self._textflows[handle] = _Textflow()
        tf = self._textflows.get(handle)
        if tf is None:
            raise EngineProtocolError(f'unknown textflow handle {handle}')
        if tf.pending is not None:
            raise EngineProtocolError(f'textflow {handle} was already fitted')
        tf.chunks.append((text or '', normalize_options(options)))
        return handle

    def fit_textflow(
        self, handle: int, region: Region, options: Optional[Dict[str, Any]] = None
    ) -> FitStatus:
        tf = self._textflows.get(handle)
        if tf is None:
            raise EngineProtocolError(f'unknown textflow handle {handle}')
        self._page()
        if tf.pending is None:
            tf.pending = self._build_flowables(tf, normalize_options(options))
        status, bottom, placed = self._fit_flowables(tf.pending, region)
        self._check_progress(tf, placed, f'textflow {handle}')
        tf.bottom_y = bottom
        return status

    def textflow_bottom_y(self, handle: int) -> float:
        tf = self._textflows.get(handle)
        if tf is None or tf.bottom_y is None:
            raise EngineProtocolError(f'textflow {handle} has not been fitted')
        return tf.bottom_y

    def _check_progress(self, item: Any, placed: bool, what: str) -> None:
        # Two fits in a row without progress means the content can never fit
        if placed:
            item.stalled = False
            return
        if item.pending and item.stalled:
            raise EngineProtocolError(f'{what} does not fit into an empty fitbox')
        item.stalled = bool(item.pending)

    def _fit_flowables(
        self, pending: List[Flowable], region: Region
    ) -> Tuple[FitStatus, float, bool]:
        """Draw as many pending flowables as fit into region; consume them from the list."""
        width = region.width
        x = region.left
        y = region.top
        avail = region.height
        placed = False
        while pending:
            flowable = pending[0]
            _, h = flowable.wrap(width, avail)
            if h <= avail + _EPSILON:
                self._draw_flowable(flowable, x, y - h)
                y -= h
                avail -= h
                pending.pop(0)
                placed = True
                continue
            parts = flowable.split(width, avail) if avail > 0 else []
            if len(parts) >= 2:
                head = parts[0]
                _, hh = head.wrap(width, avail)
                if hh <= avail + _EPSILON:
                    self._draw_flowable(head, x, y - hh)
                    y -= hh
                    pending[0:1] = parts[1:]
                    placed = True
            return FitStatus.OVERFLOWED, y, placed
        return FitStatus.COMPLETE, y, placed

    def _draw_flowable(self, flowable: Flowable, x: float, y: float) -> None:
        self._draw(lambda c: flowable.drawOn(c, x, y))

    def _font_name(self, handle: Optional[int]) -> str:
        if handle is None:
            return DEFAULT_FONT
        name = self._fonts.get(handle)
        if name is None:
            raise EngineProtocolError(f'unknown font handle {handle}')
        return name

    def _apply_inline(self, state: _InlineState, opts: Dict[str, str]) -> _InlineState:
        state = replace(state)
        # fontsize first so percentages in the same list refer to the new size
        if 'fontsize' in opts:
            state.fontsize = parse_percent(opts['fontsize'], state.fontsize)
        for key, value in opts.items():
            if key == 'fontsize':
                continue
            if key == 'font':
                try:
                    state.font = int(value)
                except ValueError:
                    self._warn_once(f'Ignoring non-numeric font handle {value!r}')
            elif key == 'fillcolor':
                state.fillcolor = parse_color(value)
            elif key == 'textrise':
                state.textrise = value
            elif key == 'italicangle':
                state.italic = float(value) != 0
            elif key == 'underline':
                state.underline = value.lower() == 'true'
            elif key == 'strikeout':
                state.strikeout = value.lower() == 'true'
            elif key == 'matchbox':
                if value.strip().lower() == 'end':
                    state.matchbox = None
                else:
                    fill = parse_optlist(value).get('fillcolor')
                    state.matchbox = parse_color(fill) if fill else (1.0, 1.0, 0.0)
            elif key == 'alignment':
                state.alignment = value.lower()
            elif key == 'leftindent':
                state.leftindent = parse_percent(value, state.fontsize)
            elif key == 'leading':
                state.leading = value
            elif key not in _IGNORED_INLINE:
                self._warn_once(f'Unsupported textflow option ignored: {key}')
        return state

    def _run_xml(self, run: _Run) -> str:
        s = run.state
        text = html.escape(run.text, quote=False)
        attrs = (
            f'face="{self._font_name(s.font)}" size="{s.fontsize:g}" '
            f'color="{rgb_to_hex(s.fillcolor)}"'
        )
        if s.matchbox is not None:
            attrs += f' backColor="{rgb_to_hex(s.matchbox)}"'
        if s.italic:
            text = f'<i>{text}</i>'
        if s.strikeout:
            text = f'<strike>{text}</strike>'
        if s.underline:
            text = f'<u>{text}</u>'
        rise = parse_percent(s.textrise, s.fontsize) if s.textrise else 0.0
        if rise > 0:
            text = f'<super rise="{rise:g}" size="{s.fontsize:g}">{text}</super>'
        elif rise < 0:
            text = f'<sub rise="{-rise:g}" size="{s.fontsize:g}">{text}</sub>'
        return f'<font {attrs}>{text}</font>'

    def _build_flowables(self, tf: _Textflow, fit_options: Dict[str, str]) -> List[Flowable]:
        """Turn the textflow chunks into paragraphs, one per markup line."""
        state = _InlineState()
        if fit_options:
            state = self._apply_inline(state, fit_options)
        lines: List[Tuple[List[_Run], _InlineState, List[Tuple[int, float]], _InlineState]] = []
        runs: List[_Run] = []
        indent_events: List[Tuple[int, float]] = []
        line_start = state

        def close_line() -> None:
            lines.append((runs[:], line_start, indent_events[:], state))
            runs.clear()
            indent_events.clear()

        for text, options in tf.chunks:
            state = self._apply_inline(state, options)
            if not runs:
                line_start = state
            for kind, value in split_inline(text):
                if kind == 'options':
                    before = state.leftindent
                    state = self._apply_inline(state, value)
                    if not runs:
                        line_start = state
                    elif state.leftindent != before:
                        indent_events.append((len(runs), state.leftindent))
                    continue
                parts = value.split('\n')
                for i, part in enumerate(parts):
                    if i > 0:
                        close_line()
                        line_start = state
                    if part:
                        runs.append(_Run(part, state))
        if runs or indent_events:
            close_line()

        flowables: List[Flowable] = []
        for i, (line_runs, start, events, end) in enumerate(lines):
            if not any(r.text.strip() for r in line_runs):
                if i < len(lines) - 1:
                    flowables.append(Spacer(1, self._leading(start)))
                continue
            flowables.append(self._paragraph(line_runs, start, events, len(flowables)))
        return flowables

    def _leading(self, state: _InlineState) -> float:
        if state.leading:
            return parse_percent(state.leading, state.fontsize)
        return state.fontsize * 1.2

    def _paragraph(
        self, runs: List[_Run], start: _InlineState, events: List[Tuple[int, float]], n: int
    ) -> Paragraph:
        first = runs[0].state
        style = ParagraphStyle(
            name=f'line{n}',
            fontName=self._font_name(first.font),
            fontSize=first.fontsize,
            leading=self._leading(first),
            autoLeading='max',
            textColor=Color(*first.fillcolor),
            alignment=_ALIGNMENTS.get(first.alignment, TA_LEFT),
            leftIndent=first.leftindent,
        )
        # marker text followed by an indent change: hanging bullet
        if events and events[0][0] > 0:
            split_at, text_indent = events[0]
            marker = ''.join(r.text for r in runs[:split_at]).strip()
            body = runs[split_at:]
            if marker and body and len(marker) <= 6:
                body_state = body[0].state
                style.leftIndent = text_indent
                style.bulletIndent = start.leftindent
                style.bulletFontName = self._font_name(first.font)
                style.bulletFontSize = first.fontsize
                style.alignment = _ALIGNMENTS.get(body_state.alignment, TA_LEFT)
                xml = ''.join(self._run_xml(r) for r in body)
                return Paragraph(xml, style, bulletText=marker)
        xml = ''.join(self._run_xml(r) for r in runs)
        return Paragraph(xml, style)

    # Tables

    def add_table_cell(
        self,
        table: Optional[int],
        column: int,
        row: int,
        text: str = '',
        options: Optional[Dict[str, Any]] = None,
    ) -> int:
        if column < 1 or row < 1:
            raise EngineProtocolError(f'invalid table cell position column={column} row={row}')
        if table is None or table == 0:
            table = self._new_handle()
            self._tables[table] = _Table()
        tbl = self._tables.get(table)
        if tbl is None:
            raise EngineProtocolError(f'unknown table handle {table}')
        if tbl.pending is not None:
            raise EngineProtocolError(f'table {table} was already fitted')
        tbl.cells[(row, column)] = _Cell(text or '', normalize_options(options))
        return table

    def fit_table(
        self, handle: int, region: Region, options: Optional[Dict[str, Any]] = None
    ) -> FitStatus:
        tbl = self._tables.get(handle)
        if tbl is None:
            raise EngineProtocolError(f'unknown table handle {handle}')
        self._page()
        if tbl.pending is None:
            if not tbl.cells:
                raise EngineProtocolError(f'table {handle} has no cells')
            tbl.pending = [self._build_table(tbl, region, normalize_options(options))]
        status, bottom, placed = self._fit_flowables(tbl.pending, region)
        self._check_progress(tbl, placed, f'table {handle}')
        tbl.bottom_y = bottom
        return status

    def table_bottom_y(self, handle: int) -> float:
        tbl = self._tables.get(handle)
        if tbl is None or tbl.bottom_y is None:
            raise EngineProtocolError(f'table {handle} has not been fitted')
        return tbl.bottom_y

    def _column_widths(self, tbl: _Table, n_cols: int, total: float) -> List[float]:
        widths: List[Optional[float]] = [None] * n_cols
        for (_, col), cell in sorted(tbl.cells.items()):
            raw = cell.options.get('colwidth')
            if raw and widths[col - 1] is None:
                widths[col - 1] = parse_percent(raw, total)
        fixed = sum(w for w in widths if w is not None)
        free = [i for i, w in enumerate(widths) if w is None]
        share = max(total - fixed, 0) / len(free) if free else 0
        return [share if w is None else w for w in widths]

    def _build_table(self, tbl: _Table, region: Region, options: Dict[str, str]) -> Table:
        n_rows = max(r for r, _ in tbl.cells)
        n_cols = max(c for _, c in tbl.cells)
        col_widths = self._column_widths(tbl, n_cols, region.width)
        row_default = _numbers(options.get('rowheightdefault'))
        row_height = row_default[0] if row_default else None

        data: List[List[Any]] = [['' for _ in range(n_cols)] for _ in range(n_rows)]
        row_heights: List[Optional[float]] = [None] * n_rows
        commands: List[tuple] = [
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
            ('LEFTPADDING', (0, 0), (-1, -1), 0),
            ('RIGHTPADDING', (0, 0), (-1, -1), 0),
            ('TOPPADDING', (0, 0), (-1, -1), 0),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 0),
        ]

        for (row, col), cell in sorted(tbl.cells.items()):
            r, c = row - 1, col - 1
            opts = cell.options
            margin = _numbers(opts.get('margin'))
            pads = {
                'TOPPADDING': opts.get('margintop'),
                'BOTTOMPADDING': opts.get('marginbottom'),
                'LEFTPADDING': opts.get('marginleft'),
                'RIGHTPADDING': opts.get('marginright'),
            }
            pad_values = {}
            for name, raw in pads.items():
                values = _numbers(raw) or margin
                pad_values[name] = values[0] if values else 0.0
                if values:
                    commands.append((name, (c, r), (c, r), values[0]))
            inner_w = col_widths[c] - pad_values['LEFTPADDING'] - pad_values['RIGHTPADDING']

            if 'textflow' in opts:
                tf = self._textflows.get(int(opts['textflow']))
                if tf is None:
                    raise EngineProtocolError(f'unknown textflow handle {opts["textflow"]}')
                tf.pending = self._build_flowables(tf, {})
                data[r][c] = tf.pending
                sub = parse_optlist(opts.get('fittextflow', ''))
                valign = _VALIGN.get(sub.get('verticalalign', 'top').lower(), 'TOP')
                commands.append(('VALIGN', (c, r), (c, r), valign))
            elif 'image' in opts:
                img = self._images.get(int(opts['image']))
                if img is None:
                    raise EngineProtocolError(f'unknown image handle {opts["image"]}')
                sub = parse_optlist(opts.get('fitimage', ''))
                box_h = (
                    (row_height or img.height)
                    - pad_values['TOPPADDING']
                    - pad_values['BOTTOMPADDING']
                )
                sub.setdefault('boxsize', f'{inner_w} {box_h}')
                _, _, w, h = fit_box(img.width, img.height, 0, 0, sub)
                data[r][c] = Image(img.path, width=w, height=h)
                if row_height:
                    row_heights[r] = row_height
                hx, vy = _position_fractions(sub.get('position'))
                align = 'LEFT' if hx < 0.25 else ('RIGHT' if hx > 0.75 else 'CENTER')
                valign = 'BOTTOM' if vy < 0.25 else ('TOP' if vy > 0.75 else 'MIDDLE')
                commands.append(('ALIGN', (c, r), (c, r), align))
                commands.append(('VALIGN', (c, r), (c, r), valign))
            elif cell.text:
                sub = parse_optlist(opts.get('fittextline', ''))
                state = self._apply_inline(_InlineState(), sub)
                data[r][c] = self._paragraph([_Run(cell.text, state)], state, [], r * n_cols + c)

        commands.extend(self._stroke_commands(options.get('stroke', '')))
        return Table(
            data,
            colWidths=col_widths,
            rowHeights=row_heights,
            style=TableStyle(commands),
            hAlign='LEFT',
        )

    def _stroke_commands(self, stroke: str) -> List[tuple]:
        commands: List[tuple] = []
        if not stroke:
            return commands
        groups = []
        i = 0
        while i < len(stroke):
            start = stroke.find('{', i)
            if start < 0:
                break
            depth = 0
            for j in range(start, len(stroke)):
                if stroke[j] == '{':
                    depth += 1
                elif stroke[j] == '}':
                    depth -= 1
                    if depth == 0:
                        groups.append(stroke[start + 1 : j])
                        i = j + 1
                        break
            else:
                break
        if not groups:
            groups = [stroke]
        for group in groups:
            opts = parse_optlist(group)
            width = _numbers(opts.get('linewidth')) or [1.0]
            line = opts.get('line', 'frame').lower()
            if line == 'frame':
                commands.append(('BOX', (0, 0), (-1, -1), width[0], black))
            elif line == 'vertother':
                commands.append(('LINEAFTER', (0, 0), (-2, -1), width[0], black))
            elif line == 'horother':
                commands.append(('LINEBELOW', (0, 0), (-1, -2), width[0], black))
            else:
                self._warn_once(f'Unsupported table stroke line ignored: {line}')
        return commands

    # Resources

    def _resolve(self, path: str, resource: str) -> pathlib.Path:
        resolved = resolve_asset_path(path, self.search_paths)
        if resolved is None:
            raise EngineResourceError(path, 'file not found in search path', resource)
        return resolved

    def load_image(self, path: str) -> int:
        resolved = self._resolve(path, 'image')
        try:
            width, height = ImageReader(str(resolved)).getSize()
        except Exception as e:
            raise EngineResourceError(path, str(e), 'image') from e
        handle = self._new_handle()
        self._images[handle] = _ImageResource(str(resolved), float(width), float(height))
        return handle

    def fit_image(
        self, handle: int, x: float, y: float, options: Optional[Dict[str, Any]] = None
    ) -> None:
        img = self._images.get(handle)
        if img is None:
            raise EngineProtocolError(f'unknown image handle {handle}')
        x0, y0, w, h = fit_box(img.width, img.height, x, y, normalize_options(options))
        self._draw(lambda c: c.drawImage(img.path, x0, y0, width=w, height=h, mask='auto'))

    def load_graphics(self, path: str) -> int:
        resolved = self._resolve(path, 'vector graphic')
        try:
            drawing = svg2rlg(str(resolved))
        except Exception as e:
            raise EngineResourceError(path, str(e), 'vector graphic') from e
        if drawing is None:
            raise EngineResourceError(path, 'not a readable SVG document', 'vector graphic')
        handle = self._new_handle()
        self._graphics[handle] = _GraphicResource(str(resolved), drawing)
        return handle

    def fit_graphics(
        self, handle: int, x: float, y: float, options: Optional[Dict[str, Any]] = None
    ) -> None:
        graphic = self._graphics.get(handle)
        if graphic is None:
            raise EngineProtocolError(f'unknown graphics handle {handle}')
        drawing = graphic.drawing
        nw, nh = float(drawing.width or 0), float(drawing.height or 0)
        if nw <= 0 or nh <= 0:
            self._warn_once(f'Vector graphic without size drawn unscaled: {graphic.path}')
        x0, y0, w, h = fit_box(nw, nh, x, y, normalize_options(options))
        sx = w / nw if nw > 0 else 1.0
        sy = h / nh if nh > 0 else 1.0

        def op(c: canvas.Canvas) -> None:
            c.saveState()
            c.translate(x0, y0)
            c.scale(sx, sy)
            renderPDF.draw(drawing, c, 0, 0)
            c.restoreState()

        self._draw(op)

    def load_font(self, name: str) -> int:
        if name in pdfmetrics.standardFonts:
            rl_name = name
        else:
            path = find_font_file(name, self.search_paths)
            if path is None:
                raise EngineResourceError(name, 'font file not found in search path', 'font')
            try:
                family = read_family_name(path)
                rl_name = f'{family}-{path.stem}'
                pdfmetrics.registerFont(TTFont(rl_name, str(path)))
            except Exception as e:
                raise EngineResourceError(name, str(e), 'font') from e
            pdfmetrics.registerFontFamily(
                rl_name, normal=rl_name, bold=rl_name, italic=rl_name, boldItalic=rl_name
            )
        handle = self._new_handle()
        self._fonts[handle] = rl_name
        return handle

    # Drawing

    def draw_line(
        self,
        start_x: float,
        start_y: float,
        end_x: float,
        end_y: float,
        line_width: float = 1,
        rgb: Sequence[float] = (0.0, 0.0, 0.0),
        dasharray: Optional[Sequence[float]] = None,
    ) -> None:
        red, green, blue = rgb
        dash = list(dasharray) if dasharray else None

        def op(c: canvas.Canvas) -> None:
            c.saveState()
            c.setLineWidth(line_width)
            c.setStrokeColorRGB(red, green, blue)
            c.setFillColorRGB(red, green, blue)
            if dash:
                c.setDash(dash)
            c.line(start_x, start_y, end_x, end_y)
            c.restoreState()

        self._draw(op)

    def place_template(self, path: str, page_number: int = 1) -> None:
        page = self._page()
        resolved = resolve_asset_path(path, self.search_paths)
        if resolved is None:
            raise EngineProtocolError(f'Could not open template "{path}": file not found')
        key = str(resolved)
        reader = self._templates.get(key)
        if reader is None:
            try:
                reader = PdfReader(key)
            except (PyPdfError, OSError) as e:
                raise EngineProtocolError(f'Could not open template "{path}": {e}') from e
            self._templates[key] = reader
        if page_number < 1 or page_number > len(reader.pages):
            raise EngineProtocolError(f'Template "{path}" has no page {page_number}')
        page.stamps.append((len(page.layers), reader.pages[page_number - 1]))
        page.layers.append([])
