"""Core generation module - base class for payload-driven reports.

``ReportGenerator`` owns the render lifecycle (configuration checks, metadata,
first page, content, pagination sweep, document bytes) and carries the helpers
concrete reports use to put headlines, text, tables, images, graphics and lines
on the page. Subclasses implement ``generate_contents``.
"""

import pathlib
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple, Union

from ..engine.base import TypesettingEngine
from ..engine.reportlab_engine import ReportlabEngine, normalize_options
from ..errors import ConfigurationError
from ..geometry import Region
from ..markup import MarkupOptions, transpile
from ..settings import LayoutSettings, settings_from_meta
from ..utils.colors import convert_hex_to_rgb
from ..utils.file_ops import resolve_asset_path, search_paths_from_env
from ..utils.svg import get_svg_dimensions
from .flow import Document, PageFlowController
from .pagination import PaginationFinalizer
from .placer import TABLE, TEXTFLOW, ContentPlacer

Options = Union[str, Dict[str, Any], None]


def _merge(*parts: Options) -> Dict[str, str]:
    merged: Dict[str, str] = {}
    for part in parts:
        merged.update(normalize_options(part))
    return merged


class ReportGenerator(ABC):
    """Base class for reports rendered from a payload mapping.

    Args:
        engine_factory: Callable returning a fresh TypesettingEngine per render.
        search_paths: Asset directories (fonts, images, templates). Subclasses or
            callers must provide at least one before rendering.
    """

    unicode_font_name = 'Helvetica'

    def __init__(
        self,
        engine_factory: Callable[[], TypesettingEngine] = ReportlabEngine,
        search_paths: Optional[Sequence[str]] = None,
    ):
        self.engine_factory = engine_factory
        self.default_search_paths = [str(p) for p in (search_paths or [])]
        self.engine: Optional[TypesettingEngine] = None
        self.data: Dict[str, Any] = {}
        self.translations: Dict[str, str] = {}
        self.search_paths: list = []
        self.template_main = ''
        self.settings = LayoutSettings()
        self.document: Optional[Document] = None
        self.flow: Optional[PageFlowController] = None
        self.placer: Optional[ContentPlacer] = None
        self.font_unicode: Optional[int] = None
        self.font_pagination: Optional[int] = None

    @abstractmethod
    def generate_contents(self) -> None:
        """Stream the report body onto the pages."""

    # Lifecycle

    def get_pdf_buffer(self, payload: Mapping[str, Any]) -> bytes:
        """Render ``payload`` and return the document bytes.

        Raises:
            ConfigurationError: no asset search path or no main template, before any
                page is opened.
            ReportflowError: any other fatal layout or engine failure. No partial
                output is returned.
        """
        self.initialize(payload)

        if not self.search_paths:
            raise ConfigurationError('No custom asset search path defined')
        if not self.template_main:
            raise ConfigurationError('No template defined')

        self.settings = settings_from_meta(self.data.get('settings'), self.settings)
        self.apply_metadata_and_options()
        return self.create_pdf_buffer()

    def initialize(self, payload: Mapping[str, Any]) -> None:
        self.engine = self.engine_factory()
        self.data = dict(payload or {})
        self.translations = dict(self.data.get('translations') or {})
        self.search_paths = list(self.default_search_paths) or search_paths_from_env()
        self.template_main = ''
        self.settings = LayoutSettings()
        self.font_unicode = self.engine.load_font(self.unicode_font_name)
        self.font_pagination = self.font_unicode

    def apply_metadata_and_options(self) -> None:
        self.engine.set_search_path(self.search_paths)
        info = self.data.get('documentInfo') or {}
        self.set_meta_data(
            info.get('subject', ''),
            info.get('title', ''),
            info.get('creator', ''),
            info.get('author', ''),
        )

    def set_meta_data(self, subject: str, title: str, creator: str, author: str = '') -> None:
        for key, value in (
            ('Subject', subject),
            ('Title', title),
            ('Creator', creator),
            ('Author', author),
        ):
            if value:
                self.engine.set_info(key, value)

    def document_options(self) -> Dict[str, Any]:
        if self.settings.page_layout:
            return {'pagelayout': self.settings.page_layout}
        return {}

    def create_pdf_buffer(self) -> bytes:
        self.engine.begin_document(self.document_options())
        self.document = Document.from_settings(self.settings)
        self.flow = PageFlowController(self.engine, self.document, self._on_page_created)
        self.placer = ContentPlacer(self.engine, self.flow)
        self.flow.begin_first_page()
        self.generate_contents()
        return self.end_document()

    def end_document(self) -> bytes:
        self.generate_pagination()
        return self.engine.end_document()

    def generate_pagination(self) -> int:
        finalizer = PaginationFinalizer(
            self.flow,
            self.placer,
            self.settings,
            stamp_template=self.stamp_template,
            footer_font=self.font_pagination,
        )
        return finalizer.run()

    def _on_page_created(self, page_number: int) -> None:
        if not self.settings.render_template_after_content:
            self.stamp_template()

    def stamp_template(self) -> None:
        self.place_template_on_page(self.template_main, 1)
        self.draw_page_base()

    def draw_page_base(self) -> None:
        """Hook for static page furniture drawn after each template stamp."""

    # Position

    @property
    def position_y(self) -> float:
        return self.flow.cursor_y

    @position_y.setter
    def position_y(self, value: float) -> None:
        self.flow.cursor_y = value

    def get_new_position_y(self, current_position_y: float, padding_bottom: float) -> None:
        self.flow.advance(current_position_y, padding_bottom)

    def break_if_needed(
        self,
        section_margin_top: float = 0,
        end_bottom_y: Optional[float] = None,
        min_bottom_distance: Optional[float] = None,
    ) -> bool:
        return self.flow.break_if_needed(section_margin_top, min_bottom_distance, end_bottom_y)

    def generate_new_page(self) -> int:
        return self.flow.new_page()

    @staticmethod
    def create_coordinates(start_x: float, start_y: float, end_x: float, end_y: float) -> Region:
        return Region(start_x, start_y, end_x, end_y)

    # Fonts and templates

    def load_fonts_initially(self, fonts: Mapping[str, Mapping[str, str]]) -> Dict[str, int]:
        """Load every font of ``{'family': {'regular': 'File-Regular', ...}}``.

        Returns:
            Handles keyed ``familyStyle`` (``examplePdfBold``).
        """
        font_styles: Dict[str, int] = {}
        for font_name, config in fonts.items():
            for style, font_path in config.items():
                key = font_name + style[:1].upper() + style[1:]
                font_styles[key] = self.engine.load_font(font_path)
        return font_styles

    def place_template_on_page(self, filename: str, page_number: int = 1) -> None:
        self.engine.place_template(filename, page_number)

    # Text

    def replace_html(
        self,
        text: Optional[str],
        font_regular: int,
        font_bold: int,
        font_size: Optional[float] = None,
    ) -> str:
        s = self.settings
        return transpile(
            text,
            font_regular,
            font_bold,
            s.font_size if font_size is None else font_size,
            font_unicode=self.font_unicode,
            options=MarkupOptions(
                list_bullet=s.list_bullet,
                list_indent=s.list_indent,
                mark_color=s.color_text_mark,
                small_font_size=s.font_size_smaller,
            ),
        )

    def create_textflow(
        self,
        text: str,
        font_regular: int,
        font_bold: int,
        font_size: float,
        options: Options,
        should_replace_html: bool = True,
    ) -> int:
        if should_replace_html:
            text = self.replace_html(text, font_regular, font_bold, font_size)
        return self.engine.create_textflow(text, _merge(options))

    def add_textflow(self, textflow: Optional[int], text: str, options: Options) -> int:
        return self.engine.add_textflow(textflow, text, _merge(options))

    def place_textflow(
        self,
        textflow: int,
        coordinates: Region,
        should_continue_on_next_page: bool,
        textflow_name: str,
        options: Options = None,
        padding_bottom: float = 0,
        calculate_new_height: bool = True,
        text: Optional[str] = None,
    ) -> int:
        return self.placer.place(
            textflow,
            coordinates,
            should_continue_on_next_page,
            textflow_name,
            kind=TEXTFLOW,
            fit_options=_merge(options) or None,
            padding_bottom=padding_bottom,
            advance_cursor=calculate_new_height,
            text=text,
        )

    def create_headline(
        self,
        headline: str,
        start_x: float,
        start_y: float,
        end_x: float,
        end_y: float,
        font: int,
        font_size: float,
        text_color: str,
        extra_options: Options = None,
    ) -> None:
        if not headline:
            return
        options = _merge(
            {
                'font': font,
                'fontsize': font_size,
                'fillcolor': text_color,
                'wordspacing': 0,
                'charref': True,
            },
            extra_options,
        )
        textflow = self.add_textflow(None, headline, options)
        self.place_textflow(
            textflow,
            self.create_coordinates(start_x, start_y, end_x, end_y),
            False,
            'PDF Headline',
            calculate_new_height=False,
        )

    # Tables

    def create_table_cell(
        self,
        table: Optional[int],
        row: int,
        column: int,
        cell_options: Options,
        cell_text: str,
        font_size: float,
        font_regular: int,
        font_bold: int,
        textflow_options: Options,
        should_replace_html: bool = True,
    ) -> int:
        textflow = self.create_textflow(
            cell_text, font_regular, font_bold, font_size, textflow_options, should_replace_html
        )
        options = _merge(cell_options, {'textflow': textflow})
        return self.engine.add_table_cell(table, column, row, '', options)

    def create_table_cell_with_textline(
        self,
        table: Optional[int],
        row: int,
        column: int,
        cell_text: str,
        cell_options: Options,
        textline_options: Options,
    ) -> int:
        options = _merge(cell_options, {'fittextline': _merge(textline_options)})
        return self.engine.add_table_cell(table, column, row, cell_text, options)

    def create_table_cell_with_image(
        self,
        table: Optional[int],
        row: int,
        column: int,
        cell_options: Options,
        image_path: str,
        image_options: Options = None,
        image_fit_method: str = 'meet',
    ) -> int:
        image = self.load_image(image_path)
        fit = _merge({'fitmethod': image_fit_method}, image_options)
        options = _merge(cell_options, {'image': image, 'fitimage': fit})
        return self.engine.add_table_cell(table, column, row, '', options)

    def create_table_cell_without_content(
        self, table: Optional[int], row: int, column: int, options: Options
    ) -> int:
        return self.engine.add_table_cell(table, column, row, '', _merge(options))

    def place_table(
        self,
        table: int,
        coordinates: Region,
        table_options: Options,
        table_name: str,
        should_continue_on_next_page: bool,
        padding_bottom: float = 0,
        calculate_new_position_y: bool = True,
    ) -> int:
        return self.placer.place(
            table,
            coordinates,
            should_continue_on_next_page,
            table_name,
            kind=TABLE,
            fit_options=_merge(table_options) or None,
            padding_bottom=padding_bottom,
            advance_cursor=calculate_new_position_y,
        )

    # Images and graphics

    def load_image(self, image_path: str) -> int:
        return self.engine.load_image(image_path)

    def fit_image(
        self,
        image: int,
        x: float,
        y: float,
        box_width: Union[float, str] = 'auto',
        box_height: Union[float, str] = 'auto',
        options: Options = None,
        position: str = 'center',
        fit_method: str = 'auto',
    ) -> None:
        fit = _merge({'fitmethod': fit_method}, options)
        if box_width != 'auto' and box_height != 'auto':
            fit['boxsize'] = f'{box_width} {box_height}'
        if position:
            fit['position'] = position
        self.engine.fit_image(image, x, y, fit)

    def load_graphic(self, graphics_path: str) -> int:
        return self.engine.load_graphics(graphics_path)

    def fit_graphic(
        self,
        graphic: int,
        x: float,
        y: float,
        box_width: Union[float, str] = 'auto',
        box_height: Union[float, str] = 'auto',
        options: Options = None,
        position: str = 'center',
        fit_method: str = 'auto',
    ) -> None:
        fit = _merge({'fitmethod': fit_method}, options)
        if box_width not in (0, 'auto') and box_height not in (0, 'auto'):
            fit['boxsize'] = f'{box_width} {box_height}'
        if position:
            fit['position'] = position
        self.engine.fit_graphics(graphic, x, y, fit)

    def get_svg_dimensions(self, file_path: str) -> Tuple[float, float]:
        """SVG size looked up on the search path; ``(0, 0)`` when it cannot be determined."""
        resolved = resolve_asset_path(file_path, self.search_paths)
        if resolved is None:
            resolved = pathlib.Path(self.search_paths[0] if self.search_paths else '.') / file_path
        return get_svg_dimensions(resolved)

    # Lines

    def place_line(
        self,
        start_x: float,
        start_y: float,
        end_x: float,
        end_y: float,
        line_width: float = 1,
        color: Optional[str] = None,
        dasharray: Optional[Sequence[float]] = None,
    ) -> None:
        rgb = convert_hex_to_rgb(color or self.settings.color_black)
        self.engine.draw_line(start_x, start_y, end_x, end_y, line_width, rgb, dasharray)

    def place_dashed_line(
        self,
        start_x: float,
        start_y: float,
        end_x: float,
        end_y: float,
        dasharray: str = '1 1',
        line_width: float = 1,
        color: Optional[str] = None,
    ) -> None:
        dashes = [float(v) for v in dasharray.split()]
        self.place_line(start_x, start_y, end_x, end_y, line_width, color, dashes)

    def place_parting_line(self) -> None:
        """Full-width rule with 5pt of space above and below."""
        self.flow.consume(5)
        y = self.position_y
        self.place_line(self.settings.element_start_left, y, self.settings.element_end_right, y)
        self.flow.consume(5)
