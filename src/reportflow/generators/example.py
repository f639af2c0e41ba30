"""Example report: headline, paragraph with pictograms, key/value table, image, long text.

Payload shape::

    {
        "documentInfo": {"subject": ..., "title": ..., "creator": ..., "author": ...},
        "templates": {"templateMain": "/templates/template_example.pdf"},
        "headline": "...",
        "paragraph": "<p>HTML subset</p>",
        "longParagraph": "<p>...</p>",
        "graphics": ["images/a.svg", ...],
        "image": {"heading": "...", "source": "images/photo.jpg"},
        "table": {"tableHeading": "...", "tableContent": {"key": "value", ...}},
        "translations": {"page": "Seite"},
        "fonts": {"regular": "...", "bold": "...", "italic": "..."},   # optional
        "settings": {"PAGINATION_LABEL": "...", ...}                   # optional
    }
"""

from dataclasses import replace
from typing import Any, Mapping

from ..generation.core import ReportGenerator

GRAPHIC_BOX = 45
GRAPHIC_STEP = 55
IMAGE_SIZE = 140


class ExampleReportGenerator(ReportGenerator):
    font_paths = {
        'examplePdf': {
            'regular': 'Helvetica',
            'bold': 'Helvetica-Bold',
            'italic': 'Helvetica-Oblique',
        },
    }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.graphics_position_y = 0.0
        self.description_position_y = 0.0
        self.font_regular = 0
        self.font_bold = 0
        self.font_italic = 0

    def initialize(self, payload: Mapping[str, Any]) -> None:
        super().initialize(payload)
        self.template_main = (self.data.get('templates') or {}).get('templateMain', '')
        self.graphics_position_y = 0.0
        self.description_position_y = 0.0
        self.settings = replace(
            self.settings,
            margin_left=35,
            margin_right=35,
            end_y=60,
            pagination_label=self.translations.get('page', ''),
            pagination_start_y=40,
            page_layout='twopageleft',
        )

    def apply_metadata_and_options(self) -> None:
        super().apply_metadata_and_options()
        fonts = self.font_paths
        if self.data.get('fonts'):
            fonts = {'examplePdf': dict(self.data['fonts'])}
        font_styles = self.load_fonts_initially(fonts)
        self.font_regular = font_styles['examplePdfRegular']
        self.font_bold = font_styles['examplePdfBold']
        self.font_italic = font_styles['examplePdfItalic']
        self.font_pagination = self.font_italic

    def generate_contents(self) -> None:
        self.load_example_graphics()
        self.create_text_paragraph()
        self.create_table()
        self.load_example_image(True)
        self.create_text_paragraph(True)
        self.load_example_image(True)

    def draw_page_base(self) -> None:
        s = self.settings
        self.create_headline(
            self.data.get('headline', ''),
            s.element_start_left,
            815,
            s.element_end_right,
            815 - 20,
            self.font_bold,
            16,
            s.color_white,
        )

    # Content blocks

    def load_example_graphics(self) -> None:
        svg_images = self.data.get('graphics') or []
        if not svg_images:
            return

        image_y = self.position_y - 50
        image_x = self.settings.element_end_right - GRAPHIC_BOX

        for svg in svg_images:
            graphic = self.load_graphic(svg)
            self.fit_graphic(graphic, image_x, image_y, GRAPHIC_BOX, GRAPHIC_BOX)
            image_y -= GRAPHIC_STEP

        self.graphics_position_y = image_y + GRAPHIC_STEP

    def create_text_paragraph(self, is_long_paragraph: bool = False) -> None:
        text = self.data.get('longParagraph' if is_long_paragraph else 'paragraph')
        if not text:
            return

        s = self.settings
        if is_long_paragraph:
            coordinates = self.create_coordinates(
                s.element_start_left, self.position_y, s.element_end_right, s.end_y
            )
        else:
            coordinates = self.create_coordinates(
                s.element_start_left,
                self.position_y,
                s.element_end_right - 100,
                self.position_y - 180,
            )

        options = {
            'font': self.font_regular,
            'fontsize': s.font_size,
            'fillcolor': s.color_black,
            'wordspacing': 0.5,
            'leading': 13,
            'charref': True,
        }
        textflow = self.create_textflow(
            text, self.font_regular, self.font_bold, s.font_size, options
        )
        self.place_textflow(
            textflow,
            coordinates,
            is_long_paragraph,
            'Long Paragraph' if is_long_paragraph else 'Paragraph',
            None,
            20 if is_long_paragraph else 0,
            is_long_paragraph,
        )

        if not is_long_paragraph:
            self.description_position_y = self.engine.textflow_bottom_y(textflow)

    def create_heading(
        self,
        text: str,
        block_name: str,
        padding_bottom: float = 20,
        render_parting_line: bool = True,
    ) -> None:
        if not text:
            return

        s = self.settings
        self.break_if_needed()
        coordinates = self.create_coordinates(
            s.element_start_left, self.position_y, s.element_end_right, self.position_y - 20
        )
        options = {
            'font': self.font_bold,
            'fontsize': 12,
            'fillcolor': 'black',
            'wordspacing': 0.5,
            'leading': 13,
            'charref': True,
        }
        textflow = self.add_textflow(None, text, options)
        self.place_textflow(
            textflow, coordinates, False, f'Heading for {block_name}', calculate_new_height=False
        )

        if render_parting_line:
            self.get_new_position_y(self.position_y, 15)
            self.place_parting_line()

        self.get_new_position_y(self.position_y, padding_bottom)

    def create_table(self) -> None:
        # continue below whichever of paragraph and pictogram column ends lower
        placed = [y for y in (self.description_position_y, self.graphics_position_y) if y]
        if placed:
            self.position_y = min(placed) - 20

        table_data = self.data.get('table') or {}
        table_content = table_data.get('tableContent') or {}
        if not table_content:
            return

        self.create_heading(table_data.get('tableHeading', ''), 'Table', 20, False)

        s = self.settings
        textflow_options = {
            'font': self.font_regular,
            'fontsize': 10,
            'fillcolor': 'black',
            'wordspacing': 0,
            'leading': 13,
        }
        cell_options = (
            'colwidth=50% margintop=4 marginbottom=4 marginleft=4 marginright=4'
            ' fittextflow={verticalalign=top}'
        )

        table = None
        for row, (key, value) in enumerate(table_content.items(), start=1):
            for column, cell_text in enumerate((key, value), start=1):
                table = self.create_table_cell(
                    table,
                    row,
                    column,
                    cell_options,
                    str(cell_text),
                    s.font_size,
                    self.font_regular,
                    self.font_bold,
                    textflow_options,
                )

        coordinates = self.create_coordinates(
            s.element_start_left, self.position_y, s.element_end_right, 310
        )
        table_options = (
            'rowheightdefault=15 '
            'stroke={{line=frame linewidth=1} {line=vertother linewidth=1} '
            '{line=horother linewidth=1}}'
        )
        self.place_table(table, coordinates, table_options, 'Example Table', False, 30)

    def load_example_image(self, place_headline: bool = False) -> None:
        image = self.data.get('image') or {}
        image_path = image.get('source')
        if not image_path:
            return

        # keep heading and picture together
        self.break_if_needed(0, min_bottom_distance=IMAGE_SIZE + 40)
        if place_headline and image.get('heading'):
            self.create_heading(image['heading'], 'Image', 5)

        s = self.settings
        coordinates = self.create_coordinates(
            s.element_start_left,
            self.position_y,
            s.element_end_right,
            self.position_y - IMAGE_SIZE,
        )
        table = self.create_table_cell_with_image(
            None, 1, 1, '', image_path, 'position={top left}'
        )
        self.place_table(
            table,
            coordinates,
            f'rowheightdefault={IMAGE_SIZE}',
            'Product Dimensional Drawing',
            False,
            20,
            True,
        )
