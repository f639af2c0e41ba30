"""Second pass over all pages: deferred template stamp and "n/total" footers."""

import html
from typing import Any, Callable, Dict, Optional

from ..geometry import Region
from ..settings import LayoutSettings
from .flow import PageFlowController
from .placer import ContentPlacer


class PaginationFinalizer:
    """Visits pages 1..N once each, in order, and finalizes them.

    Must run after all content was streamed, since N is only known then. A footer
    that does not fit its box is a configuration error and raises.
    """

    def __init__(
        self,
        flow: PageFlowController,
        placer: ContentPlacer,
        settings: LayoutSettings,
        stamp_template: Optional[Callable[[], None]] = None,
        footer_font: Optional[int] = None,
    ):
        self.flow = flow
        self.placer = placer
        self.settings = settings
        self.stamp_template = stamp_template
        self.footer_font = footer_font

    @property
    def region(self) -> Region:
        s = self.settings
        return Region(
            s.pagination_start_x, s.pagination_start_y, s.pagination_end_x, s.pagination_end_y
        )

    def footer_text(self, page_number: int, total: int) -> str:
        text = f'{page_number}/{total}'
        if self.settings.pagination_label:
            text = f'{html.escape(self.settings.pagination_label, quote=False)}: {text}'
        return text

    def footer_options(self) -> Dict[str, Any]:
        s = self.settings
        options: Dict[str, Any] = {
            'fontsize': s.pagination_font_size,
            'fillcolor': s.pagination_text_color,
            'wordspacing': 0.5,
            'charref': True,
            'alignment': s.pagination_alignment,
        }
        if self.footer_font is not None:
            options = {'font': self.footer_font, **options}
        return options

    def run(self) -> int:
        """Stamp and number every page; returns the total page count."""
        total = self.flow.document.total_pages
        engine = self.flow.engine
        for page_number in range(1, total + 1):
            self.flow.resume_existing_page(page_number, self.flow.document.start_y)

            if self.settings.render_template_after_content and self.stamp_template is not None:
                self.stamp_template()

            if self.settings.has_pagination:
                text = self.footer_text(page_number, total)
                handle = engine.add_textflow(None, text, self.footer_options())
                self.placer.place(
                    handle,
                    self.region,
                    False,
                    f'PDF Pagination for Page{page_number}',
                    advance_cursor=False,
                )

            self.flow.finalize_page()
        return total
