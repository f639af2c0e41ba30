"""Recording typesetting engine for tests that must not depend on a PDF backend."""

import os
import sys
from typing import Any, Dict, List, Optional, Tuple

PROJECT_ROOT = os.path.join(os.path.dirname(__file__), '..')
sys.path.insert(0, os.path.join(PROJECT_ROOT, 'src'))

from reportflow.engine.base import FitStatus, TypesettingEngine  # noqa: E402
from reportflow.errors import EngineProtocolError  # noqa: E402


class StubEngine(TypesettingEngine):
    """Keeps a call log and answers fits from a script.

    overflow_times: every textflow/table reports Overflowed this many times, then Complete.
    overflow_match: when set, only textflows whose text contains it overflow.
    always_overflow: every fit reports Overflowed.
    bottom_y: value reported as the bottom of placed content.
    """

    def __init__(
        self,
        overflow_times: int = 0,
        always_overflow: bool = False,
        bottom_y=500.0,
        overflow_match: Optional[str] = None,
    ):
        self.overflow_times = overflow_times
        self.overflow_match = overflow_match
        self.always_overflow = always_overflow
        self.bottom_y = bottom_y
        self.calls: List[Tuple[str, tuple]] = []
        self.fit_regions: List[Any] = []
        self.fit_options: List[Any] = []
        self.textflows: Dict[int, str] = {}
        self.textflow_options: Dict[int, Any] = {}
        self.textflow_pages: Dict[int, int] = {}
        self.remaining: Dict[int, int] = {}
        self.info: Dict[str, str] = {}
        self.search_paths: List[str] = []
        self.pages = 0
        self.active: Optional[int] = None
        self.finished: List[int] = []
        self.templates: List[Tuple[int, str]] = []
        self.fonts: Dict[int, str] = {}
        self._next = 1

    def _log(self, name, *args):
        self.calls.append((name, args))

    def _handle(self) -> int:
        h = self._next
        self._next += 1
        return h

    def _require_page(self):
        if self.active is None:
            raise EngineProtocolError('no active page')

    def calls_named(self, name):
        return [args for n, args in self.calls if n == name]

    # Document lifecycle
    def set_search_path(self, paths):
        self.search_paths = list(paths)

    def set_info(self, key, value):
        self.info[key] = value

    def begin_document(self, options=None):
        self._log('begin_document', options)

    def end_document(self) -> bytes:
        self._log('end_document')
        if self.active is not None:
            raise EngineProtocolError('page still open')
        return b'%PDF-stub'

    # Pages
    def begin_page(self, width, height, rotate=0):
        if self.active is not None:
            raise EngineProtocolError('begin_page while a page is active')
        self.pages += 1
        self.active = self.pages
        self._log('begin_page', width, height, rotate)

    def end_page(self):
        self._require_page()
        self._log('end_page', self.active)
        self.finished.append(self.active)
        self.active = None

    def suspend_page(self):
        self._require_page()
        self._log('suspend_page', self.active)
        self.active = None

    def resume_page(self, page_number):
        if self.active is not None:
            raise EngineProtocolError('resume while a page is active')
        if page_number in self.finished:
            raise EngineProtocolError('page already finished')
        self._log('resume_page', page_number)
        self.active = page_number

    # Text
    def create_textflow(self, text, options):
        return self.add_textflow(None, text, options)

    def add_textflow(self, handle, text, options):
        if not handle:
            handle = self._handle()
            self.textflows[handle] = ''
            self.textflow_options[handle] = options
            if self.overflow_match is None or self.overflow_match in text:
                self.remaining[handle] = self.overflow_times
        self.textflows[handle] += text
        return handle

    def _fit(self, handle, region, options):
        self._require_page()
        self.fit_regions.append(region)
        self.fit_options.append(options)
        self.textflow_pages[handle] = self.active
        if self.always_overflow:
            return FitStatus.OVERFLOWED
        if self.remaining.get(handle, 0) > 0:
            self.remaining[handle] -= 1
            return FitStatus.OVERFLOWED
        return FitStatus.COMPLETE

    def fit_textflow(self, handle, region, options=None):
        self._log('fit_textflow', handle, region, options)
        return self._fit(handle, region, options)

    def textflow_bottom_y(self, handle):
        return self.bottom_y

    # Tables
    def add_table_cell(self, table, column, row, text='', options=None):
        if not table:
            table = self._handle()
            if self.overflow_match is None:
                self.remaining[table] = self.overflow_times
        self._log('add_table_cell', table, column, row, text, options)
        return table

    def fit_table(self, handle, region, options=None):
        self._log('fit_table', handle, region, options)
        return self._fit(handle, region, options)

    def table_bottom_y(self, handle):
        return self.bottom_y

    # Resources
    def load_image(self, path):
        self._log('load_image', path)
        return self._handle()

    def fit_image(self, handle, x, y, options=None):
        self._require_page()
        self._log('fit_image', handle, x, y, options)

    def load_graphics(self, path):
        self._log('load_graphics', path)
        return self._handle()

    def fit_graphics(self, handle, x, y, options=None):
        self._require_page()
        self._log('fit_graphics', handle, x, y, options)

    def load_font(self, name):
        h = self._handle()
        self.fonts[h] = name
        return h

    # Drawing
    def draw_line(
        self, start_x, start_y, end_x, end_y, line_width=1, rgb=(0, 0, 0), dasharray=None
    ):
        self._require_page()
        self._log('draw_line', start_x, start_y, end_x, end_y, line_width, tuple(rgb), dasharray)

    def place_template(self, path, page_number=1):
        self._require_page()
        self._log('place_template', path, page_number)
        self.templates.append((self.active, path))
