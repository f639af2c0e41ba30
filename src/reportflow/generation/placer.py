"""Content placement with overflow continuation."""

from typing import Any, Dict, Optional

from ..engine.base import FitStatus, TypesettingEngine
from ..errors import LayoutOverflowError
from ..geometry import Region
from .flow import PageFlowController

TEXTFLOW = 'Textflow'
TABLE = 'Table'


class ContentPlacer:
    """Fits textflows and tables into regions, spilling onto new pages on request."""

    def __init__(self, engine: TypesettingEngine, flow: PageFlowController):
        self.engine = engine
        self.flow = flow

    def _fit(self, kind: str, handle: int, region: Region, options: Optional[Dict[str, Any]]):
        if kind == TABLE:
            return self.engine.fit_table(handle, region, options)
        return self.engine.fit_textflow(handle, region, options)

    def _bottom_y(self, kind: str, handle: int) -> float:
        if kind == TABLE:
            return self.engine.table_bottom_y(handle)
        return self.engine.textflow_bottom_y(handle)

    def place(
        self,
        handle: int,
        region: Region,
        allow_continuation: bool,
        label: str,
        *,
        kind: str = TEXTFLOW,
        fit_options: Optional[Dict[str, Any]] = None,
        padding_bottom: float = 0,
        advance_cursor: bool = True,
        text: Optional[str] = None,
    ) -> int:
        """Fit ``handle`` into ``region``.

        With ``allow_continuation`` an overflow opens a new page and the same handle
        is fitted again into the page body (cursor down to the document's end_y),
        until the engine reports the content complete. Without it an overflow raises
        LayoutOverflowError carrying ``label`` and, for text, ``text``.

        Textflow retries are fitted without options; table retries reuse
        ``fit_options``.

        Returns:
            The number of fit attempts made.
        """
        status = self._fit(kind, handle, region, fit_options)
        attempts = 1

        if allow_continuation:
            while status is not FitStatus.COMPLETE:
                self.flow.new_page()
                continuation = region.with_y(self.flow.cursor_y, self.flow.document.end_y)
                retry_options = fit_options if kind == TABLE else None
                status = self._fit(kind, handle, continuation, retry_options)
                attempts += 1
        elif status is FitStatus.OVERFLOWED:
            raise LayoutOverflowError(label, text if kind == TEXTFLOW else None, kind)

        if advance_cursor:
            self.flow.advance(self._bottom_y(kind, handle), padding_bottom)
        return attempts
