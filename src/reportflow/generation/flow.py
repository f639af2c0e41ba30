"""Page flow: the vertical cursor and the page state machine.

A page is ACTIVE while it accepts content, SUSPENDED once a newer page was opened
(its cursor is kept), and FINALIZED after the pagination sweep closed it. Only one
page is active at a time; the engine is told about every transition.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional

from ..engine.base import TypesettingEngine
from ..errors import EngineProtocolError
from ..geometry import PageState, PageStatus
from ..settings import LayoutSettings


@dataclass
class Document:
    """Page geometry and the pages created so far."""

    page_width: float = 595
    page_height: float = 842
    rotate: int = 0
    start_y: float = 755
    end_y: float = 100
    min_distance_end_bottom: float = 30
    pages: List[PageState] = field(default_factory=list)
    current_page_no: int = 0

    @classmethod
    def from_settings(cls, settings: LayoutSettings) -> 'Document':
        return cls(
            page_width=settings.page_width,
            page_height=settings.page_height,
            rotate=90 if settings.rotate_page else 0,
            start_y=settings.start_y,
            end_y=settings.end_y,
            min_distance_end_bottom=settings.min_distance_end_bottom,
        )

    @property
    def total_pages(self) -> int:
        return len(self.pages)

    def page(self, page_number: int) -> PageState:
        if page_number < 1 or page_number > len(self.pages):
            raise EngineProtocolError(f'page {page_number} does not exist')
        return self.pages[page_number - 1]


class PageFlowController:
    """Tracks the drawing position and opens, suspends, resumes and closes pages.

    ``on_page_created`` runs right after a page was begun (with its number); the
    report generator uses it to stamp the template eagerly when deferred stamping
    is off.
    """

    def __init__(
        self,
        engine: TypesettingEngine,
        document: Document,
        on_page_created: Optional[Callable[[int], None]] = None,
    ):
        self.engine = engine
        self.document = document
        self.on_page_created = on_page_created
        self._active: Optional[PageState] = None

    @property
    def active_page(self) -> Optional[PageState]:
        return self._active

    @property
    def cursor_y(self) -> float:
        if self._active is None:
            raise EngineProtocolError('no active page')
        return self._active.cursor_y

    @cursor_y.setter
    def cursor_y(self, value: float) -> None:
        if self._active is None:
            raise EngineProtocolError('no active page')
        self._active.cursor_y = value

    def _suspend_active(self) -> None:
        if self._active is None:
            return
        self.engine.suspend_page()
        self._active.status = PageStatus.SUSPENDED
        self._active = None

    def _open_page(self) -> int:
        doc = self.document
        self.engine.begin_page(doc.page_width, doc.page_height, doc.rotate)
        state = PageState(page_number=len(doc.pages) + 1, cursor_y=doc.start_y)
        doc.pages.append(state)
        doc.current_page_no = state.page_number
        self._active = state
        if self.on_page_created is not None:
            self.on_page_created(state.page_number)
        return state.page_number

    def begin_first_page(self) -> int:
        if self.document.pages:
            raise EngineProtocolError('the first page was already created')
        return self._open_page()

    def new_page(self) -> int:
        """Suspend the active page and open the next one; the cursor goes to the top."""
        self._suspend_active()
        return self._open_page()

    def resume_existing_page(self, page_number: int, start_y: float) -> PageState:
        """Re-activate an earlier page (pagination sweep only) with the cursor at ``start_y``."""
        page = self.document.page(page_number)
        if page.status is PageStatus.FINALIZED:
            raise EngineProtocolError(f'page {page_number} is already finalized')
        # The still-active last page is drawn on directly, without a suspend/resume pair
        if page is not self._active:
            self._suspend_active()
            self.engine.resume_page(page_number)
        page.status = PageStatus.ACTIVE
        page.cursor_y = start_y
        self._active = page
        self.document.current_page_no = page_number
        return page

    def break_if_needed(
        self,
        top_margin: float = 0,
        min_bottom_distance: Optional[float] = None,
        end_bottom_y: Optional[float] = None,
    ) -> bool:
        """Soft page break before a new block.

        Opens a new page when fewer than ``min_bottom_distance`` points are left above
        ``end_bottom_y`` (defaults: the document's values); otherwise only consumes
        ``top_margin``. Returns True when a page was created.
        """
        if min_bottom_distance is None:
            min_bottom_distance = self.document.min_distance_end_bottom
        if end_bottom_y is None:
            end_bottom_y = self.document.end_y
        if self.cursor_y < end_bottom_y + min_bottom_distance:
            self.new_page()
            return True
        self.consume(top_margin)
        return False

    def advance(self, bottom_y: float, padding: float = 0) -> None:
        """Move the cursor below placed content ending at ``bottom_y``."""
        self.cursor_y = bottom_y - padding

    def consume(self, amount: float) -> None:
        self.cursor_y = self.cursor_y - amount

    def finalize_page(self) -> None:
        if self._active is None:
            raise EngineProtocolError('no active page to finalize')
        self.engine.end_page()
        self._active.status = PageStatus.FINALIZED
        self._active = None
