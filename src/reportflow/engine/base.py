"""Contract of the typesetting engine the layout core drives.

The core decides what markup and which geometry to hand over and when to open a
new page; an engine draws glyphs and shapes and assembles the document bytes.
Handles returned by ``create_*``/``load_*`` are opaque integers.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Optional, Sequence

from ..geometry import Region


class FitStatus(Enum):
    """Outcome of one fit attempt. Values are the engine sentinels."""

    COMPLETE = '_stop'
    OVERFLOWED = '_boxfull'


class TypesettingEngine(ABC):
    # Document lifecycle
    @abstractmethod
    def set_search_path(self, paths: Sequence[str]) -> None: ...

    @abstractmethod
    def set_info(self, key: str, value: str) -> None: ...

    @abstractmethod
    def begin_document(self, options: Optional[Dict[str, Any]] = None) -> None: ...

    @abstractmethod
    def end_document(self) -> bytes: ...

    # Pages
    @abstractmethod
    def begin_page(self, width: float, height: float, rotate: int = 0) -> None: ...

    @abstractmethod
    def end_page(self) -> None: ...

    @abstractmethod
    def suspend_page(self) -> None: ...

    @abstractmethod
    def resume_page(self, page_number: int) -> None: ...

    # Text
    @abstractmethod
    def create_textflow(self, text: str, options: Dict[str, Any]) -> int: ...

    @abstractmethod
    def add_textflow(self, handle: Optional[int], text: str, options: Dict[str, Any]) -> int: ...

    @abstractmethod
    def fit_textflow(
        self, handle: int, region: Region, options: Optional[Dict[str, Any]] = None
    ) -> FitStatus: ...

    @abstractmethod
    def textflow_bottom_y(self, handle: int) -> float: ...

    # Tables
    @abstractmethod
    def add_table_cell(
        self,
        table: Optional[int],
        column: int,
        row: int,
        text: str = '',
        options: Optional[Dict[str, Any]] = None,
    ) -> int: ...

    @abstractmethod
    def fit_table(
        self, handle: int, region: Region, options: Optional[Dict[str, Any]] = None
    ) -> FitStatus: ...

    @abstractmethod
    def table_bottom_y(self, handle: int) -> float: ...

    # Resources
    @abstractmethod
    def load_image(self, path: str) -> int: ...

    @abstractmethod
    def fit_image(
        self, handle: int, x: float, y: float, options: Optional[Dict[str, Any]] = None
    ) -> None: ...

    @abstractmethod
    def load_graphics(self, path: str) -> int: ...

    @abstractmethod
    def fit_graphics(
        self, handle: int, x: float, y: float, options: Optional[Dict[str, Any]] = None
    ) -> None: ...

    @abstractmethod
    def load_font(self, name: str) -> int: ...

    # Drawing
    @abstractmethod
    def draw_line(
        self,
        start_x: float,
        start_y: float,
        end_x: float,
        end_y: float,
        line_width: float = 1,
        rgb: Sequence[float] = (0.0, 0.0, 0.0),
        dasharray: Optional[Sequence[float]] = None,
    ) -> None: ...

    @abstractmethod
    def place_template(self, path: str, page_number: int = 1) -> None:
        """Stamp page ``page_number`` of the PDF at ``path`` onto the active page."""
