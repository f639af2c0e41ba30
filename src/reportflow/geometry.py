"""Geometry value types shared by the page-flow machinery."""

from dataclasses import dataclass, replace
from enum import Enum

POINTS_PER_INCH = 72
MM_PER_INCH = 25.4


@dataclass(frozen=True)
class Region:
    """A fitbox in page coordinates (points, origin bottom-left).

    ``start_y`` is normally the upper edge and ``end_y`` the lower edge, but the
    corners may be given in any order; the helpers below normalize them.
    """

    start_x: float
    start_y: float
    end_x: float
    end_y: float

    @property
    def left(self) -> float:
        return min(self.start_x, self.end_x)

    @property
    def right(self) -> float:
        return max(self.start_x, self.end_x)

    @property
    def top(self) -> float:
        return max(self.start_y, self.end_y)

    @property
    def bottom(self) -> float:
        return min(self.start_y, self.end_y)

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.top - self.bottom

    def with_y(self, start_y: float, end_y: float) -> 'Region':
        """Same horizontal span, new vertical span (used for continuation pages)."""
        return replace(self, start_y=start_y, end_y=end_y)


class PageStatus(Enum):
    ACTIVE = 'active'
    SUSPENDED = 'suspended'
    FINALIZED = 'finalized'


@dataclass
class PageState:
    page_number: int
    cursor_y: float
    status: PageStatus = PageStatus.ACTIVE


def pt_from_mm(mm: float, precision: int = 0) -> float:
    """Convert millimetres to PostScript points, rounded to ``precision`` digits."""
    pt = (mm * POINTS_PER_INCH) / MM_PER_INCH
    return round(pt, precision)
