"""Generation package: page flow, placement, pagination and the report base class.

- flow: Document and the PageFlowController state machine
- placer: ContentPlacer with overflow continuation
- pagination: PaginationFinalizer ("n/total" footers, deferred template stamp)
- core: ReportGenerator lifecycle and drawing helpers
"""

from .core import ReportGenerator
from .flow import Document, PageFlowController
from .pagination import PaginationFinalizer
from .placer import TABLE, TEXTFLOW, ContentPlacer

__all__ = [
    'ReportGenerator',
    'Document',
    'PageFlowController',
    'PaginationFinalizer',
    'ContentPlacer',
    'TABLE',
    'TEXTFLOW',
]
