from .errors import (
    ConfigurationError as ConfigurationError,
    EngineProtocolError as EngineProtocolError,
    EngineResourceError as EngineResourceError,
    LayoutOverflowError as LayoutOverflowError,
    ReportflowError as ReportflowError,
)
from .geometry import (
    PageState as PageState,
    PageStatus as PageStatus,
    Region as Region,
    pt_from_mm as pt_from_mm,
)
from .markup import (
    MarkupOptions as MarkupOptions,
    MarkupText as MarkupText,
    normalize_lists as normalize_lists,
    transpile as transpile,
)
from .engine import (
    FitStatus as FitStatus,
    ReportlabEngine as ReportlabEngine,
    TypesettingEngine as TypesettingEngine,
)
from .generation import (
    ContentPlacer as ContentPlacer,
    Document as Document,
    PageFlowController as PageFlowController,
    PaginationFinalizer as PaginationFinalizer,
    ReportGenerator as ReportGenerator,
)
from .settings import (
    DEFAULTS as DEFAULTS,
    LayoutSettings as LayoutSettings,
    settings_from_meta as settings_from_meta,
)
from .validation import (
    validate_payload as validate_payload,
    ValidationIssue as ValidationIssue,
    ValidationResult as ValidationResult,
)
