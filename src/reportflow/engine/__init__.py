"""Typesetting engines the layout core can drive."""

from .base import FitStatus, TypesettingEngine
from .optlist import parse_optlist, parse_percent, split_inline
from .reportlab_engine import ReportlabEngine, fit_box, normalize_options

__all__ = [
    'FitStatus',
    'TypesettingEngine',
    'ReportlabEngine',
    'fit_box',
    'normalize_options',
    'parse_optlist',
    'parse_percent',
    'split_inline',
]
