"""Concrete report generators."""

from .example import ExampleReportGenerator

__all__ = ['ExampleReportGenerator']
