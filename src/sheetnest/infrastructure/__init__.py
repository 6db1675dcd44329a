"""Infrastructure layer - formatters and exporters."""

from .formatters import (
    AnalysisFormatter,
    JsonExporter,
    PipelineFormatter,
    QuoteFormatter,
    format_failure,
)

__all__ = [
    "AnalysisFormatter",
    "JsonExporter",
    "PipelineFormatter",
    "QuoteFormatter",
    "format_failure",
]
