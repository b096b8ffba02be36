"""Shared utilities for XML row extraction.

This module provides configuration objects, the exception hierarchy, metrics
and logging helpers used across all components.
"""

from .config import (
    ExtractorConfig,
    StreamingConfig,
)
from .errors import (
    AmbiguousColumnMappingError,
    ConfigurationError,
    MalformedXmlError,
    StructuralError,
    XmlRowExtractorError,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)
from .result import ExtractionMetrics

__all__ = [
    "AmbiguousColumnMappingError",
    "ConfigurationError",
    "CorrelationLogger",
    "ExtractionMetrics",
    "ExtractorConfig",
    "MalformedXmlError",
    "StreamingConfig",
    "StructuralError",
    "XmlRowExtractorError",
    "get_logger",
]
