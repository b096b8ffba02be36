"""XML Row Extractor.

Converts XML byte streams into flat, schema-shaped rows in a single forward
pass, and writes rows back out as XML fragments.

Progressive API Disclosure:
- Level 1: Simple functions - extract_rows(), write_rows()
- Level 2: Configured components - XmlExtractor, XmlOutputter
- Level 3: DOM/XPath extraction - XmlDomExtractor, XmlApplier, find_nodes(), evaluate()
"""

__version__ = "0.1.0"
__author__ = "XML Row Extractor Team"

# Level 1: Simple functions
from .api import extract_rows, rows_to_dataframe, write_rows

# Level 3: DOM/XPath extraction
from .dom import XmlApplier, XmlDomExtractor, evaluate, evaluate_many, find_nodes, find_nodes_many

# Level 2: Configured components
from .extraction import ColumnPathTable, XmlExtractor
from .output import XmlOutputter

# Rows and schemas
from .rows import ColumnSpec, Row, RowSchema, UpdatableRow

# Configuration and errors
from .shared import (
    AmbiguousColumnMappingError,
    ConfigurationError,
    ExtractionMetrics,
    ExtractorConfig,
    MalformedXmlError,
    StreamingConfig,
    StructuralError,
    XmlRowExtractorError,
)

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple functions
    "extract_rows",
    "rows_to_dataframe",
    "write_rows",

    # Level 2: Configured components
    "ColumnPathTable",
    "XmlExtractor",
    "XmlOutputter",

    # Level 3: DOM/XPath extraction
    "XmlApplier",
    "XmlDomExtractor",
    "evaluate",
    "evaluate_many",
    "find_nodes",
    "find_nodes_many",

    # Rows and schemas
    "ColumnSpec",
    "Row",
    "RowSchema",
    "UpdatableRow",

    # Configuration and errors
    "AmbiguousColumnMappingError",
    "ConfigurationError",
    "ExtractionMetrics",
    "ExtractorConfig",
    "MalformedXmlError",
    "StreamingConfig",
    "StructuralError",
    "XmlRowExtractorError",
]
