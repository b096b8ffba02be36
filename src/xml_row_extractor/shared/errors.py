"""Exception hierarchy for XML row extraction.

Configuration errors are raised before any row is produced. Structural and
malformed-input errors are raised while iterating, after every row that was
completely parsed has already been yielded.
"""

from typing import List, Optional


class XmlRowExtractorError(Exception):
    """Base exception for all extraction and output errors."""


class ConfigurationError(XmlRowExtractorError, ValueError):
    """Raised when an extractor, schema or outputter is misconfigured."""

    def __init__(self, message: str, field_name: Optional[str] = None) -> None:
        super().__init__(message)
        self.field_name = field_name


class AmbiguousColumnMappingError(ConfigurationError):
    """Raised when two source names map to the same output column."""

    def __init__(self, column_name: str, source_names: List[str]) -> None:
        super().__init__(
            f"Column '{column_name}' is mapped from more than one source: "
            f"{', '.join(repr(name) for name in source_names)}",
            field_name=column_name,
        )
        self.column_name = column_name
        self.source_names = source_names


class StructuralError(XmlRowExtractorError, ValueError):
    """Raised when the stream ends inside a row, a column or another element."""

    def __init__(
        self,
        message: str,
        location: Optional[str] = None,
        open_elements: Optional[List[str]] = None,
    ) -> None:
        super().__init__(message)
        self.location = location
        self.open_elements = open_elements or []


class MalformedXmlError(XmlRowExtractorError, ValueError):
    """Raised when the input is not well-formed XML."""

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> None:
        if line is not None:
            message = f"{message} (line {line}, column {column})"
        super().__init__(message)
        self.line = line
        self.column = column
